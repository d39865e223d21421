import pytest
from nullable.options import reset_options


@pytest.fixture(autouse=True)
def default_options():
    """Restore the default timestamp options around each test to ensure test isolation."""
    reset_options()
    yield
    reset_options()


pytest_plugins = [
    'tests.fixtures.values',
    'tests.fixtures.sqlite',
]
