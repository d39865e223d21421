"""
Tests for NullTime and the multi-format timestamp parser.
"""
import datetime

import numpy as np
import pandas as pd
import pytest
import pytz
from nullable import TIMESTAMP_FORMATS, ConversionError, DecodeError
from nullable import NullTime, TimeParseError, TimestampOptions, format_datetime
from nullable import new_null_time, parse_datetime
from nullable.timeparse import parse_rfc3339, rfc3339

UTC = datetime.UTC
MINUS_7 = datetime.timezone(datetime.timedelta(hours=-7))
PLUS_530 = datetime.timezone(datetime.timedelta(hours=5, minutes=30))
LMT_NEW_YORK = datetime.timezone(-datetime.timedelta(hours=4, minutes=56, seconds=2))


class TestParseDatetime:
    """Test parsing text against the ordered timestamp formats"""

    def test_offset_and_fraction_pattern_wins(self):
        """The longest pattern is selected and keeps the exact offset"""
        parsed = parse_datetime('2021-03-04 05:06:07.123456789-07:00')
        assert parsed == datetime.datetime(2021, 3, 4, 5, 6, 7, 123456, tzinfo=MINUS_7)
        assert parsed.utcoffset() == datetime.timedelta(hours=-7)

    def test_trailing_z_is_default_zone(self):
        """A trailing Z is dropped and the text read in the default zone"""
        with_z = parse_datetime('2021-03-04T05:06:07Z')
        without_z = parse_datetime('2021-03-04T05:06:07')
        assert with_z == without_z
        assert with_z == datetime.datetime(2021, 3, 4, 5, 6, 7, tzinfo=UTC)

    @pytest.mark.parametrize(('text', 'expected'), [
        ('2021-03-04T05:06:07.5+05:30', datetime.datetime(2021, 3, 4, 5, 6, 7, 500000, tzinfo=PLUS_530)),
        ('2021-03-04 05:06:07+05:30', datetime.datetime(2021, 3, 4, 5, 6, 7, tzinfo=PLUS_530)),
        ('2021-03-04 05:06:07.25', datetime.datetime(2021, 3, 4, 5, 6, 7, 250000, tzinfo=UTC)),
        ('2021-03-04T05:06:07.000001', datetime.datetime(2021, 3, 4, 5, 6, 7, 1, tzinfo=UTC)),
        ('2021-03-04 05:06:07', datetime.datetime(2021, 3, 4, 5, 6, 7, tzinfo=UTC)),
        ('2021-03-04 05:06', datetime.datetime(2021, 3, 4, 5, 6, tzinfo=UTC)),
        ('2021-03-04T05:06', datetime.datetime(2021, 3, 4, 5, 6, tzinfo=UTC)),
        ('2021-03-04', datetime.datetime(2021, 3, 4, tzinfo=UTC)),
    ])
    def test_default_formats(self, text, expected):
        parsed = parse_datetime(text)
        assert parsed == expected
        assert parsed.utcoffset() == expected.utcoffset()

    @pytest.mark.parametrize('text', [
        '2021-3-4',
        '2021-03-04 5:06',
        '2021-03-04  5:06',
        '2021-03-04 05:06:07+0700',
        '2021-03-04T05:06:07.5-07',
    ])
    def test_fields_are_fixed_width(self, text):
        """Single-digit fields and offsets without a colon do not match"""
        with pytest.raises(TimeParseError):
            parse_datetime(text)

    def test_offset_with_seconds(self):
        parsed = parse_datetime('1880-03-04 05:06:07-04:56:02')
        assert parsed.utcoffset() == LMT_NEW_YORK.utcoffset(None)

    def test_fraction_truncated_to_microseconds(self):
        parsed = parse_datetime('2021-03-04 05:06:07.999999999')
        assert parsed.microsecond == 999999
        assert parsed.second == 7

    def test_failure_reports_last_pattern(self):
        """When nothing matches, the error names the last format attempted"""
        with pytest.raises(TimeParseError) as exc_info:
            parse_datetime('not-a-date')
        err = exc_info.value
        assert err.pattern == TIMESTAMP_FORMATS[-1]
        assert err.text == 'not-a-date'
        assert isinstance(err.__cause__, ValueError)
        assert isinstance(err, ConversionError)

    def test_explicit_zone(self):
        parsed = parse_datetime('2021-03-04 05:06:07', tz=PLUS_530)
        assert parsed.utcoffset() == datetime.timedelta(hours=5, minutes=30)

    def test_explicit_zone_does_not_override_offset(self):
        parsed = parse_datetime('2021-03-04 05:06:07-07:00', tz=PLUS_530)
        assert parsed.utcoffset() == datetime.timedelta(hours=-7)

    def test_pytz_zone(self):
        """pytz zones are applied with localize"""
        zone = pytz.timezone('America/New_York')
        parsed = parse_datetime('2021-07-04 12:00:00', tz=zone)
        assert parsed.utcoffset() == datetime.timedelta(hours=-4)

    def test_explicit_formats(self):
        parsed = parse_datetime('04/03/2021', formats=['%d/%m/%Y'])
        assert parsed == datetime.datetime(2021, 3, 4, tzinfo=UTC)

        with pytest.raises(TimeParseError) as exc_info:
            parse_datetime('2021-03-04', formats=['%d/%m/%Y', '%H:%M'])
        assert exc_info.value.pattern == '%H:%M'

    def test_empty_formats(self):
        with pytest.raises(ValueError):
            parse_datetime('2021-03-04', formats=[])


class TestFormatDatetime:
    """Test rendering with the first timestamp format"""

    @pytest.mark.parametrize(('dt', 'expected'), [
        (datetime.datetime(2021, 3, 4, 5, 6, 7, tzinfo=UTC), '2021-03-04 05:06:07+00:00'),
        (datetime.datetime(2021, 3, 4, 5, 6, 7, 120000, tzinfo=MINUS_7), '2021-03-04 05:06:07.12-07:00'),
        (datetime.datetime(2021, 3, 4, 5, 6, 7, 1, tzinfo=PLUS_530), '2021-03-04 05:06:07.000001+05:30'),
        (datetime.datetime(2021, 3, 4), '2021-03-04 00:00:00+00:00'),
    ])
    def test_first_format(self, dt, expected):
        assert format_datetime(dt) == expected

    def test_parses_back(self, value_dict):
        dt = value_dict['datetime_value']
        assert parse_datetime(format_datetime(dt)) == dt

    def test_offset_with_seconds_parses_back(self):
        """Sub-minute offsets are written in full"""
        dt = datetime.datetime(1880, 3, 4, 5, 6, 7, tzinfo=LMT_NEW_YORK)
        text = format_datetime(dt)
        assert text == '1880-03-04 05:06:07-04:56:02'
        assert parse_datetime(text) == dt

    def test_explicit_formats(self):
        dt = datetime.datetime(2021, 3, 4, 5, 6, 7, tzinfo=UTC)
        assert format_datetime(dt, formats=['%Y%m%dT%H%M%S%z']) == '20210304T050607+00:00'


class TestRfc3339:
    """Test the JSON timestamp representation"""

    @pytest.mark.parametrize(('dt', 'expected'), [
        (datetime.datetime(2021, 3, 4, 5, 6, 7, tzinfo=UTC), '2021-03-04T05:06:07Z'),
        (datetime.datetime(2021, 3, 4, 5, 6, 7, 500, tzinfo=MINUS_7), '2021-03-04T05:06:07.0005-07:00'),
        (datetime.datetime(2021, 3, 4, 5, 6, 7, tzinfo=PLUS_530), '2021-03-04T05:06:07+05:30'),
    ])
    def test_rfc3339(self, dt, expected):
        assert rfc3339(dt) == expected
        assert parse_rfc3339(expected) == dt

    def test_offset_with_seconds_written_as_utc(self):
        """RFC 3339 has no seconds in offsets, so the instant is kept in UTC"""
        dt = datetime.datetime(1880, 3, 4, 5, 6, 7, tzinfo=LMT_NEW_YORK)
        text = rfc3339(dt)
        assert text == '1880-03-04T10:02:09Z'
        assert parse_rfc3339(text) == dt

    def test_pytz_local_mean_time(self):
        dt = datetime.datetime(1880, 3, 4, 5, 6, 7, tzinfo=pytz.timezone('America/New_York'))
        assert parse_rfc3339(rfc3339(dt)) == dt
        assert parse_datetime(format_datetime(dt)) == dt

    @pytest.mark.parametrize('text', ['2021-03-04', '2021-03-04T05:06:07', 'yesterday'])
    def test_parse_rfc3339_requires_offset(self, text):
        with pytest.raises(ValueError):
            parse_rfc3339(text)


class TestNullTimeScan:
    """Test database scans into NullTime"""

    def test_scan_none(self):
        value = NullTime(datetime.datetime(2021, 1, 1, tzinfo=UTC), True)
        value.scan(None)
        assert value.valid is False
        assert value.value is None

    def test_scan_datetime(self, value_dict):
        value = NullTime()
        value.scan(value_dict['datetime_value'])
        assert value.valid is True
        assert value.value is value_dict['datetime_value']

    def test_scan_naive_datetime_gets_default_zone(self):
        value = new_null_time(datetime.datetime(2021, 3, 4, 5, 6, 7))
        assert value.value.tzinfo is UTC

    def test_scan_date(self, value_dict):
        value = new_null_time(value_dict['date_value'])
        assert value == NullTime(datetime.datetime(2023, 5, 15, tzinfo=UTC), True)

    @pytest.mark.parametrize('raw', ['2021-03-04 05:06:07', b'2021-03-04 05:06:07',
                                     bytearray(b'2021-03-04T05:06:07Z')])
    def test_scan_text(self, raw):
        value = NullTime()
        value.scan(raw)
        assert value == NullTime(datetime.datetime(2021, 3, 4, 5, 6, 7, tzinfo=UTC), True)

    def test_scan_unparseable_text(self):
        value = NullTime(datetime.datetime(2021, 1, 1, tzinfo=UTC), True)
        with pytest.raises(TimeParseError):
            value.scan('not-a-date')
        assert value.valid is False

    def test_scan_invalid_utf8(self):
        with pytest.raises(ConversionError):
            NullTime().scan(b'\xff\xfe')

    @pytest.mark.parametrize('raw', [True, 42, 1.5, ['2021-03-04'], object()])
    def test_scan_unrecognized_kind_is_silent_null(self, raw):
        """Unrecognized driver kinds give NULL without raising"""
        value = NullTime(datetime.datetime(2021, 1, 1, tzinfo=UTC), True)
        value.scan(raw)
        assert value.valid is False

    def test_scan_pandas_and_numpy(self):
        expected = NullTime(datetime.datetime(2021, 3, 4, 5, 6, 7, tzinfo=UTC), True)
        assert new_null_time(pd.Timestamp('2021-03-04 05:06:07')) == expected
        assert new_null_time(np.datetime64('2021-03-04T05:06:07')) == expected
        assert new_null_time(pd.NaT).valid is False
        assert new_null_time(np.datetime64('NaT')).valid is False

    def test_scan_explicit_options(self):
        options = TimestampOptions(formats=('%d/%m/%Y %H:%M',), default_tz=PLUS_530)
        value = NullTime()
        value.scan('04/03/2021 05:06', options=options)
        assert value.value == datetime.datetime(2021, 3, 4, 5, 6, tzinfo=PLUS_530)

    def test_new_null_time_swallows_parse_errors(self):
        assert new_null_time('garbage').valid is False

    def test_db_value(self, value_dict):
        dt = value_dict['datetime_value']
        assert NullTime(dt, True).db_value() is dt
        assert NullTime().db_value() is None


class TestNullTimeJson:
    """Test JSON encoding and decoding of NullTime"""

    def test_encode(self):
        value = NullTime(datetime.datetime(2021, 3, 4, 5, 6, 7, 123000, tzinfo=MINUS_7), True)
        assert value.to_json() == '"2021-03-04T05:06:07.123-07:00"'
        assert NullTime().to_json() == 'null'

    def test_encode_utc(self):
        value = new_null_time('2021-03-04 05:06:07')
        assert value.to_json() == '"2021-03-04T05:06:07Z"'

    def test_round_trip(self, value_dict):
        value = NullTime(value_dict['datetime_value'], True)
        assert NullTime.from_json(value.to_json()) == value
        assert NullTime.from_json(NullTime().to_json()) == NullTime()

    def test_decode_keeps_offset(self):
        value = NullTime.from_json('"2021-03-04T05:06:07.5+05:30"')
        assert value.valid is True
        assert value.value.utcoffset() == datetime.timedelta(hours=5, minutes=30)
        assert value.value.microsecond == 500000

    def test_decode_null(self):
        value = new_null_time('2021-03-04')
        value.decode_json(b'null')
        assert value.valid is False

    @pytest.mark.parametrize('data', ['"2021-03-04"', '"not a date"', '42', 'true', '{',
                                      '["2021"]', 'NaN', 'Infinity'])
    def test_decode_rejects(self, data):
        value = new_null_time('2021-03-04')
        with pytest.raises(DecodeError):
            value.decode_json(data)
        assert value.valid is False
