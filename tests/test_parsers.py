"""
tests/test_parsers.py
Unit tests for the content-query parser and field normalizer.
"""

from datetime import datetime

import pytest

from droidscope.parsers.content_parser import (
    CALL_LOG_FIELDS,
    CONTACT_FIELDS,
    SMS_FIELDS,
    parse_entities,
    parse_line,
    parse_records,
)
from droidscope.parsers.normalizer import (
    call_direction,
    format_duration,
    format_timestamp,
    message_direction,
    normalize_call,
    normalize_contact,
    normalize_message,
)

from tests.conftest import SAMPLE_CALLS, SAMPLE_CONTACTS, SAMPLE_INBOX


# ── RAW RECORD PARSER ────────────────────────────────────────

class TestParseLine:

    def test_keeps_only_allow_listed_keys(self):
        line   = 'Row: 0 _id=7, thread_id=3, address=+15550001, date=1705320000000, type=1, body=hi, read=1'
        record = parse_line(line, SMS_FIELDS)
        assert set(record) == {'address', 'date', 'type', 'body'}

    def test_null_becomes_none(self):
        record = parse_line('Row: 0 address=+15550001, body=NULL', SMS_FIELDS)
        assert record['body'] is None
        assert record['address'] == '+15550001'

    def test_empty_value_becomes_none(self):
        record = parse_line('Row: 0 address=+15550001, body=', SMS_FIELDS)
        assert record['body'] is None

    def test_plain_comma_separated_pairs(self):
        record = parse_line('k1=v1,k2=v2', ('k1', 'k2'))
        assert record == {'k1': 'v1', 'k2': 'v2'}

    def test_body_with_embedded_commas_kept_whole(self):
        record = parse_line('Row: 0 address=+1555, body=hello, world, date=1', SMS_FIELDS)
        assert record['body'] == 'hello, world'
        assert record['date'] == '1'

    def test_line_without_pairs_is_empty(self):
        assert parse_line('No result found.', SMS_FIELDS) == {}


class TestParseRecords:

    def test_skips_blank_lines(self):
        text    = '\n' + SAMPLE_CALLS + '\n\n'
        records = list(parse_records(text, CALL_LOG_FIELDS))
        assert len(records) == 3

    def test_lazy(self):
        records = parse_records(SAMPLE_CALLS, CALL_LOG_FIELDS)
        first   = next(records)
        assert first['number'] == '+15550001'

    def test_none_text(self):
        assert list(parse_records(None, SMS_FIELDS)) == []


class TestParseEntities:

    def test_sms_rows(self):
        records = list(parse_entities(SAMPLE_INBOX, 'sms'))
        assert len(records) == 3
        assert records[0]['body'] == 'This is a scam, send the money now'

    def test_discards_rows_missing_identifying_field(self):
        records = list(parse_entities(SAMPLE_CONTACTS, 'contact'))
        assert [r['display_name'] for r in records] == ['Alice Example', 'Bob Example']

    def test_no_result_line_dropped(self):
        assert list(parse_entities('No result found.\n', 'call_log')) == []

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            list(parse_entities(SAMPLE_INBOX, 'mms'))

    def test_contact_fields_constant(self):
        assert CONTACT_FIELDS == ('display_name', 'number')


# ── FIELD NORMALIZER ─────────────────────────────────────────

class TestNormalizer:

    @pytest.mark.parametrize('seconds, expected', [
        (125, '2m 5s'),
        (59,  '0m 59s'),
        (60,  '1m 0s'),
        (0,   '0m 0s'),
    ])
    def test_format_duration(self, seconds, expected):
        assert format_duration(seconds) == expected

    @pytest.mark.parametrize('raw, expected', [
        ('1', 'incoming'),
        ('2', 'outgoing'),
        ('3', 'missed'),
        ('9', 'unknown'),
        (None, None),
    ])
    def test_call_direction(self, raw, expected):
        assert call_direction(raw) == expected

    def test_message_direction(self):
        assert message_direction('1') == 'received'
        assert message_direction('2') == 'sent'
        assert message_direction('5') == 'sent'
        assert message_direction(None) is None

    def test_format_timestamp_local_time(self):
        expected = datetime.fromtimestamp(1705320000).strftime('%Y-%m-%d %H:%M:%S')
        assert format_timestamp('1705320000000') == expected

    def test_format_timestamp_unusable(self):
        assert format_timestamp(None) is None
        assert format_timestamp('yesterday') is None

    def test_normalize_message(self):
        raw = {'address': '+15550001', 'date': None, 'type': '1', 'body': 'hi'}
        msg = normalize_message(raw)
        assert msg.address == '+15550001'
        assert msg.direction == 'received'
        assert msg.date is None
        assert msg.category == 'normal'
        assert msg.is_suspicious is False

    def test_normalize_call(self):
        call = normalize_call({'number': '+15550001', 'date': None, 'duration': '125', 'type': '3'})
        assert call.direction == 'missed'
        assert call.duration == '2m 5s'

    def test_normalize_call_bad_duration(self):
        call = normalize_call({'number': '+15550001', 'duration': 'n/a', 'type': '1'})
        assert call.duration is None

    def test_normalize_contact(self):
        contact = normalize_contact({'display_name': 'Alice', 'number': None})
        assert contact.display_name == 'Alice'
        assert contact.number is None
