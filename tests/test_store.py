"""
tests/test_store.py
DeviceStore against temporary SQLite files.
"""

import json

import pytest

from droidscope.errors import StoreConnectionError
from droidscope.models.record import (
    CallLogEntry,
    ConnectionDetail,
    Contact,
    CorrelationEntry,
    Message,
    ReportSnapshot,
    TimelineEntry,
    UrlFinding,
)
from droidscope.store.sqlite_store import open_store, store_path


@pytest.fixture
def store(tmp_path):
    return open_store(tmp_path, 'Pixel_7')


def _messages():
    return [
        Message('+15550001', '2024-01-15 12:00:00', 'received', 'This is a scam',
                True, 'fraud', -2, '\U0001F61E', 'Alice'),
        Message('+15550001', '2024-01-15 13:00:00', 'received', 'I hate it',
                True, 'negative_sentiment', -3, '\U0001F621', 'Alice'),
        Message('+15550002', '2024-01-16 12:00:00', 'sent', 'see you soon'),
    ]


def _calls():
    return [
        CallLogEntry('+15550001', '2024-01-15 12:10:00', 'incoming', '2m 5s'),
        CallLogEntry('+15550003', '2024-01-17 14:00:00', 'missed', '0m 0s'),
        CallLogEntry('+15550001', '2024-01-15 14:46:00', 'outgoing', '1m 0s'),
    ]


class TestOpen:

    def test_one_file_per_device(self, tmp_path):
        a = open_store(tmp_path, 'Pixel_7')
        b = open_store(tmp_path, 'Galaxy_S23')
        assert a.db_path == store_path(tmp_path, 'Pixel_7')
        assert a.db_path != b.db_path
        a.replace_contacts([Contact('Alice', '+1')])
        assert b.contacts() == []

    def test_empty_device_name(self, tmp_path):
        with pytest.raises(StoreConnectionError):
            open_store(tmp_path, '')

    def test_missing_directory(self, tmp_path):
        with pytest.raises(StoreConnectionError):
            open_store(tmp_path / 'nope' / 'deeper', 'Pixel_7')

    def test_reopen_keeps_data(self, tmp_path, store):
        store.replace_contacts([Contact('Alice', '+1')])
        assert open_store(tmp_path, 'Pixel_7').contact_count() == 1


class TestReplace:

    def test_replace_is_idempotent(self, store):
        store.replace_messages(_messages())
        first = store.messages()
        store.replace_messages(_messages())
        assert store.messages() == first
        assert len(first) == 3

    def test_replace_drops_previous_set(self, store):
        store.replace_call_logs(_calls())
        store.replace_call_logs(_calls()[:1])
        assert len(store.call_logs()) == 1

    def test_message_fields_round_trip(self, store):
        store.replace_messages(_messages())
        assert store.messages()[0] == _messages()[0]

    def test_newest_first(self, store):
        store.replace_messages(_messages())
        dates = [m.date for m in store.messages(newest_first=True)]
        assert dates == sorted(dates, reverse=True)

    def test_call_logs_by_number(self, store):
        store.replace_call_logs(_calls())
        assert len(store.call_logs(number='+15550001')) == 2
        assert store.call_logs(number='15550001') == []


class TestQueries:

    def test_contact_names(self, store):
        store.replace_contacts([Contact('Alice', '+15550001'), Contact('No Number')])
        assert store.contact_names() == {'+15550001': 'Alice'}

    def test_sms_counts_by_address(self, store):
        store.replace_messages(_messages())
        assert store.sms_counts_by_address() == [
            {'address': '+15550001', 'totalMessages': 2},
            {'address': '+15550002', 'totalMessages': 1},
        ]

    def test_message_stats(self, store):
        store.replace_messages(_messages())
        stats = store.message_stats()
        assert stats['totalMessages'] == 3
        assert stats['suspiciousMessages'] == 2
        assert stats['fraud'] == 1
        assert stats['negative_sentiment'] == 1
        assert stats['threat'] == 0

    def test_stats_on_empty_store(self, store):
        assert store.message_stats()['totalMessages'] == 0
        assert store.call_stats() == {
            'totalCalls': 0, 'incomingCalls': 0, 'outgoingCalls': 0, 'missedCalls': 0,
        }

    def test_call_stats(self, store):
        store.replace_call_logs(_calls())
        assert store.call_stats() == {
            'totalCalls': 3, 'incomingCalls': 1, 'outgoingCalls': 1, 'missedCalls': 1,
        }

    def test_search_case_insensitive(self, store):
        store.replace_messages(_messages())
        store.replace_call_logs(_calls())
        store.replace_contacts([Contact('Alice', '+15550001')])

        results = store.search('SCAM')
        assert [m.body for m in results['sms']] == ['This is a scam']

        results = store.search('alice')
        assert len(results['contacts']) == 1
        assert results['call_log'] == []

    def test_search_regex(self, store):
        store.replace_call_logs(_calls())
        results = store.search(r'000[13]$')
        assert len(results['call_log']) == 3


class TestAnalysisResults:

    def test_timeline_replace(self, store):
        store.replace_timeline([TimelineEntry('2024-01-02', 1), TimelineEntry('2024-01-01', 2)])
        store.replace_timeline([TimelineEntry('2024-01-03', 5)])
        assert [(e.date, e.total_messages) for e in store.timeline()] == [('2024-01-03', 5)]

    def test_spam_findings(self, store):
        store.replace_spam_findings([UrlFinding('+1', None, 'x http://a', ['http://a'], True)])
        (finding,) = store.spam_findings()
        assert finding.urls == ['http://a']

    def test_correlations_serialized(self, store):
        entry = CorrelationEntry('+15550001', 2, _messages()[:2], _calls()[:1])
        store.replace_correlations([entry])
        (row,) = store.correlations()
        assert row['smsCount'] == 2
        assert row['messages'][0]['isSuspicious'] is True
        assert row['callLogs'][0]['duration'] == '2m 5s'
        json.dumps(row)


class TestAppendOnly:

    def test_reports(self, store):
        snap = ReportSnapshot('CASE-1', 'first look', 'Pixel_7',
                              {'totalMessages': 3}, {'totalCalls': 1}, 2, '2024-01-01T00:00:00')
        saved = store.insert_report(snap)
        store.insert_report(ReportSnapshot('CASE-2', 'again', 'Pixel_7', {}, {}, 0, '2024-01-02T00:00:00'))

        reports = store.reports()
        assert saved.id is not None
        assert [r.case_number for r in reports] == ['CASE-1', 'CASE-2']
        assert reports[0].sms_stats == {'totalMessages': 3}

    def test_connection_details(self, store):
        saved = store.insert_connection_detail(ConnectionDetail('Pixel_7', 'usb-1', 'inv-9'))
        assert saved.created_at
        (detail,) = store.connection_details()
        assert detail.connector_id == 'usb-1'
        assert detail.additional_info is None
