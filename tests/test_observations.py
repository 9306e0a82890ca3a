import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from observations import Category, ObservationAggregator, extract_host


def test_record_is_idempotent():
    aggregator = ObservationAggregator()

    assert aggregator.record(Category.SCRIPT_HOSTS, 'cdn.example.com') is True
    assert aggregator.record(Category.SCRIPT_HOSTS, 'cdn.example.com') is False

    assert aggregator.snapshot()['script_hosts'] == ['cdn.example.com']


def test_new_host_logged_once(capsys, monkeypatch):
    monkeypatch.delenv('DISABLE_LOGGING', raising=False)
    aggregator = ObservationAggregator()

    aggregator.record('xhr_hosts', 'api.example.com')
    aggregator.record('xhr_hosts', 'api.example.com')

    out = capsys.readouterr().out
    assert out.count('api.example.com') == 1


def test_categories_are_independent():
    aggregator = ObservationAggregator()
    aggregator.record(Category.SCRIPT_HOSTS, 'a.com')
    aggregator.record(Category.XHR_HOSTS, 'a.com')

    snapshot = aggregator.snapshot()
    assert snapshot['script_hosts'] == ['a.com']
    assert snapshot['xhr_hosts'] == ['a.com']
    assert snapshot['websocket_hosts'] == []
    assert set(snapshot) == {c.value for c in Category}


def test_snapshot_is_sorted():
    aggregator = ObservationAggregator()
    for host in ('c.com', 'a.com', 'b.com'):
        aggregator.record(Category.SCRIPT_HOSTS, host)

    assert aggregator.snapshot()['script_hosts'] == ['a.com', 'b.com', 'c.com']


def test_empty_host_ignored():
    aggregator = ObservationAggregator()
    assert aggregator.record(Category.SCRIPT_HOSTS, '') is False
    assert len(aggregator) == 0


def test_reset_clears_all_categories():
    aggregator = ObservationAggregator()
    aggregator.record(Category.SCRIPT_HOSTS, 'a.com')
    aggregator.record(Category.WEBSOCKET_HOSTS, 'ws.a.com')

    aggregator.reset()

    assert len(aggregator) == 0


def test_extract_host_keeps_port():
    assert extract_host('https://a.com:8443/x.js?v=1') == 'a.com:8443'
    assert extract_host('https://a.com/x.js') == 'a.com'


def test_extract_host_strips_blob_prefix():
    assert extract_host('blob:https://a.com/0b1c-uuid') == 'a.com'


def test_extract_host_drops_credentials():
    assert extract_host('wss://user:pw@socket.a.com/feed') == 'socket.a.com'


def test_category_label_and_title():
    assert Category.SCRIPT_HOSTS.label == 'script-hosts'
    assert Category.SCRIPT_HOSTS.title == 'script host'
    assert Category.OBFUSCATED_SCRIPT_HOSTS.title == 'obfuscated script host'
