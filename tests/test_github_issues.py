import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

import requests

from github_issues import GitHubIssueTracker


class FakeResponse:
    def __init__(self, status_code, data=None):
        self.status_code = status_code
        self._data = data

    def json(self):
        if isinstance(self._data, Exception):
            raise self._data
        return self._data


class FakeSession:
    def __init__(self, *responses, error=None):
        self.headers = {}
        self.responses = list(responses)
        self.error = error
        self.requests = []

    def request(self, method, url, timeout=None, **kwargs):
        self.requests.append((method, url, kwargs))
        if self.error:
            raise self.error
        return self.responses.pop(0)


def _tracker(session, job_logs_url=None):
    return GitHubIssueTracker('secret', 'acme/site', job_logs_url=job_logs_url, session=session)


def test_auth_header():
    session = FakeSession()
    _tracker(session)
    assert session.headers['Authorization'] == 'token secret'


def test_create_issue():
    session = FakeSession(FakeResponse(201, {'number': 12}))

    number = _tracker(session).create_issue('title', 'body', 'script-hosts')

    assert number == 12
    method, url, kwargs = session.requests[0]
    assert method == 'POST'
    assert url == 'https://api.github.com/repos/acme/site/issues'
    assert kwargs['json']['labels'] == ['script-hosts']


def test_non_success_status_is_logged_not_raised(capsys, monkeypatch):
    monkeypatch.delenv('DISABLE_LOGGING', raising=False)
    session = FakeSession(FakeResponse(422, {'message': 'Validation Failed'}))

    assert _tracker(session).create_issue('title', 'body', 'script-hosts') is None
    assert 'status=422' in capsys.readouterr().out


def test_network_error_is_logged_not_raised():
    session = FakeSession(error=requests.ConnectionError('down'))

    assert _tracker(session).close_issue(5) is False
    assert len(session.requests) == 1


def test_list_filters_pull_requests():
    session = FakeSession(FakeResponse(200, [
        {'number': 1, 'labels': []},
        {'number': 2, 'labels': [], 'pull_request': {}},
    ]))

    issues = _tracker(session).list_open_issues_by_label('xhr-hosts')

    assert [i['number'] for i in issues] == [1]
    assert session.requests[0][2]['params'] == {'state': 'open', 'labels': 'xhr-hosts'}


def test_list_failure_returns_none():
    session = FakeSession(FakeResponse(500))
    assert _tracker(session).list_open_issues_by_label('xhr-hosts') is None


def test_comment_includes_job_footer():
    session = FakeSession(FakeResponse(201, {}))

    assert _tracker(session, 'https://github.com/acme/site/actions/runs/9').comment_on_issue(4, 'hello.')

    body = session.requests[0][2]['json']['body']
    assert body.startswith('[bot] hello.')
    assert 'actions/runs/9' in body


def test_label_operations():
    session = FakeSession(FakeResponse(200, []), FakeResponse(200, []), FakeResponse(200, {}))
    tracker = _tracker(session)

    assert tracker.add_label(4, 'resolved')
    assert tracker.remove_label(4, 'resolved')
    assert tracker.close_issue(4)

    assert [r[0] for r in session.requests] == ['POST', 'DELETE', 'PATCH']
    assert session.requests[1][1].endswith('/issues/4/labels/resolved')
    assert session.requests[2][2]['json'] == {'state': 'closed'}


def test_unreadable_body_is_logged_not_raised(capsys, monkeypatch):
    monkeypatch.delenv('DISABLE_LOGGING', raising=False)
    session = FakeSession(FakeResponse(201, ValueError('Expecting value')),
                          FakeResponse(200, ValueError('Expecting value')))
    tracker = _tracker(session)

    assert tracker.create_issue('title', 'body', 'script-hosts') is None
    assert tracker.list_open_issues_by_label('script-hosts') is None
    assert 'unreadable body' in capsys.readouterr().out
