import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

import pytest


class FakeTracker:
    """In-memory stand-in for GitHubIssueTracker that records every call"""

    def __init__(self, issues=None, fail=()):
        # label -> list of issue dicts
        self.issues = issues or {}
        self.fail = set(fail)
        self.calls = []
        self._next_number = 100

    def _issue(self, number):
        for issues in self.issues.values():
            for issue in issues:
                if issue['number'] == number:
                    return issue
        return None

    def list_open_issues_by_label(self, label):
        self.calls.append(('list', label))
        if 'list' in self.fail:
            return None
        return [dict(i, labels=list(i['labels'])) for i in self.issues.get(label, [])
                if i.get('state', 'open') == 'open']

    def create_issue(self, title, body, label):
        self.calls.append(('create', title, body, label))
        if 'create' in self.fail:
            return None
        self._next_number += 1
        self.issues.setdefault(label, []).append(
            {'number': self._next_number, 'labels': [{'name': label}], 'state': 'open'})
        return self._next_number

    def add_label(self, number, label):
        self.calls.append(('add_label', number, label))
        if 'add_label' in self.fail:
            return False
        self._issue(number)['labels'].append({'name': label})
        return True

    def remove_label(self, number, label):
        self.calls.append(('remove_label', number, label))
        if 'remove_label' in self.fail:
            return False
        issue = self._issue(number)
        issue['labels'] = [l for l in issue['labels'] if l['name'] != label]
        return True

    def comment_on_issue(self, number, text):
        self.calls.append(('comment', number, text))
        return 'comment' not in self.fail

    def close_issue(self, number):
        self.calls.append(('close', number))
        if 'close' in self.fail:
            return False
        self._issue(number)['state'] = 'closed'
        return True

    def actions(self):
        return [call[0] for call in self.calls]


@pytest.fixture
def tracker():
    return FakeTracker()


@pytest.fixture
def make_tracker():
    return FakeTracker
