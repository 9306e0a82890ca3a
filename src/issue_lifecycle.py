"""
Issue Lifecycle Manager

Maps each category's comparison result onto one tracked issue:

  - failing check, no open issue      -> create an issue labeled for the category
  - passing check, open issue         -> label it 'resolved'
  - passing check, 'resolved' issue   -> close it
  - failing check, 'resolved' issue   -> remove the 'resolved' label

A category has to pass twice in a row before its issue is closed, which
keeps hosts that come and go between runs from opening and closing
issues over and over.
"""

from collections import namedtuple
from concurrent.futures import ThreadPoolExecutor
from enum import Enum

import logger
from observations import Category

RESOLVED_LABEL = 'resolved'

Transition = namedtuple('Transition', ['issue', 'before', 'after'])


class IssueState(Enum):
    NONE = "none"
    OPEN_UNRESOLVED = "open-unresolved"
    OPEN_RESOLVED = "open-resolved"
    CLOSED = "closed"


def label_names(issue):
    return [label['name'] if isinstance(label, dict) else label for label in issue.get('labels', [])]


def classify(issue):
    """Derive an issue's lifecycle state from its state and labels"""
    if issue is None:
        return IssueState.NONE
    if issue.get('state', 'open') == 'closed':
        return IssueState.CLOSED
    if RESOLVED_LABEL in label_names(issue):
        return IssueState.OPEN_RESOLVED
    return IssueState.OPEN_UNRESOLVED


def _host_block(hosts):
    return "```\n" + "\n".join(hosts) + "\n```"


class IssueLifecycleManager:
    """Drives tracker actions for each category of a report"""

    def __init__(self, tracker, max_workers=len(Category)):
        self.tracker = tracker
        self.max_workers = max_workers

    def process_report(self, report):
        """
        Apply the lifecycle to every category of a report

        Categories are independent, so each runs as its own task; the
        steps inside a category run in order.

        Returns:
            dict: Category name -> list of Transition
        """
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {
                category: pool.submit(self.process_category, category, hosts)
                for category, hosts in report.items()
            }
            return {category: future.result() for category, future in futures.items()}

    def process_category(self, category, hosts):
        """
        Run one category's transition

        Args:
            category (str or Category): Category of the report entry
            hosts (list): Unauthorized hosts for the category

        Returns:
            list: Transitions applied (empty for a no-op)
        """
        category = Category.from_name(category)
        try:
            return self._run_category(category, list(hosts))
        except Exception as e:
            logger.warn(f"[{category.label}] issue update failed: {e}")
            return []

    def _run_category(self, category, hosts):
        issues = self.tracker.list_open_issues_by_label(category.label)

        if issues is None:
            logger.warn(f"[{category.label}] could not list issues, skipping issue updates")
            return []

        if not issues:
            if not hosts:
                return []
            return [self._create(category, hosts)]

        # state is classified once per issue, before any action is taken
        states = [(issue, classify(issue)) for issue in issues]
        return [self._advance(category, issue, state, hosts) for issue, state in states]

    def _create(self, category, hosts):
        title = f"❗Unauthorized {category.title} sources detected."
        body = f"[bot] observed hosts:\n{_host_block(hosts)}"
        number = self.tracker.create_issue(title, body, category.label)
        after = IssueState.OPEN_UNRESOLVED if number is not None else IssueState.NONE
        return Transition(number, IssueState.NONE, after)

    def _advance(self, category, issue, state, hosts):
        number = issue['number']

        if hosts:
            if state == IssueState.OPEN_RESOLVED:
                self.tracker.comment_on_issue(number, 'unauthorized hosts found.')
                removed = self.tracker.remove_label(number, RESOLVED_LABEL)
                after = IssueState.OPEN_UNRESOLVED if removed else state
            else:
                self.tracker.comment_on_issue(
                    number, f"unauthorized hosts still observed:\n{_host_block(hosts)}")
                after = state
        else:
            if state == IssueState.OPEN_RESOLVED:
                self.tracker.comment_on_issue(number, 'no unauthorized hosts found.')
                closed = self.tracker.close_issue(number)
                after = IssueState.CLOSED if closed else state
            else:
                self.tracker.comment_on_issue(number, 'no unauthorized hosts found.')
                added = self.tracker.add_label(number, RESOLVED_LABEL)
                after = IssueState.OPEN_RESOLVED if added else state

        logger.log(f"[{category.label}] issue {number}: {state.value} -> {after.value}")
        return Transition(number, state, after)
