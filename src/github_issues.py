"""
GitHub Issues client
Thin REST wrapper for the issue operations the lifecycle manager needs.
Failures are logged with their status and never raised or retried.
"""

from urllib.parse import quote

import requests

import logger

REQUEST_TIMEOUT = 15


class GitHubIssueTracker:
    """Create, label, comment on and close issues in one repository"""

    def __init__(self, token, repository, api_url="https://api.github.com",
                 job_logs_url=None, session=None):
        self.repository = repository
        self.base_url = f"{api_url.rstrip('/')}/repos/{repository}"
        self.footer = f"\n\nView [logs]({job_logs_url}) from this job." if job_logs_url else ''
        self.session = session or requests.Session()
        self.session.headers.update({
            'Authorization': f'token {token}',
            'Accept': 'application/vnd.github+json',
        })

    @classmethod
    def from_config(cls, config, session=None):
        return cls(
            token=config.github_token,
            repository=config.github_repository,
            api_url=config.github_api_url,
            job_logs_url=config.job_logs_url,
            session=session,
        )

    def _request(self, method, path, action, expected, **kwargs):
        """
        Send one API call and log its outcome

        Returns:
            requests.Response, or None if the call failed
        """
        try:
            resp = self.session.request(method, self.base_url + path, timeout=REQUEST_TIMEOUT, **kwargs)
        except requests.RequestException as e:
            logger.warn(f"[github] {action} failed: {e}")
            return None

        if resp.status_code != expected:
            logger.warn(f"[github] {action} failed status={resp.status_code}")
            return None

        logger.log(f"[github] {action} status={resp.status_code}")
        return resp

    def create_issue(self, title, body, label):
        """
        Open a new issue with a single label

        Returns:
            int: New issue number, or None on failure
        """
        resp = self._request('POST', '/issues', 'creating issue', 201,
                             json={'title': title, 'body': body + self.footer, 'labels': [label]})
        if resp is None:
            return None
        try:
            number = resp.json().get('number')
        except (ValueError, AttributeError) as e:
            logger.warn(f"[github] creating issue returned an unreadable body: {e}")
            return None
        logger.log(f"[github] created issue {number}")
        return number

    def list_open_issues_by_label(self, label):
        """
        Open issues carrying a label (pull requests excluded)

        Returns:
            list: Issue dicts, or None if the listing failed
        """
        resp = self._request('GET', '/issues', f'listing {label} issues', 200,
                             params={'state': 'open', 'labels': label})
        if resp is None:
            return None
        try:
            return [issue for issue in resp.json() if 'pull_request' not in issue]
        except (ValueError, TypeError) as e:
            logger.warn(f"[github] listing {label} issues returned an unreadable body: {e}")
            return None

    def add_label(self, number, label):
        resp = self._request('POST', f'/issues/{number}/labels', f'adding label on issue {number}', 200,
                             json={'labels': [label]})
        return resp is not None

    def remove_label(self, number, label):
        resp = self._request('DELETE', f'/issues/{number}/labels/{quote(label)}',
                             f'removing label on issue {number}', 200)
        return resp is not None

    def comment_on_issue(self, number, text):
        resp = self._request('POST', f'/issues/{number}/comments', f'commenting on issue {number}', 201,
                             json={'body': f"[bot] {text}{self.footer}"})
        return resp is not None

    def close_issue(self, number):
        resp = self._request('PATCH', f'/issues/{number}', f'closing issue {number}', 200,
                             json={'state': 'closed'})
        return resp is not None
