"""
Monitor configuration
Loads settings from the environment (and a .env file when present)
"""

import os
from typing import List, Optional

from dotenv import load_dotenv

DEFAULT_SUSPICIOUS_CALLS = ('eval', 'atob', 'btoa')
DEFAULT_OBFUSCATION_LIMIT = 25.0
DEFAULT_PAGE_TIMEOUT_MS = 10000
DEFAULT_BASELINE_FILE = 'authorized_hosts.json'
DEFAULT_GITHUB_API_URL = 'https://api.github.com'


class ConfigError(Exception):
    """Raised when an environment setting cannot be parsed"""


def _split_list(value):
    return [item.strip() for item in value.split(',') if item.strip()]


def _float(env, name, default):
    raw = env.get(name)
    if raw is None or raw == '':
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")


def _int(env, name, default):
    raw = env.get(name)
    if raw is None or raw == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


class MonitorConfig:
    """Runtime settings for a monitoring session"""

    def __init__(self, target_urls=None, suspicious_calls=None,
                 obfuscation_limit=DEFAULT_OBFUSCATION_LIMIT,
                 page_timeout_ms=DEFAULT_PAGE_TIMEOUT_MS,
                 baseline_file=DEFAULT_BASELINE_FILE,
                 recommendation_file=None, browser_ws_endpoint=None,
                 github_token=None, github_repository=None,
                 github_api_url=DEFAULT_GITHUB_API_URL,
                 github_server_url=None, github_run_id=None):
        self.target_urls: List[str] = list(target_urls or [])
        self.suspicious_calls = set(suspicious_calls or DEFAULT_SUSPICIOUS_CALLS)
        self.obfuscation_limit = obfuscation_limit
        self.page_timeout_ms = page_timeout_ms
        self.baseline_file = baseline_file
        self.recommendation_file: Optional[str] = recommendation_file
        self.browser_ws_endpoint: Optional[str] = browser_ws_endpoint
        self.github_token: Optional[str] = github_token
        self.github_repository: Optional[str] = github_repository
        self.github_api_url = github_api_url
        self.github_server_url: Optional[str] = github_server_url
        self.github_run_id: Optional[str] = github_run_id

    @classmethod
    def from_env(cls, env=None, dotenv=True):
        """
        Build a config from environment variables

        Args:
            env (dict): Mapping to read instead of os.environ
            dotenv (bool): Load a .env file into os.environ first

        Returns:
            MonitorConfig
        """
        if dotenv:
            load_dotenv()
        env = os.environ if env is None else env

        calls = env.get('SUSPICIOUS_CALLS')

        return cls(
            target_urls=_split_list(env.get('TARGET_URLS', '')),
            suspicious_calls=_split_list(calls) if calls else None,
            obfuscation_limit=_float(env, 'OBFUSCATION_LIMIT_PERCENT', DEFAULT_OBFUSCATION_LIMIT),
            page_timeout_ms=_int(env, 'PAGE_TIMEOUT', DEFAULT_PAGE_TIMEOUT_MS),
            baseline_file=env.get('BASELINE_FILE') or DEFAULT_BASELINE_FILE,
            recommendation_file=env.get('RECOMMENDATION_FILE') or None,
            browser_ws_endpoint=env.get('BROWSER_WS_ENDPOINT') or None,
            github_token=env.get('GITHUB_TOKEN') or None,
            github_repository=env.get('GITHUB_REPOSITORY') or None,
            github_api_url=env.get('GITHUB_API_URL') or DEFAULT_GITHUB_API_URL,
            github_server_url=env.get('GITHUB_SERVER_URL') or None,
            github_run_id=env.get('GITHUB_RUN_ID') or None,
        )

    @property
    def tracker_configured(self):
        """Both a token and a target repository are required for issue traffic"""
        return bool(self.github_token and self.github_repository)

    @property
    def job_logs_url(self):
        if not (self.github_server_url and self.github_repository and self.github_run_id):
            return None
        return f"{self.github_server_url}/{self.github_repository}/actions/runs/{self.github_run_id}"
