"""
Observation Aggregator
Collects the unique hosts seen per category during one browsing session
"""

import threading
from enum import Enum
from urllib.parse import urlparse

import logger


class Category(Enum):
    """Host categories tracked against the baseline"""
    SCRIPT_HOSTS = "script_hosts"
    XHR_HOSTS = "xhr_hosts"
    WEBSOCKET_HOSTS = "websocket_hosts"
    WEBWORKER_HOSTS = "webworker_hosts"
    OBFUSCATED_SCRIPT_HOSTS = "obfuscated_script_hosts"
    SUSPICIOUS_SCRIPT_HOSTS = "suspicious_script_hosts"

    @property
    def label(self):
        """Issue label, e.g. script-hosts"""
        return self.value.replace('_', '-')

    @property
    def title(self):
        """Human readable singular noun, e.g. script host"""
        return self.value.replace('_', ' ').replace('hosts', 'host')

    @classmethod
    def from_name(cls, name):
        return cls(name)


def extract_host(url):
    """
    Get the authority (host[:port]) of a resource URL

    Worker scripts created from blobs carry a 'blob:' prefix in front of
    the origin URL; it is stripped before parsing.
    """
    if url.startswith('blob:'):
        url = url[len('blob:'):]
    netloc = urlparse(url).netloc
    # drop any user:pass@ prefix
    return netloc.rpartition('@')[2]


class ObservationAggregator:
    """Owns the category -> host set mapping for a session"""

    def __init__(self):
        self._hosts = {category: set() for category in Category}
        # script analysis records from worker threads
        self._lock = threading.Lock()

    def reset(self):
        for hosts in self._hosts.values():
            hosts.clear()

    def record(self, category, hostname):
        """
        Add a host to a category

        Returns:
            bool: True if the host had not been seen in this category before
        """
        category = Category.from_name(category)
        if not hostname:
            return False

        with self._lock:
            hosts = self._hosts[category]
            if hostname in hosts:
                return False
            hosts.add(hostname)

        logger.log(f"[{category.label}] new host observed: {hostname}")
        return True

    def snapshot(self):
        """Category name -> sorted host list"""
        with self._lock:
            return {category.value: sorted(hosts) for category, hosts in self._hosts.items()}

    def __len__(self):
        return sum(len(hosts) for hosts in self._hosts.values())
