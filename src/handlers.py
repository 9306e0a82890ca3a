"""
Browser event handlers
Feed page, websocket, worker and console events into an ObservationAggregator
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from urllib.parse import urlparse

import logger
from ast_analyzer import SuspiciousCallDetector
from config import DEFAULT_SUSPICIOUS_CALLS
from obfuscation import ObfuscationScorer, DEFAULT_LIMIT
from observations import Category, extract_host

XHR_RESOURCE_TYPES = ('xhr', 'fetch')


class EventHandlers:
    """Event callbacks for one browsing session, bound to one aggregator"""

    def __init__(self, aggregator, suspicious_calls=DEFAULT_SUSPICIOUS_CALLS,
                 obfuscation_limit=DEFAULT_LIMIT):
        self.aggregator = aggregator
        self.suspicious_calls = set(suspicious_calls)
        self.scorer = ObfuscationScorer(obfuscation_limit)
        self._pending = set()
        self._executor = None

    def response(self, res):
        """General response handler (scripts and XHR)"""
        req = res.request
        url = res.url
        ref = req.headers.get('referer', '')
        resource_type = req.resource_type

        if resource_type == 'script' or resource_type in XHR_RESOURCE_TYPES:
            logger.log(f"[{resource_type}] url={url} referrer={ref}")

        if resource_type == 'script':
            host = extract_host(url)
            self.aggregator.record(Category.SCRIPT_HOSTS, host)
            task = asyncio.ensure_future(self.process_script(res, host, urlparse(url).path))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

        elif resource_type in XHR_RESOURCE_TYPES:
            self.aggregator.record(Category.XHR_HOSTS, extract_host(url))

    def websocket(self, ws):
        url = ws.url
        host = extract_host(url)
        logger.log(f"[ws] {host} ({url})")
        self.aggregator.record(Category.WEBSOCKET_HOSTS, host)

    def worker(self, worker):
        url = worker.url
        host = extract_host(url)
        logger.log(f"[webworker] {host} ({url})")
        self.aggregator.record(Category.WEBWORKER_HOSTS, host)

    def console(self, msg):
        url = (msg.location or {}).get('url', '')
        logger.log(f"[console][{msg.type}] message={msg.text} url={url}")

    async def process_script(self, res, host, path):
        """Fetch a script body and run both content detectors on it"""
        try:
            body = await res.body()
        except Exception as e:
            logger.warn(f"[error][ast] host={host} path={path} could not read body: {e}")
            return

        # parsing is CPU bound; keep it off the loop so events and timeouts keep firing
        if self._executor is None:
            self._executor = ThreadPoolExecutor(thread_name_prefix='script-analysis')
        content = body.decode('utf-8', errors='replace')
        await asyncio.get_running_loop().run_in_executor(
            self._executor, self.analyze_script, content, host, path)

    def analyze_script(self, content, host, path=''):
        """Score and scan one script; each detector fails independently"""
        detector = SuspiciousCallDetector(self.suspicious_calls)
        if content and detector.detect(content, host, path):
            self.aggregator.record(Category.SUSPICIOUS_SCRIPT_HOSTS, host)

        if self.scorer.analyze(content, host, path):
            self.aggregator.record(Category.OBFUSCATED_SCRIPT_HOSTS, host)

    async def drain(self):
        """Wait for script analysis still in flight"""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def close(self):
        """Stop analysis workers without waiting on scripts still being parsed"""
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None
