"""
Site Network Capture
Drives headless Chromium through Playwright and routes page events
(responses, websockets, workers, console) into the event handlers.

Requires: pip install playwright && playwright install chromium
"""

import asyncio
import time

import logger

DEFAULT_VIEWPORT = {'width': 1920, 'height': 1080}
# Upper bound for finishing script analysis after browsing ends
DRAIN_TIMEOUT = 10


class SiteCapture:
    """Visits a site (single page or multi-page flow) and captures its traffic"""

    def __init__(self, handlers, ws_endpoint=None, viewport=None):
        self.handlers = handlers
        self.ws_endpoint = ws_endpoint
        self.viewport = viewport or DEFAULT_VIEWPORT

    def run(self, urls, timeout_ms):
        """Blocking wrapper around capture()"""
        return asyncio.run(self.capture(urls, timeout_ms))

    async def capture(self, urls, timeout_ms):
        """
        Browse the given URLs for at most timeout_ms milliseconds

        Running out of time is not an error: whatever was observed so far
        is kept for analysis.

        Returns:
            dict: Capture summary
        """
        from playwright.async_api import async_playwright

        timeout = timeout_ms / 1000
        start_time = time.monotonic()
        visited = []
        timed_out = False

        async with async_playwright() as pw:
            browser = await self._open_browser(pw)
            try:
                context = await browser.new_context(viewport=self.viewport)
                page = await context.new_page()
                self.attach(page)

                try:
                    await asyncio.wait_for(self._browse(page, urls, timeout_ms, visited), timeout=timeout)
                except asyncio.TimeoutError:
                    timed_out = True
                    logger.log(f"[browser] timeout of {timeout_ms}ms reached, continuing with partial data")

                remaining = timeout - (time.monotonic() - start_time)
                if remaining > 0:
                    # let late scripts, XHRs and workers arrive
                    await page.wait_for_timeout(remaining * 1000)

                try:
                    await asyncio.wait_for(self.handlers.drain(), timeout=DRAIN_TIMEOUT)
                except asyncio.TimeoutError:
                    logger.warn("[browser] script analysis still pending at shutdown, skipping remainder")
            finally:
                await browser.close()
                self.handlers.close()

        return {
            'pages_visited': visited,
            'timed_out': timed_out,
            'duration_seconds': round(time.monotonic() - start_time, 1),
        }

    def attach(self, page):
        """Subscribe the handlers to a page's events"""
        page.on('response', self.handlers.response)
        page.on('websocket', self.handlers.websocket)
        page.on('worker', self.handlers.worker)
        page.on('console', self.handlers.console)

    async def _open_browser(self, pw):
        if self.ws_endpoint:
            logger.log(f"[browser] connecting to {self.ws_endpoint}")
            return await pw.chromium.connect_over_cdp(self.ws_endpoint)
        logger.log("[browser] launching headless Chromium")
        return await pw.chromium.launch(headless=True)

    async def _browse(self, page, urls, timeout_ms, visited):
        for url in urls:
            try:
                logger.log(f"[browser] browsing {url}")
                await page.goto(url, wait_until='domcontentloaded', timeout=timeout_ms)
                visited.append(url)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warn(f"[browser] could not load {url}: {e}")
