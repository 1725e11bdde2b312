from __future__ import annotations
import logging
from typing import Any, Dict, List, Mapping, Optional

from playwright.async_api import Browser, BrowserContext, Playwright, Route, async_playwright
from playwright.async_api import Page as PlaywrightNativePage

from ..config import CrawlerConfig

logger = logging.getLogger(__name__)


class PlaywrightPage:
    """Thin wrapper over a Playwright page.

    Anything not defined here falls through to the native page, so handlers
    can use the full Playwright API (``fill``, ``click``, ``eval_on_selector``...).
    """

    def __init__(self, page: PlaywrightNativePage):
        self.raw = page

    def __getattr__(self, name: str) -> Any:
        return getattr(self.raw, name)

    @property
    def url(self) -> str:
        return self.raw.url

    async def navigate(
        self,
        url: str,
        timeout: float,
        headers: Optional[Mapping[str, str]] = None,
        method: str = "GET",
        payload: Optional[str] = None,
    ) -> None:
        if headers:
            await self.raw.set_extra_http_headers(dict(headers))
        method = (method or "GET").upper()
        if method == "GET" and payload is None:
            await self.raw.goto(url, timeout=timeout * 1000)
            return

        # page.goto always issues GET; rewrite its main-frame request. The
        # browser normalises the url, so match on the request kind instead.
        rewritten = []

        async def _override(route: Route) -> None:
            request = route.request
            if not rewritten and request.is_navigation_request() and request.frame == self.raw.main_frame:
                rewritten.append(request.url)
                await route.continue_(method=method, post_data=payload)
            else:
                await route.continue_()

        await self.raw.route("**/*", _override)
        try:
            await self.raw.goto(url, timeout=timeout * 1000)
        finally:
            await self.raw.unroute("**/*", _override)
        if not rewritten:
            logger.warning("%s override did not apply to %s", method, url)

    async def content(self) -> str:
        return await self.raw.content()

    async def title(self) -> str:
        return await self.raw.title()

    async def query_selector(self, selector: str):
        return await self.raw.query_selector(selector)

    async def query_selector_all(self, selector: str) -> List[Any]:
        return await self.raw.query_selector_all(selector)

    async def close(self) -> None:
        await self.raw.close()


class PlaywrightSession:
    def __init__(self, playwright: Playwright, browser: Browser, context: BrowserContext):
        self._playwright = playwright
        self._browser = browser
        self._context = context

    @property
    def context(self) -> BrowserContext:
        return self._context

    async def new_page(self) -> PlaywrightPage:
        return PlaywrightPage(await self._context.new_page())

    async def close(self) -> None:
        # closing the context also closes any page a handler left open
        try:
            await self._context.close()
            await self._browser.close()
        finally:
            await self._playwright.stop()


class PlaywrightProvider:
    """Opens one browser (chromium / firefox / webkit) and one context per run."""

    def __init__(self, launch_options: Optional[Dict[str, Any]] = None):
        self.launch_options = dict(launch_options or {})

    async def open(self, config: CrawlerConfig) -> PlaywrightSession:
        pw = await async_playwright().start()
        try:
            launcher = getattr(pw, config.browser_type)
            browser = await launcher.launch(headless=config.headless, **self.launch_options)
            context = await browser.new_context(user_agent=config.user_agent)
            context.set_default_navigation_timeout(config.navigation_timeout * 1000)
        except Exception:
            await pw.stop()
            raise
        logger.debug("Launched %s (headless=%s)", config.browser_type, config.headless)
        return PlaywrightSession(pw, browser, context)
