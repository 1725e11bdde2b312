"""Static HTTP rendering provider (no JavaScript).

Fetches with a shared ``requests.Session`` and parses with BeautifulSoup, for
sites where a browser is overkill. The blocking request runs in a worker
thread so the event loop keeps serving other pages. Like a browser, a 404 is
a completed navigation (see ``page.status``); only the transient statuses in
``retry_statuses`` are reported as navigation failures so the crawler retries.
"""
from __future__ import annotations
import asyncio
from typing import Callable, List, Mapping, Optional

import requests
from bs4 import BeautifulSoup, Tag

from ..config import CrawlerConfig
from ..errors import NavigationError

RETRY_STATUSES_DEFAULT = (429, 500, 502, 503, 504)


class StaticElement:
    def __init__(self, tag: Tag):
        self.tag = tag

    async def get_attribute(self, name: str) -> Optional[str]:
        value = self.tag.get(name)
        if isinstance(value, list):  # multi-valued attrs such as class
            return " ".join(value)
        return value

    async def text_content(self) -> str:
        return self.tag.get_text()

    async def inner_text(self) -> str:
        return self.tag.get_text(" ", strip=True)

    async def query_selector(self, selector: str) -> Optional["StaticElement"]:
        node = self.tag.select_one(selector)
        return StaticElement(node) if node is not None else None

    async def query_selector_all(self, selector: str) -> List["StaticElement"]:
        return [StaticElement(n) for n in self.tag.select(selector)]


class StaticPage:
    def __init__(self, http: requests.Session, retry_statuses: tuple[int, ...] = RETRY_STATUSES_DEFAULT):
        self._http = http
        self._retry_statuses = retry_statuses
        self._url = "about:blank"
        self._html = ""
        self._soup: Optional[BeautifulSoup] = None
        self.status: Optional[int] = None
        self.headers: dict = {}
        self.closed = False

    @property
    def url(self) -> str:
        return self._url

    async def navigate(
        self,
        url: str,
        timeout: float,
        headers: Optional[Mapping[str, str]] = None,
        method: str = "GET",
        payload: Optional[str] = None,
    ) -> None:
        if self.closed:
            raise RuntimeError("Page is closed")
        resp = await asyncio.to_thread(
            self._http.request,
            (method or "GET").upper(),
            url,
            headers=dict(headers) if headers else None,
            data=payload,
            timeout=timeout,
            allow_redirects=True,
        )
        status = getattr(resp, "status_code", 0)
        if status in self._retry_statuses:
            raise NavigationError(url, f"HTTP {status}")
        self._url = str(getattr(resp, "url", url) or url)
        self.status = status
        self.headers = dict(getattr(resp, "headers", {}) or {})
        self._html = resp.text or ""
        self._soup = BeautifulSoup(self._html, "lxml")

    def _root(self) -> BeautifulSoup:
        if self._soup is None:
            self._soup = BeautifulSoup(self._html, "lxml")
        return self._soup

    async def content(self) -> str:
        return self._html

    async def title(self) -> str:
        soup = self._root()
        if soup.title and soup.title.string:
            return soup.title.string.strip()
        return ""

    async def query_selector(self, selector: str) -> Optional[StaticElement]:
        node = self._root().select_one(selector)
        return StaticElement(node) if node is not None else None

    async def query_selector_all(self, selector: str) -> List[StaticElement]:
        return [StaticElement(n) for n in self._root().select(selector)]

    async def close(self) -> None:
        self.closed = True
        self._soup = None


class StaticSession:
    def __init__(self, http: requests.Session, retry_statuses: tuple[int, ...]):
        self._http = http
        self._retry_statuses = retry_statuses

    @property
    def context(self) -> requests.Session:
        return self._http

    async def new_page(self) -> StaticPage:
        return StaticPage(self._http, self._retry_statuses)

    async def close(self) -> None:
        self._http.close()


class StaticProvider:
    def __init__(
        self,
        browser_headers: bool = False,
        retry_statuses: tuple[int, ...] = RETRY_STATUSES_DEFAULT,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ):
        self.browser_headers = browser_headers
        self.retry_statuses = tuple(retry_statuses)
        self.session_factory = session_factory

    async def open(self, config: CrawlerConfig) -> StaticSession:
        http = self.session_factory()
        http.headers["User-Agent"] = config.user_agent
        if self.browser_headers:
            # Minimal common headers (avoid full fingerprinting complexity)
            http.headers.setdefault("Accept", "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8")
            http.headers.setdefault("Accept-Language", "en-US,en;q=0.9")
        return StaticSession(http, self.retry_statuses)
