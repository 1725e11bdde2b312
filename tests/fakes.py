"""In-memory rendering provider used by the engine tests."""
from __future__ import annotations
import asyncio
from collections import Counter

from crawlcore.config import CrawlerConfig


def fast_config(**kwargs) -> CrawlerConfig:
    """CrawlerConfig without the pre-attempt jitter so tests stay quick."""
    kwargs.setdefault("jitter_min", 0.0)
    kwargs.setdefault("jitter_max", 0.0)
    return CrawlerConfig(**kwargs)


class FakePage:
    def __init__(self, provider: "FakeProvider"):
        self.provider = provider
        self.url = "about:blank"
        self.closed = False

    async def navigate(self, url, timeout, headers=None, method="GET", payload=None):
        self.provider.navigations.append(url)
        await asyncio.sleep(0)
        if self.provider.failures[url] > 0:
            self.provider.failures[url] -= 1
            raise ConnectionError(f"connection reset by {url}")
        self.url = url

    async def content(self):
        return self.provider.pages.get(self.url, "")

    async def title(self):
        return ""

    async def query_selector(self, selector):
        return None

    async def query_selector_all(self, selector):
        return []

    async def close(self):
        self.closed = True
        self.provider.closed_pages += 1


class FakeSession:
    def __init__(self, provider: "FakeProvider"):
        self.provider = provider
        self.closed = False

    @property
    def context(self):
        return self

    async def new_page(self):
        if self.closed:
            raise RuntimeError("session closed")
        self.provider.opened_pages += 1
        return FakePage(self.provider)

    async def close(self):
        self.closed = True


class FakeProvider:
    def __init__(self, failures: dict[str, int] | None = None, pages: dict[str, str] | None = None):
        # url -> number of navigations that fail before one succeeds
        self.failures: Counter = Counter(failures or {})
        self.pages = pages or {}
        self.navigations: list[str] = []
        self.sessions: list[FakeSession] = []
        self.configs: list[CrawlerConfig] = []
        self.opened_pages = 0
        self.closed_pages = 0

    async def open(self, config):
        self.configs.append(config)
        session = FakeSession(self)
        self.sessions.append(session)
        return session

    @property
    def session(self) -> FakeSession:
        return self.sessions[-1]
