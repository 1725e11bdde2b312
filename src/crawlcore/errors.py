from __future__ import annotations


class CrawlerError(Exception):
    """Base class for errors raised by the crawl engine."""


class NavigationError(CrawlerError):
    """Loading a location failed (transport error or navigation timeout)."""

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        super().__init__(f"Navigation to {url} failed" + (f": {reason}" if reason else ""))


class HandlerTimeoutError(CrawlerError, TimeoutError):
    def __init__(self, url: str, timeout: float):
        self.url = url
        self.timeout = timeout
        super().__init__(f"Request handler timeout after {timeout}s: {url}")


class SessionNotInitializedError(CrawlerError, RuntimeError):
    def __init__(self, message: str = "Browser context is not initialized"):
        super().__init__(message)
