from __future__ import annotations
import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping, Optional, TYPE_CHECKING, Union

if TYPE_CHECKING:
    from .crawler import Crawler
    from .rendering.base import Page, RenderingSession


@dataclass(frozen=True)
class CrawlRequest:
    """One location to visit.

    Equality and hashing look at ``url`` only; the engine itself never
    deduplicates, so callers that want dedupe can keep a set of requests.
    """
    url: str
    user_data: Any = field(default=None, compare=False)
    headers: Mapping[str, str] = field(default_factory=dict, compare=False)
    method: str = field(default="GET", compare=False)
    payload: Optional[str] = field(default=None, compare=False)

    @classmethod
    def coerce(cls, value: Union["CrawlRequest", str, Mapping[str, Any]]) -> "CrawlRequest":
        """Accept a CrawlRequest, a bare URL or a ``{"url": ..., ...}`` mapping."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls(url=value)
        if isinstance(value, Mapping):
            if "url" not in value:
                raise TypeError("request mapping needs a 'url' key")
            return cls(
                url=value["url"],
                user_data=value.get("user_data", value.get("userData")),
                headers=dict(value.get("headers") or {}),
                method=(value.get("method") or "GET").upper(),
                payload=value.get("payload"),
            )
        raise TypeError(f"Cannot build a CrawlRequest from {type(value).__name__}")


EnqueueFn = Callable[[Union[CrawlRequest, str, Mapping[str, Any]]], bool]


@dataclass
class RequestContext:
    """Built fresh for every execution attempt; not kept after it ends."""
    request: CrawlRequest
    page: "Page"
    crawler: "Crawler"
    enqueue_request: EnqueueFn
    # set when the attempt is abandoned on timeout; handlers may poll it
    cancelled: asyncio.Event = field(default_factory=asyncio.Event)

    @property
    def is_cancelled(self) -> bool:
        return self.cancelled.is_set()


@dataclass
class PreTaskContext:
    session: "RenderingSession"
    crawler: "Crawler"

    @property
    def context(self) -> Any:
        # provider-native browsing context (a Playwright BrowserContext for the default provider)
        return self.session.context


RequestHandler = Callable[[RequestContext], Union[Awaitable[Any], Any]]
PreTaskHandler = Callable[[PreTaskContext], Union[Awaitable[Any], Any]]
