"""Rendering-provider protocol consumed by the crawl engine.

The engine only calls ``open``, ``new_page``, ``navigate`` and the two
``close`` methods. The query helpers are what handlers use; elements are
duck-typed (Playwright ElementHandles satisfy the same shape).
"""
from __future__ import annotations
from typing import Any, List, Mapping, Optional, Protocol, TYPE_CHECKING, runtime_checkable

if TYPE_CHECKING:
    from ..config import CrawlerConfig


@runtime_checkable
class Element(Protocol):
    async def get_attribute(self, name: str) -> Optional[str]: ...
    async def text_content(self) -> Optional[str]: ...
    async def query_selector(self, selector: str) -> Optional["Element"]: ...
    async def query_selector_all(self, selector: str) -> List["Element"]: ...


@runtime_checkable
class Page(Protocol):
    @property
    def url(self) -> str: ...

    async def navigate(
        self,
        url: str,
        timeout: float,
        headers: Optional[Mapping[str, str]] = None,
        method: str = "GET",
        payload: Optional[str] = None,
    ) -> None: ...

    async def content(self) -> str: ...
    async def title(self) -> str: ...
    async def query_selector(self, selector: str) -> Optional[Element]: ...
    async def query_selector_all(self, selector: str) -> List[Element]: ...
    async def close(self) -> None: ...


@runtime_checkable
class RenderingSession(Protocol):
    @property
    def context(self) -> Any: ...

    async def new_page(self) -> Page: ...
    async def close(self) -> None: ...


@runtime_checkable
class RenderingProvider(Protocol):
    async def open(self, config: "CrawlerConfig") -> RenderingSession: ...
