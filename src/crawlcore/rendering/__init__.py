from __future__ import annotations
from typing import Any

from .base import Element, Page, RenderingProvider, RenderingSession

PROVIDERS = ("playwright", "static")


def get_provider(name: str, **kwargs: Any) -> RenderingProvider:
    """Build a rendering provider by name; imports are deferred to the chosen backend."""
    if name == "playwright":
        from .playwright_provider import PlaywrightProvider
        return PlaywrightProvider(**kwargs)
    if name == "static":
        from .static_provider import StaticProvider
        return StaticProvider(**kwargs)
    raise ValueError(f"Unknown rendering provider '{name}' (expected one of {', '.join(PROVIDERS)})")


__all__ = ['Element', 'Page', 'RenderingProvider', 'RenderingSession', 'get_provider', 'PROVIDERS']
