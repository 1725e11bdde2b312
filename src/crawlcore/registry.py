from __future__ import annotations
import re
from typing import List, Optional, Pattern, Tuple, Union

from .models import RequestHandler


class HandlerRegistry:
    """Ordered URL-pattern -> handler rules with an optional fallback.

    Patterns use ``re.search`` semantics (unanchored unless the pattern says
    otherwise). Resolution walks rules in registration order and the first
    match wins; registering the same pattern string again swaps the handler
    but keeps the rule where it was.
    """

    def __init__(self) -> None:
        self._rules: List[Tuple[Pattern[str], RequestHandler]] = []
        self._default: Optional[RequestHandler] = None

    def register(self, pattern: Union[str, Pattern[str]], handler: RequestHandler) -> None:
        compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
        for i, (existing, _) in enumerate(self._rules):
            if existing.pattern == compiled.pattern and existing.flags == compiled.flags:
                self._rules[i] = (existing, handler)
                return
        self._rules.append((compiled, handler))

    def set_default(self, handler: Optional[RequestHandler]) -> None:
        self._default = handler

    @property
    def default(self) -> Optional[RequestHandler]:
        return self._default

    @property
    def patterns(self) -> list[str]:
        return [p.pattern for p, _ in self._rules]

    def __len__(self) -> int:
        return len(self._rules)

    def resolve(self, url: str) -> Optional[RequestHandler]:
        for pattern, handler in self._rules:
            if pattern.search(url):
                return handler
        return self._default
