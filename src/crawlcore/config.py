from __future__ import annotations
from dataclasses import dataclass

BROWSER_TYPES = ("chromium", "firefox", "webkit")

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; CrawlcoreBot/0.1; +https://example.com/bot)"

@dataclass(frozen=True)
class CrawlerConfig:
    max_concurrency: int = 10
    max_requests_per_crawl: int | None = None  # None = unlimited successful requests
    browser_type: str = "chromium"
    headless: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    navigation_timeout: float = 30.0  # seconds; context default for handler-driven navigations
    max_retries: int = 3
    download_timeout: float = 60.0  # seconds; bounds the crawler's own navigation
    handler_timeout: float = 60.0  # seconds per handler invocation
    jitter_min: float = 0.1  # random delay before each attempt (seconds)
    jitter_max: float = 0.6

    def __post_init__(self) -> None:
        if self.max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1 (got {self.max_concurrency})")
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0 (got {self.max_retries})")
        if self.max_requests_per_crawl is not None and self.max_requests_per_crawl < 0:
            raise ValueError(f"max_requests_per_crawl must be >= 0 or None (got {self.max_requests_per_crawl})")
        for name in ("navigation_timeout", "download_timeout", "handler_timeout"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be > 0 (got {getattr(self, name)})")
        if not (0 <= self.jitter_min <= self.jitter_max):
            raise ValueError(f"jitter range invalid: {self.jitter_min}..{self.jitter_max}")
        if self.browser_type not in BROWSER_TYPES:
            raise ValueError(f"Unknown browser_type '{self.browser_type}' (expected one of {', '.join(BROWSER_TYPES)})")

    def cap_reached(self, processed: int) -> bool:
        """True once `processed` successful requests hit max_requests_per_crawl."""
        return self.max_requests_per_crawl is not None and processed >= self.max_requests_per_crawl
