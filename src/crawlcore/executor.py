"""Executes one crawl request: page acquisition, retry loop, handler race.

Outcome per request is exactly one terminal event: ``request_finished`` on the
first successful attempt or ``request_max_retries_reached`` once
``max_retries + 1`` attempts have failed. Each failed attempt additionally
emits ``request_failed``. The page is closed on every exit path.

A handler that outlives ``handler_timeout`` is not killed: its context's
``cancelled`` event is set and the task is handed to the crawler, which
cancels leftovers when the session closes. Enqueues it already made stay.
"""
from __future__ import annotations
import asyncio
import inspect
import logging
import random
from typing import TYPE_CHECKING

from .errors import HandlerTimeoutError, NavigationError, SessionNotInitializedError
from .models import CrawlRequest, RequestContext, RequestHandler

if TYPE_CHECKING:
    from .crawler import Crawler
    from .rendering.base import Page

logger = logging.getLogger(__name__)

REQUEST_FINISHED = "request_finished"
REQUEST_FAILED = "request_failed"
REQUEST_MAX_RETRIES_REACHED = "request_max_retries_reached"


async def _invoke(handler: RequestHandler, ctx: RequestContext) -> None:
    result = handler(ctx)
    if inspect.isawaitable(result):
        await result


class RequestExecutor:
    def __init__(self, crawler: "Crawler"):
        self.crawler = crawler

    async def execute(self, request: CrawlRequest) -> bool:
        """Run ``request`` to its terminal outcome. Returns True on success."""
        crawler = self.crawler
        cfg = crawler.config
        session = crawler.session
        if session is None:
            raise SessionNotInitializedError()
        page = await session.new_page()
        attempts = 0
        try:
            while attempts <= cfg.max_retries:
                await self._jitter()
                try:
                    await self._attempt(request, page)
                except Exception as exc:
                    attempts += 1
                    retries_left = max(cfg.max_retries - attempts, 0)
                    crawler.stats["failed_attempts"] += 1
                    logger.warning("Request failed: %s - %s (retries left: %d)", request.url, exc, retries_left)
                    crawler.emit(REQUEST_FAILED, url=request.url, error=exc, retries_left=retries_left)
                    if attempts > cfg.max_retries:
                        crawler.stats["max_retries_reached"] += 1
                        logger.error("Max retries reached for: %s", request.url)
                        crawler.emit(REQUEST_MAX_RETRIES_REACHED, url=request.url, error=exc)
                    continue
                crawler.stats["processed_requests"] += 1
                logger.info("Request finished: %s", request.url)
                crawler.emit(REQUEST_FINISHED, url=request.url)
                return True
            return False
        finally:
            await page.close()

    async def _jitter(self) -> None:
        cfg = self.crawler.config
        if cfg.jitter_max <= 0:
            return
        delay = random.uniform(cfg.jitter_min, cfg.jitter_max)
        await asyncio.sleep(delay)

    async def _attempt(self, request: CrawlRequest, page: "Page") -> None:
        crawler = self.crawler
        cfg = crawler.config
        try:
            await asyncio.wait_for(
                page.navigate(
                    request.url,
                    timeout=cfg.download_timeout,
                    headers=dict(request.headers) or None,
                    method=request.method,
                    payload=request.payload,
                ),
                cfg.download_timeout,
            )
        except asyncio.TimeoutError as exc:
            raise NavigationError(request.url, f"timed out after {cfg.download_timeout}s") from exc
        except NavigationError:
            raise
        except Exception as exc:
            raise NavigationError(request.url, str(exc) or type(exc).__name__) from exc

        handler = crawler.registry.resolve(request.url)
        if handler is None:
            logger.debug("No handler matches %s; skipping", request.url)
            return

        ctx = RequestContext(request=request, page=page, crawler=crawler, enqueue_request=crawler.enqueue_request)
        task = asyncio.ensure_future(_invoke(handler, ctx))
        try:
            done, _ = await asyncio.wait({task}, timeout=cfg.handler_timeout)
        except asyncio.CancelledError:
            task.cancel()
            raise
        if task not in done:
            ctx.cancelled.set()
            crawler.detach(task)
            raise HandlerTimeoutError(request.url, cfg.handler_timeout)
        task.result()
