from __future__ import annotations
import asyncio
import functools
import inspect
import logging
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Pattern, Set, Union

from .config import CrawlerConfig
from .errors import SessionNotInitializedError
from .executor import REQUEST_FAILED, REQUEST_FINISHED, REQUEST_MAX_RETRIES_REACHED, RequestExecutor
from .models import CrawlRequest, PreTaskContext, PreTaskHandler, RequestHandler
from .registry import HandlerRegistry
from .rendering.base import RenderingProvider, RenderingSession
from .work_queue import WorkQueue

logger = logging.getLogger(__name__)

EVENT_TYPES = (REQUEST_FINISHED, REQUEST_FAILED, REQUEST_MAX_RETRIES_REACHED)

EventListener = Callable[[Dict[str, Any]], Any]


class CrawlerState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    RUNNING = "running"
    DRAINING = "draining"
    CLOSING = "closing"
    CLOSED = "closed"


class Crawler:
    """Drives one crawl run from seed requests to an idle queue.

    Handlers are registered against regex patterns; each one receives a
    RequestContext and may call ``enqueue_request`` to add work to the same
    run. Events are plain dicts (``{"type": ..., "url": ...}``) delivered to
    listeners added with ``on`` and to the optional ``event_cb``.

    A Crawler is single-use: counters live for one run and ``run`` cannot be
    called twice.
    """

    def __init__(
        self,
        config: CrawlerConfig | None = None,
        provider: RenderingProvider | None = None,
        event_cb: EventListener | None = None,
    ):
        self.config = config or CrawlerConfig()
        if provider is None:
            from .rendering import get_provider
            provider = get_provider("playwright")
        self.provider = provider
        self.event_cb = event_cb
        self.registry = HandlerRegistry()
        self.queue = WorkQueue(self.config.max_concurrency)
        self.executor = RequestExecutor(self)
        self.session: Optional[RenderingSession] = None
        self.stats: Dict[str, int] = {
            "processed_requests": 0,
            "enqueued": 0,
            "dropped": 0,
            "failed_attempts": 0,
            "max_retries_reached": 0,
        }
        self._listeners: Dict[str, List[EventListener]] = {t: [] for t in EVENT_TYPES}
        self._pre_task_handlers: List[PreTaskHandler] = []
        self._detached: Set[asyncio.Task] = set()
        self._state = CrawlerState.UNINITIALIZED

    @property
    def state(self) -> CrawlerState:
        return self._state

    @property
    def processed_requests(self) -> int:
        return self.stats["processed_requests"]

    # -- lifecycle -----------------------------------------------------

    async def initialize(self) -> None:
        if self._state is not CrawlerState.UNINITIALIZED:
            raise RuntimeError(f"Crawler already initialized (state={self._state.value})")
        self.session = await self.provider.open(self.config)
        self._state = CrawlerState.INITIALIZED
        logger.info("Browser initialized (%s, headless=%s)", self.config.browser_type, self.config.headless)

    async def close(self) -> None:
        """Cancel outstanding work, then close the session.

        Enqueues are refused from the moment this starts, so handlers unwinding
        from cancellation cannot add work behind it.
        """
        if self._state in (CrawlerState.CLOSING, CrawlerState.CLOSED):
            return
        self._state = CrawlerState.CLOSING
        if not self.queue.is_idle:
            logger.info("Cancelling %d queued request(s)", self.queue.pending)
        await self.queue.cancel_all()
        if self._detached:
            pending = list(self._detached)
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
        session, self.session = self.session, None
        self._state = CrawlerState.CLOSED
        if session is not None:
            await session.close()
            logger.info("Browser closed")

    async def __aenter__(self) -> "Crawler":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # -- registration --------------------------------------------------

    def add_request_handler(self, pattern: Union[str, Pattern[str]], handler: RequestHandler) -> None:
        self.registry.register(pattern, handler)
        logger.info("Request handler added for pattern: %s", getattr(pattern, "pattern", pattern))

    def set_default_handler(self, handler: RequestHandler) -> None:
        self.registry.set_default(handler)
        logger.info("Default request handler set")

    def add_pre_task_handler(self, handler: PreTaskHandler) -> None:
        self._pre_task_handlers.append(handler)
        logger.info("Pre-task handler added")

    # -- events --------------------------------------------------------

    def on(self, event: str, listener: EventListener) -> None:
        if event not in self._listeners:
            raise ValueError(f"Unknown event '{event}' (expected one of {', '.join(EVENT_TYPES)})")
        self._listeners[event].append(listener)

    def off(self, event: str, listener: EventListener) -> None:
        self._listeners.get(event, []).remove(listener)

    def emit(self, event: str, **payload: Any) -> None:
        ev = {"type": event, **payload}
        for listener in list(self._listeners.get(event, ())):
            listener(ev)
        if self.event_cb:
            self.event_cb(ev)

    # -- running -------------------------------------------------------

    def enqueue_request(self, request: Union[CrawlRequest, str, Mapping[str, Any]]) -> bool:
        """Admit ``request`` into the run unless the success cap is reached.

        The cap is checked here only, so requests admitted before it was hit
        still run and may push ``processed_requests`` past the maximum.
        Returns True when the request was queued.
        """
        req = CrawlRequest.coerce(request)
        if self._state is CrawlerState.UNINITIALIZED:
            raise SessionNotInitializedError("Crawler is not running; use run() or initialize() first")
        if self._state in (CrawlerState.CLOSING, CrawlerState.CLOSED):
            logger.debug("Crawler closed; ignoring %s", req.url)
            return False
        if self.config.cap_reached(self.stats["processed_requests"]):
            self.stats["dropped"] += 1
            logger.debug("Request cap reached; dropping %s", req.url)
            return False
        self.stats["enqueued"] += 1
        self.queue.submit(functools.partial(self.executor.execute, req))
        return True

    async def run(self, start_requests: Iterable[Union[CrawlRequest, str, Mapping[str, Any]]] = ()) -> None:
        """Full lifecycle: open session, pre-task hooks, seed, drain, close.

        Pre-task hook errors propagate and leave the session open; use
        ``async with Crawler(...)`` to guarantee it gets closed.
        """
        if self._state is not CrawlerState.UNINITIALIZED:
            raise RuntimeError("Crawler instances are single-use; create a new Crawler for another run")
        await self.initialize()

        for hook in self._pre_task_handlers:
            result = hook(PreTaskContext(session=self.session, crawler=self))
            if inspect.isawaitable(result):
                await result

        self._state = CrawlerState.RUNNING
        for request in start_requests:
            self.enqueue_request(request)

        self._state = CrawlerState.DRAINING
        await self.queue.wait_idle()
        logger.info(
            "Crawl finished: %d processed, %d enqueued, %d gave up",
            self.stats["processed_requests"], self.stats["enqueued"], self.stats["max_retries_reached"],
        )
        await self.close()

    def detach(self, task: asyncio.Task) -> None:
        """Keep a timed-out handler task alive until it ends or the session closes."""
        self._detached.add(task)
        task.add_done_callback(self._on_detached_done)

    def _on_detached_done(self, task: asyncio.Task) -> None:
        self._detached.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.debug("Timed-out handler finished later with error: %r", exc)
