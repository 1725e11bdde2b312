from .config import CrawlerConfig, BROWSER_TYPES, DEFAULT_USER_AGENT
from .crawler import Crawler, CrawlerState, EVENT_TYPES
from .errors import CrawlerError, NavigationError, HandlerTimeoutError, SessionNotInitializedError
from .executor import RequestExecutor, REQUEST_FINISHED, REQUEST_FAILED, REQUEST_MAX_RETRIES_REACHED
from .models import CrawlRequest, RequestContext, PreTaskContext, RequestHandler, PreTaskHandler
from .registry import HandlerRegistry
from .work_queue import WorkQueue

__version__ = "0.1.0"

__all__ = [
    'CrawlerConfig','BROWSER_TYPES','DEFAULT_USER_AGENT',
    'Crawler','CrawlerState','EVENT_TYPES',
    'CrawlerError','NavigationError','HandlerTimeoutError','SessionNotInitializedError',
    'RequestExecutor','REQUEST_FINISHED','REQUEST_FAILED','REQUEST_MAX_RETRIES_REACHED',
    'CrawlRequest','RequestContext','PreTaskContext','RequestHandler','PreTaskHandler',
    'HandlerRegistry','WorkQueue',
]
