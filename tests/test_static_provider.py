import asyncio
import pytest

from crawlcore import Crawler, NavigationError
from crawlcore.config import CrawlerConfig
from crawlcore.rendering import get_provider
from crawlcore.rendering.static_provider import StaticProvider
from fakes import fast_config

LIST_HTML = """<html><head><title> Listing </title></head><body>
<a class="item" href="/p/1" data-id="1">First</a>
<a class="item big" href="/p/2" data-id="2">Second <b>bold</b></a>
</body></html>"""


class DummyResp:
    def __init__(self, url: str, status_code: int = 200, text: str = "<html><title>Ok</title><body>Content</body></html>"):
        self.url = url
        self.status_code = status_code
        self.text = text
        self.headers = {"Content-Type": "text/html; charset=utf-8"}


class DummySession:
    def __init__(self, site: dict[str, DummyResp]):
        self.site = site
        self.headers: dict[str, str] = {}
        self.calls: list[tuple] = []
        self.closed = False

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        return self.site.get(url) or DummyResp(url, 404, "<html><title>Missing</title></html>")

    def close(self):
        self.closed = True


def _provider(site, **kwargs):
    holder = {}

    def factory():
        holder["session"] = DummySession(site)
        return holder["session"]

    return StaticProvider(session_factory=factory, **kwargs), holder


def test_open_sets_user_agent_and_browser_headers():
    provider, holder = _provider({}, browser_headers=True)
    session = asyncio.run(provider.open(CrawlerConfig(user_agent="UA/1")))
    http = holder["session"]
    assert session.context is http
    assert http.headers["User-Agent"] == "UA/1"
    assert "Accept-Language" in http.headers


def test_page_queries():
    site = {"https://example.com/": DummyResp("https://example.com/", text=LIST_HTML)}
    provider, _ = _provider(site)

    async def main():
        session = await provider.open(CrawlerConfig())
        page = await session.new_page()
        await page.navigate("https://example.com/", timeout=5)
        items = await page.query_selector_all("a.item")
        first = await page.query_selector("a.item")
        out = {
            "title": await page.title(),
            "count": len(items),
            "href": await first.get_attribute("href"),
            "cls": await items[1].get_attribute("class"),
            "text": await items[1].inner_text(),
            "bold": await (await items[1].query_selector("b")).text_content(),
            "missing": await page.query_selector("table"),
            "status": page.status,
            "url": page.url,
        }
        await page.close()
        await session.close()
        return out

    out = asyncio.run(main())
    assert out["title"] == "Listing"
    assert out["count"] == 2
    assert out["href"] == "/p/1"
    assert out["cls"] == "item big"
    assert out["text"] == "Second bold"
    assert out["bold"] == "bold"
    assert out["missing"] is None
    assert out["status"] == 200
    assert out["url"] == "https://example.com/"


def test_request_method_headers_payload_forwarded():
    provider, holder = _provider({})

    async def main():
        session = await provider.open(CrawlerConfig())
        page = await session.new_page()
        await page.navigate("https://example.com/s", timeout=7, headers={"X-A": "1"}, method="post", payload="q=1")
        return page.status

    assert asyncio.run(main()) == 404  # not found is a completed navigation
    method, url, kwargs = holder["session"].calls[0]
    assert method == "POST" and url == "https://example.com/s"
    assert kwargs["headers"] == {"X-A": "1"}
    assert kwargs["data"] == "q=1"
    assert kwargs["timeout"] == 7


def test_transient_status_is_navigation_error():
    site = {"https://example.com/": DummyResp("https://example.com/", 503)}
    provider, _ = _provider(site)

    async def main():
        session = await provider.open(CrawlerConfig())
        page = await session.new_page()
        await page.navigate("https://example.com/", timeout=5)

    with pytest.raises(NavigationError):
        asyncio.run(main())


def test_crawl_with_static_provider_follows_links():
    site = {
        "https://example.com/": DummyResp("https://example.com/", text=LIST_HTML),
        "https://example.com/p/1": DummyResp("https://example.com/p/1", text="<html><title>P1</title></html>"),
        "https://example.com/p/2": DummyResp("https://example.com/p/2", text="<html><title>P2</title></html>"),
    }
    provider, holder = _provider(site)
    titles = {}

    async def listing(ctx):
        for a in await ctx.page.query_selector_all("a.item"):
            ctx.enqueue_request("https://example.com" + await a.get_attribute("href"))

    async def detail(ctx):
        titles[ctx.request.url] = await ctx.page.title()

    crawler = Crawler(fast_config(), provider=provider)
    crawler.add_request_handler(r"^https://example\.com/$", listing)
    crawler.add_request_handler(r"/p/\d+$", detail)
    asyncio.run(crawler.run(["https://example.com/"]))
    assert titles == {"https://example.com/p/1": "P1", "https://example.com/p/2": "P2"}
    assert crawler.processed_requests == 3
    assert holder["session"].closed


def test_get_provider_names():
    assert isinstance(get_provider("static"), StaticProvider)
    with pytest.raises(ValueError):
        get_provider("selenium")
