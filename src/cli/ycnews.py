from __future__ import annotations
import argparse
import asyncio
import json
import logging
import sys, pathlib
from pathlib import Path
# Ensure src root is on path if running as a script (python src/cli/ycnews.py ...)
_root = pathlib.Path(__file__).resolve().parents[1]
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))

from crawlcore import Crawler, CrawlerConfig, RequestContext
from crawlcore.config import BROWSER_TYPES, DEFAULT_USER_AGENT
from crawlcore.iojsonl import write_jsonl
from crawlcore.rendering import PROVIDERS, get_provider
from crawlcore.urlnorm import normalize_url

START_URL = "https://news.ycombinator.com/"
LIST_PATTERN = r"^https://news\.ycombinator\.com/(?:news)?(?:\?p=\d+)?$"
ITEM_PATTERN = r"^https://news\.ycombinator\.com/item"


async def _text(el) -> str:
    if el is None:
        return ""
    return ((await el.text_content()) or "").strip()


def build_crawler(config: CrawlerConfig, provider, results: list[dict], event_cb=None) -> Crawler:
    crawler = Crawler(config, provider=provider, event_cb=event_cb)
    seen: set[str] = set()

    def enqueue_once(ctx: RequestContext, url: str) -> None:
        if url in seen:
            return
        seen.add(url)
        ctx.enqueue_request(url)

    async def handle_list(ctx: RequestContext) -> None:
        page = ctx.page
        for item in await page.query_selector_all(".athing"):
            item_id = await item.get_attribute("id")
            if item_id:
                enqueue_once(ctx, normalize_url(page.url, f"item?id={item_id}"))
        more = await page.query_selector(".morelink")
        if more is not None:
            href = await more.get_attribute("href")
            if href:
                enqueue_once(ctx, normalize_url(page.url, href))

    async def handle_item(ctx: RequestContext) -> None:
        page = ctx.page
        link = await page.query_selector(".titleline a")
        points, author, time = 0, "", ""
        subtext = await page.query_selector(".subtext")
        if subtext is not None:
            score = await _text(await subtext.query_selector(".score"))
            points = int(score.split()[0]) if score[:1].isdigit() else 0
            author = await _text(await subtext.query_selector(".hnuser"))
            age = await subtext.query_selector(".age")
            time = (await age.get_attribute("title") or "") if age is not None else ""
        comments = []
        for row in await page.query_selector_all(".comtr"):
            body = await row.query_selector(".commtext")
            if body is None:
                continue
            age = await row.query_selector(".age")
            comments.append({
                "author": await _text(await row.query_selector(".hnuser")),
                "text": await _text(body),
                "time": (await age.get_attribute("title") or "") if age is not None else "",
            })
        results.append({
            "item": ctx.request.url,
            "title": await _text(link),
            "url": (await link.get_attribute("href") or "") if link is not None else "",
            "points": points,
            "author": author,
            "time": time,
            "comments": comments,
        })

    crawler.add_request_handler(LIST_PATTERN, handle_list)
    crawler.add_request_handler(ITEM_PATTERN, handle_item)
    return crawler


def build_config(args: argparse.Namespace) -> CrawlerConfig:
    return CrawlerConfig(
        max_concurrency=args.maxConcurrency,
        max_requests_per_crawl=args.maxRequests,
        max_retries=args.maxRetries,
        handler_timeout=args.handlerTimeout,
        browser_type=args.browser,
        headless=not args.headful,
        user_agent=args.userAgent or DEFAULT_USER_AGENT,
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Hacker News front-page crawler (example caller of crawlcore)")
    ap.add_argument("--start", default=START_URL, help="Seed URL (front page or ?p=N listing)")
    ap.add_argument("--maxRequests", type=int, default=100, help="Stop admitting new requests after this many successes")
    ap.add_argument("--maxConcurrency", type=int, default=1, help="Pages processed at the same time")
    ap.add_argument("--maxRetries", type=int, default=3, help="Retries per request after the first attempt")
    ap.add_argument("--handlerTimeout", type=float, default=60.0, help="Seconds a handler may run per attempt")
    ap.add_argument("--browser", choices=BROWSER_TYPES, default="chromium", help="Browser engine (playwright provider)")
    ap.add_argument("--headful", action="store_true", help="Show the browser window")
    ap.add_argument("--provider", choices=PROVIDERS, default="playwright", help="Rendering provider")
    ap.add_argument("--userAgent", default=None, help="Override User-Agent string (default from CrawlerConfig)")
    ap.add_argument("--out", help="Output JSONL file path (default: print records to stdout)")
    ap.add_argument("--logEvents", help="Write JSONL event log to this file")
    ap.add_argument("--verbose", action="store_true", help="Debug logging plus per-request events on stderr")
    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    event_fp = None
    if args.logEvents:
        event_log_file = Path(args.logEvents)
        event_log_file.parent.mkdir(parents=True, exist_ok=True)
        event_fp = event_log_file.open('w', encoding='utf-8')

    def event_cb(ev):
        line = json.dumps(ev, ensure_ascii=False, default=str)
        if args.verbose:
            sys.stderr.write(line + "\n")
        if event_fp:
            event_fp.write(line + "\n")

    cfg = build_config(args)
    results: list[dict] = []
    crawler = build_crawler(cfg, get_provider(args.provider), results, event_cb=event_cb if (args.verbose or event_fp) else None)
    try:
        asyncio.run(crawler.run([args.start]))
    finally:
        if event_fp:
            event_fp.close()

    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        write_jsonl(results, out_path)
    else:
        for rec in results:
            print(json.dumps(rec, ensure_ascii=False))
    sys.stderr.write(json.dumps(crawler.stats) + "\n")
    return 0

if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
