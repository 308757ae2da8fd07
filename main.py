"""Social Harvester — entry point.

    python main.py run [--input input.json]   one crawl, then exit
    python main.py serve                      API + periodic crawls
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os

import certifi
import uvicorn

# Fix SSL cert resolution for curl_cffi (used by Scrapling)
os.environ.setdefault("CURL_CA_BUNDLE", certifi.where())
os.environ.setdefault("SSL_CERT_FILE", certifi.where())

from api.app import create_app  # noqa: E402
from api.routers.crawl_control import set_scheduler  # noqa: E402
from config.settings import settings  # noqa: E402
from data.database import init_db  # noqa: E402
from data.sinks import make_sink  # noqa: E402
from scrapers.crawler import CrawlOptions, CrawlOrchestrator  # noqa: E402
from scrapers.fetcher import PageFetcher  # noqa: E402
from scrapers.scheduler import CrawlScheduler  # noqa: E402

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
)
log = logging.getLogger(__name__)


def build_orchestrator(options: CrawlOptions) -> CrawlOrchestrator:
    return CrawlOrchestrator(
        fetcher=PageFetcher(),
        sink=make_sink(settings.OUTPUT_SINK, settings.OUTPUT_DIR),
        options=options,
    )


app = create_app()


@app.on_event("startup")
async def on_startup() -> None:
    log.info("Initialising database…")
    await init_db()

    scheduler = CrawlScheduler(build_orchestrator)
    app.state.scheduler = scheduler
    set_scheduler(scheduler)
    scheduler.start()


@app.on_event("shutdown")
async def on_shutdown() -> None:
    if hasattr(app.state, "scheduler"):
        app.state.scheduler.stop()
        log.info("Crawl scheduler stopped.")


async def run_once(options: CrawlOptions) -> int:
    if settings.OUTPUT_SINK == "database":
        await init_db()
    summary = await build_orchestrator(options).run()
    return summary.records_saved


def main() -> None:
    parser = argparse.ArgumentParser(description="Harvest public posts for keywords")
    sub = parser.add_subparsers(dest="command", required=True)
    run_p = sub.add_parser("run", help="run one crawl and exit")
    run_p.add_argument("--input", help="JSON file with platforms/keywords/maxRecords/...")
    sub.add_parser("serve", help="start the API and the crawl scheduler")
    args = parser.parse_args()

    if args.command == "serve":
        uvicorn.run("main:app", host="0.0.0.0", port=settings.API_PORT, reload=False)
        return

    options = CrawlOptions.from_settings()
    if args.input:
        with open(args.input, "r", encoding="utf-8") as f:
            options = CrawlOptions.from_input(json.load(f), base=options)

    total = asyncio.run(run_once(options))
    print(f"Scraping completed! Total records collected: {total}")


if __name__ == "__main__":
    main()
