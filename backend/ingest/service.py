"""
Crawl job entrypoint.

Wires fetcher, parser, extractor, writer and orchestrator for one crawl run.
Used by the scheduler on every firing and runnable by hand:

    python -m ingest.service
"""
from __future__ import annotations

import asyncio
import time
import uuid
from dataclasses import dataclass
from typing import Optional

from shared.config import Settings, get_settings
from shared.models.enums import CrawlTrigger
from shared.store import MatchStore
from shared.utils.database import DatabaseManager, connect_with_retry
from shared.utils.http_client import HtmlPageFetcher
from shared.utils.logging import crawl_context, get_logger, setup_logging
from shared.utils.metrics import CRAWL_DURATION, CRAWL_RUNS

from ingest.crawler import CrawlOrchestrator, PageFetcher
from ingest.extractor import MatchRecordExtractor
from ingest.page_parser import PageStructureParser
from ingest.writer import IngestionWriter, MatchRecordStore

logger = get_logger(__name__)


@dataclass
class CrawlSummary:
    run_id: str
    start_url: str
    page_budget: int
    pages_visited: int
    candidates: int
    inserted: int
    skipped: int
    rejected: int
    failed: int
    duration_s: float


def build_orchestrator(
    fetcher: PageFetcher,
    store: MatchRecordStore,
    settings: Settings,
) -> CrawlOrchestrator:
    return CrawlOrchestrator(
        fetcher=fetcher,
        parser=PageStructureParser(origin=settings.scraper_origin),
        extractor=MatchRecordExtractor(source_tz=settings.source_timezone),
        writer=IngestionWriter(store),
    )


async def run_crawl(
    store: MatchRecordStore,
    settings: Settings | None = None,
    trigger: CrawlTrigger = CrawlTrigger.MANUAL,
    fetcher: Optional[PageFetcher] = None,
) -> CrawlSummary:
    """
    Run one full crawl from the configured start URL.

    Every log entry emitted during the run carries the same crawl_run_id.
    Page-level failures are absorbed by the orchestrator; this function only
    raises if the HTTP client itself cannot be set up.
    """
    settings = settings or get_settings()
    run_id = uuid.uuid4().hex[:12]
    with crawl_context(run_id, trigger.value):
        return await _run_crawl(run_id, store, settings, trigger, fetcher)


async def _run_crawl(
    run_id: str,
    store: MatchRecordStore,
    settings: Settings,
    trigger: CrawlTrigger,
    fetcher: Optional[PageFetcher],
) -> CrawlSummary:
    CRAWL_RUNS.labels(trigger=trigger.value).inc()
    logger.info(
        "crawl_started",
        start_url=settings.crawl_start_url,
        page_budget=settings.crawl_page_budget,
    )

    start = time.perf_counter()
    if fetcher is None:
        async with HtmlPageFetcher(settings) as http_fetcher:
            orchestrator = build_orchestrator(http_fetcher, store, settings)
            candidates = await orchestrator.crawl(settings.crawl_start_url, settings.crawl_page_budget)
    else:
        orchestrator = build_orchestrator(fetcher, store, settings)
        candidates = await orchestrator.crawl(settings.crawl_start_url, settings.crawl_page_budget)
    duration_s = time.perf_counter() - start
    CRAWL_DURATION.observe(duration_s)

    report = orchestrator.report
    summary = CrawlSummary(
        run_id=run_id,
        start_url=settings.crawl_start_url,
        page_budget=settings.crawl_page_budget,
        pages_visited=orchestrator.pages_visited,
        candidates=len(candidates),
        inserted=report.inserted,
        skipped=report.skipped,
        rejected=report.rejected,
        failed=report.failed,
        duration_s=round(duration_s, 3),
    )
    logger.info(
        "crawl_finished",
        pages_visited=summary.pages_visited,
        candidates=summary.candidates,
        inserted=summary.inserted,
        skipped=summary.skipped,
        rejected=summary.rejected,
        failed=summary.failed,
        duration_s=summary.duration_s,
    )
    return summary


async def main() -> None:
    """Run a single crawl against the configured database."""
    settings = get_settings()
    setup_logging("crawler")

    db = DatabaseManager(settings)
    await connect_with_retry(db.connect, "Database")
    await db.create_schema()
    try:
        await run_crawl(MatchStore(db), settings, trigger=CrawlTrigger.MANUAL)
    finally:
        await db.disconnect()


def cli() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    cli()
