"""
Recursive crawl over the results site's "previous page" chain.

Each page is fetched, parsed, extracted and ingested before the crawler moves
on to the next (older) page, so a failure deeper in the chain never undoes
work already written. Page failures end the chain quietly; the background job
prefers partial ingestion over all-or-nothing.
"""
from __future__ import annotations

from typing import Optional, Protocol

from shared.models.domain import MatchCandidate
from shared.utils.logging import get_logger
from shared.utils.metrics import CRAWL_PAGES

from ingest.extractor import MatchRecordExtractor
from ingest.page_parser import PageStructureParser
from ingest.writer import IngestionWriter, IngestReport

logger = get_logger(__name__)


class PageFetcher(Protocol):
    async def fetch(self, url: str) -> str: ...


class CrawlOrchestrator:
    """
    Walks at most `page_budget` pages, newest first.

    Attributes:
        pages_visited: Pages fetched successfully during this orchestrator's lifetime.
        report: Ingestion counters accumulated over all visited pages.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        parser: PageStructureParser,
        extractor: MatchRecordExtractor,
        writer: IngestionWriter,
    ) -> None:
        self._fetcher = fetcher
        self._parser = parser
        self._extractor = extractor
        self._writer = writer
        self.pages_visited = 0
        self.report = IngestReport()

    async def crawl(
        self,
        start_url: str,
        page_budget: int,
        current_header: Optional[str] = None,
    ) -> list[MatchCandidate]:
        """
        Crawl from start_url and return every candidate seen, this page's first.

        Args:
            start_url: Page to fetch.
            page_budget: Maximum number of pages (fetches) left for this walk.
            current_header: Date header in scope from the previous page, if any.

        Returns:
            Candidates of this page followed by those of older pages.
        """
        if page_budget <= 0:
            return []

        try:
            raw_html = await self._fetcher.fetch(start_url)
            page = self._parser.parse(raw_html)
            extraction = self._extractor.extract(page.nodes, current_header)
            self.report.merge(await self._writer.ingest(extraction.candidates))
        except Exception as exc:
            CRAWL_PAGES.labels(result="failed").inc()
            logger.error(
                "crawl_page_failed",
                url=start_url,
                budget=page_budget,
                error=str(exc),
                error_type=type(exc).__name__,
                exc_info=True,
            )
            return []

        self.pages_visited += 1
        CRAWL_PAGES.labels(result="empty" if page.is_empty else "ok").inc()
        logger.info(
            "crawl_page_done",
            url=start_url,
            budget=page_budget,
            nodes=len(page.nodes),
            candidates=len(extraction.candidates),
            previous_url=page.previous_url,
        )

        candidates = list(extraction.candidates)
        if page.is_empty or page.previous_url is None:
            return candidates

        candidates.extend(
            await self.crawl(page.previous_url, page_budget - 1, extraction.current_header)
        )
        return candidates
