"""
Prometheus metrics for the crawl pipeline and the API.
"""
from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import AsyncIterator

from prometheus_client import Counter, Histogram, start_http_server

from shared.config import get_settings
from shared.utils.logging import get_logger

logger = get_logger(__name__)

# ── Counters ────────────────────────────────────────────────────────────
PAGE_FETCHES = Counter(
    "mrb_page_fetches_total",
    "Total results-page HTTP fetches",
    ["status"],
)
CANDIDATES_EXTRACTED = Counter(
    "mrb_candidates_extracted_total",
    "Match candidates extracted from crawled pages",
    ["dated"],
)
INGEST_OUTCOMES = Counter(
    "mrb_ingest_outcomes_total",
    "Ingestion decision per match candidate",
    ["outcome"],
)
CRAWL_PAGES = Counter(
    "mrb_crawl_pages_total",
    "Crawled pages by result",
    ["result"],
)
CRAWL_RUNS = Counter(
    "mrb_crawl_runs_total",
    "Scheduled or manual crawl runs",
    ["trigger"],
)

# ── Histograms ──────────────────────────────────────────────────────────
FETCH_LATENCY = Histogram(
    "mrb_page_fetch_latency_seconds",
    "Results-page fetch latency in seconds",
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)
CRAWL_DURATION = Histogram(
    "mrb_crawl_duration_seconds",
    "Wall time of one full crawl run",
    buckets=(1, 5, 10, 30, 60, 120, 300, 600),
)


@asynccontextmanager
async def atrack_latency(histogram: Histogram, **labels: str) -> AsyncIterator[None]:
    """Async context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        if labels:
            histogram.labels(**labels).observe(elapsed)
        else:
            histogram.observe(elapsed)


def start_metrics_server(port: int | None = None) -> None:
    """Start the Prometheus metrics HTTP server."""
    settings = get_settings()
    if not settings.metrics_enabled:
        return
    metrics_port = port or settings.metrics_port
    try:
        start_http_server(metrics_port)
        logger.info("metrics_server_started", port=metrics_port)
    except OSError as exc:
        logger.warning("metrics_server_failed", error=str(exc), port=metrics_port)
