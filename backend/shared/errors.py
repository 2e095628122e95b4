"""
Error taxonomy for the scraping pipeline and the record stores.

Duplicate detection during ingestion is an expected outcome, not an error,
so it has no exception type here.
"""
from __future__ import annotations

import uuid
from typing import Optional


class ScraperError(Exception):
    """Base class for failures inside the crawl pipeline."""


class FetchError(ScraperError):
    """Network failure or non-success HTTP status while fetching a page."""

    def __init__(self, url: str, status: Optional[int] = None, reason: str = "") -> None:
        self.url = url
        self.status = status
        self.reason = reason
        detail = f"status {status}" if status is not None else (reason or "transport error")
        super().__init__(f"Failed to fetch {url}: {detail}")


class ParseError(ScraperError):
    """The fetched document could not be read as the expected page."""


class DateParseError(ScraperError):
    """A header/time pair did not produce a valid calendar instant."""

    def __init__(self, header: Optional[str], time_text: Optional[str], reason: str) -> None:
        self.header = header
        self.time_text = time_text
        self.reason = reason
        super().__init__(f"Cannot parse date {header!r} {time_text!r}: {reason}")


class RecordNotFound(Exception):
    """No stored record carries the requested id."""

    def __init__(self, kind: str, record_id: uuid.UUID) -> None:
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} {record_id} not found")
