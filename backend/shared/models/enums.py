"""Domain enumerations for the match results backend."""
from __future__ import annotations

from enum import Enum


class NodeKind(str, Enum):
    """Structural node types read from a results table."""
    HEADER = "header"
    ROW = "row"


class IngestOutcome(str, Enum):
    INSERTED = "inserted"
    SKIPPED = "skipped"
    REJECTED = "rejected"
    FAILED = "failed"


class CrawlTrigger(str, Enum):
    SCHEDULE = "schedule"
    MANUAL = "manual"
