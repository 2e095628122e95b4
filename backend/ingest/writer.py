"""
Idempotent write path for scraped matches.

A candidate is inserted only when no stored match has the same
(home team, away team, date). Lookups and inserts are not transactional
together, so two overlapping crawls could both insert; the scheduler never
runs crawls concurrently.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol

from shared.models.domain import Match, MatchCandidate, MatchFilter, Pagination
from shared.models.enums import IngestOutcome
from shared.utils.logging import get_logger
from shared.utils.metrics import INGEST_OUTCOMES

logger = get_logger(__name__)


class MatchRecordStore(Protocol):
    async def find_many(self, flt: MatchFilter | None = None, pagination: Pagination | None = None) -> list[Match]: ...

    async def insert_one(self, data: MatchCandidate) -> Match: ...


@dataclass
class IngestReport:
    inserted: int = 0
    skipped: int = 0
    rejected: int = 0
    failed: int = 0

    def record(self, outcome: IngestOutcome) -> None:
        setattr(self, outcome.value, getattr(self, outcome.value) + 1)
        INGEST_OUTCOMES.labels(outcome=outcome.value).inc()

    def merge(self, other: "IngestReport") -> None:
        self.inserted += other.inserted
        self.skipped += other.skipped
        self.rejected += other.rejected
        self.failed += other.failed


class IngestionWriter:
    def __init__(self, store: MatchRecordStore) -> None:
        self._store = store

    async def ingest(self, candidates: Iterable[MatchCandidate]) -> IngestReport:
        """
        Insert every candidate whose natural key is not stored yet.

        Candidates without a complete natural key are rejected. A storage
        error on one candidate is logged and does not stop the others.
        """
        report = IngestReport()
        for candidate in candidates:
            report.record(await self._ingest_one(candidate))
        logger.info(
            "ingest_batch_done",
            inserted=report.inserted,
            skipped=report.skipped,
            rejected=report.rejected,
            failed=report.failed,
        )
        return report

    async def _ingest_one(self, candidate: MatchCandidate) -> IngestOutcome:
        if None in candidate.natural_key:
            logger.warning(
                "match_candidate_rejected",
                home=candidate.home_team_name,
                away=candidate.away_team_name,
                date=candidate.date.isoformat() if candidate.date else None,
            )
            return IngestOutcome.REJECTED

        try:
            existing = await self._store.find_many(MatchFilter.natural_key(candidate))
            if existing:
                return IngestOutcome.SKIPPED
            match = await self._store.insert_one(candidate)
        except Exception as exc:
            logger.error(
                "match_ingest_error",
                home=candidate.home_team_name,
                away=candidate.away_team_name,
                date=candidate.date.isoformat() if candidate.date else None,
                error=str(exc),
                exc_info=True,
            )
            return IngestOutcome.FAILED

        logger.debug("match_inserted", id=str(match.id), home=match.home_team_name, away=match.away_team_name)
        return IngestOutcome.INSERTED
