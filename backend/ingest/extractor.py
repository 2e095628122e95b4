"""
Match record extraction from parsed page nodes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from shared.errors import DateParseError
from shared.models.domain import MatchCandidate
from shared.utils.logging import get_logger
from shared.utils.metrics import CANDIDATES_EXTRACTED

from ingest.dates import DEFAULT_SOURCE_TZ, parse_local_datetime
from ingest.page_parser import HeaderNode, PageNode, RowNode

logger = get_logger(__name__)

SCORE_SEPARATOR = " - "


@dataclass
class Extraction:
    candidates: list[MatchCandidate] = field(default_factory=list)
    # Last header in scope at the end of the page; seeds the next page.
    current_header: Optional[str] = None


def parse_score(score_text: Optional[str]) -> tuple[Optional[int], Optional[int]]:
    """Split "2 - 1" into (2, 1); unreadable sides come back as None."""
    if not score_text:
        return None, None
    parts = score_text.split(SCORE_SEPARATOR)
    home = _score_side(parts[0])
    away = _score_side(parts[1]) if len(parts) > 1 else None
    return home, away


def _score_side(text: str) -> Optional[int]:
    text = text.strip()
    # ASCII only: isdigit() also accepts superscripts that int() rejects.
    if not (text.isascii() and text.isdigit()):
        return None
    return int(text)


class MatchRecordExtractor:
    """
    Walks header/row nodes in order. Each row is dated with the most recent
    header seen; rows are never dropped for bad score or date text.
    """

    def __init__(self, source_tz: str | ZoneInfo = DEFAULT_SOURCE_TZ) -> None:
        self._tz = source_tz

    def extract(self, nodes: Iterable[PageNode], current_header: Optional[str] = None) -> Extraction:
        result = Extraction(current_header=current_header)
        for node in nodes:
            if isinstance(node, HeaderNode):
                if node.text:
                    result.current_header = node.text
            elif isinstance(node, RowNode):
                result.candidates.append(self._candidate(node, result.current_header))
        return result

    def _candidate(self, row: RowNode, header: Optional[str]) -> MatchCandidate:
        home_score, away_score = parse_score(row.score_text)
        try:
            kickoff = parse_local_datetime(header, row.time_text, self._tz)
        except DateParseError as exc:
            logger.warning(
                "match_date_unparseable",
                header=header,
                time=row.time_text,
                home=row.home_team,
                away=row.away_team,
                reason=exc.reason,
            )
            kickoff = None

        CANDIDATES_EXTRACTED.labels(dated=str(kickoff is not None).lower()).inc()
        return MatchCandidate(
            home_team_name=row.home_team,
            away_team_name=row.away_team,
            home_team_score=home_score,
            away_team_score=away_score,
            date=kickoff,
        )
