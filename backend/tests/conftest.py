"""
Shared test helpers: in-memory record stores, a scripted page fetcher and a
results-page HTML builder shaped like matchendirect.fr markup.
"""
from __future__ import annotations

import uuid
from datetime import datetime, time, timedelta, timezone
from typing import Any, Optional, Sequence, Union

import pytest
from pydantic import BaseModel

from shared.errors import FetchError, RecordNotFound
from shared.models.domain import Match, MatchFilter, Pagination, Team

ORIGIN = "https://www.matchendirect.fr"


# ── In-memory stores ────────────────────────────────────────────────────

class InMemoryStore:
    model: type[BaseModel]
    kind: str

    def __init__(self) -> None:
        self.rows: dict[uuid.UUID, dict[str, Any]] = {}
        self.insert_calls = 0

    async def insert_one(self, data: Union[BaseModel, dict[str, Any]]) -> Any:
        self.insert_calls += 1
        values = data.model_dump() if isinstance(data, BaseModel) else dict(data)
        record_id = uuid.uuid4()
        self.rows[record_id] = {"id": record_id, **values}
        return self.model.model_validate(self.rows[record_id])

    async def find_by_id(self, record_id: uuid.UUID) -> Any:
        if record_id not in self.rows:
            raise RecordNotFound(self.kind, record_id)
        return self.model.model_validate(self.rows[record_id])

    async def update_by_id(self, record_id: uuid.UUID, values: dict[str, Any]) -> Any:
        if record_id not in self.rows:
            raise RecordNotFound(self.kind, record_id)
        self.rows[record_id].update(values)
        return self.model.model_validate(self.rows[record_id])

    async def delete_by_id(self, record_id: uuid.UUID) -> None:
        if self.rows.pop(record_id, None) is None:
            raise RecordNotFound(self.kind, record_id)

    def _page(self, rows: list[dict[str, Any]], pagination: Optional[Pagination]) -> list[Any]:
        if pagination is not None:
            rows = rows[pagination.offset:pagination.offset + pagination.size]
        return [self.model.model_validate(r) for r in rows]


class InMemoryMatchStore(InMemoryStore):
    model = Match
    kind = "match"

    async def find_many(
        self,
        flt: Optional[MatchFilter] = None,
        pagination: Optional[Pagination] = None,
    ) -> list[Match]:
        rows = [r for r in self.rows.values() if flt is None or _matches(r, flt)]
        return self._page(rows, pagination)


class InMemoryTeamStore(InMemoryStore):
    model = Team
    kind = "team"

    async def find_many(self, pagination: Optional[Pagination] = None) -> list[Team]:
        return self._page(list(self.rows.values()), pagination)


def _matches(row: dict[str, Any], flt: MatchFilter) -> bool:
    if flt.home_team_name is not None and row["home_team_name"] != flt.home_team_name:
        return False
    if flt.away_team_name is not None and row["away_team_name"] != flt.away_team_name:
        return False
    if flt.team is not None and flt.team not in (row["home_team_name"], row["away_team_name"]):
        return False
    if flt.day is not None:
        start = datetime.combine(flt.day, time.min, tzinfo=timezone.utc)
        if row["date"] is None or not (start <= row["date"] < start + timedelta(days=1)):
            return False
    if flt.kickoff is not None and row["date"] != flt.kickoff:
        return False
    return True


# ── Scripted fetcher ────────────────────────────────────────────────────

class ScriptedFetcher:
    """Serves canned documents by URL; a stored exception is raised instead."""

    def __init__(self, pages: dict[str, Union[str, Exception]]) -> None:
        self._pages = pages
        self.calls: list[str] = []

    async def fetch(self, url: str) -> str:
        self.calls.append(url)
        page = self._pages.get(url)
        if page is None:
            raise FetchError(url, status=404)
        if isinstance(page, Exception):
            raise page
        return page


# ── HTML builder ────────────────────────────────────────────────────────

# (kickoff time, home team, score text, away team)
Row = tuple[str, str, str, str]
# A header string followed by its rows; header None renders a banner without a <th>.
Section = tuple[Optional[str], Sequence[Row]]


def render_row(row: Row) -> str:
    kickoff, home, score, away = row
    return (
        "<tr>"
        f'<td class="lm1">{kickoff}</td>'
        '<td class="lm2"><span class="flag"></span></td>'
        '<td class="lm3"><a href="/live-score/x.html">'
        f'<span class="lm3_eq1">{home}</span> '
        f'<span class="lm3_score">{score}</span> '
        f'<span class="lm3_eq2">{away}</span>'
        "</a></td>"
        "</tr>"
    )


def results_page(sections: Sequence[Section], previous_href: Optional[str] = None) -> str:
    body = []
    for header, rows in sections:
        if header is None:
            body.append("<thead><tr><td>&nbsp;</td></tr></thead>")
        else:
            body.append(f'<thead><tr><th colspan="3">{header}</th></tr></thead>')
        body.extend(render_row(r) for r in rows)
    nav = ""
    if previous_href is not None:
        nav = (
            '<div class="objselect">'
            f'<a class="objselect_prevnext objselect_prec" href="{previous_href}" title="Précédent">&lt;</a>'
            '<a class="objselect_prevnext objselect_suiv" href="/next/">&gt;</a>'
            "</div>"
        )
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\"><title>Résultats</title></head><body>"
        f"{nav}"
        '<div id="livescore"><div class="panel panel-info">'
        '<div class="panel-heading">Ligue des champions</div>'
        '<div class="panel-body">'
        '<table class="table table-striped table-hover">\n'
        + "\n".join(body)
        + "\n</table></div></div></div></body></html>"
    )


@pytest.fixture
def match_store() -> InMemoryMatchStore:
    return InMemoryMatchStore()


@pytest.fixture
def team_store() -> InMemoryTeamStore:
    return InMemoryTeamStore()
