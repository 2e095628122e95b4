"""Unit tests for match filter → SQL condition translation."""
from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy.dialects import postgresql

from shared.models.domain import MatchCandidate, MatchFilter
from shared.store import _match_conditions


def _compiled(condition) -> tuple[str, list]:
    compiled = condition.compile(dialect=postgresql.dialect())
    return str(compiled), list(compiled.params.values())


def test_empty_filter_has_no_conditions() -> None:
    assert _match_conditions(MatchFilter()) == []


def test_natural_key_filter_is_exact_on_all_three_columns() -> None:
    kickoff = datetime(2022, 3, 8, 20, 0, tzinfo=timezone.utc)
    candidate = MatchCandidate(home_team_name="PSG", away_team_name="Lyon", date=kickoff)

    compiled = [_compiled(c) for c in _match_conditions(MatchFilter.natural_key(candidate))]

    assert [sql.split(" ")[:2] for sql, _ in compiled] == [
        ["matches.home_team_name", "="],
        ["matches.away_team_name", "="],
        ["matches.date", "="],
    ]
    assert [params for _, params in compiled] == [["PSG"], ["Lyon"], [kickoff]]


def test_team_filter_matches_either_side() -> None:
    [condition] = _match_conditions(MatchFilter(team="Nice"))
    sql, params = _compiled(condition)
    assert " OR " in sql
    assert "matches.home_team_name" in sql and "matches.away_team_name" in sql
    assert params == ["Nice", "Nice"]


def test_day_filter_is_a_half_open_utc_range() -> None:
    lower, upper = (_compiled(c) for c in _match_conditions(MatchFilter(day=date(2022, 3, 8))))
    assert lower[0].startswith("matches.date >=")
    assert lower[1] == [datetime(2022, 3, 8, tzinfo=timezone.utc)]
    assert upper[0].startswith("matches.date <")
    assert upper[1] == [datetime(2022, 3, 9, tzinfo=timezone.utc)]
