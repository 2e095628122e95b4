"""
Pydantic v2 domain models shared across the API and the crawler.
These are the wire/internal representations, NOT ORM models.
"""
from __future__ import annotations

import uuid
from datetime import date as date_type
from datetime import datetime
from typing import Annotated, Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator

from shared.models.orm import TEAM_NAME_MAX

TeamName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=TEAM_NAME_MAX)]
Score = Annotated[int, Field(ge=0, strict=True)]


# ── Base ────────────────────────────────────────────────────────────────
class DomainModel(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class PartialUpdate(DomainModel):
    """
    PATCH body: omitted fields are left untouched, explicit nulls are refused
    except on the fields listed in nullable_fields.
    """
    nullable_fields: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="before")
    @classmethod
    def reject_explicit_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            nulls = sorted(
                key for key, value in data.items()
                if value is None and key in cls.model_fields and key not in cls.nullable_fields
            )
            if nulls:
                raise ValueError(f"null is not allowed for: {', '.join(nulls)}")
        return data


# ── Matches ─────────────────────────────────────────────────────────────
class MatchCreate(DomainModel):
    home_team_name: TeamName
    away_team_name: TeamName
    home_team_score: Score
    away_team_score: Score
    date: datetime


class MatchReset(MatchCreate):
    """Full replacement of a stored match (PUT)."""


class MatchUpdate(PartialUpdate):
    """Partial update (PATCH): only provided fields are written."""
    home_team_name: Optional[TeamName] = None
    away_team_name: Optional[TeamName] = None
    home_team_score: Optional[Score] = None
    away_team_score: Optional[Score] = None
    date: Optional[datetime] = None


class Match(DomainModel):
    id: uuid.UUID
    home_team_name: Optional[str] = None
    away_team_name: Optional[str] = None
    home_team_score: Optional[int] = None
    away_team_score: Optional[int] = None
    date: Optional[datetime] = None


class MatchCandidate(DomainModel):
    """
    A match read from a results page, not yet persisted.

    Scores are None when the score text was malformed; date is None when the
    header/time pair could not be normalized.
    """
    home_team_name: Optional[str] = None
    away_team_name: Optional[str] = None
    home_team_score: Optional[int] = None
    away_team_score: Optional[int] = None
    date: Optional[datetime] = None

    @property
    def natural_key(self) -> tuple[Optional[str], Optional[str], Optional[datetime]]:
        return (self.home_team_name, self.away_team_name, self.date)


class MatchFilter(DomainModel):
    home_team_name: Optional[str] = None
    away_team_name: Optional[str] = None
    team: Optional[str] = Field(default=None, description="Matches where this team plays either side.")
    day: Optional[date_type] = Field(default=None, description="Calendar day (UTC) of kickoff.")
    kickoff: Optional[datetime] = Field(default=None, description="Exact kickoff instant.")

    @classmethod
    def natural_key(cls, candidate: MatchCandidate) -> "MatchFilter":
        return cls(
            home_team_name=candidate.home_team_name,
            away_team_name=candidate.away_team_name,
            kickoff=candidate.date,
        )


# ── Teams ───────────────────────────────────────────────────────────────
class TeamCreate(DomainModel):
    name: TeamName
    short_name: Optional[Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=10)]] = None
    country: Optional[Annotated[str, StringConstraints(max_length=100)]] = None


class TeamReset(TeamCreate):
    """Full replacement of a stored team (PUT)."""


class TeamUpdate(PartialUpdate):
    nullable_fields: ClassVar[frozenset[str]] = frozenset({"short_name", "country"})

    name: Optional[TeamName] = None
    short_name: Optional[Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=10)]] = None
    country: Optional[Annotated[str, StringConstraints(max_length=100)]] = None


class Team(DomainModel):
    id: uuid.UUID
    name: str
    short_name: Optional[str] = None
    country: Optional[str] = None


# ── Paging ──────────────────────────────────────────────────────────────
class Pagination(DomainModel):
    page: int = Field(default=1, ge=1)
    size: int = Field(default=20, ge=1, le=100)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size
