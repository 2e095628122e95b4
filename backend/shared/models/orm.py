"""
SQLAlchemy 2.0 ORM models for teams and matches.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

TEAM_NAME_MAX = 30


class Base(DeclarativeBase):
    pass


class TeamORM(Base):
    __tablename__ = "teams"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(TEAM_NAME_MAX), nullable=False)
    short_name: Mapped[Optional[str]] = mapped_column(String(10))
    country: Mapped[Optional[str]] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class MatchORM(Base):
    """
    A played or scheduled match.

    Team names are stored as text, as read from the results site. Scores and
    date are nullable because scraped rows may carry malformed text. The
    (home_team_name, away_team_name, date) triplet is kept unique by the
    ingestion path, not by a constraint.
    """

    __tablename__ = "matches"
    __table_args__ = (
        Index("ix_matches_natural_key", "home_team_name", "away_team_name", "date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    home_team_name: Mapped[Optional[str]] = mapped_column(String(200))
    away_team_name: Mapped[Optional[str]] = mapped_column(String(200))
    home_team_score: Mapped[Optional[int]] = mapped_column(Integer)
    away_team_score: Mapped[Optional[int]] = mapped_column(Integer)
    date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
