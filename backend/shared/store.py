"""
Record stores for teams and matches.

Conventional find/insert/update/delete by id over the async DatabaseManager.
The crawler only uses MatchStore.find_many (duplicate lookups) and
MatchStore.insert_one.
"""
from __future__ import annotations

import uuid
from datetime import datetime, time, timedelta, timezone
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel
from sqlalchemy import Select, or_, select

from shared.errors import RecordNotFound
from shared.models.domain import Match, MatchFilter, Pagination, Team
from shared.models.orm import Base, MatchORM, TeamORM
from shared.utils.database import DatabaseManager
from shared.utils.logging import get_logger

logger = get_logger(__name__)

OrmT = TypeVar("OrmT", bound=Base)
ModelT = TypeVar("ModelT", bound=BaseModel)


class RecordStore(Generic[OrmT, ModelT]):
    """Shared id-based operations; subclasses bind the ORM class and wire model."""

    orm: type[OrmT]
    model: type[ModelT]
    kind: str

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    async def insert_one(self, data: BaseModel | dict[str, Any]) -> ModelT:
        values = data.model_dump() if isinstance(data, BaseModel) else dict(data)
        async with self._db.write_session() as session:
            row = self.orm(**values)
            session.add(row)
            await session.flush()
            await session.refresh(row)
            return self.model.model_validate(row)

    async def find_by_id(self, record_id: uuid.UUID) -> ModelT:
        async with self._db.read_session() as session:
            row = await session.get(self.orm, record_id)
            if row is None:
                raise RecordNotFound(self.kind, record_id)
            return self.model.model_validate(row)

    async def update_by_id(self, record_id: uuid.UUID, values: dict[str, Any]) -> ModelT:
        """Write the given columns; pass every field for a full replacement."""
        async with self._db.write_session() as session:
            row = await session.get(self.orm, record_id)
            if row is None:
                raise RecordNotFound(self.kind, record_id)
            for key, value in values.items():
                setattr(row, key, value)
            await session.flush()
            return self.model.model_validate(row)

    async def delete_by_id(self, record_id: uuid.UUID) -> None:
        async with self._db.write_session() as session:
            row = await session.get(self.orm, record_id)
            if row is None:
                raise RecordNotFound(self.kind, record_id)
            await session.delete(row)
        logger.info("record_deleted", kind=self.kind, id=str(record_id))

    async def _fetch(self, stmt: Select[Any], pagination: Optional[Pagination]) -> list[ModelT]:
        if pagination is not None:
            stmt = stmt.offset(pagination.offset).limit(pagination.size)
        async with self._db.read_session() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [self.model.model_validate(r) for r in rows]


class TeamStore(RecordStore[TeamORM, Team]):
    orm = TeamORM
    model = Team
    kind = "team"

    async def find_many(self, pagination: Optional[Pagination] = None) -> list[Team]:
        stmt = select(TeamORM).order_by(TeamORM.created_at, TeamORM.id)
        return await self._fetch(stmt, pagination)


class MatchStore(RecordStore[MatchORM, Match]):
    orm = MatchORM
    model = Match
    kind = "match"

    async def find_many(
        self,
        flt: Optional[MatchFilter] = None,
        pagination: Optional[Pagination] = None,
    ) -> list[Match]:
        stmt = select(MatchORM).order_by(MatchORM.date.desc(), MatchORM.id)
        if flt is not None:
            stmt = stmt.where(*_match_conditions(flt))
        return await self._fetch(stmt, pagination)


def _match_conditions(flt: MatchFilter) -> list[Any]:
    conditions: list[Any] = []
    if flt.home_team_name is not None:
        conditions.append(MatchORM.home_team_name == flt.home_team_name)
    if flt.away_team_name is not None:
        conditions.append(MatchORM.away_team_name == flt.away_team_name)
    if flt.team is not None:
        conditions.append(or_(MatchORM.home_team_name == flt.team, MatchORM.away_team_name == flt.team))
    if flt.day is not None:
        start = datetime.combine(flt.day, time.min, tzinfo=timezone.utc)
        conditions.append(MatchORM.date >= start)
        conditions.append(MatchORM.date < start + timedelta(days=1))
    if flt.kickoff is not None:
        conditions.append(MatchORM.date == flt.kickoff)
    return conditions
