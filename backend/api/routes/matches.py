"""
Match REST endpoints.

POST   /v1/matches       Create a match.
GET    /v1/matches       Paginated list, filterable by team names and day.
GET    /v1/matches/{id}  One match.
PATCH  /v1/matches/{id}  Partial update.
PUT    /v1/matches/{id}  Full replacement.
DELETE /v1/matches/{id}  Remove.
"""
from __future__ import annotations

import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from shared.models.domain import Match, MatchCreate, MatchFilter, MatchReset, MatchUpdate, Pagination
from shared.store import MatchStore
from shared.utils.logging import get_logger

from api.dependencies import get_match_store

logger = get_logger(__name__)
router = APIRouter(prefix="/v1/matches", tags=["matches"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_match(
    body: MatchCreate,
    store: MatchStore = Depends(get_match_store),
) -> Match:
    match = await store.insert_one(body)
    logger.info("match_created", id=str(match.id))
    return match


@router.get("")
async def list_matches(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    home_team_name: Optional[str] = Query(None),
    away_team_name: Optional[str] = Query(None),
    team: Optional[str] = Query(None, description="Either side."),
    day: Optional[date] = Query(None, alias="date", description="Kickoff day, YYYY-MM-DD (UTC)."),
    store: MatchStore = Depends(get_match_store),
) -> list[Match]:
    flt = MatchFilter(
        home_team_name=home_team_name,
        away_team_name=away_team_name,
        team=team,
        day=day,
    )
    return await store.find_many(flt, Pagination(page=page, size=size))


@router.get("/{match_id}")
async def get_match(
    match_id: uuid.UUID,
    store: MatchStore = Depends(get_match_store),
) -> Match:
    return await store.find_by_id(match_id)


@router.patch("/{match_id}")
async def update_match(
    match_id: uuid.UUID,
    body: MatchUpdate,
    store: MatchStore = Depends(get_match_store),
) -> Match:
    return await store.update_by_id(match_id, body.model_dump(exclude_unset=True))


@router.put("/{match_id}")
async def reset_match(
    match_id: uuid.UUID,
    body: MatchReset,
    store: MatchStore = Depends(get_match_store),
) -> Match:
    return await store.update_by_id(match_id, body.model_dump())


@router.delete("/{match_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_match(
    match_id: uuid.UUID,
    store: MatchStore = Depends(get_match_store),
) -> Response:
    await store.delete_by_id(match_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
