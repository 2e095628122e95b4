"""
Team REST endpoints.

POST /v1/teams, GET /v1/teams (paginated), GET|PATCH|PUT|DELETE /v1/teams/{id}.
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, Response, status

from shared.models.domain import Pagination, Team, TeamCreate, TeamReset, TeamUpdate
from shared.store import TeamStore
from shared.utils.logging import get_logger

from api.dependencies import get_team_store

logger = get_logger(__name__)
router = APIRouter(prefix="/v1/teams", tags=["teams"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_team(
    body: TeamCreate,
    store: TeamStore = Depends(get_team_store),
) -> Team:
    team = await store.insert_one(body)
    logger.info("team_created", id=str(team.id), name=team.name)
    return team


@router.get("")
async def list_teams(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    store: TeamStore = Depends(get_team_store),
) -> list[Team]:
    return await store.find_many(Pagination(page=page, size=size))


@router.get("/{team_id}")
async def get_team(team_id: uuid.UUID, store: TeamStore = Depends(get_team_store)) -> Team:
    return await store.find_by_id(team_id)


@router.patch("/{team_id}")
async def update_team(
    team_id: uuid.UUID,
    body: TeamUpdate,
    store: TeamStore = Depends(get_team_store),
) -> Team:
    return await store.update_by_id(team_id, body.model_dump(exclude_unset=True))


@router.put("/{team_id}")
async def reset_team(
    team_id: uuid.UUID,
    body: TeamReset,
    store: TeamStore = Depends(get_team_store),
) -> Team:
    return await store.update_by_id(team_id, body.model_dump())


@router.delete("/{team_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_team(team_id: uuid.UUID, store: TeamStore = Depends(get_team_store)) -> Response:
    await store.delete_by_id(team_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
