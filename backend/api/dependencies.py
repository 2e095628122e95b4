"""
Dependency injection for the API service.
Provides the database manager and record stores to route handlers.
"""
from __future__ import annotations

from fastapi import Depends

from shared.store import MatchStore, TeamStore
from shared.utils.database import DatabaseManager

# Module-level singleton, initialized at startup
_db: DatabaseManager | None = None


def init_dependencies(db: DatabaseManager) -> None:
    """Initialize module-level singletons. Called once at startup."""
    global _db
    _db = db


def get_db() -> DatabaseManager:
    """FastAPI dependency: returns the shared DatabaseManager."""
    if _db is None:
        raise RuntimeError("DatabaseManager not initialized, call init_dependencies first")
    return _db


def get_match_store(db: DatabaseManager = Depends(get_db)) -> MatchStore:
    return MatchStore(db)


def get_team_store(db: DatabaseManager = Depends(get_db)) -> TeamStore:
    return TeamStore(db)
