"""
Core foundation layer for the pick'em sync and grading engine.

Provides models, database connection, configuration and the error hierarchy.
"""

from pickem_core.config import Settings, get_settings
from pickem_core.database import get_engine, get_session, get_session_maker
from pickem_core.errors import (
    GameDataSyncError,
    GradingError,
    MissingOddsError,
    NotFoundError,
    PersistenceError,
    PickemError,
    PreconditionError,
    Tank01SchemaError,
    Tank01TransportError,
)
from pickem_core.models import (
    BetOption,
    BetTarget,
    BetType,
    Game,
    GameStatus,
    Pick,
    PickStatus,
    Team,
)

__all__ = [
    # Models
    "Team",
    "Game",
    "GameStatus",
    "BetOption",
    "BetType",
    "BetTarget",
    "Pick",
    "PickStatus",
    # Database
    "get_engine",
    "get_session",
    "get_session_maker",
    # Config
    "Settings",
    "get_settings",
    # Errors
    "PickemError",
    "Tank01TransportError",
    "Tank01SchemaError",
    "MissingOddsError",
    "NotFoundError",
    "PreconditionError",
    "PersistenceError",
    "GameDataSyncError",
    "GradingError",
]
