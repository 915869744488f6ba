"""Tank01 NFL API client and response schemas."""

from pickem_sync.tank01.client import Tank01Client
from pickem_sync.tank01.schemas import (
    SportsbookQuote,
    Tank01Game,
    Tank01GameOdds,
    Tank01GameStatus,
    Tank01Team,
)

__all__ = [
    "Tank01Client",
    "SportsbookQuote",
    "Tank01Game",
    "Tank01GameOdds",
    "Tank01GameStatus",
    "Tank01Team",
]
