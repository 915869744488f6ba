"""
Sync and grading engine for the pick'em game.

Provides the Tank01 client, odds selection, storage, game data sync and
pick grading.
"""

from pickem_sync.game_data_sync import GameDataSyncService, SyncCallbacks
from pickem_sync.grading import GradingCallbacks, GradingService
from pickem_sync.odds_selection import select_odds
from pickem_sync.tank01 import Tank01Client
from pickem_sync.tasks import WeekTasks

__all__ = [
    # Upstream
    "Tank01Client",
    "select_odds",
    # Sync
    "GameDataSyncService",
    "SyncCallbacks",
    "WeekTasks",
    # Grading
    "GradingService",
    "GradingCallbacks",
]
