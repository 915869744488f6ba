"""Week lifecycle tasks composed from sync and grading operations."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from pickem_sync.game_data_sync import (
    BettingOptionsImportResult,
    GameDataSyncService,
    GameSyncResult,
)
from pickem_sync.grading import GradingResult, GradingService

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class PrepareWeekResult:
    games: GameSyncResult
    betting_options: BettingOptionsImportResult


@dataclass(slots=True)
class CompleteWeekResult:
    games: GameSyncResult
    grading: GradingResult


class WeekTasks:
    """
    Run the checkpoints of an NFL week.

    Each task refreshes game data first so odds are offered and picks are
    graded against the latest upstream state.
    """

    def __init__(self, sync_service: GameDataSyncService, grading_service: GradingService):
        self._sync = sync_service
        self._grading = grading_service

    async def prepare_week(self, year: int, week: int) -> PrepareWeekResult:
        """Start of week: refresh games, then offer bet options."""
        logger.info("week_prepare_started", year=year, week=week)
        games = await self._sync.sync_game_data(year, week)
        betting_options = await self._sync.import_betting_options(year, week)
        logger.info("week_prepare_completed", year=year, week=week)
        return PrepareWeekResult(games=games, betting_options=betting_options)

    async def daily_update(self, year: int, week: int) -> GameSyncResult:
        """Mid week: refresh scores and statuses."""
        logger.info("week_daily_update_started", year=year, week=week)
        games = await self._sync.sync_game_data(year, week)
        logger.info("week_daily_update_completed", year=year, week=week)
        return games

    async def complete_week(self, year: int, week: int) -> CompleteWeekResult:
        """End of week: refresh games, then grade picks."""
        logger.info("week_complete_started", year=year, week=week)
        games = await self._sync.sync_game_data(year, week)
        grading = await self._grading.grade_week_picks(year, week)
        logger.info("week_complete_completed", year=year, week=week)
        return CompleteWeekResult(games=games, grading=grading)
