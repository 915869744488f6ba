"""
Game data synchronization: teams, season schedules, live scores and odds.

Every operation is an operator-invoked batch. The first failure aborts the
batch and is re-raised as GameDataSyncError chained to the categorized cause;
nothing is retried here. Re-running a batch is safe because team and game
writes are upserts and bet options are insert-if-absent.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pickem_core.config import Settings, get_settings
from pickem_core.database import get_session_maker
from pickem_core.errors import GameDataSyncError, PickemError
from pickem_core.models import Game, GameStatus, Team
from pickem_sync.odds_selection import CompleteOdds, select_odds
from pickem_sync.storage.readers import PickemReader
from pickem_sync.storage.writers import PickemWriter
from pickem_sync.tank01.schemas import (
    SportsbookQuote,
    Tank01Game,
    Tank01GameStatus,
    Tank01Team,
)

logger = structlog.get_logger(__name__)


class UpstreamClient(Protocol):
    """Provider operations the sync service depends on."""

    async def get_week_games(self, year: int, week: int) -> list[Tank01Game]: ...

    async def get_game_status(self, external_id: str) -> Tank01GameStatus: ...

    async def get_game_odds(self, external_id: str) -> list[SportsbookQuote]: ...

    async def get_teams(self) -> list[Tank01Team]: ...


@dataclass(slots=True)
class TeamImportResult:
    """Outcome of importing the team list."""

    upserted: int


@dataclass(slots=True)
class SeasonImportResult:
    """Outcome of importing a season's schedule."""

    year: int
    weeks: int
    games: int


@dataclass(slots=True)
class GameSyncResult:
    """Outcome of refreshing one week's scores and statuses."""

    year: int
    week: int
    games: int
    completed: int


@dataclass(slots=True)
class BettingOptionsImportResult:
    """Outcome of importing one week's bet options."""

    year: int
    week: int
    games: int
    inserted: int


@dataclass(slots=True)
class SyncCallbacks:
    """Optional observers for progress reporting during sync."""

    on_week_imported: Callable[[int, int], None] | None = None
    on_game_synced: Callable[[Game, Tank01GameStatus], None] | None = None
    on_odds_selected: Callable[[Game, CompleteOdds], None] | None = None
    on_failed: Callable[[str, PickemError], None] | None = None


class GameDataSyncService:
    """Imports provider data and reconciles it with the database."""

    def __init__(
        self,
        client: UpstreamClient,
        *,
        settings: Settings | None = None,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        callbacks: SyncCallbacks | None = None,
    ) -> None:
        self._client = client
        self._settings = settings or get_settings()
        self._session_factory = session_factory or get_session_maker()
        self._callbacks = callbacks or SyncCallbacks()

    def _failed(self, operation: str, error: PickemError, **context: Any) -> GameDataSyncError:
        """Log a failed batch and build the error to raise from it."""
        logger.error(
            "game_data_sync_failed",
            operation=operation,
            error=str(error),
            error_type=type(error).__name__,
            **context,
        )
        if self._callbacks.on_failed:
            self._callbacks.on_failed(operation, error)
        return GameDataSyncError(
            f"{operation} failed: {error.message}",
            context={"operation": operation, **context},
        )

    async def import_teams(self) -> TeamImportResult:
        """Fetch every team and upsert it by abbreviation in one transaction."""
        logger.info("team_import_started")

        try:
            teams = await self._client.get_teams()

            async with self._session_factory() as session:
                writer = PickemWriter(session)
                for team in teams:
                    await writer.upsert_team(
                        Team(
                            abbr=team.abbr,
                            name=team.name,
                            conference=team.conference,
                            conference_abbr=team.conference_abbr,
                            division=team.division,
                        )
                    )
                await writer.commit()
        except PickemError as e:
            raise self._failed("import_teams", e) from e

        logger.info("team_import_completed", upserted=len(teams))
        return TeamImportResult(upserted=len(teams))

    async def import_season_games(self, year: int) -> SeasonImportResult:
        """
        Import the regular season schedule week by week.

        Each week is committed on its own. The first failing week is rolled
        back and aborts the import; earlier weeks stay committed.
        """
        weeks = self._settings.sync.season_weeks
        logger.info("season_import_started", year=year, weeks=weeks)

        total_games = 0
        for week in range(1, weeks + 1):
            try:
                week_games = await self._import_week_games(year, week)
            except PickemError as e:
                raise self._failed(
                    "import_season_games",
                    e,
                    year=year,
                    week=week,
                    weeks_committed=week - 1,
                ) from e

            total_games += week_games
            logger.info("season_week_imported", year=year, week=week, games=week_games)
            if self._callbacks.on_week_imported:
                self._callbacks.on_week_imported(week, week_games)

        logger.info("season_import_completed", year=year, weeks=weeks, games=total_games)
        return SeasonImportResult(year=year, weeks=weeks, games=total_games)

    async def _import_week_games(self, year: int, week: int) -> int:
        """Upsert one week's schedule; teams must already exist."""
        tank01_games = await self._client.get_week_games(year=year, week=week)

        async with self._session_factory() as session:
            reader = PickemReader(session)
            writer = PickemWriter(session)
            teams: dict[str, Team] = {}

            for tank01_game in tank01_games:
                for abbr in (tank01_game.home, tank01_game.away):
                    if abbr not in teams:
                        teams[abbr] = await reader.get_team_by_abbr(abbr)

                await writer.upsert_game(
                    Game(
                        external_id=tank01_game.game_id,
                        year=year,
                        week=week,
                        date=tank01_game.date,
                        home_team_id=teams[tank01_game.home].id,
                        away_team_id=teams[tank01_game.away].id,
                    ),
                    refresh=("date",),
                )

            await writer.commit()

        return len(tank01_games)

    async def _load_games(self, year: int, week: int) -> list[Game]:
        async with self._session_factory() as session:
            return await PickemReader(session).get_games(year=year, week=week)

    async def sync_game_data(self, year: int, week: int) -> GameSyncResult:
        """
        Refresh score, date and status of every stored game in a week.

        All statuses are fetched before anything is written, and the writes
        share one transaction, so a failure leaves the week untouched.
        """
        logger.info("game_sync_started", year=year, week=week)
        operation = "sync_game_data"

        try:
            games = await self._load_games(year, week)
        except PickemError as e:
            raise self._failed(operation, e, year=year, week=week) from e

        updates: list[tuple[Game, Tank01GameStatus]] = []
        for game in games:
            try:
                status = await self._client.get_game_status(game.external_id)
            except PickemError as e:
                raise self._failed(
                    operation, e, year=year, week=week, external_id=game.external_id
                ) from e
            updates.append((game, status))

        try:
            async with self._session_factory() as session:
                writer = PickemWriter(session)
                for game, status in updates:
                    await writer.upsert_game(
                        Game(
                            external_id=game.external_id,
                            year=game.year,
                            week=game.week,
                            date=status.date,
                            home_team_id=game.home_team_id,
                            away_team_id=game.away_team_id,
                            home_score=status.home_score,
                            away_score=status.away_score,
                            status=status.status,
                        )
                    )
                await writer.commit()
        except PickemError as e:
            raise self._failed(operation, e, year=year, week=week) from e

        for game, status in updates:
            if self._callbacks.on_game_synced:
                self._callbacks.on_game_synced(game, status)

        completed = sum(1 for _, status in updates if status.status == GameStatus.COMPLETED)
        logger.info(
            "game_sync_completed", year=year, week=week, games=len(updates), completed=completed
        )
        return GameSyncResult(year=year, week=week, games=len(updates), completed=completed)

    async def import_betting_options(self, year: int, week: int) -> BettingOptionsImportResult:
        """
        Offer spread and total bet options for every stored game in a week.

        One complete quote is selected per game. Its four options (home and
        away spread, over and under) are written together; options that
        already exist keep the terms they were first recorded with.
        """
        logger.info("betting_options_import_started", year=year, week=week)
        operation = "import_betting_options"
        preferred: Sequence[str] = self._settings.sync.preferred_sportsbooks

        try:
            games = await self._load_games(year, week)
        except PickemError as e:
            raise self._failed(operation, e, year=year, week=week) from e

        selections: list[tuple[Game, CompleteOdds]] = []
        for game in games:
            try:
                quotes = await self._client.get_game_odds(game.external_id)
                odds = select_odds(game.external_id, quotes, preferred)
            except PickemError as e:
                raise self._failed(
                    operation, e, year=year, week=week, external_id=game.external_id
                ) from e
            selections.append((game, odds))
            if self._callbacks.on_odds_selected:
                self._callbacks.on_odds_selected(game, odds)

        inserted = 0
        try:
            async with self._session_factory() as session:
                writer = PickemWriter(session)
                for game, odds in selections:
                    inserted += await writer.insert_bet_options(odds.to_bet_options(game.id))
                await writer.commit()
        except PickemError as e:
            raise self._failed(operation, e, year=year, week=week) from e

        logger.info(
            "betting_options_import_completed",
            year=year,
            week=week,
            games=len(selections),
            inserted=inserted,
        )
        return BettingOptionsImportResult(
            year=year, week=week, games=len(selections), inserted=inserted
        )
