"""Database read operations for sync and grading."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy import and_, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pickem_core.errors import GameNotFoundError, PersistenceError, TeamNotFoundError
from pickem_core.models import BetOption, Game, Pick, Team

logger = structlog.get_logger()


@dataclass(slots=True)
class PickRecord:
    """A pick joined with its bet option and that option's game."""

    pick: Pick
    bet_option: BetOption | None
    game: Game | None


class PickemReader:
    """Handles all read operations from the database."""

    def __init__(self, session: AsyncSession):
        """
        Initialize reader with database session.

        Args:
            session: Async database session
        """
        self.session = session

    async def _execute(self, stmt: Any, operation: str, **context: Any) -> Any:
        try:
            return await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("database_read_failed", operation=operation, error=str(e), **context)
            raise PersistenceError(
                f"{operation} failed", context={"operation": operation, **context}
            ) from e

    async def get_team_by_abbr(self, abbr: str) -> Team:
        """
        Get team by abbreviation.

        Raises:
            TeamNotFoundError: If no team has this abbreviation
        """
        result = await self._execute(
            select(Team).where(Team.abbr == abbr), "get_team_by_abbr", abbr=abbr
        )
        team = result.scalar_one_or_none()
        if team is None:
            raise TeamNotFoundError(f"Team with abbr {abbr} not found", context={"abbr": abbr})
        return team

    async def get_game(self, game_id: int) -> Game:
        """
        Get game by ID.

        Raises:
            GameNotFoundError: If the game does not exist
        """
        result = await self._execute(
            select(Game).where(Game.id == game_id), "get_game", game_id=game_id
        )
        game = result.scalar_one_or_none()
        if game is None:
            raise GameNotFoundError(
                f"Game with id {game_id} not found", context={"game_id": game_id}
            )
        return game

    async def get_games(self, year: int | None = None, week: int | None = None) -> list[Game]:
        """
        Get games, optionally filtered by season and week.

        Args:
            year: Season year filter (optional)
            week: Week filter (optional)

        Returns:
            List of Game records ordered by id
        """
        query = select(Game)

        if year is not None:
            query = query.where(Game.year == year)

        if week is not None:
            query = query.where(Game.week == week)

        result = await self._execute(query.order_by(Game.id), "get_games", year=year, week=week)
        return list(result.scalars().all())

    async def get_bet_options(self, game_id: int) -> list[BetOption]:
        """Get the bet options recorded for a game."""
        result = await self._execute(
            select(BetOption).where(BetOption.game_id == game_id).order_by(BetOption.id),
            "get_bet_options",
            game_id=game_id,
        )
        return list(result.scalars().all())

    async def get_picks_with_game_and_option(self, year: int, week: int) -> list[PickRecord]:
        """
        Get every pick placed on a week's games with its bet option and game.

        Bet option and game come from outer joins and are None when the
        relation is broken. Such picks cannot be attributed to a week, so
        they are returned for every week and grading reports them.
        """
        query = (
            select(Pick, BetOption, Game)
            .select_from(Pick)
            .outerjoin(BetOption, Pick.bet_option_id == BetOption.id)
            .outerjoin(Game, BetOption.game_id == Game.id)
            .where(or_(Game.id.is_(None), and_(Game.year == year, Game.week == week)))
            .order_by(Pick.id)
        )
        result = await self._execute(
            query, "get_picks_with_game_and_option", year=year, week=week
        )
        return [
            PickRecord(pick=pick, bet_option=bet_option, game=game)
            for pick, bet_option, game in result.all()
        ]
