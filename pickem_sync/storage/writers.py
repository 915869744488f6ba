"""Idempotent database writes for teams, games, bet options and picks."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

import structlog
from sqlalchemy import update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pickem_core.errors import PersistenceError, PickStatusConflictError
from pickem_core.models import (
    TERMINAL_PICK_STATUSES,
    BetOption,
    Game,
    Pick,
    PickStatus,
    Team,
)

logger = structlog.get_logger()

TEAM_KEY = ("abbr",)
TEAM_MUTABLE_FIELDS = ("name", "conference", "conference_abbr", "division")

GAME_KEY = ("year", "week", "home_team_id", "away_team_id")
GAME_MUTABLE_FIELDS = ("date", "status", "home_score", "away_score")

BET_OPTION_KEY = ("game_id", "type", "target")

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class PickemWriter:
    """
    Handles all write operations to the database.

    Writes are keyed by natural keys so every operation is safe to repeat.
    The caller owns the transaction: nothing here commits.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize writer with database session.

        Args:
            session: Async database session
        """
        self.session = session

    async def commit(self) -> None:
        """Commit the caller's transaction."""
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            logger.error("database_commit_failed", error=str(e))
            raise PersistenceError("commit failed", context={"operation": "commit"}) from e

    def _insert(self, model: type) -> Any:
        """Build a dialect-specific INSERT that supports ON CONFLICT."""
        dialect = self.session.bind.dialect.name
        try:
            insert = _DIALECT_INSERTS[dialect]
        except KeyError:
            raise PersistenceError(
                f"Upserts are not supported on {dialect}", context={"dialect": dialect}
            ) from None
        return insert(model)

    async def _execute(self, stmt: Any, operation: str, **context: Any) -> Any:
        try:
            return await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("database_write_failed", operation=operation, error=str(e), **context)
            raise PersistenceError(
                f"{operation} failed", context={"operation": operation, **context}
            ) from e

    async def upsert_team(self, team: Team) -> None:
        """
        Insert a team or refresh its descriptive fields.

        The abbreviation is the natural key and is never changed; name,
        conference and division are overwritten unconditionally.
        """
        stmt = self._insert(Team).values(team.model_dump(exclude={"id"}))
        stmt = stmt.on_conflict_do_update(
            index_elements=list(TEAM_KEY),
            set_={field: stmt.excluded[field] for field in TEAM_MUTABLE_FIELDS},
        )
        await self._execute(stmt, "upsert_team", abbr=team.abbr)
        logger.debug("team_upserted", abbr=team.abbr)

    async def upsert_game(
        self,
        game: Game,
        refresh: Iterable[str] = GAME_MUTABLE_FIELDS,
    ) -> None:
        """
        Insert a game or refresh its upstream-owned fields.

        Args:
            game: Game to write; keyed by (year, week, home_team_id, away_team_id)
            refresh: Mutable fields to overwrite on conflict. external_id,
                team references and created_at always keep their first value.
        """
        refresh = tuple(refresh)
        unknown = set(refresh) - set(GAME_MUTABLE_FIELDS)
        if unknown:
            raise ValueError(f"Not refreshable game fields: {sorted(unknown)}")

        stmt = self._insert(Game).values(game.model_dump(exclude={"id"}))
        set_: dict[str, Any] = {field: stmt.excluded[field] for field in refresh}
        set_["updated_at"] = datetime.now(UTC)

        stmt = stmt.on_conflict_do_update(index_elements=list(GAME_KEY), set_=set_)
        await self._execute(
            stmt,
            "upsert_game",
            external_id=game.external_id,
            year=game.year,
            week=game.week,
        )
        logger.debug(
            "game_upserted",
            external_id=game.external_id,
            year=game.year,
            week=game.week,
            refreshed=list(refresh),
        )

    async def insert_bet_options(self, options: list[BetOption]) -> int:
        """
        Record bet options that are not recorded yet.

        Options are written in one statement with ON CONFLICT DO NOTHING, so
        a (game, type, target) that already exists keeps its original line
        and odds.

        Returns:
            Number of rows actually inserted
        """
        if not options:
            return 0

        stmt = self._insert(BetOption).values(
            [option.model_dump(exclude={"id"}) for option in options]
        )
        stmt = stmt.on_conflict_do_nothing(index_elements=list(BET_OPTION_KEY))
        result = await self._execute(
            stmt,
            "insert_bet_options",
            game_ids=sorted({option.game_id for option in options}),
        )

        inserted = max(result.rowcount, 0)
        logger.debug("bet_options_inserted", inserted=inserted, offered=len(options))
        return inserted

    async def update_pick_status(self, pick_id: int, status: PickStatus) -> None:
        """
        Settle a pending pick.

        The update only applies while the pick is still pending, so a pick
        can never move between settled states.

        Raises:
            ValueError: If status is not a settled status
            PickStatusConflictError: If the pick is missing or no longer pending
        """
        if status not in TERMINAL_PICK_STATUSES:
            raise ValueError(f"Picks can only be settled as won, lost or push, not {status}")

        stmt = (
            update(Pick)
            .where(Pick.id == pick_id, Pick.status == PickStatus.PENDING)
            .values(status=status)
        )
        result = await self._execute(
            stmt, "update_pick_status", pick_id=pick_id, status=status.value
        )

        if result.rowcount != 1:
            raise PickStatusConflictError(
                f"Pick {pick_id} is not pending",
                context={"pick_id": pick_id, "status": status.value},
            )
        logger.debug("pick_status_updated", pick_id=pick_id, status=status.value)
