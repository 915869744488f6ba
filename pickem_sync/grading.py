"""
Pick grading against final scores.

A pick moves from pending to won, lost or push exactly once. Grading a
week runs in one transaction: every precondition failure rolls back the
statuses already set in that run.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pickem_core.database import get_session_maker
from pickem_core.errors import (
    GameNotCompletedError,
    GradingError,
    MissingBetOptionError,
    MissingGameError,
    PickemError,
    PreconditionError,
)
from pickem_core.models import (
    SPREAD_TARGETS,
    TOTAL_TARGETS,
    BetOption,
    BetTarget,
    BetType,
    Game,
    GameStatus,
    PickStatus,
)
from pickem_sync.storage.readers import PickemReader, PickRecord
from pickem_sync.storage.writers import PickemWriter

logger = structlog.get_logger(__name__)


def grade_spread_pick(
    line: float, target: BetTarget, home_score: int, away_score: int
) -> PickStatus:
    """
    Settle a spread pick.

    The backed side's score plus the line is compared with the other side's
    score: higher wins, lower loses, equal pushes.

    Raises:
        ValueError: If target is not home or away
    """
    if target not in SPREAD_TARGETS:
        raise ValueError(f"Spread picks back home or away, not {target}")

    if target == BetTarget.HOME:
        target_score, opposing_score = home_score, away_score
    else:
        target_score, opposing_score = away_score, home_score

    net = target_score + line
    if net > opposing_score:
        return PickStatus.WON
    if net < opposing_score:
        return PickStatus.LOST
    return PickStatus.PUSH


def grade_total_pick(
    line: float, target: BetTarget, home_score: int, away_score: int
) -> PickStatus:
    """
    Settle a total pick against the combined score.

    Raises:
        ValueError: If target is not over or under
    """
    if target not in TOTAL_TARGETS:
        raise ValueError(f"Total picks back over or under, not {target}")

    total = home_score + away_score
    if total == line:
        return PickStatus.PUSH
    if target == BetTarget.OVER:
        return PickStatus.WON if total > line else PickStatus.LOST
    return PickStatus.WON if total < line else PickStatus.LOST


_GRADERS = {
    BetType.SPREAD: grade_spread_pick,
    BetType.TOTAL: grade_total_pick,
}


def grade_pick(bet_option: BetOption, game: Game) -> PickStatus:
    """
    Settle a pick on a bet option using its game's final score.

    Raises:
        PreconditionError: If the bet option's target does not fit its type
    """
    grader = _GRADERS[bet_option.type]
    try:
        return grader(bet_option.line, bet_option.target, game.home_score, game.away_score)
    except ValueError as e:
        raise PreconditionError(
            str(e),
            context={
                "bet_option_id": bet_option.id,
                "type": bet_option.type.value,
                "target": bet_option.target.value,
            },
        ) from e


@dataclass(slots=True)
class GradingResult:
    """Outcome of grading one week of picks."""

    year: int
    week: int
    graded: int = 0
    skipped: int = 0
    outcomes: dict[PickStatus, int] = field(
        default_factory=lambda: {PickStatus.WON: 0, PickStatus.LOST: 0, PickStatus.PUSH: 0}
    )


@dataclass(slots=True)
class GradingCallbacks:
    """Optional observers for grading progress."""

    on_pick_graded: Callable[[PickRecord, PickStatus], None] | None = None
    on_pick_skipped: Callable[[PickRecord], None] | None = None
    on_failed: Callable[[PickemError], None] | None = None


def _check_gradable(record: PickRecord) -> tuple[BetOption, Game]:
    pick = record.pick
    if record.bet_option is None:
        raise MissingBetOptionError(
            f"Bet option {pick.bet_option_id} for pick {pick.id} not found",
            context={"pick_id": pick.id, "bet_option_id": pick.bet_option_id},
        )
    if record.game is None:
        raise MissingGameError(
            f"Game {record.bet_option.game_id} for pick {pick.id} not found",
            context={"pick_id": pick.id, "game_id": record.bet_option.game_id},
        )
    if record.game.status != GameStatus.COMPLETED:
        raise GameNotCompletedError(
            f"Game {record.game.external_id} is {record.game.status.value}, not completed",
            context={
                "pick_id": pick.id,
                "game_id": record.game.id,
                "status": record.game.status.value,
            },
        )
    return record.bet_option, record.game


class GradingService:
    """Grades a week of picks and persists their settlement."""

    def __init__(
        self,
        *,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        callbacks: GradingCallbacks | None = None,
    ) -> None:
        self._session_factory = session_factory or get_session_maker()
        self._callbacks = callbacks or GradingCallbacks()

    async def grade_week_picks(self, year: int, week: int) -> GradingResult:
        """
        Grade every pick placed on a week's games.

        Each pick record is checked in order for its bet option, its game and
        the game's completion. Picks that are no longer pending are skipped.

        Raises:
            GradingError: On the first failing pick; no status change of this
                run is kept
        """
        logger.info("grading_started", year=year, week=week)
        result = GradingResult(year=year, week=week)

        try:
            async with self._session_factory() as session:
                reader = PickemReader(session)
                writer = PickemWriter(session)

                records = await reader.get_picks_with_game_and_option(year, week)
                logger.info("grading_picks_loaded", year=year, week=week, picks=len(records))

                for record in records:
                    bet_option, game = _check_gradable(record)

                    if record.pick.status != PickStatus.PENDING:
                        logger.debug(
                            "pick_already_graded",
                            pick_id=record.pick.id,
                            status=record.pick.status.value,
                        )
                        result.skipped += 1
                        if self._callbacks.on_pick_skipped:
                            self._callbacks.on_pick_skipped(record)
                        continue

                    status = grade_pick(bet_option, game)
                    await writer.update_pick_status(record.pick.id, status)
                    result.graded += 1
                    result.outcomes[status] += 1
                    if self._callbacks.on_pick_graded:
                        self._callbacks.on_pick_graded(record, status)

                await writer.commit()
        except GradingError as e:
            e.context.update(year=year, week=week)
            self._report_failure(e, year, week)
            raise
        except PickemError as e:
            self._report_failure(e, year, week)
            raise GradingError(
                f"Grading week {week} of {year} failed: {e.message}",
                context={"year": year, "week": week},
            ) from e

        logger.info(
            "grading_completed",
            year=year,
            week=week,
            graded=result.graded,
            skipped=result.skipped,
            won=result.outcomes[PickStatus.WON],
            lost=result.outcomes[PickStatus.LOST],
            push=result.outcomes[PickStatus.PUSH],
        )
        return result

    def _report_failure(self, error: PickemError, year: int, week: int) -> None:
        logger.error(
            "grading_failed",
            year=year,
            week=week,
            error=str(error),
            error_type=type(error).__name__,
        )
        if self._callbacks.on_failed:
            self._callbacks.on_failed(error)
