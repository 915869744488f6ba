"""Exception hierarchy for sync and grading operations."""

from __future__ import annotations

from typing import Any


class PickemError(Exception):
    """Base exception carrying diagnostic context for the failed operation."""

    retryable: bool = False

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = dict(context or {})

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value!r}" for key, value in self.context.items())
        return f"{self.message} ({details})"


# Upstream provider


class Tank01Error(PickemError):
    """Base exception for Tank01 API failures."""


class Tank01TransportError(Tank01Error):
    """Upstream unreachable, timed out, or answered with a non-2xx status."""

    retryable = True


class Tank01SchemaError(Tank01Error):
    """Upstream payload failed schema validation."""


class MissingOddsError(PickemError):
    """No sportsbook produced a complete odds quote for a game."""

    def __init__(self, game_id: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(
            f"No sportsbook provided complete odds for game {game_id}",
            context={"game_id": game_id, **(context or {})},
        )
        self.game_id = game_id


# Persistence


class PersistenceError(PickemError):
    """Store rejected a read or write for reasons other than modeled conflicts."""


class NotFoundError(PickemError):
    """A required record is absent."""


class TeamNotFoundError(NotFoundError):
    """No team with the requested abbreviation."""


class GameNotFoundError(NotFoundError):
    """No game with the requested id."""


class PreconditionError(PickemError):
    """A record is not in the state an operation requires."""


class PickStatusConflictError(PreconditionError):
    """Pick was no longer pending when its status update was applied."""


# Orchestration


class _WrappingError(PickemError):
    """Batch-level error; retryability follows the chained cause."""

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        cause = self.__cause__
        return bool(getattr(cause, "retryable", False))


class GameDataSyncError(_WrappingError):
    """Team, season, game or odds import failed."""


class GradingError(_WrappingError):
    """Grading a week of picks failed."""


class MissingBetOptionError(GradingError, NotFoundError):
    """Pick references a bet option that does not exist."""


class MissingGameError(GradingError, NotFoundError):
    """Bet option references a game that does not exist."""


class GameNotCompletedError(GradingError, PreconditionError):
    """Game is not completed, so its picks cannot be graded."""
