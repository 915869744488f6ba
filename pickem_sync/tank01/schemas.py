"""
Tank01 NFL API response schemas.

Every payload is validated here before it leaves the client. Upstream quirks
are normalized during validation so business logic only sees canonical values:

- American odds may be the token ``even``, which means +100.
- Spread lines may be the token ``PK`` (pick'em), which means 0.
- Blank odds fields mean the sportsbook did not quote that market.
- ``gameTime_epoch`` may be blank or missing, which means the kickoff time is unknown.
- Unrecognized game status codes fall back to not-started.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Literal

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator

from pickem_core.models import GameStatus
from pickem_core.time import epoch_to_utc

logger = structlog.get_logger()

NFLTeamAbbr = Literal[
    "ARI", "ATL", "BAL", "BUF", "CAR", "CHI", "CIN", "CLE",
    "DAL", "DEN", "DET", "GB", "HOU", "IND", "JAX", "KC",
    "LAC", "LAR", "LV", "MIA", "MIN", "NE", "NO", "NYG",
    "NYJ", "PHI", "PIT", "SEA", "SF", "TB", "TEN", "WSH",
]  # fmt: skip

GAME_STATUS_CODES: dict[str, GameStatus] = {
    "0": GameStatus.NOT_STARTED,
    "1": GameStatus.IN_PROGRESS,
    "2": GameStatus.COMPLETED,
    "3": GameStatus.POSTPONED,
    "4": GameStatus.SUSPENDED,
}

EVEN_ODDS = 100
PICKEM_SPREAD = 0.0


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _to_decimal(value: Any) -> Decimal:
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"not a number: {value!r}") from e
    if not number.is_finite():
        raise ValueError(f"not a finite number: {value!r}")
    return number


def _to_int(value: Any) -> int:
    number = _to_decimal(value)
    if number != number.to_integral_value():
        raise ValueError(f"not a whole number: {value!r}")
    return int(number)


def parse_american_odds(value: Any) -> int | None:
    """Normalize an American odds field; ``even`` becomes +100."""
    if _is_blank(value):
        return None
    if isinstance(value, str) and value.strip().lower() == "even":
        return EVEN_ODDS
    return _to_int(value)


def parse_spread_line(value: Any) -> float | None:
    """Normalize a spread line; ``PK`` becomes 0."""
    if _is_blank(value):
        return None
    if isinstance(value, str) and value.strip().lower() == "pk":
        return PICKEM_SPREAD
    return float(_to_decimal(value))


def parse_total_line(value: Any) -> float | None:
    """Normalize a point-total line, which must not be negative."""
    if _is_blank(value):
        return None
    line = float(_to_decimal(value))
    if line < 0:
        raise ValueError(f"total line must not be negative: {value!r}")
    return line


def parse_epoch(value: Any) -> datetime | None:
    """Convert an epoch-seconds field to UTC; blank or zero means unknown."""
    if _is_blank(value):
        return None
    seconds = float(_to_decimal(value))
    if seconds <= 0:
        return None
    return epoch_to_utc(seconds)


class Tank01Envelope(BaseModel):
    """Outer wrapper shared by every Tank01 response."""

    status_code: int = Field(alias="statusCode")
    body: Any = None


class _Tank01Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Tank01Team(_Tank01Model):
    """Team entry from getNFLTeams."""

    abbr: NFLTeamAbbr = Field(alias="teamAbv")
    city: str = Field(alias="teamCity", min_length=1)
    nickname: str = Field(alias="teamName", min_length=1)
    conference: str = Field(min_length=1)
    conference_abbr: str = Field(alias="conferenceAbv", min_length=1, max_length=3)
    division: str = Field(min_length=1)

    @property
    def name(self) -> str:
        """Full display name, e.g. ``Buffalo Bills``."""
        return f"{self.city} {self.nickname}"


class Tank01Game(_Tank01Model):
    """Scheduled game entry from getNFLGamesForWeek."""

    game_id: str = Field(alias="gameID", min_length=1)
    home: NFLTeamAbbr
    away: NFLTeamAbbr
    date: datetime | None = Field(default=None, alias="gameTime_epoch")

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> datetime | None:
        return parse_epoch(value)


class Tank01GameStatus(_Tank01Model):
    """Live score entry from getNFLScoresOnly."""

    home_score: int = Field(alias="homePts", ge=0)
    away_score: int = Field(alias="awayPts", ge=0)
    status: GameStatus = Field(alias="gameStatusCode")
    date: datetime | None = Field(default=None, alias="gameTime_epoch")

    @field_validator("home_score", "away_score", mode="before")
    @classmethod
    def _parse_points(cls, value: Any) -> int:
        if _is_blank(value):
            return 0
        return _to_int(value)

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value: Any) -> GameStatus:
        if isinstance(value, GameStatus):
            return value
        code = "" if value is None else str(value).strip()
        status = GAME_STATUS_CODES.get(code)
        if status is None:
            logger.warning("tank01_unknown_game_status_code", code=value)
            return GameStatus.NOT_STARTED
        return status

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> datetime | None:
        return parse_epoch(value)


class Tank01GameOdds(_Tank01Model):
    """One sportsbook's quote; any market may be missing."""

    total_over: float | None = Field(default=None, alias="totalOver")
    total_over_odds: int | None = Field(default=None, alias="totalOverOdds")
    total_under: float | None = Field(default=None, alias="totalUnder")
    total_under_odds: int | None = Field(default=None, alias="totalUnderOdds")
    home_spread: float | None = Field(default=None, alias="homeTeamSpread")
    home_spread_odds: int | None = Field(default=None, alias="homeTeamSpreadOdds")
    away_spread: float | None = Field(default=None, alias="awayTeamSpread")
    away_spread_odds: int | None = Field(default=None, alias="awayTeamSpreadOdds")

    @field_validator(
        "total_over_odds",
        "total_under_odds",
        "home_spread_odds",
        "away_spread_odds",
        mode="before",
    )
    @classmethod
    def _parse_odds(cls, value: Any) -> int | None:
        return parse_american_odds(value)

    @field_validator("home_spread", "away_spread", mode="before")
    @classmethod
    def _parse_spread(cls, value: Any) -> float | None:
        return parse_spread_line(value)

    @field_validator("total_over", "total_under", mode="before")
    @classmethod
    def _parse_total(cls, value: Any) -> float | None:
        return parse_total_line(value)

    def missing_fields(self) -> list[str]:
        """Names of the markets this sportsbook did not quote."""
        return [name for name in type(self).model_fields if getattr(self, name) is None]

    def is_complete(self) -> bool:
        """True when all eight spread/total fields are populated."""
        return not self.missing_fields()


class SportsbookQuote(_Tank01Model):
    """Odds attributed to a single sportsbook."""

    sportsbook: str = Field(alias="sportsBook", min_length=1)
    odds: Tank01GameOdds = Field(default_factory=Tank01GameOdds)


class Tank01BettingOdds(_Tank01Model):
    """Body of getNFLBettingOdds with ``itemFormat=list``."""

    sportsbooks: list[SportsbookQuote] = Field(default_factory=list, alias="sportsBooks")
