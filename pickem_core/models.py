"""SQLModel database schema definitions."""

from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import Column, DateTime, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


def _enum_column(enum_cls: type[Enum], name: str, default: Enum | None = None) -> Column:
    # Persist enum values ("not-started"), not member names ("NOT_STARTED")
    return Column(
        SAEnum(
            enum_cls,
            name=name,
            values_callable=lambda members: [member.value for member in members],
            validate_strings=True,
        ),
        nullable=False,
        default=default,
    )


class GameStatus(str, Enum):
    """Game status enumeration."""

    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    POSTPONED = "postponed"
    SUSPENDED = "suspended"


class BetType(str, Enum):
    """Supported bet markets."""

    SPREAD = "spread"
    TOTAL = "total"


class BetTarget(str, Enum):
    """Side of a market a bet option backs."""

    HOME = "home"
    AWAY = "away"
    OVER = "over"
    UNDER = "under"


class PickStatus(str, Enum):
    """Pick settlement status."""

    PENDING = "pending"
    WON = "won"
    LOST = "lost"
    PUSH = "push"


SPREAD_TARGETS = frozenset({BetTarget.HOME, BetTarget.AWAY})
TOTAL_TARGETS = frozenset({BetTarget.OVER, BetTarget.UNDER})
TERMINAL_PICK_STATUSES = frozenset({PickStatus.WON, PickStatus.LOST, PickStatus.PUSH})


class Team(SQLModel, table=True):
    """NFL team keyed by its abbreviation."""

    __tablename__ = "teams"

    id: int | None = Field(default=None, primary_key=True)
    abbr: str = Field(max_length=3, unique=True, index=True, description="Team abbreviation")
    name: str = Field(max_length=255, description="Full team name")
    conference: str = Field(max_length=255, description="Conference name")
    conference_abbr: str = Field(max_length=3, description="Conference abbreviation")
    division: str = Field(max_length=255, description="Division name")


class Game(SQLModel, table=True):
    """Scheduled game; scores and status mirror the upstream provider."""

    __tablename__ = "games"

    id: int | None = Field(default=None, primary_key=True)
    external_id: str = Field(unique=True, index=True, description="Tank01 game ID")
    year: int = Field(index=True, description="Season year")
    week: int = Field(index=True, ge=1, le=18, description="Regular season week")

    date: datetime | None = Field(
        sa_column=Column(DateTime(timezone=True)),
        default=None,
        description="Kickoff time, unknown until scheduled",
    )
    home_team_id: int = Field(foreign_key="teams.id", description="Home team reference")
    away_team_id: int = Field(foreign_key="teams.id", description="Away team reference")

    home_score: int = Field(default=0, description="Home team score")
    away_score: int = Field(default=0, description="Away team score")
    status: GameStatus = Field(
        sa_column=_enum_column(GameStatus, "game_status", GameStatus.NOT_STARTED),
        default=GameStatus.NOT_STARTED,
        description="Upstream game status",
    )

    created_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True)),
        default_factory=utc_now,
        description="Record creation time",
    )
    updated_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True)),
        default_factory=utc_now,
        description="Record last update time",
    )

    __table_args__ = (
        UniqueConstraint(
            "year", "week", "home_team_id", "away_team_id", name="uq_games_year_week_teams"
        ),
    )


class BetOption(SQLModel, table=True):
    """Market offered on a game; terms are frozen once recorded."""

    __tablename__ = "bet_options"

    id: int | None = Field(default=None, primary_key=True)
    game_id: int = Field(foreign_key="games.id", index=True, description="Game reference")
    type: BetType = Field(
        sa_column=_enum_column(BetType, "bet_type", BetType.SPREAD),
        default=BetType.SPREAD,
        description="Market type",
    )
    target: BetTarget = Field(
        sa_column=_enum_column(BetTarget, "bet_target"), description="Side backed"
    )
    line: float = Field(description="Spread handicap or total points line")
    odds: int = Field(description="American odds (e.g., -110, +100)")

    created_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True)),
        default_factory=utc_now,
        description="Record creation time",
    )

    __table_args__ = (
        UniqueConstraint("game_id", "type", "target", name="uq_bet_options_game_type_target"),
    )


class Pick(SQLModel, table=True):
    """User wager on a bet option."""

    __tablename__ = "picks"

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(index=True, description="Owning user (auth system id)")
    bet_option_id: int = Field(foreign_key="bet_options.id", index=True)
    status: PickStatus = Field(
        sa_column=_enum_column(PickStatus, "pick_status", PickStatus.PENDING),
        default=PickStatus.PENDING,
        description="Settlement status",
    )

    created_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True)),
        default_factory=utc_now,
        description="Record creation time",
    )

    __table_args__ = (
        UniqueConstraint("user_id", "bet_option_id", name="uq_picks_user_bet_option"),
    )
