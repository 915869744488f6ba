"""Pick one complete odds quote per game from competing sportsbooks."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from pickem_core.errors import MissingOddsError
from pickem_core.models import BetOption, BetTarget, BetType
from pickem_sync.tank01.schemas import SportsbookQuote

logger = structlog.get_logger()

DEFAULT_PREFERRED_SPORTSBOOKS: tuple[str, ...] = (
    "bet365",
    "fanduel",
    "draftkings",
    "caesars_sportsbook",
    "betmgm",
)


@dataclass(frozen=True, slots=True)
class CompleteOdds:
    """A sportsbook quote with every spread and total market populated."""

    sportsbook: str
    total_over: float
    total_over_odds: int
    total_under: float
    total_under_odds: int
    home_spread: float
    home_spread_odds: int
    away_spread: float
    away_spread_odds: int

    @classmethod
    def from_quote(cls, quote: SportsbookQuote) -> CompleteOdds:
        """Build from a quote already known to be complete."""
        odds = quote.odds
        return cls(
            sportsbook=quote.sportsbook,
            total_over=odds.total_over,
            total_over_odds=odds.total_over_odds,
            total_under=odds.total_under,
            total_under_odds=odds.total_under_odds,
            home_spread=odds.home_spread,
            home_spread_odds=odds.home_spread_odds,
            away_spread=odds.away_spread,
            away_spread_odds=odds.away_spread_odds,
        )

    def to_bet_options(self, game_id: int) -> list[BetOption]:
        """Expand into the four bet options offered on a game."""
        return [
            BetOption(
                game_id=game_id,
                type=BetType.SPREAD,
                target=BetTarget.HOME,
                line=self.home_spread,
                odds=self.home_spread_odds,
            ),
            BetOption(
                game_id=game_id,
                type=BetType.SPREAD,
                target=BetTarget.AWAY,
                line=self.away_spread,
                odds=self.away_spread_odds,
            ),
            BetOption(
                game_id=game_id,
                type=BetType.TOTAL,
                target=BetTarget.OVER,
                line=self.total_over,
                odds=self.total_over_odds,
            ),
            BetOption(
                game_id=game_id,
                type=BetType.TOTAL,
                target=BetTarget.UNDER,
                line=self.total_under,
                odds=self.total_under_odds,
            ),
        ]


def select_odds(
    game_id: str,
    quotes: Sequence[SportsbookQuote],
    preferred: Sequence[str] = DEFAULT_PREFERRED_SPORTSBOOKS,
) -> CompleteOdds:
    """
    Select the odds quote to offer for a game.

    Preferred sportsbooks are tried in priority order; the first one present
    with all eight fields wins. When none qualifies, the first complete quote
    in input order is used. Quotes are never merged across sportsbooks.

    Args:
        game_id: Upstream game ID, used in logs and errors
        quotes: Per-sportsbook quotes in upstream order
        preferred: Sportsbook names in priority order

    Returns:
        The selected complete quote

    Raises:
        MissingOddsError: If no sportsbook quoted every market
    """
    by_sportsbook: dict[str, SportsbookQuote] = {}
    for quote in quotes:
        by_sportsbook.setdefault(quote.sportsbook, quote)

    for sportsbook in preferred:
        quote = by_sportsbook.get(sportsbook)
        if quote is not None and quote.odds.is_complete():
            logger.debug("odds_selected", game_id=game_id, sportsbook=sportsbook, preferred=True)
            return CompleteOdds.from_quote(quote)

    for quote in quotes:
        if quote.odds.is_complete():
            logger.info(
                "odds_selected_fallback",
                game_id=game_id,
                sportsbook=quote.sportsbook,
            )
            return CompleteOdds.from_quote(quote)

    logger.warning(
        "odds_missing",
        game_id=game_id,
        sportsbooks={quote.sportsbook: quote.odds.missing_fields() for quote in quotes},
    )
    raise MissingOddsError(game_id, context={"sportsbooks": len(quotes)})
