"""Tank01 NFL API client for schedules, live scores, odds and teams."""

from __future__ import annotations

import time
from typing import Any, TypeVar

import aiohttp
import structlog
from pydantic import TypeAdapter, ValidationError

from pickem_core.config import Tank01Config, get_settings
from pickem_core.errors import Tank01SchemaError, Tank01TransportError
from pickem_sync.tank01.schemas import (
    SportsbookQuote,
    Tank01BettingOdds,
    Tank01Envelope,
    Tank01Game,
    Tank01GameStatus,
    Tank01Team,
)

logger = structlog.get_logger()

T = TypeVar("T")

_GAMES_ADAPTER = TypeAdapter(list[Tank01Game])
_TEAMS_ADAPTER = TypeAdapter(list[Tank01Team])
_SCORES_ADAPTER = TypeAdapter(dict[str, Tank01GameStatus])
_ODDS_ADAPTER = TypeAdapter(Tank01BettingOdds)


class Tank01Client:
    """
    Client for the Tank01 NFL API on RapidAPI.

    Every response is validated before it is returned. Transport failures
    raise Tank01TransportError and malformed payloads raise Tank01SchemaError;
    the client never retries on its own.

    Example:
        async with Tank01Client() as client:
            games = await client.get_week_games(year=2025, week=1)
    """

    def __init__(self, config: Tank01Config | None = None, season_type: str | None = None):
        """
        Initialize API client.

        Args:
            config: Tank01 configuration (defaults to settings)
            season_type: Season type for schedule requests (defaults to settings)
        """
        settings = get_settings() if config is None or season_type is None else None
        self.config = config or settings.tank01
        self.season_type = season_type or settings.sync.season_type
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> Tank01Client:
        """Async context manager entry."""
        self.session = self._create_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        if self.session:
            await self.session.close()
            self.session = None

    def _create_session(self) -> aiohttp.ClientSession:
        return aiohttp.ClientSession(
            base_url=self.config.base_url.rstrip("/") + "/",
            headers={
                "X-RapidAPI-Key": self.config.key,
                "X-RapidAPI-Host": self.config.host,
            },
            timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds),
        )

    async def _request(self, endpoint: str, params: dict[str, Any]) -> Any:
        """
        Issue a GET request and return the decoded JSON payload.

        Raises:
            aiohttp.ClientError: On connection or HTTP status failure
            TimeoutError: When the request exceeds the configured timeout
            ValueError: When the body is not valid JSON
            RuntimeError: When called outside the async context manager
        """
        if not self.session:
            raise RuntimeError("Tank01Client must be used as an async context manager")

        start_time = time.time()
        async with self.session.get(endpoint, params=params) as response:
            response.raise_for_status()
            data = await response.json(content_type=None)
            logger.debug(
                "tank01_request_success",
                endpoint=endpoint,
                status=response.status,
                elapsed_ms=int((time.time() - start_time) * 1000),
            )
            return data

    async def _fetch(
        self,
        resource: str,
        endpoint: str,
        params: dict[str, Any],
        adapter: TypeAdapter[T],
        context: dict[str, Any],
    ) -> T:
        """
        Fetch an endpoint and validate its body.

        Args:
            resource: Human readable resource name used in errors and logs
            endpoint: Tank01 endpoint path
            params: Query parameters
            adapter: Validator for the response body
            context: Caller parameters attached to any raised error

        Raises:
            Tank01TransportError: Upstream unreachable, timed out or non-2xx
            Tank01SchemaError: Payload failed validation
        """
        error_context = {"resource": resource, **context}

        try:
            payload = await self._request(endpoint, params)
        except (aiohttp.ClientError, TimeoutError) as e:
            logger.error("tank01_request_failed", error=str(e), **error_context)
            raise Tank01TransportError(
                f"Tank01 request for {resource} failed: {e}", context=error_context
            ) from e
        except ValueError as e:
            logger.error("tank01_invalid_json", error=str(e), **error_context)
            raise Tank01SchemaError(
                f"Tank01 returned a non-JSON body for {resource}", context=error_context
            ) from e

        try:
            envelope = Tank01Envelope.model_validate(payload)
        except ValidationError as e:
            logger.error("tank01_schema_invalid", error=str(e), **error_context)
            raise Tank01SchemaError(
                f"Tank01 response envelope for {resource} is invalid", context=error_context
            ) from e

        if not 200 <= envelope.status_code < 300:
            logger.error(
                "tank01_upstream_error", status_code=envelope.status_code, **error_context
            )
            raise Tank01TransportError(
                f"Tank01 reported status {envelope.status_code} for {resource}",
                context={**error_context, "status_code": envelope.status_code},
            )

        try:
            return adapter.validate_python(envelope.body)
        except ValidationError as e:
            logger.error("tank01_schema_invalid", error=str(e), **error_context)
            raise Tank01SchemaError(
                f"Tank01 response body for {resource} is invalid: "
                f"{e.error_count()} validation error(s)",
                context=error_context,
            ) from e

    async def get_week_games(self, year: int, week: int) -> list[Tank01Game]:
        """
        Fetch the regular season schedule for one week.

        Args:
            year: Season year
            week: Week number (1-18)

        Returns:
            Scheduled games in upstream order
        """
        games = await self._fetch(
            "week_games",
            "getNFLGamesForWeek",
            {"week": week, "season": year, "seasonType": self.season_type},
            _GAMES_ADAPTER,
            {"year": year, "week": week},
        )
        logger.info("tank01_week_games_fetched", year=year, week=week, games_count=len(games))
        return games

    async def get_game_status(self, external_id: str) -> Tank01GameStatus:
        """
        Fetch live score and status for one game.

        Args:
            external_id: Tank01 game ID

        Returns:
            Score and normalized status for the game
        """
        context = {"external_id": external_id}
        scores = await self._fetch(
            "game_status",
            "getNFLScoresOnly",
            {"gameID": external_id, "topPerformers": "false"},
            _SCORES_ADAPTER,
            context,
        )

        status = scores.get(external_id)
        if status is None:
            logger.error("tank01_game_status_missing", external_id=external_id)
            raise Tank01SchemaError(
                f"Tank01 scores response has no entry for game {external_id}",
                context={"resource": "game_status", **context},
            )
        return status

    async def get_game_odds(self, external_id: str) -> list[SportsbookQuote]:
        """
        Fetch every sportsbook's (possibly partial) quote for one game.

        Args:
            external_id: Tank01 game ID

        Returns:
            Per-sportsbook quotes in upstream order
        """
        odds = await self._fetch(
            "game_odds",
            "getNFLBettingOdds",
            {"gameID": external_id, "itemFormat": "list"},
            _ODDS_ADAPTER,
            {"external_id": external_id},
        )
        logger.info(
            "tank01_game_odds_fetched",
            external_id=external_id,
            sportsbooks=[quote.sportsbook for quote in odds.sportsbooks],
        )
        return odds.sportsbooks

    async def get_teams(self) -> list[Tank01Team]:
        """Fetch all NFL teams."""
        teams = await self._fetch("teams", "getNFLTeams", {}, _TEAMS_ADAPTER, {})
        logger.info("tank01_teams_fetched", teams_count=len(teams))
        return teams
