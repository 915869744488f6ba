"""Unit tests for Tank01 payload validation and normalization."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from pickem_core.models import GameStatus
from pickem_sync.tank01.schemas import (
    SportsbookQuote,
    Tank01BettingOdds,
    Tank01Game,
    Tank01GameOdds,
    Tank01GameStatus,
    Tank01Team,
    parse_american_odds,
    parse_epoch,
    parse_spread_line,
    parse_total_line,
)
from tests.test_helpers import COMPLETE_ODDS, game_payload, team_payload


class TestFieldParsers:
    """Tests for the sentinel-aware field parsers."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("-110", -110),
            ("+150", 150),
            (" 120 ", 120),
            (-105, -105),
            ("even", 100),
            ("EVEN", 100),
            ("", None),
            ("  ", None),
            (None, None),
        ],
    )
    def test_parse_american_odds(self, raw, expected):
        assert parse_american_odds(raw) == expected

    @pytest.mark.parametrize("raw", ["-110.5", "abc", "nan", "inf"])
    def test_parse_american_odds_rejects_non_integers(self, raw):
        with pytest.raises(ValueError):
            parse_american_odds(raw)

    @pytest.mark.parametrize(
        "raw,expected",
        [("-3.5", -3.5), ("+7", 7.0), ("PK", 0.0), ("pk", 0.0), ("", None)],
    )
    def test_parse_spread_line(self, raw, expected):
        assert parse_spread_line(raw) == expected

    def test_parse_total_line(self):
        assert parse_total_line("44.5") == 44.5
        assert parse_total_line("") is None
        with pytest.raises(ValueError):
            parse_total_line("-1")

    def test_parse_epoch(self):
        assert parse_epoch("1725820800.0") == datetime.fromtimestamp(1725820800, tz=UTC)
        assert parse_epoch(1725820800) == datetime.fromtimestamp(1725820800, tz=UTC)

    @pytest.mark.parametrize("raw", [None, "", "  ", "0", 0])
    def test_parse_epoch_unknown_is_never_epoch_zero(self, raw):
        assert parse_epoch(raw) is None


class TestTank01Team:
    def test_team_from_payload(self):
        team = Tank01Team.model_validate(team_payload("BUF"))

        assert team.abbr == "BUF"
        assert team.name == "Buffalo Bills"
        assert team.conference_abbr == "AFC"
        assert team.division == "East"

    def test_unknown_abbreviation_is_rejected(self):
        with pytest.raises(ValidationError):
            Tank01Team.model_validate(team_payload("BUF", teamAbv="XXX"))

    def test_missing_field_is_rejected(self):
        payload = team_payload("BUF")
        del payload["division"]

        with pytest.raises(ValidationError):
            Tank01Team.model_validate(payload)


class TestTank01Game:
    def test_game_from_payload(self):
        game = Tank01Game.model_validate(game_payload("BUF", "ARI"))

        assert game.game_id == "20240908_BUF@ARI"
        assert game.home == "ARI"
        assert game.away == "BUF"
        assert game.date == datetime.fromtimestamp(1725820800, tz=UTC)

    @pytest.mark.parametrize("epoch", [None, ""])
    def test_missing_kickoff_is_unknown(self, epoch):
        game = Tank01Game.model_validate(game_payload("BUF", "ARI", epoch=epoch))

        assert game.date is None


class TestTank01GameStatus:
    @pytest.mark.parametrize(
        "code,expected",
        [
            ("0", GameStatus.NOT_STARTED),
            ("1", GameStatus.IN_PROGRESS),
            ("2", GameStatus.COMPLETED),
            ("3", GameStatus.POSTPONED),
            ("4", GameStatus.SUSPENDED),
            (2, GameStatus.COMPLETED),
        ],
    )
    def test_status_codes(self, code, expected):
        status = Tank01GameStatus.model_validate(
            {"homePts": "21", "awayPts": "17", "gameStatusCode": code}
        )

        assert status.status == expected
        assert status.home_score == 21
        assert status.away_score == 17

    @pytest.mark.parametrize("code", ["9", "", "final"])
    def test_unknown_status_code_falls_back_to_not_started(self, code):
        status = Tank01GameStatus.model_validate(
            {"homePts": "21", "awayPts": "17", "gameStatusCode": code}
        )

        assert status.status == GameStatus.NOT_STARTED

    def test_blank_points_before_kickoff_are_zero(self):
        status = Tank01GameStatus.model_validate(
            {"homePts": "", "awayPts": "", "gameStatusCode": "0"}
        )

        assert status.home_score == 0
        assert status.away_score == 0

    @pytest.mark.parametrize(
        "payload",
        [
            {"awayPts": "17", "gameStatusCode": "2"},
            {"homePts": "-3", "awayPts": "17", "gameStatusCode": "2"},
            {"homePts": "twenty", "awayPts": "17", "gameStatusCode": "2"},
            {"homePts": "21", "awayPts": "17"},
        ],
    )
    def test_malformed_status_is_rejected(self, payload):
        with pytest.raises(ValidationError):
            Tank01GameStatus.model_validate(payload)


class TestTank01GameOdds:
    def test_complete_quote(self):
        odds = Tank01GameOdds.model_validate(COMPLETE_ODDS)

        assert odds.is_complete()
        assert odds.missing_fields() == []
        assert odds.home_spread == -3.0
        assert odds.away_spread == 3.0
        assert odds.total_over == 47.5
        assert odds.home_spread_odds == -115

    def test_sentinels_are_normalized(self):
        odds = Tank01GameOdds.model_validate(
            {
                **COMPLETE_ODDS,
                "homeTeamSpread": "PK",
                "awayTeamSpread": "PK",
                "totalOverOdds": "even",
            }
        )

        assert odds.home_spread == 0.0
        assert odds.away_spread == 0.0
        assert odds.total_over_odds == 100

    def test_partial_quote_reports_missing_fields(self):
        odds = Tank01GameOdds.model_validate(
            {**COMPLETE_ODDS, "totalUnder": "", "awayTeamSpread": None}
        )

        assert not odds.is_complete()
        assert odds.missing_fields() == ["total_under", "away_spread"]

    def test_betting_odds_body(self):
        body = Tank01BettingOdds.model_validate(
            {
                "gameID": "20240908_BUF@ARI",
                "sportsBooks": [
                    {"sportsBook": "draftkings", "odds": {"totalOver": "47.5"}},
                    {"sportsBook": "fanduel", "odds": COMPLETE_ODDS},
                ],
            }
        )

        assert [quote.sportsbook for quote in body.sportsbooks] == ["draftkings", "fanduel"]
        assert isinstance(body.sportsbooks[0], SportsbookQuote)
        assert not body.sportsbooks[0].odds.is_complete()
        assert body.sportsbooks[1].odds.is_complete()

    def test_garbage_odds_are_rejected(self):
        with pytest.raises(ValidationError):
            Tank01GameOdds.model_validate({**COMPLETE_ODDS, "homeTeamSpreadOdds": "n/a"})
