"""Unit tests for the pickem CLI."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from tenacity import wait_none
from typer.testing import CliRunner

from pickem_cli.main import app
from pickem_cli.runner import run_with_retries
from pickem_core.errors import (
    GameDataSyncError,
    GameNotCompletedError,
    Tank01SchemaError,
    Tank01TransportError,
)
from pickem_core.models import PickStatus
from pickem_sync.game_data_sync import (
    BettingOptionsImportResult,
    GameSyncResult,
    TeamImportResult,
)
from pickem_sync.grading import GradingResult


def _wrapped(cause: Exception) -> GameDataSyncError:
    error = GameDataSyncError("sync_game_data failed")
    error.__cause__ = cause
    return error


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def quiet_cli():
    """Keep the CLI from reconfiguring logging or touching the real engine."""
    with (
        patch("pickem_cli.main.configure_logging"),
        patch("pickem_cli.commands.sync.close_db", new_callable=AsyncMock),
        patch("pickem_cli.commands.grade.close_db", new_callable=AsyncMock),
        patch("pickem_cli.commands.week.close_db", new_callable=AsyncMock),
        patch("pickem_cli.commands.sync.Tank01Client"),
        patch("pickem_cli.commands.grade.Tank01Client"),
        patch("pickem_cli.commands.week.Tank01Client"),
    ):
        yield


@pytest.fixture
def sync_service():
    """GameDataSyncService stand-in shared by the sync and grade commands."""
    service = MagicMock()
    service.import_teams = AsyncMock(return_value=TeamImportResult(upserted=32))
    service.sync_game_data = AsyncMock(
        return_value=GameSyncResult(year=2024, week=1, games=16, completed=12)
    )
    service.import_betting_options = AsyncMock(
        return_value=BettingOptionsImportResult(year=2024, week=1, games=16, inserted=60)
    )
    with patch("pickem_cli.commands.sync.GameDataSyncService", return_value=service):
        yield service


class TestArgumentValidation:
    @pytest.mark.parametrize(
        "args",
        [
            ["sync", "games", "--year", "1999", "--week", "1"],
            ["sync", "games", "--year", "2031", "--week", "1"],
            ["sync", "games", "--year", "2024", "--week", "0"],
            ["sync", "games", "--year", "2024", "--week", "19"],
            ["grade", "picks", "--year", "2024", "--week", "19"],
            ["sync", "teams", "--retries", "6"],
        ],
    )
    def test_out_of_range_values_are_rejected(self, runner, sync_service, args):
        result = runner.invoke(app, args)

        assert result.exit_code == 2
        sync_service.sync_game_data.assert_not_awaited()

    def test_week_is_required(self, runner, sync_service):
        result = runner.invoke(app, ["sync", "games", "--year", "2024"])

        assert result.exit_code != 0
        sync_service.sync_game_data.assert_not_awaited()


class TestSyncCommands:
    def test_teams(self, runner, sync_service):
        result = runner.invoke(app, ["sync", "teams"])

        assert result.exit_code == 0
        assert "Teams upserted: 32" in result.stdout

    def test_games(self, runner, sync_service):
        result = runner.invoke(app, ["sync", "games", "-y", "2024", "-w", "1"])

        assert result.exit_code == 0
        sync_service.sync_game_data.assert_awaited_once_with(2024, 1)
        assert "Games synced: 16" in result.stdout
        assert "Completed: 12" in result.stdout

    def test_games_failure_exits_with_error(self, runner, sync_service):
        sync_service.sync_game_data.side_effect = _wrapped(Tank01SchemaError("bad payload"))

        result = runner.invoke(app, ["sync", "games", "-y", "2024", "-w", "1", "-r", "2"])

        assert result.exit_code == 1
        assert "Game sync failed" in result.stdout
        # Schema errors are not retried even when retries are allowed
        sync_service.sync_game_data.assert_awaited_once()

    def test_betting_reports_already_recorded_options(self, runner, sync_service):
        result = runner.invoke(app, ["sync", "betting", "-y", "2024", "-w", "1"])

        assert result.exit_code == 0
        sync_service.sync_game_data.assert_awaited_once_with(2024, 1)
        sync_service.import_betting_options.assert_awaited_once_with(2024, 1)
        assert "Bet options inserted: 60" in result.stdout
        assert "Already recorded (kept unchanged): 4" in result.stdout


class TestGradeCommand:
    @pytest.fixture
    def grading_service(self):
        service = MagicMock()
        service.grade_week_picks = AsyncMock(
            return_value=GradingResult(
                year=2024,
                week=1,
                graded=3,
                skipped=1,
                outcomes={PickStatus.WON: 2, PickStatus.LOST: 1, PickStatus.PUSH: 0},
            )
        )
        with patch("pickem_cli.commands.grade.GradingService", return_value=service):
            yield service

    def test_refreshes_games_then_grades(self, runner, sync_service, grading_service):
        result = runner.invoke(app, ["grade", "picks", "-y", "2024", "-w", "1"])

        assert result.exit_code == 0
        sync_service.sync_game_data.assert_awaited_once_with(2024, 1)
        grading_service.grade_week_picks.assert_awaited_once_with(2024, 1)
        assert "Graded: 3" in result.stdout
        assert "Skipped (already graded): 1" in result.stdout

    def test_incomplete_week_fails(self, runner, sync_service, grading_service):
        grading_service.grade_week_picks.side_effect = GameNotCompletedError(
            "game is not completed", context={"game_id": 7}
        )

        result = runner.invoke(app, ["grade", "picks", "-y", "2024", "-w", "1"])

        assert result.exit_code == 1
        assert "Grading failed" in result.stdout


class TestWeekCommands:
    @pytest.fixture
    def week_tasks(self):
        tasks = MagicMock()
        tasks.daily_update = AsyncMock(
            return_value=GameSyncResult(year=2024, week=5, games=14, completed=0)
        )
        with (
            patch("pickem_cli.commands.week.WeekTasks", return_value=tasks),
            patch("pickem_cli.commands.week.GameDataSyncService"),
            patch("pickem_cli.commands.week.GradingService"),
        ):
            yield tasks

    def test_update(self, runner, week_tasks):
        result = runner.invoke(app, ["week", "update", "--year", "2024", "--week", "5"])

        assert result.exit_code == 0
        week_tasks.daily_update.assert_awaited_once_with(2024, 5)
        assert "Games synced: 14" in result.stdout

    def test_prompts_for_missing_year_and_week(self, runner, week_tasks):
        result = runner.invoke(app, ["week", "update"], input="2024\n5\n")

        assert result.exit_code == 0
        week_tasks.daily_update.assert_awaited_once_with(2024, 5)

    def test_failure_exits_with_error(self, runner, week_tasks):
        week_tasks.daily_update.side_effect = _wrapped(Tank01SchemaError("bad payload"))

        result = runner.invoke(app, ["week", "update", "-y", "2024", "-w", "5"])

        assert result.exit_code == 1
        assert "failed" in result.stdout


class TestRunWithRetries:
    async def test_retries_transport_failures(self):
        operation = AsyncMock(
            side_effect=[_wrapped(Tank01TransportError("timed out")), "done"]
        )

        assert await run_with_retries(operation, retries=2, wait=wait_none()) == "done"
        assert operation.await_count == 2

    async def test_gives_up_after_retries(self):
        operation = AsyncMock(side_effect=_wrapped(Tank01TransportError("timed out")))

        with pytest.raises(GameDataSyncError):
            await run_with_retries(operation, retries=2, wait=wait_none())

        assert operation.await_count == 3

    async def test_non_retryable_error_is_raised_immediately(self):
        operation = AsyncMock(side_effect=_wrapped(Tank01SchemaError("bad payload")))

        with pytest.raises(GameDataSyncError):
            await run_with_retries(operation, retries=3, wait=wait_none())

        assert operation.await_count == 1

    async def test_zero_retries_runs_once(self):
        operation = AsyncMock(side_effect=_wrapped(Tank01TransportError("timed out")))

        with pytest.raises(GameDataSyncError):
            await run_with_retries(operation, retries=0, wait=wait_none())

        assert operation.await_count == 1

    async def test_plain_lambda_around_coroutine_is_awaited(self):
        calls = []

        async def sync_week(year: int, week: int) -> str:
            calls.append((year, week))
            return f"{year}-{week}"

        result = await run_with_retries(lambda: sync_week(2024, 3), retries=0)

        assert result == "2024-3"
        assert calls == [(2024, 3)]

    async def test_plain_lambda_is_re_invoked_on_retry(self):
        attempts = []

        async def flaky() -> str:
            attempts.append(len(attempts) + 1)
            if len(attempts) == 1:
                raise _wrapped(Tank01TransportError("timed out"))
            return "done"

        assert await run_with_retries(lambda: flaky(), retries=1, wait=wait_none()) == "done"
        assert attempts == [1, 2]
