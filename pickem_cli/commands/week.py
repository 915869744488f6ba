"""CLI commands for the week lifecycle: prepare, daily update, complete."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import typer
from rich.console import Console

from pickem_core.database import close_db
from pickem_cli.commands.grade import print_grading_summary
from pickem_cli.runner import retries_option, run_with_retries, week_option, year_option
from pickem_sync.game_data_sync import GameDataSyncService
from pickem_sync.grading import GradingService
from pickem_sync.tank01 import Tank01Client
from pickem_sync.tasks import WeekTasks

app = typer.Typer()
console = Console()

T = TypeVar("T")


async def _run_task(
    label: str, retries: int, run: Callable[[WeekTasks], Awaitable[T]]
) -> T:
    console.print(f"[bold blue]{label}...[/bold blue]")

    try:
        async with Tank01Client() as client:
            tasks = WeekTasks(GameDataSyncService(client), GradingService())
            return await run_with_retries(lambda: run(tasks), retries)
    except Exception as e:
        console.print(f"\n[bold red]✗ {label} failed: {e}[/bold red]")
        raise typer.Exit(code=1) from e
    finally:
        await close_db()


@app.command("prepare")
def prepare_week(
    year: int = year_option(prompt=True),
    week: int = week_option(prompt=True),
    retries: int = retries_option(),
):
    """Start of week: sync games, then import betting options."""
    result = asyncio.run(
        _run_task(
            f"Preparing {year} week {week}",
            retries,
            lambda tasks: tasks.prepare_week(year, week),
        )
    )

    console.print("\n[bold green]✓ Week prepared![/bold green]")
    console.print(f"  Games synced: {result.games.games}")
    console.print(f"  Bet options inserted: {result.betting_options.inserted}")


@app.command("update")
def update_week(
    year: int = year_option(prompt=True),
    week: int = week_option(prompt=True),
    retries: int = retries_option(),
):
    """Daily update: sync scores and statuses."""
    result = asyncio.run(
        _run_task(
            f"Updating {year} week {week}",
            retries,
            lambda tasks: tasks.daily_update(year, week),
        )
    )

    console.print("\n[bold green]✓ Week updated![/bold green]")
    console.print(f"  Games synced: {result.games}")
    console.print(f"  Completed: {result.completed}")


@app.command("complete")
def complete_week(
    year: int = year_option(prompt=True),
    week: int = week_option(prompt=True),
    retries: int = retries_option(),
):
    """End of week: sync games, then grade picks."""
    result = asyncio.run(
        _run_task(
            f"Completing {year} week {week}",
            retries,
            lambda tasks: tasks.complete_week(year, week),
        )
    )

    console.print("\n[bold green]✓ Week completed![/bold green]")
    console.print(f"  Games synced: {result.games.games}")
    print_grading_summary(result.grading)
