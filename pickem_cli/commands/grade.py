"""CLI commands for grading picks."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from pickem_core.database import close_db
from pickem_core.models import PickStatus
from pickem_cli.commands.sync import refresh_games
from pickem_cli.runner import retries_option, run_with_retries, week_option, year_option
from pickem_sync.grading import GradingResult, GradingService
from pickem_sync.tank01 import Tank01Client

app = typer.Typer()
console = Console()


def print_grading_summary(result: GradingResult) -> None:
    table = Table(title=f"Picks graded for {result.year} week {result.week}")
    table.add_column("Outcome", style="cyan")
    table.add_column("Picks", justify="right")
    for status in (PickStatus.WON, PickStatus.LOST, PickStatus.PUSH):
        table.add_row(status.value, str(result.outcomes[status]))
    console.print(table)
    console.print(f"  Graded: {result.graded}")
    if result.skipped:
        console.print(f"  [yellow]Skipped (already graded): {result.skipped}[/yellow]")


@app.command("picks")
def grade_picks(
    year: int = year_option(),
    week: int = week_option(),
    retries: int = retries_option(),
):
    """
    Refresh a week's games, then grade every pick placed on them.

    Fails without changing any pick if a game is not completed yet.
    """
    asyncio.run(_grade_picks(year, week, retries))


async def _grade_picks(year: int, week: int, retries: int):
    console.print(f"[bold blue]Grading picks for {year} week {week}...[/bold blue]")

    try:
        async with Tank01Client() as client:
            await refresh_games(client, year, week, retries)

        result = await run_with_retries(
            lambda: GradingService().grade_week_picks(year, week), retries
        )
    except Exception as e:
        console.print(f"\n[bold red]✗ Grading failed: {e}[/bold red]")
        raise typer.Exit(code=1) from e
    finally:
        await close_db()

    console.print("\n[bold green]✓ Grading completed![/bold green]")
    print_grading_summary(result)
