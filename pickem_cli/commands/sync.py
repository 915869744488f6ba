"""CLI commands for importing teams, schedules, scores and odds."""

import asyncio

import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from pickem_core.config import get_settings
from pickem_core.database import close_db
from pickem_core.models import Game
from pickem_core.time import utc_isoformat
from pickem_cli.runner import retries_option, run_with_retries, week_option, year_option
from pickem_sync.game_data_sync import GameDataSyncService, SyncCallbacks
from pickem_sync.odds_selection import CompleteOdds
from pickem_sync.tank01 import Tank01Client, Tank01GameStatus

app = typer.Typer()
console = Console()


@app.command("teams")
def sync_teams(retries: int = retries_option()):
    """Import all NFL teams (run before importing a season)."""
    asyncio.run(_sync_teams(retries))


async def _sync_teams(retries: int):
    console.print("[bold blue]Importing NFL teams...[/bold blue]")

    try:
        async with Tank01Client() as client:
            service = GameDataSyncService(client)
            result = await run_with_retries(service.import_teams, retries)
    except Exception as e:
        console.print(f"\n[bold red]✗ Team import failed: {e}[/bold red]")
        raise typer.Exit(code=1) from e
    finally:
        await close_db()

    console.print("\n[bold green]✓ Team import completed![/bold green]")
    console.print(f"  Teams upserted: {result.upserted}")


@app.command("season")
def sync_season(
    year: int = year_option(),
    retries: int = retries_option(),
):
    """
    Import the regular season schedule for a year.

    Weeks are committed one at a time. If a week fails, the weeks before it
    stay imported; re-running the command is safe.
    """
    asyncio.run(_sync_season(year, retries))


async def _sync_season(year: int, retries: int):
    settings = get_settings()
    weeks = settings.sync.season_weeks
    console.print(f"[bold blue]Importing {year} season ({weeks} weeks)...[/bold blue]")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total} weeks"),
        console=console,
    ) as progress:
        task = progress.add_task(description="Importing weeks...", total=weeks)

        def _on_week_imported(week: int, games: int) -> None:
            progress.update(
                task, completed=week, description=f"Week {week}: {games} games imported"
            )

        try:
            async with Tank01Client() as client:
                service = GameDataSyncService(
                    client,
                    settings=settings,
                    callbacks=SyncCallbacks(on_week_imported=_on_week_imported),
                )
                # A retry starts over at week 1; committed weeks are upserted again
                result = await run_with_retries(
                    lambda: service.import_season_games(year), retries
                )
        except Exception as e:
            progress.update(task, description="Failed!")
            console.print(f"\n[bold red]✗ Season import failed: {e}[/bold red]")
            raise typer.Exit(code=1) from e
        finally:
            await close_db()

        progress.update(task, description="Complete!")

    console.print("\n[bold green]✓ Season import completed![/bold green]")
    console.print(f"  Weeks imported: {result.weeks}")
    console.print(f"  Games imported: {result.games}")


async def refresh_games(client: Tank01Client, year: int, week: int, retries: int):
    """Refresh a week's games and print them; shared by commands that need fresh scores."""
    rows: list[tuple[Game, Tank01GameStatus]] = []

    service = GameDataSyncService(
        client,
        callbacks=SyncCallbacks(on_game_synced=lambda game, status: rows.append((game, status))),
    )

    def _sync():
        rows.clear()
        return service.sync_game_data(year, week)

    result = await run_with_retries(_sync, retries)

    table = Table(title=f"{year} week {week}")
    table.add_column("Game", style="cyan")
    table.add_column("Kickoff (UTC)")
    table.add_column("Status")
    table.add_column("Score", justify="right")
    for game, status in rows:
        kickoff = status.date or game.date
        table.add_row(
            game.external_id,
            utc_isoformat(kickoff) if kickoff else "TBD",
            status.status.value,
            f"{status.away_score}-{status.home_score}",
        )
    console.print(table)
    return result


@app.command("games")
def sync_games(
    year: int = year_option(),
    week: int = week_option(),
    retries: int = retries_option(),
):
    """Refresh scores, kickoff times and statuses for a week's games."""
    asyncio.run(_sync_games(year, week, retries))


async def _sync_games(year: int, week: int, retries: int):
    console.print(f"[bold blue]Syncing games for {year} week {week}...[/bold blue]")

    try:
        async with Tank01Client() as client:
            result = await refresh_games(client, year, week, retries)
    except Exception as e:
        console.print(f"\n[bold red]✗ Game sync failed: {e}[/bold red]")
        raise typer.Exit(code=1) from e
    finally:
        await close_db()

    console.print("\n[bold green]✓ Game sync completed![/bold green]")
    console.print(f"  Games synced: {result.games}")
    console.print(f"  Completed: {result.completed}")


@app.command("betting")
def sync_betting(
    year: int = year_option(),
    week: int = week_option(),
    retries: int = retries_option(),
):
    """Refresh a week's games, then offer spread and total bet options."""
    asyncio.run(_sync_betting(year, week, retries))


async def _sync_betting(year: int, week: int, retries: int):
    console.print(f"[bold blue]Setting up betting for {year} week {week}...[/bold blue]")

    def _on_odds_selected(game: Game, odds: CompleteOdds) -> None:
        console.print(
            f"  {game.external_id}: {odds.sportsbook} "
            f"(spread {odds.home_spread:+g}, total {odds.total_over:g})"
        )

    try:
        async with Tank01Client() as client:
            await refresh_games(client, year, week, retries)

            service = GameDataSyncService(
                client, callbacks=SyncCallbacks(on_odds_selected=_on_odds_selected)
            )
            result = await run_with_retries(
                lambda: service.import_betting_options(year, week), retries
            )
    except Exception as e:
        console.print(f"\n[bold red]✗ Betting setup failed: {e}[/bold red]")
        raise typer.Exit(code=1) from e
    finally:
        await close_db()

    console.print("\n[bold green]✓ Betting setup completed![/bold green]")
    console.print(f"  Games: {result.games}")
    console.print(f"  Bet options inserted: {result.inserted}")
    already_recorded = result.games * 4 - result.inserted
    if already_recorded:
        console.print(f"  Already recorded (kept unchanged): {already_recorded}")
