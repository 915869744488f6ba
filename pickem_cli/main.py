"""Main CLI entry point using Typer."""

import typer
from pydantic import ValidationError
from rich.console import Console

from pickem_cli.commands import db, grade, sync, week
from pickem_core.config import get_settings
from pickem_core.logging_setup import configure_logging

app = typer.Typer(
    name="pickem",
    help="NFL Pick'em - schedule, odds and score sync with pick grading",
    add_completion=False,
)

# Add command groups
app.add_typer(sync.app, name="sync", help="Import teams, schedules, scores and odds")
app.add_typer(grade.app, name="grade", help="Grade picks")
app.add_typer(week.app, name="week", help="Week lifecycle tasks")
app.add_typer(db.app, name="db", help="Database setup")

console = Console()


@app.callback()
def callback(
    json_logs: bool = typer.Option(False, "--json-logs", help="Write logs as JSON lines"),
):
    """
    NFL Pick'em

    Syncs teams, games and betting odds from Tank01 and grades user picks.
    """
    try:
        settings = get_settings()
    except ValidationError as e:
        console.print(f"[bold red]✗ Invalid configuration: {e}[/bold red]")
        raise typer.Exit(code=1) from e

    configure_logging(settings, json_output=json_logs)


if __name__ == "__main__":
    app()
