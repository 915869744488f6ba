"""CLI commands for database setup."""

import asyncio

import structlog
import typer
from rich.console import Console

from pickem_core.database import close_db, init_db

app = typer.Typer()
console = Console()
logger = structlog.get_logger()


@app.command("init")
def db_init():
    """Create all tables (development only; production schemas are managed separately)."""
    asyncio.run(_db_init())


async def _db_init():
    logger.info("initializing_database")

    try:
        await init_db()
        logger.info("database_initialized")
        console.print("[bold green]✓ Database initialized successfully[/bold green]")
    except Exception as e:
        logger.error("database_initialization_failed", error=str(e))
        console.print(f"[bold red]✗ Database initialization failed: {e}[/bold red]")
        raise typer.Exit(code=1) from e
    finally:
        await close_db()
