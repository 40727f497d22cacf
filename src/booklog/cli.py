#!/usr/bin/env python3
"""
Main CLI entry point for Booklog backend server.
"""

import asyncio
import os
import sys

import click
import uvicorn

from booklog import __version__
from booklog.logging import configure_logging, get_logger

logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="booklog")
def cli() -> None:
    """Booklog CLI - manage server and database."""
    pass


@cli.command()
@click.option("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
@click.option("--port", default=4000, type=int, help="Port to bind to (default: 4000)")
@click.option(
    "--reload",
    is_flag=True,
    default=False,
    help="Enable auto-reload for development",
)
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Log level (default: info)",
)
def serve(host: str, port: int, reload: bool, log_level: str) -> None:
    """Start the Booklog API server."""
    configure_logging(debug=(log_level == "debug"))

    logger.info("Starting Booklog API server", host=host, port=port, reload=reload)

    # Settings are read at import time, so pass the level through the environment
    if log_level == "debug":
        os.environ["BOOKLOG_DEBUG"] = "true"
    else:
        os.environ.setdefault("BOOKLOG_DEBUG", "false")
    os.environ["BOOKLOG_LOG_LEVEL"] = log_level.upper()

    try:
        # A single process: the event broadcaster lives in this process only
        uvicorn.run(
            "booklog.api.app:create_app",
            factory=True,
            host=host,
            port=port,
            reload=reload,
            workers=1,
            log_level=log_level,
            access_log=True,
        )
    except KeyboardInterrupt:
        logger.info("Server shutdown requested by user")
    except Exception as e:
        logger.error("Server startup failed", error=str(e))
        sys.exit(1)


@cli.command("init-db")
@click.option("--database-url", default=None, help="Override BOOKLOG_DATABASE_URL")
def init_db(database_url: str | None) -> None:
    """Create the catalog tables in the configured database."""
    from booklog.database.connection import create_schema, dispose_database, init_database

    configure_logging()

    async def do_init():
        init_database(database_url, force_reinit=True)
        try:
            await create_schema()
        finally:
            await dispose_database()

    try:
        asyncio.run(do_init())
    except Exception as e:
        logger.error("Failed to create schema", error=str(e))
        click.echo(f"✗ Error creating schema: {e}", err=True)
        sys.exit(1)
    click.echo("✓ Database schema ready")


@cli.command()
def seed() -> None:
    """Load the sample catalog into the configured SQL database."""
    from booklog.config import settings
    from booklog.database.seed_data import seed_catalog
    from booklog.store.factory import create_entity_store

    configure_logging()

    if settings.store_backend.lower() != "sql":
        click.echo("✗ Seeding requires BOOKLOG_STORE_BACKEND=sql", err=True)
        sys.exit(1)

    async def do_seed() -> int:
        store = await create_entity_store(settings)
        try:
            return await seed_catalog(store)
        finally:
            await store.close()

    try:
        inserted = asyncio.run(do_seed())
    except Exception as e:
        logger.error("Failed to seed catalog", error=str(e))
        click.echo(f"✗ Error seeding catalog: {e}", err=True)
        sys.exit(1)
    click.echo(f"✓ Seeded {inserted} books")


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
