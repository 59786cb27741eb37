"""Database CLI commands."""

import click

from lootbase.app import AppConfig, build_app
from lootbase.errors import LootbaseError


@click.group()
def db():
    """Database commands."""
    pass


@db.command()
def init():
    """Create tables for every collection declared in metadata."""
    try:
        config = AppConfig.from_env()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    if not config.metadata_path.exists():
        click.echo(f"Error: Metadata directory not found at {config.metadata_path}", err=True)
        raise SystemExit(1)

    try:
        app = build_app(config)
    except (ValueError, LootbaseError) as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    try:
        click.echo(f"Database: {config.database.url}")
        for name in sorted(app.metadata_loader.list_collections()):
            click.echo(f"  ✓ {name}")
    finally:
        app.close()
