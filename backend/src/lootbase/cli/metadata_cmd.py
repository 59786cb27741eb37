"""Metadata CLI commands."""

import click

from lootbase.app import AppConfig
from lootbase.metadata.loader import MetadataLoader


@click.group()
def metadata():
    """Metadata commands."""
    pass


@metadata.command()
def validate():
    """Load collection YAML files and check cross-collection constraints."""
    try:
        config = AppConfig.from_env()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    if not config.metadata_path.exists():
        click.echo(f"Error: Metadata directory not found at {config.metadata_path}", err=True)
        raise SystemExit(1)

    try:
        loader = MetadataLoader(config.metadata_path)
        loader.load_all()
    except (ValueError, KeyError) as e:
        click.echo(click.style(f"Validation failed: {e}", fg="red"), err=True)
        raise SystemExit(1)

    collections = loader.list_collections()
    click.echo(f"Loaded {len(collections)} collections:")
    for name in sorted(collections):
        collection = loader.get_collection(name)
        hook_count = sum(len(h) for h in collection.hooks.values())
        kind = "auth" if collection.auth else "base"
        click.echo(
            f"  ✓ {name} ({len(collection.fields)} fields, {hook_count} hooks, {kind})"
        )

    click.echo(click.style("\nAll metadata is valid.", fg="green", bold=True))
