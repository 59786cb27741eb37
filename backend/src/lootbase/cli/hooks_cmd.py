"""Hook CLI commands."""

import click

from lootbase.app import AppConfig, unbound_hook_warnings
from lootbase.handlers import register_builtin_hooks
from lootbase.hooks import HookRegistry
from lootbase.metadata.loader import MetadataLoader


@click.group()
def hooks():
    """Hook commands."""
    pass


@hooks.command("list")
def list_cmd():
    """Show registered hooks and where metadata binds them."""
    try:
        config = AppConfig.from_env()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    loader = MetadataLoader(config.metadata_path)
    try:
        loader.load_all()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    registry = HookRegistry()
    register_builtin_hooks(registry, config.membership_max_attempts)

    click.echo("Registered hooks:")
    for name in registry.list_registered():
        click.echo(f"  {name}")

    click.echo("\nBindings:")
    for collection_name in sorted(loader.list_collections()):
        collection = loader.get_collection(collection_name)
        for event, bound in collection.hooks.items():
            for h in bound:
                marker = "✓" if registry.is_registered(h.name) else "✗"
                click.echo(f"  {marker} {collection_name}/{event.value}: {h.name}")

    warnings = unbound_hook_warnings(loader, registry)
    for warning in warnings:
        click.echo(click.style(warning, fg="yellow"), err=True)
    if warnings:
        raise SystemExit(1)
