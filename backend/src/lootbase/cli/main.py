"""lootbase CLI entry point."""

import logging

import click


@click.group()
@click.option(
    "--log-level",
    envvar="LOOTBASE_LOG_LEVEL",
    default="WARNING",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Root logger level.",
)
def cli(log_level: str):
    """lootbase — record-store hooks for group loot-split backends."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Register subcommand groups
from lootbase.cli.db_cmd import db  # noqa: E402
from lootbase.cli.hooks_cmd import hooks  # noqa: E402
from lootbase.cli.metadata_cmd import metadata  # noqa: E402

cli.add_command(db)
cli.add_command(hooks)
cli.add_command(metadata)
