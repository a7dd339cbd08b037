"""recordguard CLI entry point."""

import click


@click.group()
def cli():
    """recordguard — declarative record validation CLI."""
    pass


# Register subcommand groups
from recordguard.cli.rules_cmd import rules  # noqa: E402

cli.add_command(rules)
