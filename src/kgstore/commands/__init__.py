"""Subcommand modules for kgstore.

register_commands() imports command modules lazily so ``kgstore --help``
stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the command groups and standalone commands on the root group."""
    from kgstore.commands.graphs import graphs
    from kgstore.commands.init_cmd import init_cmd
    from kgstore.commands.snapshot import snapshot

    cli.add_command(graphs)
    cli.add_command(snapshot)
    cli.add_command(init_cmd)
