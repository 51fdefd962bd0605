"""Command: store initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from kgstore.commands._base import KgCommand

if TYPE_CHECKING:
    from kgstore.commands._context import AppContext

_INIT_EXAMPLES = """\
  kgstore init
  kgstore init --no-seed
  kgstore --db /var/lib/kgstore/graph.db init"""


@click.command("init", cls=KgCommand, examples=_INIT_EXAMPLES)
@click.option("--no-seed", is_flag=True, help="Do not seed an empty default graph.")
@click.pass_obj
def init_cmd(app: AppContext, no_seed: bool) -> None:
    """Create or migrate the store image and the default graph.

    Without --no-seed, seeding follows [store] seed_initial_data.
    """
    from kgstore.services.init import InitService

    app.emit(InitService.init_store(app.settings, seed=False if no_seed else None))
