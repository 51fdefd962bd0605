"""AppContext: shared Click context for all commands.

Created once by the root group and passed to subcommands through
``@click.pass_obj``. Opens the graph store lazily so ``--help`` and
``--version`` never touch the database, and routes results to
stdout/stderr with the right exit code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from kgstore.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from kgstore.config.settings import KgSettings
    from kgstore.infrastructure.store import GraphStore
    from kgstore.services.result import ServiceResult


class AppContext:
    """State shared by every command of one CLI invocation."""

    def __init__(self, settings: KgSettings) -> None:
        self.settings = settings
        self._store: GraphStore | None = None

        from kgstore.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def store(self) -> GraphStore:
        """The graph store, initialized on first access.

        The store is opened unseeded; only ``init`` and ``GraphService.seed``
        load the reference dataset. Store errors at open time end the command with a rendered error.
        """
        if self._store is None:
            from kgstore.domain.errors import KgStoreError
            from kgstore.infrastructure.store import GraphStore
            from kgstore.services.base import BaseService

            try:
                self._store = GraphStore.initialize(settings=self.settings, seed=False)
            except KgStoreError as exc:
                self.emit(BaseService._failure("open_store", exc))
                raise
        return self._store

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
            self._store = None

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: stdout; warnings go to stderr in human mode so piped
          output stays clean.
        * Failure: stderr, exit code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
