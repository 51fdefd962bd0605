"""Output mode selection for ServiceResult.

``--json`` emits the result model as JSON, ``--quiet`` a minimal line
(or bare ids for listings), and the default is Rich-rendered text.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

from kgstore.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from kgstore.services.result import ServiceResult


class OutputSettings(BaseModel):
    """Rendering flags taken from the global CLI options."""

    model_config = {"frozen": True}

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format *result* according to *settings* (human text by default)."""
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
