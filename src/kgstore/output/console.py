"""Rich Console factory and theme for kgstore output.

Consoles render into a StringIO buffer so formatting stays a pure
``ServiceResult -> str`` function. Rich drops color codes by itself when
the output is not a terminal (tests, pipes).
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

KG_THEME = Theme(
    {
        "kg.ok": "bold green",
        "kg.error": "bold red",
        "kg.warning": "bold yellow",
        "kg.op": "bold cyan",
        "kg.key": "dim",
        "kg.id": "bold blue",
        "kg.path": "dim",
        "kg.name": "bold",
        "kg.default": "green",
        "kg.count": "magenta",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console writing to an in-memory buffer.

    Args:
        no_color: Disable ANSI escape codes.
        width: Fixed width, for stable test output.
    """
    return Console(
        file=StringIO(),
        theme=KG_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Rendered text of a console made by :func:`create_console`."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
