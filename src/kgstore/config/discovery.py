"""Config file discovery.

``kgstore.toml`` is found by walking up from the working directory, the
way git finds ``.git/``. ``--config`` and ``KGSTORE_CONFIG`` override the
walk; an override pointing at a missing file means "no config file",
never a fallback to discovery.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "kgstore.toml"
CONFIG_ENV_VAR = "KGSTORE_CONFIG"


def find_config(start: Path | None = None, *, explicit: str | Path | None = None) -> Path | None:
    """Return the config file to use, or None.

    Lookup order: *explicit* (the ``--config`` flag), ``KGSTORE_CONFIG``,
    then every directory from *start* (default: cwd) up to the root.
    """
    override = explicit or os.environ.get(CONFIG_ENV_VAR)
    if override:
        path = Path(override)
        return path if path.is_file() else None

    origin = (start or Path.cwd()).resolve()
    for directory in (origin, *origin.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
