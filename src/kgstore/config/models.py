"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, kgstore.toml only contains
overrides. An empty or missing file is a valid configuration.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class StoreConfig(BaseModel):
    """[store] section.

    Attributes:
        data_dir: Directory holding the image; relative paths resolve
            against the directory of kgstore.toml (or the CWD).
        database_name: File name of the image inside *data_dir*.
        database_path: Explicit image path; wins over the two above.
        seed_initial_data: Seed an empty default graph on initialization.
    """

    model_config = {"frozen": True}

    data_dir: Path = Path("data")
    database_name: str = "graph.db"
    database_path: Path | None = None
    seed_initial_data: bool = True


class GraphsConfig(BaseModel):
    """[graphs] section."""

    model_config = {"frozen": True}

    default_name: str = Field(default="Main", min_length=1)
    copy_name_prefix: str = Field(default="Graph", min_length=1)

