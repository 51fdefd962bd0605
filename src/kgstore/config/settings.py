"""Unified settings: CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  (CLI flags passed by Click)
  2. Env vars     (``KGSTORE_*`` prefix, ``__`` for nested sections)
  3. TOML file    (``kgstore.toml`` discovered via walk-up)
  4. Code defaults baked into the section models

The TOML path is handed to :class:`TomlSettingsSource` through a
thread-local while :meth:`KgSettings.from_cli` constructs the object,
because pydantic-settings builds its sources from the class.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from kgstore.config.discovery import find_config
from kgstore.config.models import GraphsConfig, StoreConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a discovered ``kgstore.toml``."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


_tls = threading.local()


class KgSettings(BaseSettings):
    """Settings for the store and its CLI.

    Attributes:
        root: Directory relative paths resolve against: the parent of
            ``kgstore.toml``, or the CWD when no file was found.
        config_path: The TOML file in use, if any.
        db_path: ``--db`` override of the image location.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "KGSTORE_",
        "env_nested_delimiter": "__",
    }

    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    db_path: Path | None = None

    # --- TOML sections ---
    store: StoreConfig = Field(default_factory=StoreConfig)
    graphs: GraphsConfig = Field(default_factory=GraphsConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        **cli_flags: Any,
    ) -> KgSettings:
        """Construct settings for one CLI invocation.

        Finds ``kgstore.toml`` (or uses *config_path*), takes *root* from
        the file's directory, and applies *cli_flags* on top. Flags left
        at None are dropped so they do not mask env or TOML values.
        """
        toml_path = find_config(root, explicit=config_path)
        resolved_root = root or (toml_path.parent if toml_path else Path.cwd())
        overrides = {key: value for key, value in cli_flags.items() if value is not None}

        _tls.toml_path = toml_path
        try:
            return cls(root=resolved_root, config_path=toml_path, **overrides)
        finally:
            _tls.toml_path = None

    def resolve_database_path(self, explicit: str | Path | None = None) -> Path:
        """Where the store image lives.

        *explicit* wins, then ``--db``, then ``[store] database_path``,
        then ``<data_dir>/<database_name>``. Relative paths are taken
        from :attr:`root`.
        """
        for candidate in (explicit, self.db_path, self.store.database_path):
            if candidate:
                return self._anchor(Path(candidate))
        return self._anchor(self.store.data_dir) / self.store.database_name

    def _anchor(self, path: Path) -> Path:
        path = path.expanduser()
        return path if path.is_absolute() else self.root / path
