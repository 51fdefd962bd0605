"""Tests for KgSettings: TOML source, env vars, CLI flags, path resolution."""

from __future__ import annotations

from pathlib import Path

import click
import pytest

from kgstore.config.settings import KgSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("KGSTORE_CONFIG", "KGSTORE_DB_PATH", "KGSTORE_ROOT", "KGSTORE_STORE__DATA_DIR"):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = KgSettings.from_cli(root=tmp_path)
        assert settings.root == tmp_path
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.store.database_name == "graph.db"
        assert settings.store.seed_initial_data is True
        assert settings.graphs.default_name == "Main"

    def test_frozen(self, tmp_path: Path) -> None:
        settings = KgSettings.from_cli(root=tmp_path)
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]


class TestTomlSource:
    def test_sparse_override(self, tmp_path: Path) -> None:
        (tmp_path / "kgstore.toml").write_text(
            '[store]\ndatabase_name = "kg.sqlite"\n[graphs]\ncopy_name_prefix = "Draft"\n'
        )
        settings = KgSettings.from_cli(root=tmp_path)
        assert settings.store.database_name == "kg.sqlite"
        assert settings.store.data_dir == Path("data")
        assert settings.graphs.copy_name_prefix == "Draft"
        assert settings.graphs.default_name == "Main"

    def test_root_taken_from_config_dir(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "kgstore.toml").write_text("")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        settings = KgSettings.from_cli()

        assert settings.config_path == tmp_path / "kgstore.toml"
        assert settings.root == tmp_path
        assert settings.resolve_database_path() == tmp_path / "data" / "graph.db"

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "conf" / "custom.toml"
        custom.parent.mkdir()
        custom.write_text('[graphs]\ndefault_name = "Primary"\n')
        settings = KgSettings.from_cli(config_path=str(custom), root=tmp_path)
        assert settings.graphs.default_name == "Primary"
        assert settings.config_path == custom

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "kgstore.toml").write_text("[store\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            KgSettings.from_cli(root=tmp_path)


class TestPriority:
    def test_env_beats_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "kgstore.toml").write_text('[store]\ndata_dir = "from-toml"\n')
        monkeypatch.setenv("KGSTORE_STORE__DATA_DIR", "from-env")
        settings = KgSettings.from_cli(root=tmp_path)
        assert settings.store.data_dir == Path("from-env")

    def test_cli_flags_override(self, tmp_path: Path) -> None:
        settings = KgSettings.from_cli(root=tmp_path, json_output=True, quiet=True, verbose=True)
        assert settings.json_output is True
        assert settings.quiet is True
        assert settings.verbose is True

    def test_none_flags_do_not_mask_env(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("KGSTORE_DB_PATH", "env.db")
        settings = KgSettings.from_cli(root=tmp_path, db_path=None)
        assert settings.db_path == Path("env.db")


class TestResolveDatabasePath:
    def test_default(self, tmp_path: Path) -> None:
        settings = KgSettings.from_cli(root=tmp_path)
        assert settings.resolve_database_path() == tmp_path / "data" / "graph.db"

    def test_db_flag_relative_to_root(self, tmp_path: Path) -> None:
        settings = KgSettings.from_cli(root=tmp_path, db_path="other/kg.db")
        assert settings.resolve_database_path() == tmp_path / "other" / "kg.db"

    def test_configured_database_path(self, tmp_path: Path) -> None:
        absolute = tmp_path / "abs" / "graph.db"
        (tmp_path / "kgstore.toml").write_text(f'[store]\ndatabase_path = "{absolute}"\n')
        settings = KgSettings.from_cli(root=tmp_path)
        assert settings.resolve_database_path() == absolute

    def test_explicit_wins(self, tmp_path: Path) -> None:
        settings = KgSettings.from_cli(root=tmp_path, db_path="flag.db")
        assert settings.resolve_database_path("explicit.db") == tmp_path / "explicit.db"

    def test_db_flag_beats_configured_path(self, tmp_path: Path) -> None:
        (tmp_path / "kgstore.toml").write_text('[store]\ndatabase_path = "configured.db"\n')
        settings = KgSettings.from_cli(root=tmp_path, db_path="flag.db")
        assert settings.resolve_database_path() == tmp_path / "flag.db"
