"""Tests for the store handle: image loading, transactions, export."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest
from sqlalchemy import text

from kgstore.domain.errors import NotFound, StorageFailure
from kgstore.infrastructure.database.engine import StoreHandle, load_image


def _create_table(handle: StoreHandle) -> None:
    with handle.transaction() as conn:
        conn.execute(text("CREATE TABLE items (id TEXT PRIMARY KEY)"))


def _count(handle: StoreHandle) -> int:
    with handle.connect() as conn:
        return int(conn.execute(text("SELECT count(*) FROM items")).scalar_one())


class TestLoadImage:
    def test_missing_file_gives_empty_database(self, tmp_path: Path) -> None:
        raw = load_image(tmp_path / "absent.db")
        assert raw.execute("SELECT count(*) FROM sqlite_master").fetchone() == (0,)
        raw.close()

    def test_empty_file_gives_empty_database(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.db"
        path.write_bytes(b"")
        raw = load_image(path)
        assert raw.execute("SELECT count(*) FROM sqlite_master").fetchone() == (0,)
        raw.close()

    def test_corrupt_image_is_preserved_and_replaced(self, tmp_path: Path) -> None:
        path = tmp_path / "graph.db"
        garbage = b"this is not a sqlite database" * 200
        path.write_bytes(garbage)

        raw = load_image(path)
        assert raw.execute("SELECT count(*) FROM sqlite_master").fetchone() == (0,)
        raw.close()

        preserved = list(tmp_path.glob("graph.db.corrupt-*"))
        assert len(preserved) == 1
        assert preserved[0].read_bytes() == garbage
        assert path.read_bytes() == garbage

    def test_loads_existing_image(self, tmp_path: Path) -> None:
        path = tmp_path / "graph.db"
        source = sqlite3.connect(path)
        source.execute("CREATE TABLE items (id TEXT PRIMARY KEY)")
        source.execute("INSERT INTO items VALUES ('a')")
        source.commit()
        source.close()

        raw = load_image(path)
        assert raw.execute("SELECT id FROM items").fetchall() == [("a",)]
        raw.close()


class TestTransaction:
    def test_commit_exports_image(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "graph.db"
        handle = StoreHandle.open(path)
        _create_table(handle)
        with handle.transaction() as conn:
            conn.execute(text("INSERT INTO items VALUES ('a')"))
        handle.close()

        reopened = StoreHandle.open(path)
        assert _count(reopened) == 1
        reopened.close()

    def test_error_rolls_back_and_propagates(self, tmp_path: Path) -> None:
        handle = StoreHandle.open(tmp_path / "graph.db")
        _create_table(handle)
        with pytest.raises(NotFound), handle.transaction() as conn:
            conn.execute(text("INSERT INTO items VALUES ('a')"))
            raise NotFound("missing")
        assert _count(handle) == 0
        handle.close()

    def test_database_error_becomes_storage_failure(self, tmp_path: Path) -> None:
        handle = StoreHandle.open(tmp_path / "graph.db")
        _create_table(handle)
        with pytest.raises(StorageFailure), handle.transaction() as conn:
            conn.execute(text("INSERT INTO items VALUES ('a')"))
            conn.execute(text("INSERT INTO items VALUES ('a')"))
        assert _count(handle) == 0
        handle.close()

    def test_rolled_back_write_is_not_exported(self, tmp_path: Path) -> None:
        path = tmp_path / "graph.db"
        handle = StoreHandle.open(path)
        _create_table(handle)
        before = path.read_bytes()
        with pytest.raises(RuntimeError), handle.transaction() as conn:
            conn.execute(text("INSERT INTO items VALUES ('a')"))
            raise RuntimeError("boom")
        assert path.read_bytes() == before
        handle.close()

    def test_ddl_is_transactional(self, tmp_path: Path) -> None:
        handle = StoreHandle.open(tmp_path / "graph.db")
        with pytest.raises(RuntimeError), handle.transaction() as conn:
            conn.execute(text("CREATE TABLE items (id TEXT PRIMARY KEY)"))
            raise RuntimeError("boom")
        with handle.connect() as conn:
            names = conn.execute(text("SELECT name FROM sqlite_master")).scalars().all()
        assert "items" not in names
        handle.close()

    def test_nested_transaction_refused(self, tmp_path: Path) -> None:
        handle = StoreHandle.open(tmp_path / "graph.db")
        with pytest.raises(StorageFailure, match="Nested"), handle.transaction():
            with handle.transaction():
                pass
        handle.close()

    def test_foreign_keys_enabled(self, tmp_path: Path) -> None:
        handle = StoreHandle.open(tmp_path / "graph.db")
        with handle.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1
        handle.close()


class TestMemoryOnly:
    def test_no_path_writes_nothing(self, tmp_path: Path) -> None:
        handle = StoreHandle.open(None)
        _create_table(handle)
        assert handle.path is None
        assert list(tmp_path.iterdir()) == []
        handle.close()


class TestClose:
    def test_close_is_idempotent(self, tmp_path: Path) -> None:
        handle = StoreHandle.open(tmp_path / "graph.db")
        handle.close()
        handle.close()
        assert handle.closed

    def test_use_after_close(self, tmp_path: Path) -> None:
        handle = StoreHandle.open(tmp_path / "graph.db")
        handle.close()
        with pytest.raises(StorageFailure):
            handle.export_image()
        with pytest.raises(StorageFailure), handle.connect():
            pass
