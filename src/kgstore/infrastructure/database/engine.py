"""Store handle: one in-memory SQLite database mirrored to a file image.

The whole store lives in a single SQLite connection. At open time the
on-disk image is loaded with ``sqlite3.Connection.deserialize``; after
every committed mutation the full image is serialized and written back
(temp file + ``os.replace``). SQLAlchemy Core runs on top through a
``StaticPool``, so every statement shares that one connection.

A re-entrant lock serializes readers and writers inside the process.
Cross-process sharing of the image file is not supported.

pysqlite does not emit ``BEGIN`` itself in autocommit mode; the
``connect``/``begin`` listeners below follow SQLAlchemy's documented
recipe so DDL and DML both run inside real transactions.
"""

from __future__ import annotations

import logging
import os
import shutil
import sqlite3
import threading
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from kgstore.domain.errors import StorageFailure

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy import Connection, RootTransaction
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
    dbapi_conn.isolation_level = None
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _emit_begin(conn: Connection) -> None:
    conn.exec_driver_sql("BEGIN")


def _preserve_corrupt_image(path: Path) -> Path | None:
    """Copy an unreadable image aside so later exports cannot destroy it."""
    stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S")
    target = path.with_name(f"{path.name}.corrupt-{stamp}")
    try:
        shutil.copy2(path, target)
    except OSError:
        logger.warning("Failed to preserve unreadable image %s", path, exc_info=True)
        return None
    return target


def load_image(path: Path | None) -> sqlite3.Connection:
    """Return an in-memory connection holding the image at *path*.

    A missing or empty file yields an empty database. An unreadable image
    is logged, copied to ``<name>.corrupt-<timestamp>``, and replaced by an
    empty database: startup favours availability over the damaged data.
    """
    raw = sqlite3.connect(":memory:", check_same_thread=False)
    if path is None or not path.is_file():
        return raw

    data = path.read_bytes()
    if not data:
        return raw

    try:
        raw.deserialize(data)
        raw.execute("SELECT count(*) FROM sqlite_master").fetchone()
    except sqlite3.DatabaseError:
        raw.close()
        preserved = _preserve_corrupt_image(path)
        logger.warning(
            "Unreadable store image %s, starting with an empty store (original kept at %s)",
            path,
            preserved,
        )
        return sqlite3.connect(":memory:", check_same_thread=False)
    return raw


class StoreHandle:
    """Process-wide handle over the embedded database.

    Created by :meth:`open`, released by :meth:`close`. Readers use
    :meth:`connect`; writers use :meth:`transaction`, which commits and
    exports the image on success and rolls back on any error.
    """

    def __init__(self, raw: sqlite3.Connection, path: Path | None) -> None:
        self._raw: sqlite3.Connection | None = raw
        self._path = path
        self._lock = threading.RLock()
        self._in_transaction = False

        engine = create_engine("sqlite://", creator=lambda: raw, poolclass=StaticPool)
        event.listen(engine, "connect", _set_sqlite_pragma)
        event.listen(engine, "begin", _emit_begin)
        self._engine: Engine | None = engine

    @classmethod
    def open(cls, path: Path | None) -> StoreHandle:
        """Open the image at *path* (created on first export); None keeps it in memory."""
        if path is not None:
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise StorageFailure(f"Cannot create directory for {path}: {exc}") from exc
        return cls(load_image(path), path)

    @property
    def path(self) -> Path | None:
        """Location of the on-disk image, or None for a memory-only store."""
        return self._path

    @property
    def closed(self) -> bool:
        return self._engine is None

    @property
    def engine(self) -> Engine:
        """The SQLAlchemy engine bound to the single connection."""
        if self._engine is None:
            raise StorageFailure("Store has been closed")
        return self._engine

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        """Serialized read access; nothing is committed."""
        with self._lock, self.engine.connect() as conn:
            yield conn

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Scoped write transaction.

        Commits only when the block completes normally, then exports the
        image. Any exception rolls back; SQLAlchemy errors surface as
        :class:`StorageFailure`, store errors propagate unchanged.
        Transactions never nest.
        """
        with self._lock:
            if self._in_transaction:
                raise StorageFailure("Nested transactions are not supported")
            self._in_transaction = True
            try:
                with self.engine.connect() as conn:
                    trans = conn.begin()
                    try:
                        yield conn
                    except SQLAlchemyError as exc:
                        self._rollback_quietly(trans)
                        raise StorageFailure(f"Database write failed: {exc}") from exc
                    except BaseException:
                        self._rollback_quietly(trans)
                        raise
                    try:
                        trans.commit()
                    except SQLAlchemyError as exc:
                        self._rollback_quietly(trans)
                        raise StorageFailure(f"Commit failed: {exc}") from exc
            finally:
                self._in_transaction = False
            self.flush()

    @staticmethod
    def _rollback_quietly(trans: RootTransaction) -> None:
        # The primary error is already propagating; a failed rollback
        # must not replace it.
        try:
            trans.rollback()
        except SQLAlchemyError:
            logger.warning("Rollback failed", exc_info=True)

    def export_image(self) -> bytes:
        """Serialize the full database image."""
        with self._lock:
            if self._raw is None:
                raise StorageFailure("Store has been closed")
            return self._raw.serialize()

    def flush(self) -> None:
        """Write the current image to disk (no-op for memory-only stores)."""
        if self._path is None:
            return
        image = self.export_image()
        tmp_path = self._path.with_name(f"{self._path.name}.tmp")
        try:
            tmp_path.write_bytes(image)
            os.replace(tmp_path, self._path)
        except OSError as exc:
            raise StorageFailure(f"Failed to write store image {self._path}: {exc}") from exc
        logger.debug("Exported store image to %s (%d bytes)", self._path, len(image))

    def close(self) -> None:
        """Release the connection. Safe to call twice."""
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()
                self._engine = None
            if self._raw is not None:
                self._raw.close()
                self._raw = None


