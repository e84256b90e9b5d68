"""Database handle, cluster state and status-carrying errors."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from http import HTTPStatus

from microceph.database.schema import apply_schema_extensions

_MEMBER_TABLES = ("internal_cluster_members", "core_cluster_members")


class StatusError(Exception):
    """An error carrying an HTTP status code."""

    status: int = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        if status is not None:
            self.status = status


class NotFoundError(StatusError):
    """The requested record does not exist."""

    status = HTTPStatus.NOT_FOUND


class ConflictError(StatusError):
    """The record to create already exists."""

    status = HTTPStatus.CONFLICT


class Database:
    """SQLite store holding cluster members and the schema extensions."""

    def __init__(self, path: str) -> None:
        self._conn = sqlite3.connect(path, isolation_level=None)
        self._conn.execute("PRAGMA foreign_keys = ON")
        with self.transaction() as conn:
            placeholders = ", ".join("?" for _ in _MEMBER_TABLES)
            found = conn.execute(
                f"SELECT name FROM sqlite_master WHERE name IN ({placeholders})",
                _MEMBER_TABLES,
            ).fetchall()
            if not found:
                conn.execute(
                    "CREATE TABLE core_cluster_members ("
                    "id INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL, "
                    "name TEXT NOT NULL, UNIQUE(name))"
                )
            current = conn.execute("PRAGMA user_version").fetchone()[0]
            latest = apply_schema_extensions(conn, current)
            if latest != current:
                conn.execute(f"PRAGMA user_version = {int(latest)}")

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run a block in a transaction; commit on success, roll back on error."""
        self._conn.execute("BEGIN")
        try:
            yield self._conn
        except BaseException:
            self._conn.execute("ROLLBACK")
            raise
        self._conn.execute("COMMIT")

    def close(self) -> None:
        """Close the underlying connection."""
        self._conn.close()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@dataclass
class State:
    """The local member's name and the cluster database."""

    name: str
    database: Database


@dataclass
class CephState:
    """Wrapper giving access to the cluster state."""

    state: State

    def cluster_state(self) -> State:
        """Return the wrapped cluster state."""
        return self.state