"""Records of remote clusters and their local configuration files."""

from __future__ import annotations

import os
import sqlite3
from dataclasses import dataclass

from microceph.constants import get_path_const
from microceph.database.core import (
    CephState,
    ConflictError,
    NotFoundError,
    State,
    StatusError,
)

_SELECT = "SELECT remote.id, remote.name, remote.local_name FROM remote"
_ORDER = "ORDER BY remote.name"


@dataclass
class Remote:
    """A remote cluster known under ``name``; ``local_name`` is this cluster's name there."""

    id: int = 0
    name: str = ""
    local_name: str = ""


@dataclass
class RemoteFilter:
    """Selects remotes by name."""

    name: str | None = None


def _rewrap(err: StatusError, message: str) -> StatusError:
    """Build an error of the same kind and status as ``err`` with extra context."""
    return type(err)(f"{message}: {err}", err.status)


def get_remotes(conn: sqlite3.Connection, *filters: RemoteFilter) -> list[Remote]:
    """Return the remotes matching any of ``filters``, or all when none are given."""
    clauses: list[str] = []
    args: list[str] = []
    for remote_filter in filters:
        if remote_filter.name is None:
            raise ValueError("Cannot filter on empty RemoteFilter")
        clauses.append("( remote.name = ? )")
        args.append(remote_filter.name)

    query = _SELECT
    if clauses:
        query += " WHERE " + " OR ".join(clauses)
    query += " " + _ORDER
    return [
        Remote(id=row[0], name=row[1], local_name=row[2])
        for row in conn.execute(query, args)
    ]


def get_remote(conn: sqlite3.Connection, name: str) -> Remote:
    """Return the remote called ``name``."""
    objects = get_remotes(conn, RemoteFilter(name=name))
    if not objects:
        raise NotFoundError("Remote not found")
    if len(objects) > 1:
        raise StatusError('More than one "remote" entry matches')
    return objects[0]


def get_remote_id(conn: sqlite3.Connection, name: str) -> int:
    """Return the row ID of the remote called ``name``."""
    row = conn.execute("SELECT remote.id FROM remote WHERE remote.name = ?", (name,)).fetchone()
    if row is None:
        raise NotFoundError("Remote not found")
    return row[0]


def remote_exists(conn: sqlite3.Connection, name: str) -> bool:
    """Tell whether a remote called ``name`` exists."""
    try:
        get_remote_id(conn, name)
    except NotFoundError:
        return False
    return True


def create_remote(conn: sqlite3.Connection, remote: Remote) -> int:
    """Insert ``remote`` and return its new row ID."""
    if remote_exists(conn, remote.name):
        raise ConflictError('This "remote" entry already exists')
    cursor = conn.execute(
        "INSERT INTO remote (name, local_name) VALUES (?, ?)", (remote.name, remote.local_name)
    )
    return cursor.lastrowid


def delete_remote(conn: sqlite3.Connection, name: str) -> None:
    """Delete the remote called ``name``."""
    cursor = conn.execute("DELETE FROM remote WHERE name = ?", (name,))
    if cursor.rowcount == 0:
        raise NotFoundError("Remote not found")
    if cursor.rowcount > 1:
        raise StatusError(f"Query deleted {cursor.rowcount} Remote rows instead of 1")


def update_remote(conn: sqlite3.Connection, name: str, remote: Remote) -> None:
    """Replace the remote called ``name`` by the fields of ``remote``."""
    row_id = get_remote_id(conn, name)
    cursor = conn.execute(
        "UPDATE remote SET name = ?, local_name = ? WHERE id = ?",
        (remote.name, remote.local_name, row_id),
    )
    if cursor.rowcount != 1:
        raise StatusError(f"Query updated {cursor.rowcount} rows instead of 1")


def persist_remote_db(state: CephState, name: str, local_name: str) -> None:
    """Record a remote in the cluster database."""
    try:
        with state.cluster_state().database.transaction() as conn:
            create_remote(conn, Remote(name=name, local_name=local_name))
    except StatusError as err:
        raise _rewrap(err, f"failed to record remote {name}") from err


def get_remote_db(state: State, name: str) -> list[Remote]:
    """Fetch the remote called ``name``, or every remote when ``name`` is empty."""
    try:
        with state.database.transaction() as conn:
            if not name:
                return get_remotes(conn)
            return [get_remote(conn, name)]
    except StatusError as err:
        raise _rewrap(err, "failed to fetch remote") from err


def delete_remote_db(state: State, remote_name: str) -> None:
    """Remove a remote's record and its configuration and keyring files."""
    conf_path = get_path_const().conf_path
    try:
        with state.database.transaction() as conn:
            delete_remote(conn, remote_name)
    except StatusError as err:
        raise _rewrap(err, f"failed to delete remote {remote_name}") from err

    os.remove(os.path.join(conf_path, f"{remote_name}.conf"))
    os.remove(os.path.join(conf_path, f"{remote_name}.keyring"))