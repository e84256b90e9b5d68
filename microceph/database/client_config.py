"""Access to the table of Ceph client configuration, per member or cluster wide."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from microceph.database.core import ConflictError, NotFoundError, StatusError

_SELECT = (
    "SELECT client_config.id, core_cluster_members.name AS host, "
    "client_config.key, client_config.value FROM client_config "
    "JOIN core_cluster_members ON client_config.member_id = core_cluster_members.id"
)
_ORDER = "ORDER BY core_cluster_members.id, client_config.key"
_MEMBER_ID = (
    "(SELECT core_cluster_members.id FROM core_cluster_members "
    "WHERE core_cluster_members.name = ?)"
)


@dataclass
class ClientConfigItem:
    """A client configuration ``key`` set to ``value`` for cluster member ``host``."""

    id: int = 0
    host: str = ""
    key: str = ""
    value: str = ""


@dataclass
class ClientConfigItemFilter:
    """Selects client configuration items by host, by key, or by both."""

    host: str | None = None
    key: str | None = None


def _clause(item_filter: ClientConfigItemFilter) -> tuple[str, list[str]]:
    host, key = item_filter.host, item_filter.key
    if key is not None and host is not None:
        return (
            "( client_config.key = ? AND core_cluster_members.name = ? )",
            [key, host],
        )
    if key is not None:
        return "( client_config.key = ? )", [key]
    if host is not None:
        return "( core_cluster_members.name = ? )", [host]
    raise ValueError("Cannot filter on empty ClientConfigItemFilter")


def get_client_config_items(
    conn: sqlite3.Connection, *filters: ClientConfigItemFilter
) -> list[ClientConfigItem]:
    """Return member-bound items matching any of ``filters``, or all when none are given."""
    clauses: list[str] = []
    args: list[str] = []
    for item_filter in filters:
        clause, clause_args = _clause(item_filter)
        clauses.append(clause)
        args.extend(clause_args)

    query = _SELECT
    if clauses:
        query += " WHERE " + " OR ".join(clauses)
    query += " " + _ORDER
    return [
        ClientConfigItem(id=row[0], host=row[1], key=row[2], value=row[3])
        for row in conn.execute(query, args)
    ]


def get_client_config_item(conn: sqlite3.Connection, host: str, key: str) -> ClientConfigItem:
    """Return the item ``key`` of member ``host``."""
    objects = get_client_config_items(conn, ClientConfigItemFilter(host=host, key=key))
    if not objects:
        raise NotFoundError("ClientConfigItem not found")
    if len(objects) > 1:
        raise StatusError('More than one "client_config" entry matches')
    return objects[0]


def get_client_config_item_id(conn: sqlite3.Connection, host: str, key: str) -> int:
    """Return the row ID of the item ``key`` of member ``host``."""
    row = conn.execute(
        "SELECT client_config.id FROM client_config "
        "JOIN core_cluster_members ON client_config.member_id = core_cluster_members.id "
        "WHERE core_cluster_members.name = ? AND client_config.key = ?",
        (host, key),
    ).fetchone()
    if row is None:
        raise NotFoundError("ClientConfigItem not found")
    return row[0]


def client_config_item_exists(conn: sqlite3.Connection, host: str, key: str) -> bool:
    """Tell whether member ``host`` has an item ``key``."""
    try:
        get_client_config_item_id(conn, host, key)
    except NotFoundError:
        return False
    return True


def create_client_config_item(conn: sqlite3.Connection, item: ClientConfigItem) -> int:
    """Insert ``item`` and return its new row ID."""
    if client_config_item_exists(conn, item.host, item.key):
        raise ConflictError('This "client_config" entry already exists')
    cursor = conn.execute(
        f"INSERT INTO client_config (member_id, key, value) VALUES ({_MEMBER_ID}, ?, ?)",
        (item.host, item.key, item.value),
    )
    return cursor.lastrowid


def delete_client_config_item(conn: sqlite3.Connection, key: str, host: str) -> None:
    """Delete the item ``key`` of member ``host``."""
    cursor = conn.execute(
        f"DELETE FROM client_config WHERE key = ? AND member_id = {_MEMBER_ID}",
        (key, host),
    )
    if cursor.rowcount == 0:
        raise NotFoundError("ClientConfigItem not found")
    if cursor.rowcount > 1:
        raise StatusError(
            f"Query deleted {cursor.rowcount} ClientConfigItem rows instead of 1"
        )


def delete_client_config_items(conn: sqlite3.Connection, key: str) -> None:
    """Delete every item with ``key``, cluster-wide ones included."""
    conn.execute("DELETE FROM client_config WHERE key = ?", (key,))


def update_client_config_item(
    conn: sqlite3.Connection, host: str, key: str, item: ClientConfigItem
) -> None:
    """Replace the item ``key`` of member ``host`` by the fields of ``item``."""
    row_id = get_client_config_item_id(conn, host, key)
    cursor = conn.execute(
        f"UPDATE client_config SET member_id = {_MEMBER_ID}, key = ?, value = ? WHERE id = ?",
        (item.host, item.key, item.value, row_id),
    )
    if cursor.rowcount != 1:
        raise StatusError(f"Query updated {cursor.rowcount} rows instead of 1")