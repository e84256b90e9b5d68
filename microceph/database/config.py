"""Access to the cluster-wide Ceph configuration table."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from microceph.database.core import ConflictError, NotFoundError, StatusError

_SELECT = "SELECT config.id, config.key, config.value FROM config"
_ORDER = "ORDER BY config.key"


@dataclass
class ConfigItem:
    """One Ceph configuration key and its value."""

    id: int = 0
    key: str = ""
    value: str = ""


@dataclass
class ConfigItemFilter:
    """Selects configuration items by key."""

    key: str | None = None


def get_config_items(conn: sqlite3.Connection, *filters: ConfigItemFilter) -> list[ConfigItem]:
    """Return the items matching any of ``filters``, or all items when none are given."""
    clauses: list[str] = []
    args: list[str] = []
    for item_filter in filters:
        if item_filter.key is None:
            raise ValueError("Cannot filter on empty ConfigItemFilter")
        clauses.append("( config.key = ? )")
        args.append(item_filter.key)

    query = _SELECT
    if clauses:
        query += " WHERE " + " OR ".join(clauses)
    query += " " + _ORDER
    return [
        ConfigItem(id=row[0], key=row[1], value=row[2])
        for row in conn.execute(query, args)
    ]


def get_config_item(conn: sqlite3.Connection, key: str) -> ConfigItem:
    """Return the item with ``key``."""
    objects = get_config_items(conn, ConfigItemFilter(key=key))
    if not objects:
        raise NotFoundError("ConfigItem not found")
    if len(objects) > 1:
        raise StatusError('More than one "config" entry matches')
    return objects[0]


def get_config_item_id(conn: sqlite3.Connection, key: str) -> int:
    """Return the row ID of the item with ``key``."""
    row = conn.execute("SELECT config.id FROM config WHERE config.key = ?", (key,)).fetchone()
    if row is None:
        raise NotFoundError("ConfigItem not found")
    return row[0]


def config_item_exists(conn: sqlite3.Connection, key: str) -> bool:
    """Tell whether an item with ``key`` exists."""
    try:
        get_config_item_id(conn, key)
    except NotFoundError:
        return False
    return True


def create_config_item(conn: sqlite3.Connection, item: ConfigItem) -> int:
    """Insert ``item`` and return its new row ID."""
    if config_item_exists(conn, item.key):
        raise ConflictError('This "config" entry already exists')
    cursor = conn.execute(
        "INSERT INTO config (key, value) VALUES (?, ?)", (item.key, item.value)
    )
    return cursor.lastrowid


def delete_config_item(conn: sqlite3.Connection, key: str) -> None:
    """Delete the item with ``key``."""
    cursor = conn.execute("DELETE FROM config WHERE key = ?", (key,))
    if cursor.rowcount == 0:
        raise NotFoundError("ConfigItem not found")
    if cursor.rowcount > 1:
        raise StatusError(f"Query deleted {cursor.rowcount} ConfigItem rows instead of 1")


def update_config_item(conn: sqlite3.Connection, key: str, item: ConfigItem) -> None:
    """Replace the item with ``key`` by the fields of ``item``."""
    row_id = get_config_item_id(conn, key)
    cursor = conn.execute(
        "UPDATE config SET key = ?, value = ? WHERE id = ?", (item.key, item.value, row_id)
    )
    if cursor.rowcount != 1:
        raise StatusError(f"Query updated {cursor.rowcount} rows instead of 1")