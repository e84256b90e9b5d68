"""Schema extensions applied on top of the cluster member table."""

from __future__ import annotations

import sqlite3
from collections.abc import Callable, Iterable, Sequence

_ID_COLUMN = ("id", "INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL")
_MEMBER_COLUMN = ("member_id", "INTEGER NOT NULL")
_OPTIONAL_MEMBER_COLUMN = ("member_id", "INTEGER")
_CORE_MEMBERS = "core_cluster_members"
_CLIENT_CONFIG_INDEX = (
    "CREATE UNIQUE INDEX cc_index ON client_config(coalesce(member_id, 0), key)"
)


def _text(name: str) -> tuple[str, str]:
    return (name, "TEXT NOT NULL")


def _member_fk(members_table: str) -> str:
    return f'FOREIGN KEY (member_id) REFERENCES "{members_table}" (id) ON DELETE CASCADE'


def _create_table(
    name: str, columns: Iterable[tuple[str, str]], constraints: Iterable[str] = ()
) -> str:
    parts = [f"{column} {kind}" for column, kind in columns]
    parts.extend(constraints)
    return f"CREATE TABLE {name} ({', '.join(parts)})"


def _copy_rows(target: str, source: str, columns: Sequence[str], select: Sequence[str]) -> str:
    return (
        f"INSERT INTO {target} ({', '.join(columns)}) "
        f"SELECT {', '.join(select)} FROM {source}"
    )


def _swap(old: str, new: str) -> list[str]:
    return [f"DROP TABLE {old}", f"ALTER TABLE {new} RENAME TO {old}"]


def _run(conn: sqlite3.Connection, statements: Iterable[str]) -> None:
    for statement in statements:
        conn.execute(statement)


def _disks_table(name: str, members_table: str) -> str:
    return _create_table(
        name,
        [_ID_COLUMN, _MEMBER_COLUMN, _text("path")],
        [_member_fk(members_table), "UNIQUE(member_id, path)"],
    )


def _services_table(name: str, members_table: str) -> str:
    return _create_table(
        name,
        [_ID_COLUMN, _MEMBER_COLUMN, _text("service")],
        [_member_fk(members_table), "UNIQUE(member_id, service)"],
    )


def _client_config_table(name: str, members_table: str) -> str:
    return _create_table(
        name,
        [_ID_COLUMN, _OPTIONAL_MEMBER_COLUMN, _text("key"), _text("value")],
        [_member_fk(members_table)],
    )


def get_cluster_table_name(conn: sqlite3.Connection) -> str:
    """Return the name of the table recording cluster members."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE name IN (?, ?)",
        ("internal_cluster_members", _CORE_MEMBERS),
    ).fetchall()
    if len(rows) != 1 or not rows[0][0]:
        raise LookupError("no cluster members table found")
    return rows[0][0]


def schema_update_1(conn: sqlite3.Connection) -> None:
    """Create the config, disks and services tables."""
    members = get_cluster_table_name(conn)
    _run(
        conn,
        [
            _create_table(
                "config", [_ID_COLUMN, _text("key"), _text("value")], ["UNIQUE(key)"]
            ),
            _create_table(
                "disks",
                [_ID_COLUMN, _MEMBER_COLUMN, _text("path"), ("osd", "INTEGER NOT NULL")],
                [_member_fk(members), "UNIQUE(member_id, path)", "UNIQUE(osd)"],
            ),
            _services_table("services", members),
        ],
    )


def schema_update_2(conn: sqlite3.Connection) -> None:
    """Create the client config table."""
    members = get_cluster_table_name(conn)
    _run(conn, [_client_config_table("client_config", members), _CLIENT_CONFIG_INDEX])


def schema_update_3(conn: sqlite3.Connection) -> None:
    """Rebuild the disks table keyed by OSD number."""
    members = get_cluster_table_name(conn)
    _run(
        conn,
        [
            _disks_table("disks2", members),
            _copy_rows("disks2", "disks", ("id", "member_id", "path"), ("osd", "member_id", "path")),
            *_swap("disks", "disks2"),
        ],
    )


def schema_update_4(conn: sqlite3.Connection) -> None:
    """Point every member reference at core_cluster_members."""
    disk_columns = ("id", "member_id", "path")
    config_columns = ("id", "member_id", "key", "value")
    service_columns = ("id", "member_id", "service")
    _run(
        conn,
        [
            _disks_table("disks2", _CORE_MEMBERS),
            _copy_rows("disks2", "disks", disk_columns, disk_columns),
            *_swap("disks", "disks2"),
            "DROP INDEX IF EXISTS cc_index",
            _client_config_table("client_config_new", _CORE_MEMBERS),
            _CLIENT_CONFIG_INDEX,
            _copy_rows("client_config_new", "client_config", config_columns, config_columns),
            *_swap("client_config", "client_config_new"),
            _services_table("services_new", _CORE_MEMBERS),
            _copy_rows("services_new", "services", service_columns, service_columns),
            *_swap("services", "services_new"),
        ],
    )


def schema_update_5(conn: sqlite3.Connection) -> None:
    """Create the remote table."""
    _run(
        conn,
        [
            _create_table(
                "remote",
                [_ID_COLUMN, _text("name"), _text("local_name")],
                ["UNIQUE(name)"],
            )
        ],
    )


SCHEMA_EXTENSIONS: tuple[Callable[[sqlite3.Connection], None], ...] = (
    schema_update_1,
    schema_update_2,
    schema_update_3,
    schema_update_4,
    schema_update_5,
)


def apply_schema_extensions(conn: sqlite3.Connection, start: int) -> int:
    """Apply the extensions from index ``start`` on; return the resulting version."""
    for update in SCHEMA_EXTENSIONS[start:]:
        update(conn)
    return len(SCHEMA_EXTENSIONS)