"""Access to the table of disks backing OSDs on each cluster member."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from microceph.database.core import ConflictError, NotFoundError, StatusError

_SELECT = (
    "SELECT disks.id, core_cluster_members.name AS member, disks.path FROM disks "
    "JOIN core_cluster_members ON disks.member_id = core_cluster_members.id"
)
_ORDER = "ORDER BY core_cluster_members.id, disks.path"
_MEMBER_ID = (
    "(SELECT core_cluster_members.id FROM core_cluster_members "
    "WHERE core_cluster_members.name = ?)"
)


@dataclass
class Disk:
    """A disk at ``path`` on cluster member ``member``; ``id`` is the OSD number."""

    id: int = 0
    member: str = ""
    path: str = ""


@dataclass
class DiskFilter:
    """Selects disks by member, or by member and path."""

    member: str | None = None
    path: str | None = None


def _clause(disk_filter: DiskFilter) -> tuple[str, list[str]]:
    if disk_filter.member is not None and disk_filter.path is not None:
        return (
            "( core_cluster_members.name = ? AND disks.path = ? )",
            [disk_filter.member, disk_filter.path],
        )
    if disk_filter.member is not None:
        return "( core_cluster_members.name = ? )", [disk_filter.member]
    if disk_filter.path is None:
        raise ValueError("Cannot filter on empty DiskFilter")
    raise ValueError("No statement exists for the given Filter")


def get_disks(conn: sqlite3.Connection, *filters: DiskFilter) -> list[Disk]:
    """Return the disks matching any of ``filters``, or all disks when none are given."""
    clauses: list[str] = []
    args: list[str] = []
    for disk_filter in filters:
        clause, clause_args = _clause(disk_filter)
        clauses.append(clause)
        args.extend(clause_args)

    query = _SELECT
    if clauses:
        query += " WHERE " + " OR ".join(clauses)
    query += " " + _ORDER
    return [Disk(id=row[0], member=row[1], path=row[2]) for row in conn.execute(query, args)]


def get_disk(conn: sqlite3.Connection, member: str, path: str) -> Disk:
    """Return the disk at ``path`` on ``member``."""
    objects = get_disks(conn, DiskFilter(member=member, path=path))
    if not objects:
        raise NotFoundError("Disk not found")
    if len(objects) > 1:
        raise StatusError('More than one "disks" entry matches')
    return objects[0]


def get_disk_id(conn: sqlite3.Connection, member: str, path: str) -> int:
    """Return the row ID of the disk at ``path`` on ``member``."""
    row = conn.execute(
        "SELECT disks.id FROM disks "
        "JOIN core_cluster_members ON disks.member_id = core_cluster_members.id "
        "WHERE core_cluster_members.name = ? AND disks.path = ?",
        (member, path),
    ).fetchone()
    if row is None:
        raise NotFoundError("Disk not found")
    return row[0]


def disk_exists(conn: sqlite3.Connection, member: str, path: str) -> bool:
    """Tell whether a disk at ``path`` on ``member`` exists."""
    try:
        get_disk_id(conn, member, path)
    except NotFoundError:
        return False
    return True


def create_disk(conn: sqlite3.Connection, disk: Disk) -> int:
    """Insert ``disk`` and return its new row ID."""
    if disk_exists(conn, disk.member, disk.path):
        raise ConflictError('This "disks" entry already exists')
    cursor = conn.execute(
        f"INSERT INTO disks (member_id, path) VALUES ({_MEMBER_ID}, ?)",
        (disk.member, disk.path),
    )
    return cursor.lastrowid


def delete_disk(conn: sqlite3.Connection, member: str, path: str) -> None:
    """Delete the disk at ``path`` on ``member``."""
    cursor = conn.execute(
        f"DELETE FROM disks WHERE member_id = {_MEMBER_ID} AND path = ?", (member, path)
    )
    if cursor.rowcount == 0:
        raise NotFoundError("Disk not found")
    if cursor.rowcount > 1:
        raise StatusError(f"Query deleted {cursor.rowcount} Disk rows instead of 1")


def delete_disks(conn: sqlite3.Connection, member: str) -> None:
    """Delete every disk of ``member``."""
    conn.execute(f"DELETE FROM disks WHERE member_id = {_MEMBER_ID}", (member,))


def update_disk(conn: sqlite3.Connection, member: str, path: str, disk: Disk) -> None:
    """Replace the disk at ``path`` on ``member`` by the fields of ``disk``."""
    row_id = get_disk_id(conn, member, path)
    cursor = conn.execute(
        f"UPDATE disks SET member_id = {_MEMBER_ID}, path = ? WHERE id = ?",
        (disk.member, disk.path, row_id),
    )
    if cursor.rowcount != 1:
        raise StatusError(f"Query updated {cursor.rowcount} rows instead of 1")