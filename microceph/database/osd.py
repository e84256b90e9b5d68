"""OSD-level queries over the disks table."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from microceph.database.core import NotFoundError, State
from microceph.database.disk import Disk, delete_disk, get_disks

_COUNT_ALL = """
SELECT core_cluster_members.name AS member, count(disks.id) AS num_disks
  FROM disks
  JOIN core_cluster_members ON disks.member_id = core_cluster_members.id
  GROUP BY core_cluster_members.id
"""

_COUNT_EXCLUDE = """
SELECT core_cluster_members.name AS member, count(disks.id) AS num_disks
  FROM disks
  JOIN core_cluster_members ON disks.member_id = core_cluster_members.id
  WHERE disks.id != ?
  GROUP BY core_cluster_members.id
"""


@dataclass
class MemberDisk:
    """Number of disks held by a cluster member."""

    member: str = ""
    num_disks: int = 0


def members_disk_count(conn: sqlite3.Connection, exclude: int) -> list[MemberDisk]:
    """Count disks per member having any, leaving out OSD ``exclude`` unless it is -1."""
    if exclude == -1:
        rows = conn.execute(_COUNT_ALL)
    else:
        rows = conn.execute(_COUNT_EXCLUDE, (exclude,))
    return [MemberDisk(member=row[0], num_disks=row[1]) for row in rows]


class MemberCounter:
    """Counts cluster members that hold at least one disk."""

    def count(self, state: State) -> int:
        """Return the number of members with at least one disk."""
        with state.database.transaction() as conn:
            return len(members_disk_count(conn, -1))

    def count_exclude(self, state: State, exclude: int) -> int:
        """Return the number of members with at least one disk other than OSD ``exclude``."""
        with state.database.transaction() as conn:
            return len(members_disk_count(conn, exclude))


class OSDQuery:
    """Queries on OSDs recorded in the cluster database."""

    def have_osd(self, state: State, osd: int) -> bool:
        """Tell whether OSD ``osd`` is recorded."""
        with state.database.transaction() as conn:
            (present,) = conn.execute(
                "SELECT count(*) FROM disks WHERE disks.id = ?", (osd,)
            ).fetchone()
        return present > 0

    def path(self, state: State, osd: int) -> str:
        """Return the device path of OSD ``osd``."""
        with state.database.transaction() as conn:
            row = conn.execute("SELECT disks.path FROM disks WHERE disks.id = ?", (osd,)).fetchone()
        if row is None:
            raise NotFoundError(f'Failed to get "osdPath" objects: no OSD {osd}')
        return row[0]

    def delete(self, state: State, osd: int) -> None:
        """Delete the record of OSD ``osd`` held by the local member."""
        path = self.path(state, osd)
        with state.database.transaction() as conn:
            delete_disk(conn, state.name, path)

    def list(self, state: State) -> list[Disk]:
        """Return every OSD record; ``id`` is the OSD number, ``member`` its location."""
        with state.database.transaction() as conn:
            return get_disks(conn)

    def update_path(self, state: State, osd: int, path: str) -> None:
        """Set the device path of OSD ``osd``."""
        with state.database.transaction() as conn:
            conn.execute("UPDATE disks SET path = ? WHERE disks.id = ?", (path, osd))


member_counter = MemberCounter()
osd_query = OSDQuery()