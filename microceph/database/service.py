"""Access to the table of Ceph services running on each cluster member."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from microceph.database.core import ConflictError, NotFoundError, StatusError

_SELECT = (
    "SELECT services.id, core_cluster_members.name AS member, services.service FROM services "
    "JOIN core_cluster_members ON services.member_id = core_cluster_members.id"
)
_ORDER = "ORDER BY core_cluster_members.id, services.service"
_MEMBER_ID = (
    "(SELECT core_cluster_members.id FROM core_cluster_members "
    "WHERE core_cluster_members.name = ?)"
)


@dataclass
class Service:
    """A Ceph service (mon, mgr, mds, ...) running on cluster member ``member``."""

    id: int = 0
    member: str = ""
    service: str = ""


@dataclass
class ServiceFilter:
    """Selects services by member, by service name, or by both."""

    member: str | None = None
    service: str | None = None


def _clause(service_filter: ServiceFilter) -> tuple[str, list[str]]:
    member, service = service_filter.member, service_filter.service
    if member is not None and service is not None:
        return (
            "( core_cluster_members.name = ? AND services.service = ? )",
            [member, service],
        )
    if service is not None:
        return "( services.service = ? )", [service]
    if member is not None:
        return "( core_cluster_members.name = ? )", [member]
    raise ValueError("Cannot filter on empty ServiceFilter")


def get_services(conn: sqlite3.Connection, *filters: ServiceFilter) -> list[Service]:
    """Return the services matching any of ``filters``, or all services when none are given."""
    clauses: list[str] = []
    args: list[str] = []
    for service_filter in filters:
        clause, clause_args = _clause(service_filter)
        clauses.append(clause)
        args.extend(clause_args)

    query = _SELECT
    if clauses:
        query += " WHERE " + " OR ".join(clauses)
    query += " " + _ORDER
    return [
        Service(id=row[0], member=row[1], service=row[2])
        for row in conn.execute(query, args)
    ]


def get_service(conn: sqlite3.Connection, member: str, service: str) -> Service:
    """Return the ``service`` record of ``member``."""
    objects = get_services(conn, ServiceFilter(member=member, service=service))
    if not objects:
        raise NotFoundError("Service not found")
    if len(objects) > 1:
        raise StatusError('More than one "services" entry matches')
    return objects[0]


def get_service_id(conn: sqlite3.Connection, member: str, service: str) -> int:
    """Return the row ID of the ``service`` record of ``member``."""
    row = conn.execute(
        "SELECT services.id FROM services "
        "JOIN core_cluster_members ON services.member_id = core_cluster_members.id "
        "WHERE core_cluster_members.name = ? AND services.service = ?",
        (member, service),
    ).fetchone()
    if row is None:
        raise NotFoundError("Service not found")
    return row[0]


def service_exists(conn: sqlite3.Connection, member: str, service: str) -> bool:
    """Tell whether ``member`` has a ``service`` record."""
    try:
        get_service_id(conn, member, service)
    except NotFoundError:
        return False
    return True


def create_service(conn: sqlite3.Connection, service: Service) -> int:
    """Insert ``service`` and return its new row ID."""
    if service_exists(conn, service.member, service.service):
        raise ConflictError('This "services" entry already exists')
    cursor = conn.execute(
        f"INSERT INTO services (member_id, service) VALUES ({_MEMBER_ID}, ?)",
        (service.member, service.service),
    )
    return cursor.lastrowid


def delete_service(conn: sqlite3.Connection, member: str, service: str) -> None:
    """Delete the ``service`` record of ``member``."""
    cursor = conn.execute(
        f"DELETE FROM services WHERE member_id = {_MEMBER_ID} AND service = ?",
        (member, service),
    )
    if cursor.rowcount == 0:
        raise NotFoundError("Service not found")
    if cursor.rowcount > 1:
        raise StatusError(f"Query deleted {cursor.rowcount} Service rows instead of 1")


def delete_services(conn: sqlite3.Connection, member: str) -> None:
    """Delete every service record of ``member``."""
    conn.execute(f"DELETE FROM services WHERE member_id = {_MEMBER_ID}", (member,))


def update_service(conn: sqlite3.Connection, member: str, service: str, obj: Service) -> None:
    """Replace the ``service`` record of ``member`` by the fields of ``obj``."""
    row_id = get_service_id(conn, member, service)
    cursor = conn.execute(
        f"UPDATE services SET member_id = {_MEMBER_ID}, service = ? WHERE id = ?",
        (obj.member, obj.service, row_id),
    )
    if cursor.rowcount != 1:
        raise StatusError(f"Query updated {cursor.rowcount} rows instead of 1")