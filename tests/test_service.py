from http import HTTPStatus

import pytest

from microceph.database.core import ConflictError, Database, NotFoundError
from microceph.database.service import (
    Service,
    ServiceFilter,
    create_service,
    delete_service,
    delete_services,
    get_service,
    get_service_id,
    get_services,
    service_exists,
    update_service,
)


@pytest.fixture
def db(tmp_path):
    database = Database(str(tmp_path / "cluster.db"))
    with database.transaction() as conn:
        for name in ("node1", "node2"):
            conn.execute("INSERT INTO core_cluster_members (name) VALUES (?)", (name,))
    yield database
    database.close()


def _pairs(services):
    return [(s.member, s.service) for s in services]


def test_create_and_get(db):
    with db.transaction() as conn:
        new_id = create_service(conn, Service(member="node1", service="mon"))
        found = get_service(conn, "node1", "mon")
        assert found.id == new_id
        assert (found.member, found.service) == ("node1", "mon")
        assert get_service_id(conn, "node1", "mon") == new_id


def test_create_duplicate_conflicts(db):
    with db.transaction() as conn:
        create_service(conn, Service(member="node1", service="mon"))
        with pytest.raises(ConflictError) as info:
            create_service(conn, Service(member="node1", service="mon"))
        assert info.value.status == HTTPStatus.CONFLICT
        assert len(get_services(conn)) == 1


def test_get_missing(db):
    with db.transaction() as conn:
        with pytest.raises(NotFoundError):
            get_service(conn, "node1", "mds")
        with pytest.raises(NotFoundError):
            get_service_id(conn, "node1", "mds")


def test_exists(db):
    with db.transaction() as conn:
        assert service_exists(conn, "node2", "mgr") is False
        create_service(conn, Service(member="node2", service="mgr"))
        assert service_exists(conn, "node2", "mgr") is True
        assert service_exists(conn, "node1", "mgr") is False


def test_ordering_by_member_then_service(db):
    with db.transaction() as conn:
        create_service(conn, Service(member="node2", service="mon"))
        create_service(conn, Service(member="node1", service="mon"))
        create_service(conn, Service(member="node1", service="mgr"))
        assert _pairs(get_services(conn)) == [
            ("node1", "mgr"),
            ("node1", "mon"),
            ("node2", "mon"),
        ]


def test_filters(db):
    with db.transaction() as conn:
        create_service(conn, Service(member="node1", service="mon"))
        create_service(conn, Service(member="node1", service="mgr"))
        create_service(conn, Service(member="node2", service="mon"))
        assert _pairs(get_services(conn, ServiceFilter(member="node1"))) == [
            ("node1", "mgr"),
            ("node1", "mon"),
        ]
        assert _pairs(get_services(conn, ServiceFilter(service="mon"))) == [
            ("node1", "mon"),
            ("node2", "mon"),
        ]
        assert _pairs(get_services(conn, ServiceFilter(member="node2", service="mon"))) == [
            ("node2", "mon"),
        ]
        combined = get_services(
            conn,
            ServiceFilter(member="node2"),
            ServiceFilter(member="node1", service="mgr"),
        )
        assert _pairs(combined) == [("node1", "mgr"), ("node2", "mon")]


def test_empty_filter_rejected(db):
    with db.transaction() as conn:
        with pytest.raises(ValueError, match="Cannot filter on empty ServiceFilter"):
            get_services(conn, ServiceFilter())


def test_delete_service(db):
    with db.transaction() as conn:
        create_service(conn, Service(member="node1", service="mon"))
        delete_service(conn, "node1", "mon")
        assert get_services(conn) == []
        with pytest.raises(NotFoundError):
            delete_service(conn, "node1", "mon")


def test_delete_services_of_member(db):
    with db.transaction() as conn:
        create_service(conn, Service(member="node1", service="mon"))
        create_service(conn, Service(member="node1", service="mgr"))
        create_service(conn, Service(member="node2", service="mds"))
        delete_services(conn, "node1")
        assert _pairs(get_services(conn)) == [("node2", "mds")]
        delete_services(conn, "node1")
        assert len(get_services(conn)) == 1


def test_update_service(db):
    with db.transaction() as conn:
        row_id = create_service(conn, Service(member="node1", service="mon"))
        update_service(conn, "node1", "mon", Service(member="node2", service="mgr"))
        assert service_exists(conn, "node1", "mon") is False
        moved = get_service(conn, "node2", "mgr")
        assert moved.id == row_id


def test_update_missing(db):
    with db.transaction() as conn:
        with pytest.raises(NotFoundError):
            update_service(conn, "node1", "rgw", Service(member="node1", service="mon"))


def test_rollback_on_error(db):
    with pytest.raises(ConflictError):
        with db.transaction() as conn:
            create_service(conn, Service(member="node1", service="mon"))
            create_service(conn, Service(member="node1", service="mon"))
    with db.transaction() as conn:
        assert get_services(conn) == []