import pytest

from microceph.database.client_config import (
    ClientConfigItem,
    ClientConfigItemFilter,
    client_config_item_exists,
    create_client_config_item,
    delete_client_config_item,
    delete_client_config_items,
    get_client_config_item,
    get_client_config_item_id,
    get_client_config_items,
    update_client_config_item,
)
from microceph.database.core import ConflictError, Database, NotFoundError


@pytest.fixture
def conn():
    database = Database(":memory:")
    with database.transaction() as connection:
        for name in ("node1", "node2"):
            connection.execute("INSERT INTO core_cluster_members (name) VALUES (?)", (name,))
        yield connection
    database.close()


def _add(conn, host, key, value):
    return create_client_config_item(conn, ClientConfigItem(host=host, key=key, value=value))


def _pairs(items):
    return [(item.host, item.key, item.value) for item in items]


def test_create_and_get_round_trip(conn):
    row_id = _add(conn, "node1", "rbd_cache", "true")
    item = get_client_config_item(conn, "node1", "rbd_cache")
    assert item == ClientConfigItem(id=row_id, host="node1", key="rbd_cache", value="true")
    assert get_client_config_item_id(conn, "node1", "rbd_cache") == row_id


def test_get_all_ordered_by_member_then_key(conn):
    _add(conn, "node2", "a_key", "1")
    _add(conn, "node1", "z_key", "2")
    _add(conn, "node1", "b_key", "3")
    assert _pairs(get_client_config_items(conn)) == [
        ("node1", "b_key", "3"),
        ("node1", "z_key", "2"),
        ("node2", "a_key", "1"),
    ]


def test_filters(conn):
    _add(conn, "node1", "k1", "a")
    _add(conn, "node1", "k2", "b")
    _add(conn, "node2", "k1", "c")

    by_key = get_client_config_items(conn, ClientConfigItemFilter(key="k1"))
    assert _pairs(by_key) == [("node1", "k1", "a"), ("node2", "k1", "c")]

    by_host = get_client_config_items(conn, ClientConfigItemFilter(host="node2"))
    assert _pairs(by_host) == [("node2", "k1", "c")]

    both = get_client_config_items(conn, ClientConfigItemFilter(host="node1", key="k2"))
    assert _pairs(both) == [("node1", "k2", "b")]


def test_multiple_filters_are_ored(conn):
    _add(conn, "node1", "k1", "a")
    _add(conn, "node1", "k2", "b")
    _add(conn, "node2", "k3", "c")
    items = get_client_config_items(
        conn, ClientConfigItemFilter(key="k2"), ClientConfigItemFilter(host="node2")
    )
    assert _pairs(items) == [("node1", "k2", "b"), ("node2", "k3", "c")]


def test_empty_filter_rejected(conn):
    with pytest.raises(ValueError, match="empty ClientConfigItemFilter"):
        get_client_config_items(conn, ClientConfigItemFilter())


def test_global_items_not_listed(conn):
    conn.execute(
        "INSERT INTO client_config (member_id, key, value) VALUES (NULL, ?, ?)", ("g", "v")
    )
    _add(conn, "node1", "g", "h")
    assert _pairs(get_client_config_items(conn, ClientConfigItemFilter(key="g"))) == [
        ("node1", "g", "h")
    ]


def test_get_missing(conn):
    with pytest.raises(NotFoundError):
        get_client_config_item(conn, "node1", "absent")
    with pytest.raises(NotFoundError):
        get_client_config_item_id(conn, "node1", "absent")


def test_exists(conn):
    _add(conn, "node1", "k", "v")
    assert client_config_item_exists(conn, "node1", "k") is True
    assert client_config_item_exists(conn, "node2", "k") is False


def test_create_duplicate_conflicts(conn):
    _add(conn, "node1", "k", "v")
    with pytest.raises(ConflictError):
        _add(conn, "node1", "k", "other")
    assert get_client_config_item(conn, "node1", "k").value == "v"


def test_delete_one(conn):
    _add(conn, "node1", "k", "v")
    _add(conn, "node2", "k", "w")
    delete_client_config_item(conn, "k", "node1")
    assert _pairs(get_client_config_items(conn)) == [("node2", "k", "w")]
    with pytest.raises(NotFoundError):
        delete_client_config_item(conn, "k", "node1")


def test_delete_many_by_key_includes_global(conn):
    conn.execute(
        "INSERT INTO client_config (member_id, key, value) VALUES (NULL, ?, ?)", ("k", "g")
    )
    _add(conn, "node1", "k", "v")
    _add(conn, "node2", "k", "w")
    _add(conn, "node2", "keep", "x")
    delete_client_config_items(conn, "k")
    (remaining,) = conn.execute("SELECT count(*) FROM client_config WHERE key = 'k'").fetchone()
    assert remaining == 0
    assert _pairs(get_client_config_items(conn)) == [("node2", "keep", "x")]


def test_delete_many_missing_key_is_fine(conn):
    _add(conn, "node1", "k", "v")
    delete_client_config_items(conn, "absent")
    assert _pairs(get_client_config_items(conn)) == [("node1", "k", "v")]


def test_update(conn):
    row_id = _add(conn, "node1", "k", "v")
    update_client_config_item(
        conn, "node1", "k", ClientConfigItem(host="node2", key="k2", value="new")
    )
    item = get_client_config_item(conn, "node2", "k2")
    assert item == ClientConfigItem(id=row_id, host="node2", key="k2", value="new")
    assert client_config_item_exists(conn, "node1", "k") is False


def test_update_missing(conn):
    with pytest.raises(NotFoundError):
        update_client_config_item(
            conn, "node1", "absent", ClientConfigItem(host="node1", key="x", value="y")
        )