from microceph.common.sets import Set


def test_keys_returns_all_keys():
    s = Set({"mon": None, "mgr": 1, "mds": "x"})
    assert sorted(s.keys()) == ["mds", "mgr", "mon"]


def test_keys_of_empty_set():
    assert Set().keys() == []


def test_subset_is_in_superset():
    sub = Set({"mon": None, "mgr": None})
    sup = Set({"mon": None, "mgr": None, "mds": None})
    assert sub.is_in(sup) is True
    assert sup.is_in(sub) is False


def test_empty_set_is_in_anything():
    assert Set().is_in(Set()) is True
    assert Set().is_in(Set({"a": None})) is True


def test_disjoint_sets():
    assert Set({"a": None}).is_in(Set({"b": None})) is False