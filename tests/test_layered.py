import pytest

from graphcache.layered import LayeredMap, make
from graphcache.types import MISSING


def test_make_returns_empty_map():
    m = make()
    assert isinstance(m, LayeredMap)
    assert m.base == {}
    assert m.layer_ids == []
    assert m.get("a") is MISSING


def test_base_set_and_delete():
    m = make()
    m.set("a", 1)
    assert m.get("a") == 1
    assert "a" in m

    m.set("a", MISSING)
    assert "a" not in m.base
    assert m.get("a") is MISSING


def test_layer_shadows_base_until_cleared():
    m = make()
    m.set("a", "v1")
    m.set("a", "v2", 1)

    assert m.get("a") == "v2"
    assert m.base["a"] == "v1"

    m.clear(1)
    assert m.get("a") == "v1"
    assert m.layer_ids == []


def test_newest_layer_wins():
    m = make()
    m.set("a", "base")
    m.set("a", "l1", 1)
    m.set("a", "l2", 2)

    assert m.layer_ids == [2, 1]
    assert m.get("a") == "l2"

    m.clear(2)
    assert m.get("a") == "l1"
    m.clear(1)
    assert m.get("a") == "base"


def test_reopening_a_layer_merges_and_keeps_order():
    m = make()
    m.set("a", 1, 1)
    m.set("b", 2, 2)
    m.set("c", 3, 1)

    assert m.layer_ids == [2, 1]
    assert dict(m.layer(1)) == {"a": 1, "c": 3}


def test_tombstone_shadows_older_values():
    m = make()
    m.set("a", "base")
    m.set("a", "l1", 1)
    m.set("a", MISSING, 2)

    assert m.get("a") is MISSING
    assert "a" not in m
    assert list(m.stack("a")) == [MISSING]

    m.clear(2)
    assert m.get("a") == "l1"


def test_stack_yields_newest_first():
    m = make()
    m.set("a", "base")
    m.set("a", "l1", 1)
    m.set("b", "only-l2", 2)
    m.set("a", "l2", 2)

    assert list(m.stack("a")) == ["l2", "l1", "base"]
    assert list(m.stack("b")) == ["only-l2"]
    assert list(m.stack("missing")) == []


def test_clear_is_idempotent_and_preserves_order():
    m = make()
    for layer_id in (1, 2, 3):
        m.set("k", layer_id, layer_id)

    m.clear(2)
    m.clear(2)
    m.clear(42)

    assert m.layer_ids == [3, 1]
    assert m.get("k") == 3


def test_layer_view_is_read_only():
    m = make()
    m.set("a", 1, 1)
    view = m.layer(1)
    with pytest.raises(TypeError):
        view["b"] = 2  # type: ignore[index]
    assert dict(m.layer(99)) == {}
