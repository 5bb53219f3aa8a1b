import pytest

from graphcache.keys import join_keys, key_of_entity, key_of_field


@pytest.mark.parametrize(
    "obj, expected",
    [
        ({"__typename": "Todo", "id": "1"}, "Todo:1"),
        ({"__typename": "Todo", "_id": "abc"}, "Todo:abc"),
        ({"__typename": "Todo", "id": 7, "_id": "ignored"}, "Todo:7"),
        ({"__typename": "Todo", "id": None, "_id": "x"}, "Todo:x"),
        ({"__typename": "Todo"}, None),
        ({"id": "1"}, None),
        ({"__typename": "", "id": "1"}, None),
        ({}, None),
        (None, None),
    ],
)
def test_key_of_entity(obj, expected):
    assert key_of_entity(obj) == expected


def test_key_of_entity_ignores_property_order():
    a = {"__typename": "User", "id": "1", "name": "x"}
    b = {"name": "x", "id": "1", "__typename": "User"}
    assert key_of_entity(a) == key_of_entity(b) == key_of_entity(a)


def test_key_of_field_without_arguments():
    assert key_of_field("todos") == "todos"
    assert key_of_field("todos", None) == "todos"
    assert key_of_field("todos", {}) == "todos"


def test_key_of_field_with_arguments():
    assert key_of_field("todos", {"first": 10}) == 'todos({"first":10})'


def test_key_of_field_is_order_independent():
    a = {"first": 10, "filter": {"done": True, "text": "a"}}
    b = {"filter": {"text": "a", "done": True}, "first": 10}
    assert key_of_field("todos", a) == key_of_field("todos", b)


def test_key_of_field_distinguishes_arguments():
    assert key_of_field("todos", {"first": 1}) != key_of_field("todos", {"first": 2})


def test_join_keys():
    assert join_keys("Todo:1", "text") == "Todo:1.text"
    assert join_keys("Query", 'todos({"first":1})') == 'Query.todos({"first":1})'
    # same field under different parents never shares a link key
    assert join_keys("User:1", "todos") != join_keys("User:2", "todos")
