"""
Tests for the id-keyed card merge.
"""

import copy

import pytest

from core.merge import card_key, merge_cards_by_id


def test_new_card_is_appended():
    result = merge_cards_by_id([], [{"id": "a", "name": "Alpha"}])

    assert result == [{"id": "a", "name": "Alpha"}]


def test_matching_card_gets_field_union():
    current = [{"id": "a", "name": "Alpha", "color": "red"}]

    result = merge_cards_by_id(current, [{"id": "a", "color": "blue"}])

    assert result == [{"id": "a", "name": "Alpha", "color": "blue"}]


def test_order_existing_first_then_new_in_incoming_order():
    current = [{"id": "b"}, {"id": "a"}]
    incoming = [{"id": "d"}, {"id": "a", "x": 1}, {"id": "c"}]

    result = merge_cards_by_id(current, incoming)

    assert [c["id"] for c in result] == ["b", "a", "d", "c"]
    assert result[1] == {"id": "a", "x": 1}


def test_ids_compared_as_strings():
    current = [{"id": 1, "name": "one"}]

    result = merge_cards_by_id(current, [{"id": "1", "extra": True}])

    assert len(result) == 1
    # Incoming fields win, including the id value itself
    assert result[0] == {"id": "1", "name": "one", "extra": True}


@pytest.mark.parametrize(
    "stored_id,incoming_id",
    [
        (1, 1.0),
        (1.0, "1"),
        (True, "true"),
        (False, "false"),
        (-3, -3.0),
    ],
)
def test_ids_compared_by_json_text(stored_id, incoming_id):
    result = merge_cards_by_id([{"id": stored_id, "n": "a"}], [{"id": incoming_id, "m": "b"}])

    assert result == [{"id": incoming_id, "n": "a", "m": "b"}]


def test_distinct_json_ids_stay_separate():
    result = merge_cards_by_id([{"id": 1}, {"id": True}], [{"id": 1.5}, {"id": "True"}])

    assert len(result) == 4


def test_anonymous_cards_are_dropped_from_both_sides():
    current = [{"name": "no id"}, {"id": None, "name": "null id"}, {"id": "a"}]
    incoming = [{"name": "also anonymous"}, "not a card", 42, {"id": "b"}]

    result = merge_cards_by_id(current, incoming)

    assert result == [{"id": "a"}, {"id": "b"}]


def test_falsy_ids_still_count():
    result = merge_cards_by_id([{"id": 0, "v": 1}], [{"id": "", "v": 2}, {"id": 0, "v": 3}])

    assert result == [{"id": 0, "v": 3}, {"id": "", "v": 2}]


def test_merge_is_shallow():
    current = [{"id": "a", "style": {"color": "red", "size": 2}}]

    result = merge_cards_by_id(current, [{"id": "a", "style": {"color": "blue"}}])

    assert result[0]["style"] == {"color": "blue"}


def test_duplicate_incoming_ids_apply_in_order():
    incoming = [{"id": "a", "v": 1, "keep": True}, {"id": "a", "v": 2}]

    result = merge_cards_by_id([], incoming)

    assert result == [{"id": "a", "v": 2, "keep": True}]


def test_inputs_are_not_mutated():
    current = [{"id": "a", "name": "Alpha"}]
    incoming = [{"id": "a", "name": "Changed"}]
    current_before = copy.deepcopy(current)
    incoming_before = copy.deepcopy(incoming)

    merge_cards_by_id(current, incoming)

    assert current == current_before
    assert incoming == incoming_before


@pytest.mark.parametrize(
    "current,incoming",
    [
        ([], []),
        ([{"id": "a", "n": 1}], [{"id": "a", "n": 2}, {"id": "b"}]),
        ([{"id": 1}, {"x": 1}], [{"id": "1", "y": 2}, {"z": 3}]),
    ],
)
def test_merge_is_idempotent(current, incoming):
    once = merge_cards_by_id(current, incoming)

    assert merge_cards_by_id(once, incoming) == once


def test_card_key():
    assert card_key({"id": 7}) == "7"
    assert card_key({"id": 7.0}) == "7"
    assert card_key({"id": 7.25}) == "7.25"
    assert card_key({"id": False}) == "false"
    assert card_key({"id": None}) is None
    assert card_key({}) is None
    assert card_key(["id"]) is None
