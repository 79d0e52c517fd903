"""Tests for Action, create_action and bind_action_creators."""

import pytest
from immutables import Map

from reduxpy import (
    Action, ValidationError, bind_action_creators, create_action, get_action_type,
    is_plain_action,
)


class TestAction:
    def test_is_immutable(self):
        action = Action("INC", 1)
        with pytest.raises(AttributeError):
            action.type = "DEC"
        with pytest.raises(AttributeError):
            action.meta = {}

    def test_equality_and_hash(self):
        assert Action("INC", 1) == Action("INC", 1)
        assert Action("INC", 1) != Action("INC", 2)
        assert Action("INC") != {"type": "INC"}
        assert hash(Action("INC", 1)) == hash(Action("INC", 1))

    def test_item_access(self):
        action = Action("ADD", 5)
        assert action["type"] == "ADD"
        assert action["payload"] == 5
        assert action.get("missing", "default") == "default"
        with pytest.raises(KeyError):
            action["missing"]

    def test_repr(self):
        assert repr(Action("ADD", 5)) == "Action(type='ADD', payload=5)"


class TestRecordHelpers:
    def test_is_plain_action(self):
        assert is_plain_action(Action("A"))
        assert is_plain_action({"type": "A"})
        assert is_plain_action(Map(type="A"))
        assert not is_plain_action("A")
        assert not is_plain_action(None)
        assert not is_plain_action(lambda: None)

    def test_get_action_type(self):
        assert get_action_type(Action("A")) == "A"
        assert get_action_type({"type": "B"}) == "B"
        assert get_action_type({}) is None
        assert get_action_type(object()) is None


class TestCreateAction:
    def test_without_payload(self):
        increment = create_action("[Counter] Increment")
        assert increment.type == "[Counter] Increment"
        assert increment() == Action("[Counter] Increment")

    def test_single_argument_is_payload(self):
        add = create_action("[Counter] Add")
        assert add(5).payload == 5

    def test_prepare_fn(self):
        add = create_action("[Counter] Add", lambda amount, times=1: amount * times)
        assert add(5, times=3).payload == 15

    def test_multiple_arguments_become_a_map(self):
        move = create_action("[Board] Move")
        payload = move(1, 2, piece="rook").payload
        assert isinstance(payload, Map)
        assert payload[0] == 1
        assert payload[1] == 2
        assert payload["piece"] == "rook"

    def test_dict_payload_is_frozen(self):
        load = create_action("[Todo] Loaded")
        payload = load({"items": [{"id": 1}]}).payload
        assert isinstance(payload, Map)
        assert isinstance(payload["items"], tuple)
        assert isinstance(payload["items"][0], Map)

    def test_type_is_required(self):
        with pytest.raises(ValidationError):
            create_action(None)


class TestBindActionCreators:
    def test_binds_single_function(self):
        dispatched = []
        add = create_action("ADD")
        bound = bind_action_creators(add, dispatched.append)

        bound(3)
        assert dispatched == [Action("ADD", 3)]
        assert bound.type == "ADD"

    def test_returns_dispatch_result(self):
        bound = bind_action_creators(lambda: {"type": "A"}, lambda action: ("sent", action))
        assert bound() == ("sent", {"type": "A"})

    def test_binds_mapping_and_skips_non_callables(self):
        dispatched = []
        creators = {
            "increment": create_action("INC"),
            "add": lambda amount: {"type": "ADD", "amount": amount},
            "VERSION": "1.0",
        }
        bound = bind_action_creators(creators, dispatched.append)

        assert set(bound) == {"increment", "add"}
        bound["increment"]()
        bound["add"](2)
        assert dispatched == [Action("INC"), {"type": "ADD", "amount": 2}]

    def test_rejects_other_values(self):
        with pytest.raises(ValidationError, match="instead received None"):
            bind_action_creators(None, lambda action: action)
        with pytest.raises(ValidationError, match="instead received int"):
            bind_action_creators(42, lambda action: action)
