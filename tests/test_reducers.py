"""Tests for create_reducer and on."""

import pytest
from pydantic import BaseModel

from reduxpy import (
    Action, ActionTypes, ValidationError, create_action, create_reducer, create_store, on,
)

increment = create_action("[Counter] Increment")
add = create_action("[Counter] Add")


class CounterState(BaseModel):
    count: int = 0


def handle_increment(state, action):
    return state.model_copy(update={"count": state.count + 1})


def handle_add(state, action):
    return state.model_copy(update={"count": state.count + action.payload})


counter_reducer = create_reducer(
    CounterState(),
    on(increment, handle_increment),
    ("[Counter] Add", handle_add),
)


class TestCreateReducer:
    def test_none_state_uses_initial_state(self):
        assert counter_reducer(None, Action(ActionTypes.INIT)) == CounterState()

    def test_unknown_actions_return_same_state(self):
        state = CounterState(count=3)
        assert counter_reducer(state, Action("[Other] Noop")) is state
        assert counter_reducer(state, Action(ActionTypes.REPLACE)) is state

    def test_handlers(self):
        state = counter_reducer(None, increment())
        state = counter_reducer(state, add(4))
        assert state.count == 5

    def test_dict_actions(self):
        state = counter_reducer(CounterState(), {"type": "[Counter] Increment"})
        assert state.count == 1

    def test_exposes_initial_state_and_handlers(self):
        assert counter_reducer.initial_state == CounterState()
        assert set(counter_reducer.handlers) == {"[Counter] Increment", "[Counter] Add"}

    def test_in_store(self):
        store = create_store(counter_reducer)
        store.dispatch(increment())
        store.dispatch(add(10))
        assert store.get_state().count == 11

    def test_rejects_bad_handlers(self):
        with pytest.raises(ValidationError):
            create_reducer(0, "not a handler")
        with pytest.raises(ValidationError):
            create_reducer(0, ("A", "not callable"))


class TestOn:
    def test_uses_creator_type(self):
        assert on(increment, handle_increment) == {"[Counter] Increment": handle_increment}

    def test_accepts_plain_type(self):
        assert on("RESET", handle_add) == {"RESET": handle_add}
