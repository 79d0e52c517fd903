"""Tests for the immutable helpers."""

from typing import List

from immutables import Map
from pydantic import BaseModel

from reduxpy import to_dict, to_immutable, to_pydantic


class Item(BaseModel):
    id: int
    tags: List[str]


class Inventory(BaseModel):
    items: List[Item]
    owner: str


class TestToImmutable:
    def test_nested_structures(self):
        frozen = to_immutable({"a": [1, {"b": {2, 3}}]})
        assert isinstance(frozen, Map)
        assert isinstance(frozen["a"], tuple)
        assert isinstance(frozen["a"][1], Map)
        assert frozen["a"][1]["b"] == frozenset({2, 3})

    def test_pydantic_model(self):
        frozen = to_immutable(Item(id=1, tags=["x"]))
        assert frozen == Map(id=1, tags=("x",))

    def test_maps_and_scalars_are_returned_as_is(self):
        existing = Map(a=1)
        assert to_immutable(existing) is existing
        assert to_immutable(5) == 5
        assert to_immutable("text") == "text"


class TestToDict:
    def test_round_trip(self):
        original = {"a": [1, {"b": "c"}], "d": None}
        assert to_dict(to_immutable(original)) == original

    def test_to_pydantic(self):
        state = to_immutable({"owner": "ann", "items": [{"id": 1, "tags": ["x", "y"]}]})
        inventory = to_pydantic(state, Inventory)
        assert inventory == Inventory(owner="ann", items=[Item(id=1, tags=["x", "y"])])
