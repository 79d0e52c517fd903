"""Tests for create_selector."""

from reduxpy import create_selector


class TestCreateSelector:
    def test_single_selector_is_returned(self):
        def get_items(state):
            return state["items"]

        assert create_selector(get_items) is get_items

    def test_memoizes_on_input_identity(self):
        calls = []

        def total(items):
            calls.append(items)
            return sum(items)

        select_total = create_selector(lambda state: state["items"], result_fn=total)
        items = (1, 2, 3)
        assert select_total({"items": items, "other": 1}) == 6
        assert select_total({"items": items, "other": 2}) == 6
        assert len(calls) == 1

        assert select_total({"items": (4,)}) == 4
        assert len(calls) == 2

    def test_default_result_is_tuple_of_inputs(self):
        select_both = create_selector(lambda s: s["a"], lambda s: s["b"])
        assert select_both({"a": 1, "b": 2}) == (1, 2)

    def test_cache_info_and_clear(self):
        select_len = create_selector(lambda s: s["items"], result_fn=len)
        items = ["x"]
        select_len({"items": items})
        select_len({"items": items})
        hits, misses, maxsize, size = select_len.cache_info()
        assert (hits, misses, maxsize, size) == (1, 1, 128, 1)

        select_len.cache_clear()
        assert select_len.cache_info() == (0, 0, 128, 0)

    def test_maxsize_evicts_oldest(self):
        calls = []
        select_len = create_selector(
            lambda s: s, result_fn=lambda s: calls.append(s) or len(s), maxsize=2
        )
        a, b, c = ["a"], ["b", "b"], ["c"]
        select_len(a)
        select_len(b)
        select_len(c)
        assert select_len.cache_info()[3] == 2

        select_len(a)
        assert calls == [a, b, c, a]
