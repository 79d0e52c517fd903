from collections import OrderedDict
from typing import Any, Optional, Tuple

from .types import ResultSelector, StateSelector


def create_selector(
    *selectors: StateSelector,
    result_fn: Optional[ResultSelector] = None,
    maxsize: int = 128,
) -> StateSelector:
    """
    創建一個記憶化的複合選擇器，搭配 Store.select 使用。

    輸入選擇器的結果以 identity 比較；在不可變狀態下，
    子樹未被替換就代表沒有變化，result_fn 不會重新計算。

    Args:
        *selectors: 多個輸入選擇器，這些函數會從 state 中提取對應的值
        result_fn: 處理輸出結果的函數，將多個選擇器的輸出進行處理
        maxsize: 緩存的最大條目數，預設為128

    Returns:
        經過快取優化的 selector 函數

    範例:
        >>> get_todos = lambda state: state["todos"]
        >>> get_count = create_selector(get_todos, result_fn=len)
    """
    # 如果沒有 result_fn 且只有一個選擇器，直接返回該選擇器
    if result_fn is None and len(selectors) == 1:
        return selectors[0]

    if result_fn is None:
        result_fn = lambda *args: args

    cache: "OrderedDict[Tuple[int, ...], Tuple[Tuple[Any, ...], Any]]" = OrderedDict()
    hits = misses = 0

    def selector(state: Any) -> Any:
        nonlocal hits, misses
        inputs = tuple(select(state) for select in selectors)
        key = tuple(id(value) for value in inputs)

        cached = cache.get(key)
        # 保存 inputs 本身，避免 id 被回收後重用造成誤判
        if cached is not None and all(a is b for a, b in zip(cached[0], inputs)):
            hits += 1
            cache.move_to_end(key)
            return cached[1]

        misses += 1
        result = result_fn(*inputs)
        cache[key] = (inputs, result)
        if len(cache) > maxsize:
            cache.popitem(last=False)
        return result

    def cache_info() -> Tuple[int, int, int, int]:
        return (hits, misses, maxsize, len(cache))

    def cache_clear() -> None:
        nonlocal hits, misses
        cache.clear()
        hits = misses = 0

    selector.cache_info = cache_info  # type: ignore
    selector.cache_clear = cache_clear  # type: ignore

    return selector
