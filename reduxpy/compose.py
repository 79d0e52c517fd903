import functools
from typing import Any, Callable


def compose(*funcs: Callable[..., Any]) -> Callable[..., Any]:
    """
    由右至左組合單參數函數。

    最右邊的函數可以接收任意參數，它決定了組合後函數的簽名；
    其餘函數只接收前一個函數的回傳值。

    Args:
        *funcs: 要組合的函數。

    Returns:
        組合後的函數，例如 compose(f, g, h) 等同於
        lambda *args, **kwargs: f(g(h(*args, **kwargs)))。

    範例:
        >>> compose(str, abs)(-3)
        '3'
    """
    if not funcs:
        return lambda arg: arg

    if len(funcs) == 1:
        return funcs[0]

    return functools.reduce(
        lambda f, g: lambda *args, **kwargs: f(g(*args, **kwargs)), funcs
    )
