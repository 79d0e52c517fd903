from typing import Any, Callable, Dict

from .actions import get_action_type
from .errors import ValidationError
from .types import S, ReducerFunction

Reducer = ReducerFunction


def create_reducer(initial_state: S, *handlers) -> Reducer:
    """
    創建一個 reducer 函式，用於處理狀態變更。

    Args:
        initial_state: 初始狀態，當 reducer 收到 None 狀態時使用。
        *handlers: 一系列 (action_type, handler_fn) 元組或使用 on 函式創建的處理器。

    Returns:
        一個 reducer 函式，根據 action 的類型執行對應的處理邏輯；
        沒有對應處理器的 action（包括 Store 內部的 INIT/REPLACE）會原樣返回狀態。
    """
    action_handlers: Dict[Any, Callable[[S, Any], S]] = {}

    for handler in handlers:
        if isinstance(handler, tuple) and len(handler) == 2:
            action_type, handler_fn = handler
            action_handlers[action_type] = handler_fn
        elif isinstance(handler, dict):
            action_handlers.update(handler)
        else:
            raise ValidationError(
                "Reducer handlers must be (action_type, handler) tuples or mappings from on().",
                field="handlers",
                value=handler,
                expected_type="tuple | dict",
            )

    for action_type, handler_fn in action_handlers.items():
        if not callable(handler_fn):
            raise ValidationError(
                f"Expected the handler for {action_type!r} to be a function.",
                field=str(action_type),
                value=handler_fn,
                expected_type="callable",
            )

    def reducer(state: S = None, action: Any = None) -> S:
        # Store 以 None 代表尚未初始化的狀態
        if state is None:
            state = initial_state
        if action is None:
            return state

        handler = action_handlers.get(get_action_type(action))
        if handler:
            return handler(state, action)
        return state

    # 設置 reducer 的初始狀態和處理器映射
    reducer.initial_state = initial_state  # type: ignore
    reducer.handlers = dict(action_handlers)  # type: ignore

    return reducer


def on(action_creator_or_type, handler) -> Dict[Any, Callable[..., Any]]:
    """
    創建一個 action 類型與處理函式的映射。

    Args:
        action_creator_or_type: Action 創建器函式或 Action 類型字串。
        handler: 處理該 Action 的函式，接收 (state, action) 並返回新狀態。

    Returns:
        一個包含 {action_type: handler} 的字典。
    """
    if callable(action_creator_or_type) and hasattr(action_creator_or_type, 'type'):
        action_type = action_creator_or_type.type
    else:
        action_type = str(action_creator_or_type)

    return {action_type: handler}
