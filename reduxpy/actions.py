"""
ReduxPy 的 Action 定義模組。

此模組提供 Action 類別、創建 Action 的工具、
Store 內部保留的 Action 類型，以及把 action creator 綁定到 dispatch 的輔助函數。
Actions 是描述狀態變更意圖的不可變對象。
"""
import uuid
from collections.abc import Mapping
from typing import Any, Callable, Dict, Generic, Optional, Union

from .errors import ValidationError
from .immutable_utils import to_immutable
from .types import DispatchFunction, P


class Action(Generic[P]):
    """
    表示一個有類型和可選負載的動作。

    泛型參數:
        P: 負載的類型

    屬性:
        type: 動作的類型字符串
        payload: 動作的負載數據（可選）
    """
    __slots__ = ('type', 'payload')

    def __init__(self, type: str, payload: Optional[P] = None):
        super().__setattr__('type', type)
        super().__setattr__('payload', payload)

    def __setattr__(self, name, value):
        raise AttributeError(f"Cannot modify immutable instance attribute '{name}'")

    def __getitem__(self, key: str) -> Any:
        # 讓以 action["type"] 撰寫的 reducer 也能處理 Action
        if key in self.__slots__:
            return getattr(self, key)
        raise KeyError(key)

    def get(self, key: str, default: Any = None) -> Any:
        try:
            return self[key]
        except KeyError:
            return default

    def __eq__(self, other):
        if not isinstance(other, Action):
            return False
        return self.type == other.type and self.payload == other.payload

    def __hash__(self):
        return hash((self.type, self.payload))

    def __repr__(self):
        return f"Action(type='{self.type}', payload={repr(self.payload)})"


def _random_string() -> str:
    return ".".join(uuid.uuid4().hex[:6])


class ActionTypes:
    """
    Store 保留的內部 Action 類型。

    reducer 遇到這些類型時必須回傳初始狀態，
    不可以直接比對字面值，因為後綴在每個行程中都是隨機的。
    """
    INIT = f"@@redux/INIT{_random_string()}"
    REPLACE = f"@@redux/REPLACE{_random_string()}"


def is_plain_action(action: Any) -> bool:
    """判斷是否為 Store 可接受的紀錄：Action 實例或 Mapping。"""
    return isinstance(action, (Action, Mapping))


def get_action_type(action: Any) -> Any:
    """
    取得 action 的 type，缺少時回傳 None。

    Args:
        action: Action 實例或 Mapping

    Returns:
        action 的類型
    """
    if isinstance(action, Mapping):
        return action.get("type")
    return getattr(action, "type", None)


def create_action(action_type: str, prepare_fn: Optional[Callable[..., Any]] = None) -> Callable[..., Action[Any]]:
    """
    創建一個 Action 生成器函數。

    Args:
        action_type: Action 的類型標識符
        prepare_fn: 可選的預處理函數，用於在創建 Action 前處理輸入參數

    Returns:
        一個可調用的函數，用於生成指定類型的 Action

    範例:
        >>> increment = create_action("[Counter] Increment")
        >>> increment()  # 返回 Action(type="[Counter] Increment", payload=None)
        >>>
        >>> add = create_action("[Counter] Add", lambda amount: amount)
        >>> add(5)  # 返回 Action(type="[Counter] Add", payload=5)
    """
    if action_type is None:
        raise ValidationError(
            "Action types may not be None.",
            field="action_type",
            value=action_type,
            expected_type="str",
        )

    def action_creator(*args: Any, **kwargs: Any) -> Action[Any]:
        if prepare_fn:
            payload = prepare_fn(*args, **kwargs)
        elif len(args) == 1 and not kwargs:
            payload = args[0]
        elif args or kwargs:
            payload = dict(zip(range(len(args)), args))
            payload.update(kwargs)
        else:
            # 無參數，無負載
            return Action(action_type)
        return Action(action_type, to_immutable(payload))

    # 添加 type 屬性以便於識別
    action_creator.type = action_type  # type: ignore

    return action_creator


def _bind_action_creator(action_creator: Callable[..., Any], dispatch: DispatchFunction) -> Callable[..., Any]:
    def bound(*args: Any, **kwargs: Any) -> Any:
        return dispatch(action_creator(*args, **kwargs))

    bound.__name__ = getattr(action_creator, "__name__", "bound_action_creator")
    if hasattr(action_creator, "type"):
        bound.type = action_creator.type  # type: ignore
    return bound


def bind_action_creators(
    action_creators: Union[Callable[..., Any], Mapping],
    dispatch: DispatchFunction,
) -> Union[Callable[..., Any], Dict[str, Callable[..., Any]]]:
    """
    把 action creator 包進 dispatch 呼叫，呼叫後直接分發。

    這只是便利函數，等同於自己寫 `store.dispatch(creators["increment"]())`。

    Args:
        action_creators: 單一 action creator，或值為 action creator 的 Mapping
        dispatch: Store 的 dispatch 函數

    Returns:
        傳入函數時返回單一函數；傳入 Mapping 時返回相同 key 的 dict，
        非 callable 的值會被略過。
    """
    if callable(action_creators):
        return _bind_action_creator(action_creators, dispatch)

    if not isinstance(action_creators, Mapping):
        received = "None" if action_creators is None else type(action_creators).__name__
        raise ValidationError(
            f"bind_action_creators expected a mapping or a function, instead received {received}.",
            field="action_creators",
            value=action_creators,
            expected_type="Mapping | callable",
        )

    return {
        key: _bind_action_creator(creator, dispatch)
        for key, creator in action_creators.items()
        if callable(creator)
    }
