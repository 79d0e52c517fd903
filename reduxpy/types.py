"""
ReduxPy 共用類型定義。
"""

from typing import Any, Callable, Optional, TypeVar

from typing_extensions import Protocol, TypedDict

S = TypeVar("S")  # 狀態類型
P = TypeVar("P")  # 負載類型

# Reducer: (state, action) -> state
ReducerFunction = Callable[[Any, Any], Any]
# Listener 不接收任何參數，需要自行呼叫 get_state()
Listener = Callable[[], None]
DispatchFunction = Callable[[Any], Any]
NextDispatch = Callable[[Any], Any]
GetState = Callable[[], Any]
Unsubscribe = Callable[[], None]
ThunkFunction = Callable[[DispatchFunction, GetState], Any]

StateSelector = Callable[[Any], Any]
ResultSelector = Callable[..., Any]


class MiddlewareAPI(Protocol):
    """交給中介軟體的最小能力介面，只有 get_state 與 dispatch。"""

    def get_state(self) -> Any: ...

    def dispatch(self, action: Any) -> Any: ...


# api -> next_dispatch -> action -> result
MiddlewareFunction = Callable[[NextDispatch], DispatchFunction]
MiddlewareFactory = Callable[[MiddlewareAPI], MiddlewareFunction]

# create_store 的簽名：(reducer, preloaded_state=None) -> store
StoreCreator = Callable[..., Any]
# enhancer: create_store -> create_store
StoreEnhancer = Callable[[StoreCreator], StoreCreator]


class Observer(Protocol):
    """反應式串流的觀察者，只要求有 next。"""

    def next(self, value: Any) -> None: ...


class ActionContext(TypedDict, total=False):
    """BaseMiddleware.action_context 在內外之間傳遞的資料。"""

    action: Any
    prev_state: Any
    next_state: Any
    result: Any
    error: Optional[BaseException]
