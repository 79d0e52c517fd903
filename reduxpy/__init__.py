"""
ReduxPy：同步的單一狀態容器。

狀態只能經由 reducer 轉換，每次轉換後通知訂閱者；
中介軟體可以在 action 抵達 reducer 之前攔截或擴充 dispatch。
"""

from .errors import (
    ReduxPyError, ValidationError, ActionError, StoreError, MiddlewareError,
    ErrorHandler, global_error_handler,
)
from .actions import (
    Action, ActionTypes, create_action, bind_action_creators,
    get_action_type, is_plain_action,
)
from .compose import compose
from .reducers import create_reducer, on
from .store import Store, StoreObservable, Subscription, create_store, OBSERVABLE_KEY
from .middleware import (
    apply_middleware, StoreMiddlewareAPI, BaseMiddleware, LoggerMiddleware,
    ThunkMiddleware, AwaitableMiddleware, ErrorMiddleware, PerformanceMonitorMiddleware,
    global_error,
)
from .store_selectors import create_selector
from .immutable_utils import to_immutable, to_dict, to_pydantic

__version__ = "0.1.0"

__all__ = [
    # Errors
    "ReduxPyError", "ValidationError", "ActionError", "StoreError", "MiddlewareError",
    "ErrorHandler", "global_error_handler",

    # Actions
    "Action", "ActionTypes", "create_action", "bind_action_creators",
    "get_action_type", "is_plain_action",

    # Composition
    "compose",

    # Reducers
    "create_reducer", "on",

    # Store
    "Store", "StoreObservable", "Subscription", "create_store", "OBSERVABLE_KEY",

    # Middleware
    "apply_middleware", "StoreMiddlewareAPI", "BaseMiddleware", "LoggerMiddleware",
    "ThunkMiddleware", "AwaitableMiddleware", "ErrorMiddleware",
    "PerformanceMonitorMiddleware", "global_error",

    # Selectors
    "create_selector",

    # Immutable Utils
    "to_immutable", "to_dict", "to_pydantic",
]
