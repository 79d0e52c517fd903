"""
ReduxPy 的中介軟體模組。

此模組提供 apply_middleware 這個 Store 擴充器，以及數個常用的中介軟體，
用於在動作分發過程中插入日誌記錄、非同步處理、錯誤回報與性能監控等邏輯。

中介軟體的形狀為 api -> next_dispatch -> action -> result，
其中 api 只提供 get_state 與 dispatch 兩個能力。
"""

import asyncio
import contextlib
import inspect
import logging
import time
from typing import Any, Dict, Generator, List, Optional

from .actions import create_action, get_action_type, is_plain_action
from .compose import compose
from .errors import ErrorHandler, MiddlewareError, StoreError, ValidationError, global_error_handler
from .immutable_utils import to_dict
from .types import (
    ActionContext, DispatchFunction, GetState, MiddlewareAPI, MiddlewareFactory,
    MiddlewareFunction, NextDispatch, StoreCreator, StoreEnhancer, ThunkFunction,
)

logger = logging.getLogger(__name__)


def _describe(action: Any) -> str:
    """供日誌使用的 action 描述；thunk 或 coroutine 沒有 type。"""
    if is_plain_action(action):
        return str(get_action_type(action))
    return f"<{type(action).__name__}>"


def _middleware_name(middleware: Any) -> str:
    return getattr(middleware, "__name__", None) or type(middleware).__name__


class StoreMiddlewareAPI:
    """
    交給每個中介軟體的能力物件。

    只暴露 get_state 與 dispatch，中介軟體無法接觸 Store 的其他內部狀態。
    """

    __slots__ = ("_get_state", "_dispatch")

    def __init__(self, get_state: GetState, dispatch: DispatchFunction):
        self._get_state = get_state
        self._dispatch = dispatch

    def get_state(self) -> Any:
        return self._get_state()

    def dispatch(self, action: Any) -> Any:
        return self._dispatch(action)


def apply_middleware(*middlewares: Any) -> StoreEnhancer:
    """
    建立一個 Store 擴充器，將中介軟體依序包裹在 dispatch 外層。

    最左邊的中介軟體是最外層：它最先看到每個 action，也最後拿到整條鏈的返回值；
    最右邊的中介軟體直接呼叫 Store 原本的 dispatch。

    Args:
        *middlewares: 中介軟體工廠 (api -> next -> action -> result)，
            也可以是中介軟體類別，會以無參數方式實例化。

    Returns:
        擴充器，用法為 create_store(reducer, enhancer=apply_middleware(...))。

    範例:
        ```python
        store = create_store(
            counter_reducer,
            enhancer=apply_middleware(ThunkMiddleware, LoggerMiddleware()),
        )
        ```
    """
    for m in middlewares:
        if not callable(m):
            raise ValidationError(
                "Expected each middleware to be a function.",
                field="middlewares",
                value=m,
                expected_type="callable",
            )

    def enhancer(create_store: StoreCreator) -> StoreCreator:
        def enhanced_create_store(*args: Any, **kwargs: Any) -> Any:
            store = create_store(*args, **kwargs)
            # 中介軟體類別在每個 Store 各自實例化，避免共用內部狀態
            factories: List[MiddlewareFactory] = [
                m() if inspect.isclass(m) else m for m in middlewares
            ]
            constructing: Optional[str] = None

            def dispatch(action: Any) -> Any:
                raise MiddlewareError(
                    "Dispatching while constructing your middleware is not allowed. "
                    "Other middleware would not be applied to this dispatch.",
                    middleware_name=constructing,
                )

            # 所有中介軟體共用同一個 api，透過閉包看到目前生效的 dispatch
            api = StoreMiddlewareAPI(store.get_state, lambda action: dispatch(action))

            chain: List[MiddlewareFunction] = []
            for factory in factories:
                constructing = _middleware_name(factory)
                chain.append(factory(api))

            dispatch = compose(*chain)(store.dispatch)
            constructing = None

            logger.debug(
                "Applied %d middleware: %s",
                len(factories),
                ", ".join(_middleware_name(f) for f in factories),
            )
            store.dispatch = dispatch
            return store

        return enhanced_create_store

    return enhancer


# ———— Base Middleware ————
class BaseMiddleware:
    """
    基礎中介類，以鉤子的方式撰寫中介軟體。

    子類只需覆寫 on_next、on_complete、on_error 其中幾個，
    __call__ 會負責把它們串接到 next_dispatch 的前後。
    """

    def __call__(self, api: MiddlewareAPI) -> MiddlewareFunction:
        def middleware(next_dispatch: NextDispatch) -> DispatchFunction:
            def dispatch(action: Any) -> Any:
                try:
                    prev_state = api.get_state()
                except StoreError:
                    # reducer 執行中，交由 Store 的 dispatch 拋出對應的錯誤
                    return next_dispatch(action)
                with self.action_context(action, prev_state) as context:
                    context["result"] = next_dispatch(action)
                    context["next_state"] = api.get_state()
                return context["result"]
            return dispatch
        return middleware

    def on_next(self, action: Any, prev_state: Any) -> None:
        """
        在 action 往下傳遞之前調用。

        Args:
            action: 正在 dispatch 的 Action
            prev_state: dispatch 之前的狀態
        """
        pass

    def on_complete(self, next_state: Any, action: Any) -> None:
        """
        在下游（最終是 reducer 與 listener）處理完 action 之後調用。

        Args:
            next_state: dispatch 之後的狀態
            action: 剛剛 dispatch 的 Action
        """
        pass

    def on_error(self, error: Exception, action: Any) -> None:
        """
        下游拋出異常時調用，之後異常會繼續往上拋。

        Args:
            error: 拋出的異常
            action: 導致異常的 Action
        """
        pass

    @contextlib.contextmanager
    def action_context(self, action: Any, prev_state: Any) -> Generator[ActionContext, None, None]:
        """
        以上下文管理器的形式處理一次 dispatch 的生命週期。

        子類可以覆寫此方法加入自己的資料，並以
        `with super().action_context(...)` 確保鉤子仍被呼叫。

        Args:
            action: 要分發的 Action
            prev_state: 分發前的狀態

        Yields:
            在上下文內外之間傳遞資料的字典
        """
        context: ActionContext = {
            'action': action,
            'prev_state': prev_state,
            'next_state': None,
            'result': None,
            'error': None,
        }

        self.on_next(action, prev_state)

        try:
            yield context
        except Exception as err:
            context['error'] = err
            self.on_error(err, action)
            raise

        self.on_complete(context['next_state'], action)


# ———— LoggerMiddleware ————
class LoggerMiddleware(BaseMiddleware):
    """
    日誌中介，記錄每個 action 發送前和發送後的 state。

    使用場景:
    - 偵錯時需要觀察每次 state 的變化。
    - 確保 action 的執行順序正確。
    """

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.INFO):
        self.logger = logger or logging.getLogger(__name__)
        self.level = level

    def on_next(self, action: Any, prev_state: Any) -> None:
        self.logger.log(self.level, "dispatching %s", _describe(action))
        self.logger.log(self.level, "state before %s: %r", _describe(action), to_dict(prev_state))

    def on_complete(self, next_state: Any, action: Any) -> None:
        self.logger.log(self.level, "state after %s: %r", _describe(action), to_dict(next_state))

    def on_error(self, error: Exception, action: Any) -> None:
        self.logger.error("error in %s: %s", _describe(action), error)


# ———— ThunkMiddleware ————
class ThunkMiddleware(BaseMiddleware):
    """
    支援 dispatch 函數 (thunk)，可以在 thunk 內執行條件判斷或多次 dispatch。

    範例:
        ```python
        def add_if_even(amount):
            def thunk(dispatch, get_state):
                if get_state() % 2 == 0:
                    dispatch(add(amount))
            return thunk

        store.dispatch(add_if_even(3))
        ```
    """

    def __call__(self, api: MiddlewareAPI) -> MiddlewareFunction:
        def middleware(next_dispatch: NextDispatch) -> DispatchFunction:
            def dispatch(action: Any) -> Any:
                if callable(action):
                    thunk: ThunkFunction = action
                    return thunk(api.dispatch, api.get_state)
                return next_dispatch(action)
            return dispatch
        return middleware


# ———— AwaitableMiddleware ————
class AwaitableMiddleware(BaseMiddleware):
    """
    支援 dispatch coroutine/future，完成後自動 dispatch 其返回值。

    dispatch 會立即返回排程好的 Task；返回值為 None 時不會再 dispatch。
    需要在執行中的事件迴圈內使用。
    """

    def __call__(self, api: MiddlewareAPI) -> MiddlewareFunction:
        def on_done(future: "asyncio.Future[Any]") -> None:
            if future.cancelled():
                return
            error = future.exception()
            if error is not None:
                # 等待此 Task 的呼叫者仍會收到異常
                logger.error("Awaitable action failed: %s", error)
                return
            result = future.result()
            if result is not None:
                api.dispatch(result)

        def middleware(next_dispatch: NextDispatch) -> DispatchFunction:
            def dispatch(action: Any) -> Any:
                if asyncio.iscoroutine(action) or asyncio.isfuture(action):
                    task = asyncio.ensure_future(action)
                    task.add_done_callback(on_done)
                    return task
                return next_dispatch(action)
            return dispatch
        return middleware


# ———— ErrorMiddleware ————
global_error = create_action("[Error] GlobalError", lambda info: info)
_REPORTED_ATTR = "__reduxpy_reported__"


class ErrorMiddleware(BaseMiddleware):
    """
    捕獲 dispatch 過程中的異常，回報給 ErrorHandler 並 dispatch 全域錯誤 Action。

    原始異常仍會拋給呼叫者。

    使用場景:
    - 當需要統一處理所有異常並記錄或上報時。
    """

    def __init__(self, error_handler: Optional[ErrorHandler] = None):
        self.error_handler = error_handler or global_error_handler

    def __call__(self, api: MiddlewareAPI) -> MiddlewareFunction:
        reporting = False

        def middleware(next_dispatch: NextDispatch) -> DispatchFunction:
            def dispatch(action: Any) -> Any:
                nonlocal reporting
                try:
                    return next_dispatch(action)
                except Exception as err:
                    if reporting or getattr(err, _REPORTED_ATTR, False):
                        raise
                    # 巢狀 dispatch 的外層不再重複回報同一個異常
                    setattr(err, _REPORTED_ATTR, True)
                    reporting = True
                    try:
                        self.error_handler.handle(err)
                        api.dispatch(global_error({
                            "error": str(err),
                            "error_type": err.__class__.__name__,
                            "action": _describe(action),
                            "timestamp": time.time(),
                        }))
                    except Exception as report_err:
                        # 回報失敗不可蓋掉原始異常
                        logger.error("Failed to report error in %s: %s", _describe(action), report_err)
                    finally:
                        reporting = False
                    raise
            return dispatch
        return middleware


# ———— PerformanceMonitorMiddleware ————
class PerformanceMonitorMiddleware(BaseMiddleware):
    """
    性能監控中間件，記錄每個 action 在下游處理所花的時間。
    """

    def __init__(self, threshold_ms: float = 100, log_all: bool = False, level: int = logging.INFO):
        """
        初始化 PerformanceMonitorMiddleware。

        Args:
            threshold_ms: 性能警告閾值，單位為毫秒，預設為 100 毫秒
            log_all: 是否記錄所有 action 的性能指標，預設為 False (只記錄超過閾值的)
            level: log_all 時使用的日誌等級
        """
        self.threshold_ms = threshold_ms
        self.log_all = log_all
        self.level = level
        self.metrics: Dict[str, List[float]] = {}

    @contextlib.contextmanager
    def action_context(self, action: Any, prev_state: Any) -> Generator[ActionContext, None, None]:
        start_time = time.perf_counter()
        try:
            with super().action_context(action, prev_state) as context:
                yield context
        finally:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            self._record(_describe(action), elapsed_ms)

    def _record(self, action_type: str, elapsed_ms: float) -> None:
        self.metrics.setdefault(action_type, []).append(elapsed_ms)
        if elapsed_ms > self.threshold_ms:
            logger.warning(
                "Action %s exceeded threshold (%sms): took %.2fms",
                action_type, self.threshold_ms, elapsed_ms,
            )
        elif self.log_all:
            logger.log(self.level, "Action %s took %.2fms", action_type, elapsed_ms)

    def get_metrics(self) -> Dict[str, Dict[str, float]]:
        """
        獲取性能指標統計信息。

        Returns:
            以 action 類型為鍵，包含 avg、max、min、count 的字典
        """
        result = {}
        for action_type, times in self.metrics.items():
            if not times:
                continue
            result[action_type] = {
                'avg': sum(times) / len(times),
                'max': max(times),
                'min': min(times),
                'count': len(times),
            }
        return result
