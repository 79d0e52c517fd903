import logging
from collections.abc import Mapping
from typing import Any, Callable, Generic, List, Optional

from reactivex import Observable, create, operators as ops
from reactivex.disposable import Disposable

from .actions import Action, ActionTypes, get_action_type, is_plain_action
from .errors import ActionError, StoreError, ValidationError
from .types import S, Listener, Observer, ReducerFunction, StoreEnhancer, Unsubscribe

logger = logging.getLogger(__name__)

# 外部反應式函式庫用來探測 Store 的鍵
OBSERVABLE_KEY = "__observable__"


class Subscription:
    """StoreObservable.subscribe 返回的訂閱句柄。"""

    __slots__ = ("unsubscribe",)

    def __init__(self, unsubscribe: Unsubscribe):
        self.unsubscribe = unsubscribe

    def dispose(self) -> None:
        self.unsubscribe()


class StoreObservable:
    """
    Store 的最小 observable 介面，供外部反應式函式庫以鴨子型別接入。

    只依賴 Store 的 subscribe 與 get_state，不引入新的不變式。
    """

    def __init__(self, store: "Store[Any]"):
        self._store = store

    def subscribe(self, observer: Observer) -> Subscription:
        """
        訂閱狀態變化。

        訂閱當下會立即送出一次目前狀態，之後每次 dispatch 再送出一次。

        Args:
            observer: 具有 next 方法的物件，或含有 "next" 鍵的 Mapping

        Returns:
            可呼叫 unsubscribe() 停止接收的 Subscription
        """
        if observer is None or isinstance(observer, (str, bytes, int, float, complex)):
            raise ValidationError(
                "Expected the observer to be an object.",
                field="observer",
                value=observer,
                expected_type="object",
            )

        store = self._store

        def observe_state() -> None:
            if isinstance(observer, Mapping):
                next_fn = observer.get("next")
            else:
                next_fn = getattr(observer, "next", None)
            if next_fn is not None:
                next_fn(store.get_state())

        observe_state()
        return Subscription(store.subscribe(observe_state))

    def __observable__(self) -> "StoreObservable":
        return self


class Store(Generic[S]):
    """
    狀態容器，持有唯一的狀態值。

    狀態只能透過 dispatch 交給 reducer 產生新值來改變；
    每次狀態轉換之後，依註冊順序同步通知所有 listener。
    """

    def __init__(self, reducer: ReducerFunction, preloaded_state: Optional[S] = None):
        """
        建立 Store 並執行一次內部 INIT 轉換，讓 reducer 建立初始狀態。

        Args:
            reducer: (state, action) -> state 的純函數
            preloaded_state: 可選的初始狀態
        """
        if not callable(reducer):
            raise ValidationError(
                "Expected the reducer to be a function.",
                field="reducer",
                value=reducer,
                expected_type="callable",
            )

        self._reducer = reducer
        self._state = preloaded_state
        # _current_listeners 是正在通知的快照，subscribe / unsubscribe 只改 _next_listeners
        self._current_listeners: List[Listener] = []
        self._next_listeners = self._current_listeners
        self._is_dispatching = False

        self._dispatch_core(Action(ActionTypes.INIT))

    def _ensure_can_mutate_next_listeners(self) -> None:
        # 通知途中的訂閱變更不會影響本輪的快照
        if self._next_listeners is self._current_listeners:
            self._next_listeners = list(self._current_listeners)

    def get_state(self) -> S:
        """
        讀取目前的狀態。

        Returns:
            目前的狀態。

        Raises:
            StoreError: reducer 執行中呼叫。
        """
        if self._is_dispatching:
            raise StoreError(
                "You may not call store.get_state() while the reducer is executing. "
                "The reducer has already received the state as an argument. "
                "Pass it down from the top reducer instead of reading it from the store.",
                operation="get_state",
            )
        return self._state

    @property
    def state(self) -> S:
        """目前狀態的唯讀屬性，等同於 get_state()。"""
        return self.get_state()

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """
        註冊一個 listener，每次 dispatch 完成後以無參數方式呼叫。

        訂閱清單在每次 dispatch 前取得快照：在 listener 執行期間
        訂閱或取消訂閱，不會影響正在進行的這一次 dispatch，
        下一次 dispatch（不論是否巢狀）才會使用新的清單。

        Args:
            listener: 無參數的回調函數。

        Returns:
            取消訂閱的函數，重複呼叫不會有任何效果。
        """
        if not callable(listener):
            raise ValidationError(
                "Expected the listener to be a function.",
                field="listener",
                value=listener,
                expected_type="callable",
            )

        if self._is_dispatching:
            raise StoreError(
                "You may not call store.subscribe() while the reducer is executing. "
                "If you would like to be notified after the store has been updated, "
                "subscribe from a component and invoke store.get_state() in the callback "
                "to access the latest state.",
                operation="subscribe",
            )

        is_subscribed = True

        self._ensure_can_mutate_next_listeners()
        self._next_listeners.append(listener)

        def unsubscribe() -> None:
            nonlocal is_subscribed
            if not is_subscribed:
                return

            if self._is_dispatching:
                raise StoreError(
                    "You may not unsubscribe from a store listener while the reducer is executing.",
                    operation="unsubscribe",
                )

            is_subscribed = False

            self._ensure_can_mutate_next_listeners()
            self._next_listeners.remove(listener)

        return unsubscribe

    def _dispatch_core(self, action: Any) -> Any:
        if not is_plain_action(action):
            raise ActionError(
                "Actions must be plain records (an Action or a mapping). "
                "Use custom middleware for async actions.",
                action,
            )

        if get_action_type(action) is None:
            raise ActionError(
                'Actions may not have a None "type" property. '
                "Have you misspelled a constant?",
                action,
            )

        if self._is_dispatching:
            raise StoreError("Reducers may not dispatch actions.", operation="dispatch")

        try:
            self._is_dispatching = True
            next_state = self._reducer(self._state, action)
        finally:
            self._is_dispatching = False

        # reducer 成功返回後才替換狀態
        self._state = next_state

        listeners = self._current_listeners = self._next_listeners
        for listener in listeners:
            listener()

        return action

    def dispatch(self, action: Any) -> Any:
        """
        分發一個動作，觸發狀態轉換。

        reducer 以目前狀態與 action 計算新狀態，之後通知所有 listener。
        reducer 拋出的異常會直接傳給呼叫者，此時狀態不變，也不通知 listener。
        套用中介軟體後，Store 實例上的 dispatch 會被替換為包裹後的版本。

        Args:
            action: Action 實例或帶有 "type" 鍵的 Mapping。

        Returns:
            傳入的 action。
        """
        return self._dispatch_core(action)

    def replace_reducer(self, next_reducer: ReducerFunction) -> None:
        """
        替換目前的 reducer，並立即以 REPLACE 動作重新計算狀態。

        用於程式碼分割或熱重載；既有的 listener 會保留。

        Args:
            next_reducer: 新的 reducer。
        """
        if not callable(next_reducer):
            raise ValidationError(
                "Expected the next_reducer to be a function.",
                field="next_reducer",
                value=next_reducer,
                expected_type="callable",
            )

        logger.debug("Replacing reducer with %r", next_reducer)
        self._reducer = next_reducer
        self._dispatch_core(Action(ActionTypes.REPLACE))

    def observable(self) -> StoreObservable:
        """返回給外部反應式函式庫使用的 StoreObservable。"""
        return StoreObservable(self)

    __observable__ = observable

    def select(self, selector: Optional[Callable[[S], Any]] = None) -> Observable:
        """
        以 reactivex Observable 的形式觀察狀態的一部分。

        訂閱時立即送出一次，之後只在選出的值改變時送出。
        釋放訂閱會同時取消 Store 上的 listener。

        Args:
            selector: 一個函數，接收整個狀態並返回希望觀察的部分。

        Returns:
            一個可觀察對象，發送選定的狀態部分。
        """

        def subscribe(observer, scheduler=None):
            def emit() -> None:
                state = self.get_state()
                observer.on_next(selector(state) if selector is not None else state)

            emit()
            return Disposable(self.subscribe(emit))

        return create(subscribe).pipe(ops.distinct_until_changed())


def create_store(
    reducer: ReducerFunction,
    preloaded_state: Any = None,
    enhancer: Optional[StoreEnhancer] = None,
) -> Store[Any]:
    """
    創建一個新的 Store 實例。

    Args:
        reducer: (state, action) -> state 的純函數。
        preloaded_state: 可選的初始狀態。若以位置參數傳入一個函數且沒有
            傳入 enhancer，則視為 enhancer。
        enhancer: 可選的 Store 擴充器，例如 apply_middleware(...) 的返回值。

    Returns:
        Store: 新創建的 Store 實例。
    """
    if callable(preloaded_state) and enhancer is None:
        enhancer, preloaded_state = preloaded_state, None

    if enhancer is not None:
        if not callable(enhancer):
            raise ValidationError(
                "Expected the enhancer to be a function.",
                field="enhancer",
                value=enhancer,
                expected_type="callable",
            )
        return enhancer(create_store)(reducer, preloaded_state)

    return Store(reducer, preloaded_state)
