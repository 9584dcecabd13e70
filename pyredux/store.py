"""
PyReduX 的 Store 引擎。

Store 擁有唯一的狀態、當前的 reducer 以及 listener 註冊表，
只能透過 dispatch 以 reducer 更新狀態，並在每次更新後依註冊順序通知 listener。
"""

import functools
import logging
from typing import Any, Callable, Generic, List, Mapping, Optional, Union

from reactivex import Observable, create
from reactivex import operators as ops
from reactivex.disposable import Disposable

from .actions import Action, ActionTypes, action_type_of
from .config import StoreConfig, resolve_config
from .errors import ErrorHandler, InvalidArgumentError, ListenerError, global_error_handler
from .types import S, Listener, Reducer, StateSelector, StoreEnhancer, Unsubscribe


class Store(Generic[S]):
    """
    狀態容器，管理應用狀態並通知訂閱者狀態變更。

    listener 註冊表分為 current 與 next 兩個視圖：dispatch 開始通知前會擷取
    ``current = next``，之後的 subscribe / unsubscribe 都先複製 next 再修改，
    因此 listener 在通知過程中增刪訂閱不會影響正在進行的這一輪通知。
    """

    def __init__(
        self,
        reducer: Reducer[S],
        preloaded_state: Optional[S] = None,
        config: Optional[StoreConfig] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        """
        初始化 Store 實例。

        一般應使用 create_store 建立，它會在建構後分發初始化 action。

        Args:
            reducer: 當前使用的 reducer。
            preloaded_state: 預載狀態，缺少時為 None。
            config: Store 配置。
            error_handler: 隔離 listener 錯誤時使用的錯誤處理器。
        """
        self._reducer = reducer
        self._state = preloaded_state
        self._config = config if config is not None else StoreConfig()
        self._error_handler = error_handler or global_error_handler
        self._logger = logging.getLogger(self._config.logger_name)
        self._current_listeners: List[Listener] = []
        self._next_listeners = self._current_listeners

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def state(self) -> S:
        """
        獲取當前狀態的快照。

        Returns:
            當前狀態。
        """
        return self._state

    def get_state(self) -> S:
        """返回當前狀態，沒有副作用。"""
        return self._state

    def _ensure_can_mutate_next_listeners(self) -> None:
        # next 與 current 指向同一列表時，先複製再修改
        if self._next_listeners is self._current_listeners:
            self._next_listeners = list(self._current_listeners)

    def dispatch(self, action: Any) -> Any:
        """
        分發一個動作，觸發狀態更新。

        以 reducer 計算新狀態並整體替換，接著依註冊順序呼叫擷取到的 listener。
        listener 不會收到任何參數，需要時自行呼叫 get_state()。

        Args:
            action: 要分發的 Action，必須帶有 type 欄位。

        Returns:
            傳入的 Action。

        Raises:
            InvalidArgumentError: action 不是結構化記錄或缺少 type 欄位。
        """
        action_type = action_type_of(action)

        self._state = self._reducer(self._state, action)
        self._logger.debug("Dispatched %r", action_type)

        listeners = self._current_listeners = self._next_listeners
        for listener in listeners:
            if self._config.isolate_listener_errors:
                self._call_isolated(listener, action_type)
            else:
                listener()

        return action

    def _call_isolated(self, listener: Listener, action_type: Any) -> None:
        try:
            listener()
        except Exception as err:
            self._error_handler.handle(ListenerError(listener, err, action_type))

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """
        註冊一個 listener，每次 dispatch 後被呼叫。

        Args:
            listener: 不帶參數的回調函數。

        Returns:
            取消訂閱的函數，重複呼叫不會有任何效果。

        Raises:
            InvalidArgumentError: listener 不可呼叫。
        """
        if not callable(listener):
            raise InvalidArgumentError(
                "Expected the listener to be a function.",
                "listener", listener, "callable",
            )

        is_subscribed = True
        self._ensure_can_mutate_next_listeners()
        self._next_listeners.append(listener)
        self._logger.debug("Subscribed listener %r", listener)

        def unsubscribe() -> None:
            nonlocal is_subscribed
            if not is_subscribed:
                return
            is_subscribed = False

            self._ensure_can_mutate_next_listeners()
            # 以身分比對，只移除這次註冊的引用
            for index, registered in enumerate(self._next_listeners):
                if registered is listener:
                    del self._next_listeners[index]
                    break
            self._logger.debug("Unsubscribed listener %r", listener)

        return unsubscribe

    def replace_reducer(self, next_reducer: Reducer[S]) -> None:
        """
        替換當前的 reducer，並立即重新分發初始化 action。

        Args:
            next_reducer: 新的 reducer。

        Raises:
            InvalidArgumentError: next_reducer 不可呼叫。
        """
        if not callable(next_reducer):
            raise InvalidArgumentError(
                "Expected the reducer to be a function.",
                "next_reducer", next_reducer, "callable",
            )

        self._reducer = next_reducer
        self._logger.debug("Replaced reducer with %r", next_reducer)
        self.dispatch(Action(ActionTypes.INIT))

    def select(self, selector: Optional[StateSelector] = None) -> Observable:
        """
        選擇狀態的一部分進行觀察。

        每個訂閱都會在 Store 上註冊一個 listener，每次 dispatch 後發出
        ``selector(get_state())``，連續相同的值只發出一次；
        釋放訂閱時同時取消 listener。selector 拋出的錯誤會送到訂閱者的
        on_error 並結束該訂閱，不會從 dispatch 拋出。

        Args:
            selector: 一個函數，接收整個狀態並返回希望觀察的部分。

        Returns:
            一個可觀察對象，發送選定的狀態部分。
        """
        if selector is None:
            selector = _identity

        def subscribe(observer, scheduler=None):
            def listener() -> None:
                observer.on_next(self._state)

            return Disposable(self.subscribe(listener))

        return create(subscribe).pipe(
            ops.map(selector),
            ops.distinct_until_changed(),
        )


def _identity(state: Any) -> Any:
    return state


def create_store(
    reducer: Reducer[S],
    preloaded_state: Union[S, StoreEnhancer, None] = None,
    enhancer: Optional[StoreEnhancer] = None,
    *,
    config: Union[StoreConfig, Mapping[str, Any], None] = None,
    error_handler: Optional[ErrorHandler] = None,
) -> Store[S]:
    """
    創建一個新的 Store 實例。

    preloaded_state 為函數且未提供 enhancer 時，會被視為 enhancer。
    提供 enhancer 時改由 enhancer 建立 Store：它會收到綁定相同配置的
    create_store，並必須返回完整的 Store。

    Args:
        reducer: 根 reducer。
        preloaded_state: 可選的預載狀態。
        enhancer: 可選的 Store enhancer，例如 apply_middleware(...)。
        config: Store 配置或可驗證為 StoreConfig 的映射。
        error_handler: 隔離 listener 錯誤時使用的錯誤處理器。

    Returns:
        Store: 新創建的 Store 實例。

    Raises:
        InvalidArgumentError: reducer 或 enhancer 不可呼叫。
    """
    if not callable(reducer):
        raise InvalidArgumentError(
            "Expected the reducer to be a function.",
            "reducer", reducer, "callable",
        )

    if callable(preloaded_state) and enhancer is None:
        enhancer = preloaded_state
        preloaded_state = None

    resolved_config = resolve_config(config)

    if enhancer is not None:
        if not callable(enhancer):
            raise InvalidArgumentError(
                "Expected the enhancer to be a function.",
                "enhancer", enhancer, "callable",
            )
        store_creator: Callable[..., Store[S]] = functools.partial(
            create_store, config=resolved_config, error_handler=error_handler
        )
        return enhancer(store_creator)(reducer, preloaded_state)

    store = Store(reducer, preloaded_state, resolved_config, error_handler)
    # 以 reducer 的預設分支初始化狀態
    store.dispatch(Action(ActionTypes.INIT))
    return store
