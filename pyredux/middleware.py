"""
基於 PyReduX 的中介軟體定義模組。

此模組提供函數組合工具 compose、把中介軟體鏈套在 dispatch 外層的
apply_middleware enhancer，以及以鉤子實作的類別型中介軟體，
用於在動作分發過程中插入日誌記錄、錯誤回報等自定義邏輯。
"""

import contextlib
import functools
import inspect
import logging
from typing import Any, Callable, Generator, List, Optional

from reactivex import Observable

from .actions import action_type_of
from .errors import ErrorHandler, InvalidArgumentError, global_error_handler
from .types import (
    ActionContext, DispatchFunction, GetState, Listener, Middleware,
    MiddlewareFunction, NextDispatch, Reducer, StateSelector, StoreCreator,
    StoreEnhancer, StoreLike, Unsubscribe,
)


def compose(*funcs: Callable[..., Any]) -> Callable[..., Any]:
    """
    由右至左組合函數。

    ``compose(f, g, h)(*args)`` 等同於 ``f(g(h(*args)))``；
    沒有函數時返回恆等函數，只有一個函數時直接返回該函數。

    Args:
        *funcs: 要組合的函數。

    Returns:
        組合後的函數。
    """
    if not funcs:
        return _identity
    if len(funcs) == 1:
        return funcs[0]
    return functools.reduce(lambda f, g: lambda *args, **kwargs: f(g(*args, **kwargs)), funcs)


def _identity(arg: Any) -> Any:
    return arg


class _DispatchCell:
    """
    中介軟體 API 使用的 dispatch 間接層。

    建立時指向原始 Store 的 dispatch，中介軟體鏈組合完成後改指向最終的 dispatch，
    讓中介軟體在處理 action 時呼叫的 dispatch 會重新經過整條鏈。
    """

    __slots__ = ("target",)

    def __init__(self, target: DispatchFunction) -> None:
        self.target = target

    def __call__(self, action: Any) -> Any:
        return self.target(action)


class MiddlewareAPI:
    """中介軟體在建立時取得的固定視圖 {get_state, dispatch}。"""

    __slots__ = ("get_state", "dispatch")

    def __init__(self, get_state: GetState, dispatch: DispatchFunction) -> None:
        self.get_state = get_state
        self.dispatch = dispatch

    @property
    def state(self) -> Any:
        return self.get_state()


class _MiddlewareStore:
    """
    套用中介軟體後的 Store。

    與原始 Store 共用狀態與 listener，只有 dispatch 換成中介軟體鏈。
    """

    def __init__(self, store: StoreLike, dispatch: DispatchFunction) -> None:
        self._store = store
        self.dispatch = dispatch

    @property
    def state(self) -> Any:
        return self._store.get_state()

    @property
    def config(self) -> Any:
        return self._store.config

    def get_state(self) -> Any:
        return self._store.get_state()

    def subscribe(self, listener: Listener) -> Unsubscribe:
        return self._store.subscribe(listener)

    def replace_reducer(self, next_reducer: Reducer[Any]) -> None:
        self._store.replace_reducer(next_reducer)

    def select(self, selector: Optional[StateSelector] = None) -> Observable:
        return self._store.select(selector)


def apply_middleware(*middlewares: Any) -> StoreEnhancer:
    """
    建立套用中介軟體的 Store enhancer。

    每個中介軟體工廠只會以 MiddlewareAPI 呼叫一次，返回
    ``(next) -> (action) -> result``；先註冊的中介軟體位於最外層。
    傳入的類別會先以無參數實例化。

    Args:
        *middlewares: 中介軟體工廠函數、實例或類別。

    Returns:
        可傳給 create_store 的 enhancer。

    Raises:
        InvalidArgumentError: 有中介軟體不可呼叫。
    """
    factories: List[Middleware] = []
    for mw in middlewares:
        # 接受類和實例，如果是類則直接實例化
        factory = mw() if inspect.isclass(mw) else mw
        if not callable(factory):
            raise InvalidArgumentError(
                "Expected the middleware to be a function.",
                "middlewares", mw, "callable",
            )
        factories.append(factory)

    def enhancer(create_store: StoreCreator) -> StoreCreator:
        def create_enhanced_store(reducer: Reducer[Any], preloaded_state: Any = None) -> _MiddlewareStore:
            store = create_store(reducer, preloaded_state)
            dispatch_cell = _DispatchCell(store.dispatch)
            api = MiddlewareAPI(store.get_state, dispatch_cell)

            chain = [factory(api) for factory in factories]
            dispatch_cell.target = compose(*chain)(store.dispatch)

            return _MiddlewareStore(store, dispatch_cell.target)

        return create_enhanced_store

    return enhancer


def _describe_action(action: Any) -> Any:
    try:
        return action_type_of(action)
    except InvalidArgumentError:
        return repr(action)


# ———— Base Middleware ————
class BaseMiddleware:
    """
    基礎中介類，定義所有中介可能實現的鉤子。

    實例本身就是中介軟體工廠，可直接傳給 apply_middleware。
    中介軟體可以介入動作分發的流程，在動作到達 Reducer 前、
    動作處理完成後或出現錯誤時執行自定義邏輯。
    """

    def __call__(self, api: MiddlewareAPI) -> MiddlewareFunction:
        def middleware(next_dispatch: NextDispatch) -> DispatchFunction:
            def dispatch(action: Any) -> Any:
                with self.action_context(action, api.get_state()) as context:
                    context['result'] = next_dispatch(action)
                    context['next_state'] = api.get_state()
                return context['result']
            return dispatch
        return middleware

    def on_next(self, action: Any, prev_state: Any) -> None:
        """
        在 action 發送給 reducer 之前調用。

        Args:
            action: 正在 dispatch 的 Action
            prev_state: dispatch 之前的狀態
        """
        pass

    def on_complete(self, next_state: Any, action: Any) -> None:
        """
        在 reducer 與 listener 處理完 action 之後調用。

        Args:
            next_state: dispatch 之後的最新狀態
            action: 剛剛 dispatch 的 Action
        """
        pass

    def on_error(self, error: Exception, action: Any) -> None:
        """
        如果 dispatch 過程中拋出異常，則調用此鉤子；異常之後會繼續拋出。

        Args:
            error: 拋出的異常
            action: 導致異常的 Action
        """
        pass

    @contextlib.contextmanager
    def action_context(self, action: Any, prev_state: Any) -> Generator[ActionContext, None, None]:
        """
        提供一個上下文管理器來處理 action 分發的生命週期。

        子類可以覆蓋此方法，但應負責呼叫適當的 hook 方法。

        Args:
            action: 要分發的 Action
            prev_state: 分發前的狀態

        Yields:
            ActionContext: 在上下文內部與外部之間傳遞數據的字典
        """
        context: ActionContext = {
            'action': action,
            'prev_state': prev_state,
            'next_state': None,
            'result': None,
            'error': None
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

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.INFO) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self.level = level

    def on_next(self, action: Any, prev_state: Any) -> None:
        action_type = _describe_action(action)
        self.logger.log(self.level, "▶️ dispatching %s", action_type)
        self.logger.log(self.level, "🔄 state before %s: %r", action_type, prev_state)

    def on_complete(self, next_state: Any, action: Any) -> None:
        self.logger.log(self.level, "✅ state after %s: %r", _describe_action(action), next_state)

    def on_error(self, error: Exception, action: Any) -> None:
        self.logger.error("❌ error in %s: %s", _describe_action(action), error)


# ———— ErrorMiddleware ————
class ErrorMiddleware(BaseMiddleware):
    """
    捕獲 dispatch 過程中的異常並回報給錯誤處理器，之後繼續拋出。

    使用場景:
    - 當需要統一記錄 reducer 或 listener 拋出的異常時。
    """

    def __init__(self, handler: Optional[ErrorHandler] = None) -> None:
        self.handler = handler or global_error_handler

    def on_error(self, error: Exception, action: Any) -> None:
        self.handler.handle(error)
