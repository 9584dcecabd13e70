"""
PyReduX 共用的類型定義。

集中定義 reducer、listener、dispatch、中介軟體與 enhancer 的呼叫約定，
供各模組的型別提示使用。
"""

from typing import Any, Callable, Optional, TypeVar

from typing_extensions import Protocol, TypedDict


S = TypeVar("S")  # 狀態類型
P = TypeVar("P")  # 負載類型

# Reducer: (state, action) -> state，缺少狀態時 state 為 None
Reducer = Callable[[Optional[S], Any], S]
# Listener: 不帶參數的回調，在 listener 內透過 get_state() 讀取狀態
Listener = Callable[[], Any]
Unsubscribe = Callable[[], None]
GetState = Callable[[], Any]
DispatchFunction = Callable[[Any], Any]
NextDispatch = Callable[[Any], Any]
ActionHandler = Callable[[Any, Any], Any]
StateSelector = Callable[[Any], Any]


class ActionCreator(Protocol):
    """帶有 type 屬性的 Action 生成器函數。"""

    type: str

    def __call__(self, *args: Any, **kwargs: Any) -> Any: ...


class StoreLike(Protocol):
    """Store 對外公開的操作集合。"""

    def get_state(self) -> Any: ...

    def dispatch(self, action: Any) -> Any: ...

    def subscribe(self, listener: Listener) -> Unsubscribe: ...

    def replace_reducer(self, next_reducer: Reducer[Any]) -> None: ...


class MiddlewareAPILike(Protocol):
    """中介軟體在建立時取得的固定視圖。"""

    def get_state(self) -> Any: ...

    def dispatch(self, action: Any) -> Any: ...


# 中介軟體: (api) -> (next) -> (action) -> result
MiddlewareFunction = Callable[[NextDispatch], DispatchFunction]
Middleware = Callable[[MiddlewareAPILike], MiddlewareFunction]
# Store 建立函數: (reducer, preloaded_state) -> store
StoreCreator = Callable[..., StoreLike]
# Enhancer: (store_creator) -> store_creator
StoreEnhancer = Callable[[StoreCreator], StoreCreator]


class ActionContext(TypedDict, total=False):
    """中介軟體 action_context 在 action 分發前後傳遞的上下文數據。"""

    action: Any
    prev_state: Any
    next_state: Any
    result: Any
    error: Optional[Exception]
