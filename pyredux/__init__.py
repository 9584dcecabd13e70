"""
PyReduX：單執行緒、同步的狀態容器。

狀態只能透過純函數 reducer 更新，透過訂閱觀察，
並可用可組合的中介軟體攔截 dispatch。
"""

from .errors import (
    PyReduxError, InvalidArgumentError, ListenerError,
    ErrorHandler, global_error_handler
)
from .actions import Action, ActionTypes, action_type_of, bind_action_creators, create_action
from .config import StoreConfig
from .reducers import combine_reducers, create_reducer, on
from .middleware import (
    BaseMiddleware, ErrorMiddleware, LoggerMiddleware, MiddlewareAPI,
    apply_middleware, compose
)
from .store import Store, create_store
from .store_selectors import create_selector

__version__ = "0.1.0"

# 匯出所有公開 API
__all__ = [
    # Errors
    "PyReduxError", "InvalidArgumentError", "ListenerError",
    "ErrorHandler", "global_error_handler",

    # Actions
    "Action", "ActionTypes", "action_type_of", "bind_action_creators", "create_action",

    # Config
    "StoreConfig",

    # Reducers
    "combine_reducers", "create_reducer", "on",

    # Middleware
    "BaseMiddleware", "ErrorMiddleware", "LoggerMiddleware", "MiddlewareAPI",
    "apply_middleware", "compose",

    # Store
    "Store", "create_store",

    # Selectors
    "create_selector",
]
