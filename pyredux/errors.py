"""
PyReduX 錯誤處理模組。

定義所有 PyReduX 異常的層級，以及集中式的錯誤處理器。
驗證錯誤一律在違反約定的呼叫點同步拋出，不在內部吞掉。
"""

import logging
import traceback
from typing import Any, Callable, Dict, List, Optional, Union


logger = logging.getLogger(__name__)


class PyReduxError(Exception):
    """所有 PyReduX 異常的基礎類。"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.traceback = "".join(traceback.format_stack()[:-1])

    def to_dict(self) -> Dict[str, Any]:
        """
        將錯誤轉換為可序列化的字典。

        Returns:
            包含錯誤類型、訊息與細節的字典
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": dict(self.details),
            "traceback": self.traceback,
        }

    def __str__(self) -> str:
        if not self.details:
            return self.message
        details = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        return f"{self.message} ({details})"


class InvalidArgumentError(PyReduxError, TypeError):
    """
    公開 API 收到不符合約定的參數。

    例如不可呼叫的 reducer、enhancer、listener，缺少 type 的 action，
    或既非函數也非映射的 action creators。
    """

    def __init__(self, message: str, argument: str, value: Any = None, expected: Optional[str] = None) -> None:
        super().__init__(
            message,
            {"argument": argument, "expected": expected, "value_type": type(value).__name__},
        )
        self.argument = argument
        self.value = value
        self.expected = expected


class ListenerError(PyReduxError):
    """被隔離的 listener 在通知過程中拋出的異常。"""

    def __init__(self, listener: Callable[[], Any], error: Exception, action_type: Any = None) -> None:
        name = getattr(listener, "__qualname__", repr(listener))
        super().__init__(
            f"Listener {name} raised {error.__class__.__name__}: {error}",
            {"listener": name, "action_type": action_type},
        )
        self.listener = listener
        self.error = error
        self.__cause__ = error


class ErrorHandler:
    """
    集中式錯誤處理器，負責日誌記錄與錯誤回報。

    處理器本身不會重新拋出錯誤；是否繼續傳播由呼叫端決定。
    """

    def __init__(self, logger_name: str = __name__) -> None:
        self.logger = logging.getLogger(logger_name)
        self.handlers: List[Callable[[PyReduxError], None]] = []

    def register_handler(self, handler: Callable[[PyReduxError], None]) -> Callable[[], None]:
        """
        註冊一個錯誤回調。

        Args:
            handler: 接收 PyReduxError 的回調函數

        Returns:
            取消註冊的函數
        """
        self.handlers.append(handler)

        def unregister() -> None:
            if handler in self.handlers:
                self.handlers.remove(handler)

        return unregister

    def handle(self, error: Union[PyReduxError, Exception]) -> PyReduxError:
        """
        記錄錯誤並依序通知所有已註冊的回調。

        Args:
            error: 要處理的錯誤，非 PyReduxError 會先被包裝

        Returns:
            實際回報的 PyReduxError
        """
        if not isinstance(error, PyReduxError):
            wrapped = PyReduxError(f"{error.__class__.__name__}: {error}", {"original": error.__class__.__name__})
            wrapped.__cause__ = error
            error = wrapped

        self.logger.error("%s", error, exc_info=error.__cause__ or error)
        for handler in list(self.handlers):
            handler(error)
        return error


# 單例錯誤處理器
global_error_handler = ErrorHandler()
