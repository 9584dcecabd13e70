"""
基於 PyReduX 的 Reducer 工具模組。

提供以初始狀態與處理器建立 reducer 的 create_reducer / on，
以及把多個子 reducer 合併成單一 reducer 的 combine_reducers。
"""

import logging
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from immutables import Map

from .actions import action_type_of
from .errors import InvalidArgumentError
from .types import S, ActionHandler, Reducer


logger = logging.getLogger(__name__)


def create_reducer(initial_state: S, *handlers: Union[Tuple[Any, ActionHandler], Mapping[Any, ActionHandler]]) -> Reducer[S]:
    """
    創建一個 reducer 函式，用於處理狀態變更。

    Args:
        initial_state: 初始狀態，state 為 None 時使用。
        *handlers: 一系列 (action_type, handler_fn) 元組或使用 on 函式創建的處理器。

    Returns:
        一個 reducer 函式，根據 action 的類型執行對應的處理邏輯。
    """
    action_handlers: Dict[Any, ActionHandler] = {}  # 儲存 action 類型與處理函式的對應關係

    for handler in handlers:
        if isinstance(handler, tuple) and len(handler) == 2:
            # 如果 handler 是元組，則解構為 action 類型與處理函式
            action_type, handler_fn = handler
            action_handlers[action_type] = handler_fn
        elif isinstance(handler, Mapping):
            # 如果 handler 是字典，則直接更新到 action_handlers
            action_handlers.update(handler)
        else:
            raise InvalidArgumentError(
                "Expected a (type, handler) tuple or a mapping from on().",
                "handlers", handler, "tuple or mapping",
            )

    for action_type, handler_fn in action_handlers.items():
        if not callable(handler_fn):
            raise InvalidArgumentError(
                f"Expected the handler for {action_type!r} to be a function.",
                "handlers", handler_fn, "callable",
            )

    def reducer(state: Optional[S], action: Any) -> S:
        """
        Reducer 函式，根據 action 處理狀態變更。

        Args:
            state: 當前狀態，為 None 時使用初始狀態。
            action: 要處理的 action。

        Returns:
            新的狀態，如果沒有對應的處理器則返回原狀態。
        """
        if state is None:
            state = initial_state

        handler = action_handlers.get(action_type_of(action))  # 根據 action 類型查找處理函式
        if handler:
            return handler(state, action)
        return state

    # 設置 reducer 的初始狀態和處理器映射
    reducer.initial_state = initial_state  # type: ignore[attr-defined]
    reducer.handlers = action_handlers  # type: ignore[attr-defined]

    return reducer


def on(action_creator_or_type: Any, handler: ActionHandler) -> Dict[Any, ActionHandler]:
    """
    創建一個 action 類型與處理函式的映射。

    Args:
        action_creator_or_type: Action 創建器函式或 Action 類型字串。
        handler: 處理該 Action 的函式，接收 (state, action) 並返回新狀態。

    Returns:
        一個包含 {action_type: handler} 的字典。
    """
    if callable(action_creator_or_type) and hasattr(action_creator_or_type, 'type'):
        # 如果是 action 創建器函式，則提取其類型
        action_type = action_creator_or_type.type
    else:
        action_type = action_creator_or_type

    return {action_type: handler}


def combine_reducers(reducers: Mapping[str, Reducer[Any]], *, strict: bool = False) -> Reducer[Any]:
    """
    把鍵名到子 reducer 的映射合併為單一 reducer。

    每個 action 都會依註冊順序交給所有子 reducer；子狀態以 ``is`` 比較，
    全部未變時返回原本的 state 物件，否則返回只包含 reducer 鍵名的新映射。
    輸入為 ``immutables.Map`` 時輸出同樣是 ``Map``，其餘情況輸出 ``dict``。

    Args:
        reducers: 狀態鍵名到子 reducer 的映射。
        strict: 為 True 時，不可呼叫的項目會拋出錯誤而非被略過。

    Returns:
        合併後的 reducer。

    Raises:
        InvalidArgumentError: reducers 不是映射，或 strict 模式下含有不可呼叫的項目。
    """
    if not isinstance(reducers, Mapping):
        raise InvalidArgumentError(
            "Expected reducers to be a mapping of reducer functions.",
            "reducers", reducers, "mapping",
        )

    final_reducers: Dict[str, Reducer[Any]] = {}
    for key, reducer in reducers.items():
        if callable(reducer):
            final_reducers[key] = reducer
        elif strict:
            raise InvalidArgumentError(
                f"Expected the reducer for key {key!r} to be a function.",
                key, reducer, "callable",
            )
        else:
            logger.warning("Skipping non-callable reducer for key %r", key)

    def combination(state: Optional[Mapping[str, Any]], action: Any) -> Mapping[str, Any]:
        if state is None:
            state = {}

        next_state: Dict[str, Any] = {}
        has_changed = False
        for key, reducer in final_reducers.items():
            previous_state_for_key = state.get(key)
            next_state_for_key = reducer(previous_state_for_key, action)
            next_state[key] = next_state_for_key
            has_changed = has_changed or next_state_for_key is not previous_state_for_key

        if not has_changed:
            return state
        if isinstance(state, Map):
            return Map(next_state)
        return next_state

    combination.reducers = final_reducers  # type: ignore[attr-defined]
    return combination
