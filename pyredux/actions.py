"""
基於 PyReduX 的 Action 定義模組。

此模組提供 Action 類別、創建 Action 生成器的功能，
以及讓呼叫端不必顯式 dispatch 的 bind_action_creators。
Actions 是描述狀態變更意圖的不可變對象，必須帶有 type 判別欄位。
"""

import logging
from typing import Any, Callable, Dict, Generic, Mapping, Optional, Union, overload

from immutables import Map

from .errors import InvalidArgumentError
from .types import P, ActionCreator, DispatchFunction


logger = logging.getLogger(__name__)


class ActionTypes:
    """
    PyReduX 保留的 Action 類型。

    使用帶命名空間的字串，避免與使用者定義的類型衝突。
    """

    INIT = "@@pyredux/INIT"


class Action(Generic[P]):
    """
    表示一個有類型和可選負載的動作。

    泛型參數:
        P: 負載的類型

    屬性:
        type: 動作的類型字符串
        payload: 動作的負載數據（可選）
    """
    __slots__ = ('type', 'payload')

    def __init__(self, type: str, payload: Optional[P] = None):
        super().__setattr__('type', type)
        super().__setattr__('payload', payload)

    def __setattr__(self, name, value):
        if name not in self.__slots__:
            raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")
        raise AttributeError(f"Cannot modify immutable instance attribute '{name}'")

    def __eq__(self, other):
        if not isinstance(other, Action):
            return NotImplemented
        return self.type == other.type and self.payload == other.payload

    def __hash__(self):
        return hash((self.type, self.payload))

    def __repr__(self):
        return f"Action(type='{self.type}', payload={repr(self.payload)})"

    # 與以字典表示的 action 相容的唯讀存取
    def __getitem__(self, key: str) -> Any:
        if key not in self.__slots__:
            raise KeyError(key)
        return getattr(self, key)

    def __contains__(self, key: object) -> bool:
        return key in self.__slots__

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self.__slots__:
            return default
        return getattr(self, key)


# 不屬於結構化記錄的值
_SCALAR_TYPES = (str, bytes, bytearray, int, float, complex)
_COLLECTION_TYPES = (list, tuple, set, frozenset)

_EXPECTED_ACTION = "a mapping with a 'type' key or an object with a 'type' attribute"


def action_type_of(action: Any) -> Any:
    """
    取得 action 的 type 判別欄位。

    接受帶 "type" 鍵的映射，或帶 type 屬性的非可呼叫物件
    （Action、pydantic 模型、dataclass 等）。

    Args:
        action: 要檢查的 action

    Returns:
        action 的 type 值

    Raises:
        InvalidArgumentError: action 不是結構化記錄，或缺少 type 欄位
    """
    if (
        action is None
        or isinstance(action, _SCALAR_TYPES)
        or callable(action)
        or (isinstance(action, _COLLECTION_TYPES) and not hasattr(action, "type"))
    ):
        raise InvalidArgumentError(
            "Expected the action to be a structured record.",
            "action", action, _EXPECTED_ACTION,
        )

    if isinstance(action, Mapping):
        action_type = action.get("type")
    else:
        action_type = getattr(action, "type", None)

    if action_type is None:
        raise InvalidArgumentError(
            'Actions must have a "type" field.',
            "action", action, _EXPECTED_ACTION,
        )
    return action_type


def _process_payload(payload: Any) -> Any:
    """
    處理 payload，將字典轉換為不可變結構。

    Args:
        payload: 原始 payload

    Returns:
        處理後的 payload
    """
    if isinstance(payload, dict):
        return Map(payload)
    return payload


@overload
def create_action(action_type: str) -> ActionCreator:
    ...


@overload
def create_action(action_type: str, prepare_fn: Callable[..., P]) -> ActionCreator:
    ...


def create_action(action_type: str, prepare_fn: Optional[Callable[..., Any]] = None) -> ActionCreator:
    """
    創建一個 Action 生成器函數。

    Args:
        action_type: Action 的類型標識符
        prepare_fn: 可選的預處理函數，用於在創建 Action 前處理輸入參數

    Returns:
        一個可調用的函數，用於生成指定類型的 Action

    範例:
        >>> increment = create_action("[Counter] Increment")
        >>> increment()  # 返回 Action(type="[Counter] Increment", payload=None)
        >>>
        >>> add = create_action("[Counter] Add", lambda amount: amount)
        >>> add(5)  # 返回 Action(type="[Counter] Add", payload=5)
    """
    if action_type is None:
        raise InvalidArgumentError("Expected an action type.", "action_type", action_type, "str")

    def action_creator(*args: Any, **kwargs: Any) -> Action[Any]:
        if prepare_fn:
            payload = prepare_fn(*args, **kwargs)
        elif len(args) == 1 and not kwargs:
            payload = args[0]
        elif args or kwargs:
            payload: Dict[Union[int, str], Any] = dict(zip(range(len(args)), args))
            payload.update(kwargs)
        else:
            # 無參數，無負載
            return Action(action_type)
        return Action(action_type, _process_payload(payload))

    # 添加 type 屬性以便於識別
    action_creator.type = action_type  # type: ignore

    return action_creator  # type: ignore


def _bind_action_creator(action_creator: Callable[..., Any], dispatch: DispatchFunction) -> Callable[..., Any]:
    def bound_action_creator(*args: Any, **kwargs: Any) -> Any:
        return dispatch(action_creator(*args, **kwargs))

    bound_action_creator.__wrapped__ = action_creator  # type: ignore[attr-defined]
    if hasattr(action_creator, "type"):
        bound_action_creator.type = action_creator.type  # type: ignore[attr-defined]
    return bound_action_creator


def bind_action_creators(
    action_creators: Union[Callable[..., Any], Mapping[str, Callable[..., Any]]],
    dispatch: DispatchFunction,
    *,
    strict: bool = False,
) -> Union[Callable[..., Any], Dict[str, Callable[..., Any]]]:
    """
    將 action creator 包裝成呼叫後立即 dispatch 的函數。

    Args:
        action_creators: 單個 action creator，或鍵名到 action creator 的映射
        dispatch: 用於分發生成結果的 dispatch 函數
        strict: 為 True 時，映射中不可呼叫的項目會拋出錯誤而非被略過

    Returns:
        傳入單個函數時返回包裝後的函數；傳入映射時返回同鍵名的字典

    Raises:
        InvalidArgumentError: action_creators 既不是函數也不是映射
    """
    if callable(action_creators):
        return _bind_action_creator(action_creators, dispatch)

    if not isinstance(action_creators, Mapping):
        raise InvalidArgumentError(
            "Expected action creators to be a function or a mapping of functions.",
            "action_creators", action_creators, "callable or mapping",
        )

    bound_action_creators: Dict[str, Callable[..., Any]] = {}
    for key, action_creator in action_creators.items():
        if callable(action_creator):
            bound_action_creators[key] = _bind_action_creator(action_creator, dispatch)
        elif strict:
            raise InvalidArgumentError(
                f"Expected the action creator for key {key!r} to be a function.",
                key, action_creator, "callable",
            )
        else:
            logger.warning("Skipping non-callable action creator for key %r", key)

    return bound_action_creators
