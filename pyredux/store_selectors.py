import time
from typing import Any, Callable, List, Optional, Tuple

from .errors import InvalidArgumentError
from .types import StateSelector


def create_selector(
    *selectors: StateSelector,
    result_fn: Optional[Callable[..., Any]] = None,
    deep: bool = False,
    ttl: Optional[float] = None,
    maxsize: int = 128,
) -> StateSelector:
    """
    創建一個複合選擇器，支援記憶化、深淺比較與TTL控制

    Args:
        *selectors: 多個輸入選擇器，這些函數會從 state 中提取對應的值
        result_fn: 處理輸出結果的函數，將多個選擇器的輸出進行處理
        deep: 是否進行深度比較（預設為 False，以 ``is`` 比較）
        ttl: 快取有效時間（秒），若超過此時間則重新計算，預設為無限
        maxsize: 緩存的最大條目數，預設為128

    Returns:
        經過快取優化的 selector 函數
    """
    if not selectors:
        raise InvalidArgumentError("Expected at least one input selector.", "selectors", selectors, "callable")
    for select in selectors:
        if not callable(select):
            raise InvalidArgumentError("Expected the input selector to be a function.", "selectors", select, "callable")
    if maxsize < 1:
        raise InvalidArgumentError("Expected maxsize to be positive.", "maxsize", maxsize, "int >= 1")

    # 如果沒有 result_fn 且只有一個選擇器，直接返回該選擇器
    if result_fn is None and len(selectors) == 1:
        return selectors[0]

    if result_fn is None:
        result_fn = _as_tuple

    # 每項為 (時間戳, 輸入值, 結果)，最舊的在最前面
    cache: List[Tuple[float, Tuple[Any, ...], Any]] = []
    hits = misses = 0

    def selector(state: Any) -> Any:
        nonlocal cache, hits, misses

        inputs = tuple(select(state) for select in selectors)
        now = time.monotonic()

        if ttl is not None:
            cache = [item for item in cache if now - item[0] <= ttl]

        for _, cached_inputs, cached_result in cache:
            if deep:
                matched = _safe_deep_equals(inputs, cached_inputs)
            else:
                matched = all(a is b for a, b in zip(inputs, cached_inputs))
            if matched:
                hits += 1
                return cached_result

        misses += 1
        result = result_fn(*inputs)
        while len(cache) >= maxsize:
            cache.pop(0)
        cache.append((now, inputs, result))
        return result

    # 添加緩存管理方法
    def cache_info() -> Tuple[int, int, int, int]:
        return (hits, misses, maxsize, len(cache))

    def cache_clear() -> None:
        nonlocal hits, misses
        cache.clear()
        hits = misses = 0

    selector.cache_info = cache_info  # type: ignore
    selector.cache_clear = cache_clear  # type: ignore

    return selector


def _as_tuple(*args: Any) -> Tuple[Any, ...]:
    return args


def _safe_deep_equals(a: Any, b: Any) -> bool:
    """深度比較，型別不同或比較失敗時返回False"""
    if a is b:
        return True
    if type(a) != type(b):
        return False
    if isinstance(a, dict):
        if len(a) != len(b):
            return False
        return all(key in b and _safe_deep_equals(a[key], b[key]) for key in a)
    if isinstance(a, (list, tuple)):
        if len(a) != len(b):
            return False
        return all(_safe_deep_equals(x, y) for x, y in zip(a, b))
    try:
        return bool(a == b)
    except Exception:
        return False
