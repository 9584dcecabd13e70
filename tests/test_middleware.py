"""Tests for compose, apply_middleware and the class-based middleware."""

from __future__ import annotations

import logging
from typing import Any, Callable, List

import pytest

from pyredux import (
    BaseMiddleware,
    ErrorHandler,
    ErrorMiddleware,
    InvalidArgumentError,
    LoggerMiddleware,
    MiddlewareAPI,
    PyReduxError,
    apply_middleware,
    compose,
    create_store,
)

from .conftest import counter_reducer


def recording_middleware(name: str, log: List[str]) -> Callable[[Any], Any]:
    def middleware(api: Any) -> Any:
        def wrap(next_dispatch: Any) -> Any:
            def dispatch(action: Any) -> Any:
                log.append(f"{name} before")
                result = next_dispatch(action)
                log.append(f"{name} after")
                return result
            return dispatch
        return wrap
    return middleware


# ------------------------------------------------------------------
# compose
# ------------------------------------------------------------------


class TestCompose:
    def test_no_functions_is_identity(self) -> None:
        value = object()
        assert compose()(value) is value

    def test_single_function_is_returned_as_is(self) -> None:
        def f(x: int) -> int:
            return x + 1

        assert compose(f) is f
        assert compose(f)(1) == f(1)

    def test_composes_right_to_left(self) -> None:
        def f(x: str) -> str:
            return f"f({x})"

        def g(x: str) -> str:
            return f"g({x})"

        def h(x: str) -> str:
            return f"h({x})"

        assert compose(f, g, h)("x") == f(g(h("x"))) == "f(g(h(x)))"

    def test_innermost_function_receives_all_arguments(self) -> None:
        composed = compose(str, lambda a, b, scale=1: (a + b) * scale)
        assert composed(1, 2, scale=3) == "9"


# ------------------------------------------------------------------
# apply_middleware
# ------------------------------------------------------------------


class TestApplyMiddleware:
    def test_wraps_in_registration_order(self) -> None:
        log: List[str] = []
        store = create_store(
            counter_reducer,
            apply_middleware(recording_middleware("mw1", log), recording_middleware("mw2", log)),
        )
        store.dispatch({"type": "INC"})
        assert log == ["mw1 before", "mw2 before", "mw2 after", "mw1 after"]

    def test_dispatch_returns_the_action_through_the_chain(self) -> None:
        log: List[str] = []
        store = create_store(
            counter_reducer,
            {"count": 0},
            apply_middleware(*(recording_middleware(str(i), log) for i in range(3))),
        )
        action = {"type": "INC"}
        assert store.dispatch(action) is action
        assert store.get_state() == {"count": 1}

    def test_factories_are_called_once_with_api(self) -> None:
        apis: List[Any] = []

        def middleware(api: Any) -> Any:
            apis.append(api)
            return lambda next_dispatch: next_dispatch

        store = create_store(counter_reducer, apply_middleware(middleware))
        store.dispatch({"type": "INC"})
        store.dispatch({"type": "INC"})

        assert len(apis) == 1
        assert isinstance(apis[0], MiddlewareAPI)
        assert apis[0].get_state() == {"count": 2}

    def test_api_dispatch_goes_through_the_whole_chain(self) -> None:
        log: List[str] = []

        def redirect(api: Any) -> Any:
            def wrap(next_dispatch: Any) -> Any:
                def dispatch(action: Any) -> Any:
                    if action["type"] == "DOUBLE":
                        api.dispatch({"type": "INC"})
                        return api.dispatch({"type": "INC"})
                    return next_dispatch(action)
                return dispatch
            return wrap

        store = create_store(counter_reducer, apply_middleware(redirect, recording_middleware("rec", log)))
        store.dispatch({"type": "DOUBLE"})
        assert store.get_state() == {"count": 2}
        assert log == ["rec before", "rec after", "rec before", "rec after"]

    def test_store_shares_state_and_listeners_with_base(self) -> None:
        store = create_store(counter_reducer, apply_middleware())
        calls: List[Any] = []
        unsubscribe = store.subscribe(lambda: calls.append(store.get_state()["count"]))
        store.dispatch({"type": "INC"})
        unsubscribe()
        store.dispatch({"type": "INC"})
        assert calls == [1]
        assert store.state == {"count": 2}

    def test_replace_reducer_is_exposed(self) -> None:
        store = create_store(counter_reducer, apply_middleware())
        store.replace_reducer(lambda state, action: {"count": -1})
        assert store.get_state() == {"count": -1}

    def test_middleware_can_observe_state_before_and_after(self) -> None:
        seen: List[Any] = []

        def print_state(api: Any) -> Any:
            def wrap(next_dispatch: Any) -> Any:
                def dispatch(action: Any) -> Any:
                    seen.append(api.get_state())
                    result = next_dispatch(action)
                    seen.append(api.get_state())
                    return result
                return dispatch
            return wrap

        store = create_store(counter_reducer, {"count": 0}, apply_middleware(print_state))
        store.dispatch({"type": "INC"})
        assert seen == [{"count": 0}, {"count": 1}]

    def test_invalid_action_still_rejected(self) -> None:
        store = create_store(counter_reducer, apply_middleware(recording_middleware("mw", [])))
        with pytest.raises(InvalidArgumentError):
            store.dispatch({})
        assert store.get_state() == {"count": 0}

    def test_rejects_non_callable_middleware(self) -> None:
        with pytest.raises(InvalidArgumentError):
            apply_middleware("not middleware")

    def test_enhancers_compose(self) -> None:
        log: List[str] = []
        enhancer = compose(
            apply_middleware(recording_middleware("outer", log)),
            apply_middleware(recording_middleware("inner", log)),
        )
        store = create_store(counter_reducer, enhancer)
        store.dispatch({"type": "INC"})
        assert log == ["outer before", "inner before", "inner after", "outer after"]


# ------------------------------------------------------------------
# Class-based middleware
# ------------------------------------------------------------------


class HookRecorder(BaseMiddleware):
    def __init__(self) -> None:
        self.events: List[Any] = []

    def on_next(self, action: Any, prev_state: Any) -> None:
        self.events.append(("next", action["type"], prev_state))

    def on_complete(self, next_state: Any, action: Any) -> None:
        self.events.append(("complete", action["type"], next_state))

    def on_error(self, error: Exception, action: Any) -> None:
        self.events.append(("error", action["type"], type(error)))


class TestBaseMiddleware:
    def test_hooks_wrap_dispatch(self) -> None:
        recorder = HookRecorder()
        store = create_store(counter_reducer, {"count": 0}, apply_middleware(recorder))
        store.dispatch({"type": "INC"})
        assert recorder.events == [
            ("next", "INC", {"count": 0}),
            ("complete", "INC", {"count": 1}),
        ]

    def test_on_error_then_reraise(self) -> None:
        recorder = HookRecorder()

        def reducer(state: Any, action: Any) -> Any:
            if action["type"] == "BOOM":
                raise ValueError("boom")
            return state

        store = create_store(reducer, {}, apply_middleware(recorder))
        with pytest.raises(ValueError):
            store.dispatch({"type": "BOOM"})
        assert recorder.events[-1] == ("error", "BOOM", ValueError)

    def test_classes_are_instantiated(self) -> None:
        store = create_store(counter_reducer, apply_middleware(BaseMiddleware))
        store.dispatch({"type": "INC"})
        assert store.get_state() == {"count": 1}


class TestLoggerMiddleware:
    def test_logs_before_and_after(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("tests.logger_middleware")
        store = create_store(counter_reducer, {"count": 0}, apply_middleware(LoggerMiddleware(logger)))
        with caplog.at_level(logging.INFO, logger="tests.logger_middleware"):
            store.dispatch({"type": "INC"})

        messages = [record.getMessage() for record in caplog.records]
        assert messages == [
            "▶️ dispatching INC",
            "🔄 state before INC: {'count': 0}",
            "✅ state after INC: {'count': 1}",
        ]

    def test_logs_errors(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("tests.logger_middleware")
        store = create_store(counter_reducer, apply_middleware(LoggerMiddleware(logger)))
        with caplog.at_level(logging.INFO, logger="tests.logger_middleware"):
            with pytest.raises(InvalidArgumentError):
                store.dispatch(None)
        assert "❌ error in None" in caplog.text


class TestErrorMiddleware:
    def test_reports_and_reraises(self) -> None:
        handler = ErrorHandler("tests.error_middleware")
        reported: List[PyReduxError] = []
        handler.register_handler(reported.append)

        def reducer(state: Any, action: Any) -> Any:
            if action["type"] == "BOOM":
                raise RuntimeError("boom")
            return state

        store = create_store(reducer, {}, apply_middleware(ErrorMiddleware(handler)))
        with pytest.raises(RuntimeError):
            store.dispatch({"type": "BOOM"})

        assert len(reported) == 1
        assert isinstance(reported[0].__cause__, RuntimeError)
        assert reported[0].details == {"original": "RuntimeError"}

    def test_passes_through_successful_dispatch(self) -> None:
        handler = ErrorHandler("tests.error_middleware")
        reported: List[PyReduxError] = []
        handler.register_handler(reported.append)
        store = create_store(counter_reducer, apply_middleware(ErrorMiddleware(handler)))
        store.dispatch({"type": "INC"})
        assert reported == []
        assert store.get_state() == {"count": 1}
