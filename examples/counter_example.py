"""
PyReduX 範例：計數器與頁面內容，展示 reducer 合併、中介軟體與訂閱。

以 print 代替畫面渲染，listener 在每次 dispatch 後自行讀取狀態。
"""

import logging

from pydantic import BaseModel

from pyredux import (
    LoggerMiddleware,
    apply_middleware,
    bind_action_creators,
    combine_reducers,
    create_action,
    create_reducer,
    create_selector,
    create_store,
    on,
)


# ====== Model Definition ======
class PageState(BaseModel):
    header: str = "Header"
    body: str = "Body"


# ====== Actions ======
increment = create_action("[Counter] Increment")
increment_by = create_action("[Counter] IncrementBy", lambda amount: amount)
update_header = create_action("[Page] UpdateHeader", lambda header: header)
update_body = create_action("[Page] UpdateBody", lambda body: body)


# ====== Reducers ======
counter_reducer = create_reducer(
    0,
    on(increment, lambda state, action: state + 1),
    on(increment_by, lambda state, action: state + action.payload),
)

page_reducer = create_reducer(
    PageState(),
    on(update_header, lambda state, action: state.model_copy(update={"header": action.payload})),
    on(update_body, lambda state, action: state.model_copy(update={"body": action.payload})),
)

root_reducer = combine_reducers({"counter": counter_reducer, "page": page_reducer})


# ====== Selectors ======
get_page = create_selector(lambda state: state["page"])
get_summary = create_selector(
    lambda state: state["counter"],
    get_page,
    result_fn=lambda count, page: f"{page.header} / {page.body} (count={count})",
)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    store = create_store(root_reducer, apply_middleware(LoggerMiddleware()))

    def render_header() -> None:
        print(f"render header: {get_page(store.get_state()).header}")

    def render_body() -> None:
        print(f"render body: {get_page(store.get_state()).body}")

    render_header()
    render_body()
    store.subscribe(render_header)
    unsubscribe_body = store.subscribe(render_body)
    subscription = store.select(get_summary).subscribe(lambda summary: print(f"summary: {summary}"))

    actions = bind_action_creators(
        {"increment": increment, "increment_by": increment_by, "update_header": update_header},
        store.dispatch,
    )
    actions["update_header"]("New Header")
    store.dispatch(update_body("New Body"))
    actions["increment"]()

    unsubscribe_body()
    actions["increment_by"](5)

    subscription.dispose()
    print(f"final state: {store.state}")


if __name__ == "__main__":
    main()
