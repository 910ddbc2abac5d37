# graph/graph.py
from langgraph.graph import StateGraph, END
from graph.state import HomeState


def route_after_fetch(state: HomeState) -> str:
    status = state.get("status")
    if status == "success":
        return "shift_filter"
    if status == "error":
        return "notify"
    return "end"


def build_graph(
    client=None,
    notifier=None,
    rules=None,
    tz=None,
    guard=None,
):
    """Build the Home dashboard pipeline.

    Nodes take their collaborators as keyword arguments, so each is bound with
    functools.partial to the (state) -> dict shape the graph expects.
    """
    from functools import partial
    from graph.nodes.fetch_node import fetch_node
    from graph.nodes.shift_filter_node import shift_filter_node
    from graph.nodes.missing_check_node import missing_check_node
    from graph.nodes.notify_node import notify_node
    from services.shift_window import DEFAULT_RULES
    from views.base import RequestSequence

    rules = rules or DEFAULT_RULES
    guard = guard or RequestSequence()

    fetch_wrapped = partial(fetch_node, client=client, guard=guard, rules=rules)
    shift_filter_wrapped = partial(shift_filter_node, rules=rules, tz=tz)
    missing_check_wrapped = partial(missing_check_node, rules=rules, tz=tz)
    notify_wrapped = partial(notify_node, notifier=notifier)

    workflow = StateGraph(HomeState)

    workflow.add_node("fetch", fetch_wrapped)
    workflow.add_node("shift_filter", shift_filter_wrapped)
    workflow.add_node("missing_check", missing_check_wrapped)
    workflow.add_node("notify", notify_wrapped)

    workflow.set_entry_point("fetch")

    workflow.add_conditional_edges(
        "fetch",
        route_after_fetch,
        {"shift_filter": "shift_filter", "notify": "notify", "end": END},
    )

    workflow.add_edge("shift_filter", "missing_check")
    workflow.add_edge("missing_check", "notify")
    workflow.add_edge("notify", END)

    return workflow.compile()
