from graph.state import HomeState

MESSAGES = {
    "missing": (
        "⚠️ Missing Employees Detected: there are {count} employees missing "
        "from today's attendance records ({employees})"
    ),
    "error": "Error loading data: {error}",
}


def notify_node(state: HomeState, notifier=None) -> dict:
    """Push the Home view's alerts to the notifier."""
    if notifier is None:
        return {}

    if state.get("status") == "error":
        notifier.send_error(MESSAGES["error"].format(error=state["error_message"]))
        return {}

    missing = state.get("missing_employees") or []
    if missing:
        notifier.send(
            MESSAGES["missing"].format(count=len(missing), employees=", ".join(missing))
        )
    return {}
