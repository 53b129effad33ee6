def connected_to_operator() -> str:
    return "You have been connected to an operator. Please describe your issue."


def new_customer_connected(customer_name: str) -> str:
    return f"New customer connected: {customer_name}"


def queued(position: int | None) -> str:
    base = "All operators are currently busy. You have been placed in the queue. Please wait."
    if position:
        return f"{base} Position: {position}."
    return base


def session_ended() -> str:
    return "Your support session has ended."


def session_closed_by_peer() -> str:
    return "The support session has been closed."


def not_in_session() -> str:
    return "You are not in an active session."


def registered_as_operator(languages: list[str]) -> str:
    return f"You have been registered as an operator with languages: {', '.join(languages)}"


def register_usage(token: str) -> str:
    return f"Usage: {token} uz,ru,en"


def availability_changed(available: bool) -> str:
    return "You are now available." if available else "You are now marked as busy."


def unsupported_message() -> str:
    return "Unsupported message type."


def usage_hint(register_token: str) -> str:
    return (
        "Please type /start to begin a support session "
        f"or {register_token} languages to register as an operator."
    )
