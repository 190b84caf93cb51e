from typing import Any


def extract_error_message(body: Any, status: int, fallback: str = "request failed") -> str:
    """
    Duffel error bodies look like {"errors": [{"message": ..., "title": ...}]}.
    The first entry's message wins; otherwise "<fallback>: <status>".
    """
    if isinstance(body, dict):
        errors = body.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            first = errors[0]
            message = first.get("message") or first.get("title")
            if isinstance(message, str) and message.strip():
                return message.strip()

    return f"{fallback}: {status}"
