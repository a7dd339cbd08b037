"""In-process event bus for validation notifications.

Two events are announced per record type:
- ``recordguard.validating: <Type>`` (cancellable) with (subject, event)
- ``recordguard.validated: <Type>`` with (subject, status), where status
  is one of "skipped", "passed", "failed"
"""

from collections.abc import Callable
from typing import Any

Listener = Callable[..., Any]


def validating_event(record_type: str) -> str:
    return f"recordguard.validating: {record_type}"


def validated_event(record_type: str) -> str:
    return f"recordguard.validated: {record_type}"


class EventBus:
    """Named events with ordered listeners.

    Unlike the rule registries this bus is an instance, passed to the
    dispatcher that announces on it.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def listen(self, event: str, listener: Listener) -> None:
        """Register a listener; listeners run in registration order."""
        self._listeners.setdefault(event, []).append(listener)

    def has_listeners(self, event: str) -> bool:
        return bool(self._listeners.get(event))

    def forget(self, event: str) -> None:
        self._listeners.pop(event, None)

    def until(self, event: str, *payload: Any) -> Any:
        """Call listeners until one returns a non-None value, and return it.

        Returns None if every listener returned None.
        """
        for listener in list(self._listeners.get(event, [])):
            response = listener(*payload)
            if response is not None:
                return response
        return None

    def fire(self, event: str, *payload: Any) -> list[Any]:
        """Call every listener and collect their responses."""
        return [listener(*payload) for listener in list(self._listeners.get(event, []))]
