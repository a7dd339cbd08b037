"""Ordered field -> messages container used for errors and warnings."""

from typing import Any, Iterator


class MessageBag:
    """Collects human-readable messages keyed by field name.

    Messages are only ever appended: adding the same message twice keeps
    both copies, so repeated validation passes accumulate.
    """

    def __init__(self, messages: dict[str, list[str]] | None = None):
        self._messages: dict[str, list[str]] = {}
        if messages:
            self.merge(messages)

    def add(self, key: str, message: str) -> "MessageBag":
        self._messages.setdefault(key, []).append(message)
        return self

    def merge(self, other: "MessageBag | dict[str, list[str]]") -> "MessageBag":
        """Append every message of another bag (or mapping) to this one."""
        items = other.to_dict() if isinstance(other, MessageBag) else other
        for key, messages in items.items():
            for message in messages:
                self.add(key, message)
        return self

    def has(self, key: str) -> bool:
        return bool(self._messages.get(key))

    def get(self, key: str) -> list[str]:
        return list(self._messages.get(key, []))

    def first(self, key: str | None = None) -> str | None:
        messages = self.get(key) if key is not None else self.all()
        return messages[0] if messages else None

    def all(self) -> list[str]:
        return [m for messages in self._messages.values() for m in messages]

    def keys(self) -> list[str]:
        return list(self._messages.keys())

    def count(self) -> int:
        return sum(len(messages) for messages in self._messages.values())

    def is_empty(self) -> bool:
        return self.count() == 0

    def clear(self) -> None:
        self._messages.clear()

    def copy(self) -> "MessageBag":
        return MessageBag(self.to_dict())

    def to_dict(self) -> dict[str, list[str]]:
        return {key: list(messages) for key, messages in self._messages.items()}

    def __len__(self) -> int:
        return self.count()

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __contains__(self, key: Any) -> bool:
        return self.has(key)

    def __repr__(self) -> str:
        return f"MessageBag({self._messages!r})"
