"""Identifier injectors for rules that compare a record against storage.

An injector rewrites a clause so that it accounts for the record being
validated. The only built-in injector handles ``unique``: without it an
existing record would always collide with its own stored row.
"""

from collections.abc import Callable
from typing import Any

from recordguard.rules.types import Clause

# Injector signature: (clause, field, record) -> rewritten clause
Injector = Callable[[Clause, str, Any], Clause]

NULL_LITERAL = "NULL"


class InjectorRegistry:
    """Registry mapping rule tags to injector functions.

    Injectors must be registered explicitly, typically at startup via
    register_builtin_injectors().
    """

    _injectors: dict[str, Injector] = {}

    @classmethod
    def register(cls, tag: str, injector: Injector) -> None:
        """Register an injector for a rule tag.

        Idempotent - re-registering the same tag is a no-op.
        """
        tag = tag.lower()
        if tag in cls._injectors:
            return
        cls._injectors[tag] = injector

    @classmethod
    def get(cls, tag: str) -> Injector | None:
        """Get the injector for a rule tag, or None if the tag has none."""
        return cls._injectors.get(tag.lower())

    @classmethod
    def is_registered(cls, tag: str) -> bool:
        return tag.lower() in cls._injectors

    @classmethod
    def list_registered(cls) -> list[str]:
        return sorted(cls._injectors.keys())

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations. Primarily for testing."""
        cls._injectors.clear()


def _is_unset(parameters: list[str], index: int) -> bool:
    return len(parameters) <= index or parameters[index] == ""


def _set(parameters: list[str], index: int, value: Any) -> None:
    while len(parameters) <= index:
        parameters.append("")
    parameters[index] = str(value)


def inject_unique_identifier(clause: Clause, field: str, record: Any) -> Clause:
    """Fill in the unique rule's table, column, except and id column.

    Parameters are ``unique:table,column,except,idColumn[,col,value...]``.
    The table defaults to the record's table and the column to the field
    being validated. For a stored record, a missing except value becomes
    the record's key and a missing id column its key name. An explicit
    ``NULL`` except value opts out of the exclusion.
    """
    parameters = list(clause.parameters)

    if _is_unset(parameters, 0):
        _set(parameters, 0, record.table)

    if _is_unset(parameters, 1):
        _set(parameters, 1, field)

    if record.exists and record.key is not None:
        if _is_unset(parameters, 2):
            _set(parameters, 2, record.key)
        if _is_unset(parameters, 3):
            _set(parameters, 3, record.key_name)

    return clause.with_parameters(parameters)


def register_builtin_injectors() -> None:
    """Register the injectors shipped with recordguard."""
    InjectorRegistry.register("unique", inject_unique_identifier)
