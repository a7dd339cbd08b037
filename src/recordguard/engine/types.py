"""Core types for the validation engine."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from recordguard.messages import MessageBag


class QueryService(Protocol):
    """Protocol for storage access during validation.

    Rules that compare against stored rows (unique, exists) receive this
    service through their RuleContext.
    """

    def exists(
        self,
        table: str,
        column: str,
        value: Any,
        *,
        exclude: Any = None,
        exclude_column: str = "id",
        where: Sequence[tuple[str, str]] = (),
    ) -> bool:
        """Check if any row has column == value.

        Args:
            table: Table to query
            column: Column compared against value
            value: Value to look for
            exclude: Identity value of a row to ignore (None for no exclusion)
            exclude_column: Column holding the identity
            where: Extra (column, value) constraints

        Returns:
            True if at least one row matches
        """
        ...

    def count(
        self,
        table: str,
        column: str,
        value: Any,
        *,
        exclude: Any = None,
        exclude_column: str = "id",
        where: Sequence[tuple[str, str]] = (),
    ) -> int:
        """Count rows matching the same criteria as exists()."""
        ...


@dataclass
class RuleContext:
    """Everything a rule check needs to decide on one field.

    Attributes:
        field: Name of the field under validation
        value: The field's current value
        parameters: The clause's positional parameters
        attributes: All attribute values of the record
        rules: Tags of every rule declared on this field
        query: Storage access for unique/exists (None when unavailable)
    """

    field: str
    value: Any
    parameters: tuple[str, ...] = ()
    attributes: dict[str, Any] = field(default_factory=dict)
    rules: frozenset[str] = frozenset()
    query: QueryService | None = None

    def parameter(self, index: int, default: str | None = None) -> str | None:
        if index < len(self.parameters) and self.parameters[index] != "":
            return self.parameters[index]
        return default


@dataclass
class ValidationOutcome:
    """Result of one validation engine run.

    Attributes:
        passed: True if every clause held
        messages: Field -> messages for the clauses that failed
    """

    passed: bool
    messages: MessageBag = field(default_factory=MessageBag)

    @property
    def failed(self) -> bool:
        return not self.passed
