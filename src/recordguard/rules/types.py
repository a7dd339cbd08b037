"""Types for rule group tables and constraint clauses."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

# A field's rule specification: "required|max:255" or ["required", "max:255"]
RuleSpec = Union[str, list[str]]

# field -> spec, for one lifecycle event
RuleGroup = dict[str, RuleSpec]

# {"errors"|"warnings": {event: {field: spec}}}
RuleGroupTable = dict[str, dict[str, RuleGroup]]

# field -> ordered, pipe-free clauses
ResolvedRules = dict[str, list[str]]

SAVING_KEYS = ("saving", "save")
CREATING_KEYS = ("creating", "create")
UPDATING_KEYS = ("updating", "update")
DELETING = "deleting"
RESTORING = "restoring"

# Rules whose parameters are taken verbatim rather than split on commas
_UNSPLIT_RULES = frozenset({"regex", "not_regex"})


class RuleType(Enum):
    """Which sub-table of the rule group table to resolve."""

    ERRORS = "errors"
    WARNINGS = "warnings"


@dataclass(frozen=True)
class Clause:
    """One atomic constraint, e.g. ``unique:users,email,7,id``.

    Attributes:
        name: Rule tag (e.g., "unique")
        parameters: Positional parameters in declared order
    """

    name: str
    parameters: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def parse(cls, text: str) -> "Clause":
        name, sep, rest = text.partition(":")
        name = name.strip()
        if not sep:
            return cls(name=name)
        if name.lower() in _UNSPLIT_RULES:
            return cls(name=name, parameters=(rest,))
        return cls(name=name, parameters=tuple(p.strip() for p in rest.split(",")))

    @property
    def tag(self) -> str:
        """Normalized rule tag used for registry lookups."""
        return self.name.lower()

    def with_parameters(self, parameters: Any) -> "Clause":
        return Clause(name=self.name, parameters=tuple(str(p) for p in parameters))

    def __str__(self) -> str:
        if not self.parameters:
            return self.name
        return f"{self.name}:{','.join(self.parameters)}"
