"""Normalization of rule specifications into clause lists."""

from typing import Any, Mapping

from recordguard.exceptions import RuleConfigurationError
from recordguard.rules.types import ResolvedRules


def normalize_spec(field: str, spec: Any) -> list[str]:
    """Convert one field's rule specification to an ordered clause list.

    A string is split on pipes, one clause per segment. A list is used
    as-is, which lets clauses such as regex patterns contain pipes.

    Raises:
        RuleConfigurationError: If spec is neither a string nor a list of strings
    """
    if isinstance(spec, str):
        return [clause for clause in spec.split("|") if clause.strip()]

    if isinstance(spec, (list, tuple)):
        for clause in spec:
            if not isinstance(clause, str):
                raise RuleConfigurationError(
                    f"Cannot make validation rules for '{field}' from a list "
                    f"containing {type(clause).__name__}, expecting strings"
                )
        return list(spec)

    raise RuleConfigurationError(
        f"Cannot make validation rules for '{field}' from "
        f"{type(spec).__name__}, expecting string or list"
    )


def normalize_group(group: Any, name: str = "<inline>") -> ResolvedRules:
    """Normalize a whole rule group (field -> spec) to field -> clauses."""
    if not isinstance(group, Mapping):
        raise RuleConfigurationError(
            f"Rule group '{name}' must be a mapping of field to rules, "
            f"got {type(group).__name__}"
        )
    return {field: normalize_spec(field, spec) for field, spec in group.items()}


def format_rules(rules: Mapping[str, list[str]]) -> dict[str, str]:
    """Join each field's clauses back into a single pipe-delimited string."""
    return {field: "|".join(clauses) for field, clauses in rules.items()}
