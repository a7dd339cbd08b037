"""Rule resolution: from a rule group table to the rules for one event.

Resolution steps:
1. Pick the rule group keys for the event (identity-derived defaults
   plus requested extras, or exactly the requested keys)
2. Look each key up in the errors or warnings sub-table
3. Normalize every field spec to a clause list
4. Merge fields across groups by concatenation, in key order
5. Optionally rewrite clauses that need the record's identity (unique)
"""

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from recordguard.exceptions import RuleConfigurationError
from recordguard.rules.injectors import InjectorRegistry
from recordguard.rules.parser import normalize_group, normalize_spec
from recordguard.rules.types import (
    CREATING_KEYS,
    SAVING_KEYS,
    UPDATING_KEYS,
    Clause,
    ResolvedRules,
    RuleGroupTable,
    RuleType,
)

if TYPE_CHECKING:
    from recordguard.records import Record

logger = logging.getLogger(__name__)

RuleKey = str | Mapping[str, Any]


class RuleResolver:
    """Computes the field -> clauses mapping handed to the validation engine.

    The resolver never mutates the rule group table it is given.
    """

    def __init__(self, table: RuleGroupTable | None = None):
        self.table = table or {}

    def validatable_states(self, record: "Record") -> list[str]:
        """Default rule group keys for a save of this record."""
        keys = list(SAVING_KEYS)
        if record.has_identity:
            keys.extend(UPDATING_KEYS)
        else:
            keys.extend(CREATING_KEYS)
        return keys

    def rule_keys(
        self,
        record: "Record",
        requested: Iterable[RuleKey] = (),
        only_requested: bool = False,
    ) -> list[RuleKey]:
        """Ordered rule group keys to consult."""
        if isinstance(requested, (str, Mapping)):
            requested = [requested]
        requested = list(requested)
        if only_requested:
            return requested
        return self.validatable_states(record) + requested

    def group(self, key: RuleKey, rule_type: RuleType) -> ResolvedRules:
        """Normalized rule group for a key; missing groups are empty."""
        if isinstance(key, Mapping):
            return normalize_group(key)

        if not isinstance(key, str):
            raise RuleConfigurationError(
                f"Cannot make validation rules from {type(key).__name__}, "
                "expecting string or mapping"
            )

        sub_table = self.table.get(rule_type.value) or {}
        if not isinstance(sub_table, Mapping):
            raise RuleConfigurationError(
                f"Rules for '{rule_type.value}' must be a mapping of event to "
                f"rule group, got {type(sub_table).__name__}"
            )

        group = sub_table.get(key)
        if group is None:
            return {}
        return normalize_group(group, name=f"{rule_type.value}.{key}")

    def resolve(
        self,
        record: "Record",
        requested: Iterable[RuleKey] = (),
        rule_type: RuleType = RuleType.ERRORS,
        only_requested: bool = False,
        inject_unique: bool = True,
    ) -> ResolvedRules:
        """Resolve the rules that apply to the record for an event.

        Args:
            record: The record being validated
            requested: Extra rule group keys (or the only keys when
                only_requested is set), e.g. "deleting" or "publishing"
            rule_type: ERRORS or WARNINGS sub-table
            only_requested: Skip the identity-derived default keys
            inject_unique: Rewrite unique clauses with the record identity

        Returns:
            Mapping of field to ordered clause list
        """
        keys = self.rule_keys(record, requested, only_requested)

        merged: ResolvedRules = {}
        for key in keys:
            for field, clauses in self.group(key, rule_type).items():
                merged.setdefault(field, []).extend(clauses)

        logger.debug(
            "Resolved %s rules for %s from keys %s: %d field(s)",
            rule_type.value,
            record.record_type.name,
            [k if isinstance(k, str) else "<inline>" for k in keys],
            len(merged),
        )

        if inject_unique:
            merged = self.inject_identifiers(merged, record)
        return merged

    def inject_identifiers(
        self, rules: Mapping[str, Any], record: "Record"
    ) -> ResolvedRules:
        """Rewrite every clause that has a registered injector."""
        injected: ResolvedRules = {}
        for field, spec in rules.items():
            clauses = []
            for text in normalize_spec(field, spec):
                clause = Clause.parse(text)
                injector = InjectorRegistry.get(clause.tag)
                if injector is not None:
                    text = str(injector(clause, field, record))
                clauses.append(text)
            injected[field] = clauses
        return injected

    def inject_table(self, record: "Record") -> RuleGroupTable:
        """Copy of the whole table with identifiers injected into every group."""
        result: RuleGroupTable = {}
        for type_name, groups in self.table.items():
            result[type_name] = {
                event: self.inject_identifiers(normalize_group(group, event), record)
                for event, group in (groups or {}).items()
            }
        return result
