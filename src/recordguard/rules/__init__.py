"""Rule group tables and their resolution into per-event rule sets."""

from recordguard.rules.injectors import (
    InjectorRegistry,
    inject_unique_identifier,
    register_builtin_injectors,
)
from recordguard.rules.parser import format_rules, normalize_group, normalize_spec
from recordguard.rules.resolver import RuleResolver
from recordguard.rules.types import (
    CREATING_KEYS,
    DELETING,
    RESTORING,
    SAVING_KEYS,
    UPDATING_KEYS,
    Clause,
    ResolvedRules,
    RuleGroupTable,
    RuleType,
)

__all__ = [
    "CREATING_KEYS",
    "Clause",
    "DELETING",
    "InjectorRegistry",
    "RESTORING",
    "ResolvedRules",
    "RuleGroupTable",
    "RuleResolver",
    "RuleType",
    "SAVING_KEYS",
    "UPDATING_KEYS",
    "format_rules",
    "inject_unique_identifier",
    "normalize_group",
    "normalize_spec",
    "register_builtin_injectors",
]
