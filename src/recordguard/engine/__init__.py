"""Validation engine: rule registry, built-in rules and the Validator."""

from recordguard.engine.builtins import register_builtin_rules
from recordguard.engine.messages import DEFAULT_MESSAGES, MessageFormatter
from recordguard.engine.registry import RegisteredRule, RuleCheck, RuleRegistry
from recordguard.engine.types import QueryService, RuleContext, ValidationOutcome
from recordguard.engine.validator import Validator

__all__ = [
    "DEFAULT_MESSAGES",
    "MessageFormatter",
    "QueryService",
    "RegisteredRule",
    "RuleCheck",
    "RuleContext",
    "RuleRegistry",
    "ValidationOutcome",
    "Validator",
    "register_builtin_rules",
]
