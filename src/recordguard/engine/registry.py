"""Rule registry for the validation engine.

Provides registration and lookup for rule checks, built-in or
application-specific.
"""

from collections.abc import Callable
from dataclasses import dataclass

from recordguard.engine.types import RuleContext
from recordguard.exceptions import RuleConfigurationError

# Rule check signature: (RuleContext) -> bool (True when the value passes)
RuleCheck = Callable[[RuleContext], bool]


@dataclass(frozen=True)
class RegisteredRule:
    """A rule check plus its evaluation flags.

    Attributes:
        name: Rule tag
        check: The check function
        implicit: Runs even when the value is empty (e.g. required)
    """

    name: str
    check: RuleCheck
    implicit: bool = False


class RuleRegistry:
    """Registry for rule checks.

    Rules must be explicitly registered before clauses can use them.
    Built-in rules are registered by register_builtin_rules(); custom
    rules are registered by the application at startup.

    Example:
        RuleRegistry.register("even", lambda ctx: int(ctx.value) % 2 == 0)
    """

    _rules: dict[str, RegisteredRule] = {}

    @classmethod
    def register(cls, name: str, check: RuleCheck, implicit: bool = False) -> None:
        """Register a rule check by tag.

        Idempotent - re-registering the same tag is a no-op.

        Args:
            name: Rule tag used in clauses (e.g., "unique")
            check: Function returning True when the value passes
            implicit: Evaluate the rule even for empty values
        """
        name = name.lower()
        if name in cls._rules:
            return
        cls._rules[name] = RegisteredRule(name=name, check=check, implicit=implicit)

    @classmethod
    def get(cls, name: str) -> RegisteredRule:
        """Get a registered rule by tag.

        Raises:
            RuleConfigurationError: If the rule is not registered
        """
        rule = cls._rules.get(name.lower())
        if rule is None:
            raise RuleConfigurationError(
                f"Validation rule '{name}' is not registered. "
                "Custom rules must be explicitly registered at application startup."
            )
        return rule

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name.lower() in cls._rules

    @classmethod
    def list_registered(cls) -> list[str]:
        return sorted(cls._rules.keys())

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations. Primarily for testing."""
        cls._rules.clear()
