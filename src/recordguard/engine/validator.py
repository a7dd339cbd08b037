"""The validation engine: attribute values + rules -> outcome."""

from collections.abc import Mapping
from typing import Any

from recordguard.engine.builtins import is_empty
from recordguard.engine.messages import MessageFormatter
from recordguard.engine.registry import RuleRegistry
from recordguard.engine.types import QueryService, RuleContext, ValidationOutcome
from recordguard.messages import MessageBag
from recordguard.rules.parser import normalize_spec
from recordguard.rules.types import Clause


class Validator:
    """Runs clause lists against attribute values.

    Non-implicit rules are skipped for empty values, and a field marked
    ``nullable`` is skipped entirely when its value is None. Every
    failing clause contributes one message; evaluation does not stop at
    the first failure.
    """

    def __init__(self, query_service: QueryService | None = None):
        self.query_service = query_service

    def validate(
        self,
        attributes: Mapping[str, Any],
        rules: Mapping[str, Any],
        messages: dict[str, str] | None = None,
        attribute_names: dict[str, str] | None = None,
    ) -> ValidationOutcome:
        """Validate attributes against field -> rules.

        Args:
            attributes: Field values under validation
            rules: Field -> pipe-delimited string or clause list
            messages: Custom message templates
            attribute_names: Custom display names for :attribute

        Returns:
            ValidationOutcome with pass/fail and per-field messages

        Raises:
            RuleConfigurationError: For malformed specs or unknown rules
        """
        formatter = MessageFormatter(messages, attribute_names)
        bag = MessageBag()
        values = dict(attributes)

        for field, spec in rules.items():
            clauses = [Clause.parse(text) for text in normalize_spec(field, spec)]
            tags = frozenset(clause.tag for clause in clauses)
            value = values.get(field)

            if "nullable" in tags and value is None:
                continue

            for clause in clauses:
                rule = RuleRegistry.get(clause.tag)
                if not rule.implicit and is_empty(value):
                    continue

                ctx = RuleContext(
                    field=field,
                    value=value,
                    parameters=clause.parameters,
                    attributes=values,
                    rules=tags,
                    query=self.query_service,
                )
                if not rule.check(ctx):
                    bag.add(field, formatter.format(clause.tag, ctx))

        return ValidationOutcome(passed=bag.is_empty(), messages=bag)
