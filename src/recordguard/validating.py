"""Validating capability attached to a record.

Wraps a plain Record with the validation operations and state (error and
warning bags, per-instance toggles) instead of mixing them into the
record type.

Usage:
    subject = Validating(record, Validator(query_service))
    if not subject.is_valid():
        print(subject.errors.all())
"""

from collections.abc import Iterable, Mapping
from typing import Any

from recordguard.engine.types import ValidationOutcome
from recordguard.engine.validator import Validator
from recordguard.exceptions import ValidationException
from recordguard.messages import MessageBag
from recordguard.records import Record, RecordType
from recordguard.rules.resolver import RuleKey, RuleResolver
from recordguard.rules.types import ResolvedRules, RuleGroupTable, RuleType


class Validating:
    """Validation state and operations for one record.

    Toggles start from the record type's settings and can be changed per
    instance. Messages accumulate across calls until clear_messages().
    """

    def __init__(self, record: Record, validator: Validator | None = None):
        settings = record.record_type.settings
        self.record = record
        self.validator = validator or Validator()
        self.validating = settings.validating
        self.throw_validation_exceptions = settings.throw_validation_exceptions
        self.inject_unique_identifier = settings.inject_unique_identifier
        self.validation_messages: dict[str, str] = dict(settings.messages)
        self.validation_attribute_names: dict[str, str] | None = (
            dict(settings.attribute_names) if settings.attribute_names else None
        )
        self.rules: RuleGroupTable = record.record_type.rules
        self.errors = MessageBag()
        self.warnings = MessageBag()

    @property
    def record_type(self) -> RecordType:
        return self.record.record_type

    @property
    def resolver(self) -> RuleResolver:
        return RuleResolver(self.rules)

    def set_rules(self, rules: RuleGroupTable | None) -> None:
        self.rules = rules or {}

    def get_model_attributes(self) -> dict[str, Any]:
        """Attribute values handed to the validation engine."""
        return dict(self.record.attributes)

    # -------------------------------------------------------------------------
    # Rules
    # -------------------------------------------------------------------------

    def get_validatable_states(self) -> list[str]:
        return self.resolver.validatable_states(self.record)

    def get_rules(
        self,
        keys: Iterable[RuleKey] = (),
        rule_type: RuleType | str = RuleType.ERRORS,
        only_requested: bool = False,
    ) -> ResolvedRules:
        """Resolve the rules for the given rule group keys.

        Without keys this is the default save rule set for the record.
        """
        return self.resolver.resolve(
            self.record,
            keys,
            rule_type=RuleType(rule_type),
            only_requested=only_requested,
            inject_unique=self.inject_unique_identifier,
        )

    def update_rules_uniques(self) -> None:
        """Inject this record's identity into every unique rule of the table."""
        self.rules = self.resolver.inject_table(self.record)

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(
        self, rules: Mapping[str, Any] | None = None, inject: bool = True
    ) -> ValidationOutcome:
        """Run the engine without touching the message bags.

        Explicit rules get identifiers injected unless inject is False,
        which callers pass for rules that already came from get_rules().
        """
        if rules is None:
            rules = self.get_rules()
        elif inject and self.inject_unique_identifier:
            rules = self.resolver.inject_identifiers(rules, self.record)

        return self.validator.validate(
            self.get_model_attributes(),
            rules,
            self.validation_messages,
            self.validation_attribute_names,
        )

    def perform_validation(
        self, rules: Mapping[str, Any] | None = None, inject: bool = True
    ) -> bool:
        """Validate and append any messages to the error bag."""
        outcome = self.validate(rules, inject)
        self.errors.merge(outcome.messages)
        return outcome.passed

    def perform_warnings_validation(
        self, rules: Mapping[str, Any] | None = None, inject: bool = True
    ) -> bool:
        """Validate and append any messages to the warning bag."""
        outcome = self.validate(rules, inject)
        self.warnings.merge(outcome.messages)
        return outcome.passed

    def is_valid(self) -> bool:
        return self.perform_validation()

    def is_invalid(self) -> bool:
        return not self.is_valid()

    def is_valid_or_fail(self) -> bool:
        """Return True if valid, otherwise raise ValidationException."""
        if not self.is_valid():
            self.throw_validation_exception()
        return True

    def throw_validation_exception(self) -> None:
        """Raise ValidationException with the accumulated errors.

        Runs validation first if no errors have been collected yet.
        """
        if self.errors.is_empty():
            self.perform_validation()
        raise ValidationException(self.record, self.errors.copy())

    def clear_messages(self) -> None:
        self.errors.clear()
        self.warnings.clear()
