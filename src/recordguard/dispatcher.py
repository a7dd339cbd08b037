"""Lifecycle dispatcher: gates saving, restoring and deleting on validation.

For each event:
1. Validation disabled -> announce "skipped", allow
2. A validating listener returns non-None -> cancel, announce nothing
3. Run the warnings pass (never blocks) and the errors pass
4. Errors pass fails -> announce "failed", raise or return a falsy result
5. Errors pass succeeds -> announce "passed", allow
"""

import logging

from recordguard.events import EventBus, validated_event, validating_event
from recordguard.rules.resolver import RuleKey
from recordguard.rules.types import DELETING, RESTORING, RuleType
from recordguard.types import ValidationResult, ValidationStatus
from recordguard.validating import Validating

logger = logging.getLogger(__name__)

SAVING = "saving"


class LifecycleDispatcher:
    """Observer registered with a RecordStore for one or more record types.

    Returns a ValidationResult whose truthiness tells the store whether
    to continue. In exception mode a failure raises ValidationException
    after the "failed" announcement.
    """

    def __init__(self, events: EventBus | None = None):
        self.events = events or EventBus()

    def saving(self, subject: Validating, processing: str | None = None) -> ValidationResult:
        """Validate before a create or update.

        Args:
            subject: The record's validating capability
            processing: Optional custom state (e.g. "publishing") whose
                rule group is applied after the generic save groups
        """
        extra: list[RuleKey] = [processing] if processing else []
        return self.perform(subject, SAVING, extra, only_requested=False)

    def restoring(self, subject: Validating) -> ValidationResult:
        return self.perform(subject, RESTORING, [RESTORING], only_requested=True)

    def deleting(self, subject: Validating) -> ValidationResult:
        return self.perform(subject, DELETING, [DELETING], only_requested=True)

    def perform(
        self,
        subject: Validating,
        event: str,
        keys: list[RuleKey],
        only_requested: bool,
    ) -> ValidationResult:
        """Run the validation step for one lifecycle event."""
        type_name = subject.record_type.name

        if not subject.validating:
            self.events.fire(validated_event(type_name), subject, ValidationStatus.SKIPPED.value)
            return self._result(subject, event, ValidationStatus.SKIPPED)

        if self.events.until(validating_event(type_name), subject, event) is not None:
            logger.info("Validation of %s cancelled by listener on %s", type_name, event)
            return self._result(subject, event, ValidationStatus.CANCELLED)

        subject.perform_warnings_validation(
            subject.get_rules(keys, RuleType.WARNINGS, only_requested), inject=False
        )
        passed = subject.perform_validation(
            subject.get_rules(keys, RuleType.ERRORS, only_requested), inject=False
        )

        if not passed:
            self.events.fire(validated_event(type_name), subject, ValidationStatus.FAILED.value)
            result = self._result(subject, event, ValidationStatus.FAILED)
            logger.info(
                "Validation of %s failed on %s: %d error(s)",
                type_name,
                event,
                result.errors.count(),
            )
            if subject.throw_validation_exceptions:
                result.raise_for_failure()
            return result

        self.events.fire(validated_event(type_name), subject, ValidationStatus.PASSED.value)
        return self._result(subject, event, ValidationStatus.PASSED)

    def _result(
        self, subject: Validating, event: str, status: ValidationStatus
    ) -> ValidationResult:
        return ValidationResult(
            status=status,
            event=event,
            errors=subject.errors.copy(),
            warnings=subject.warnings.copy(),
            record=subject.record,
        )
