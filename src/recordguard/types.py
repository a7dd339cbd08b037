"""Result types for a validation attempt on a lifecycle event."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from recordguard.exceptions import ValidationException
from recordguard.messages import MessageBag


class ValidationStatus(Enum):
    """Outcome of a lifecycle validation attempt.

    PASSED and SKIPPED allow the operation. FAILED blocks it. CANCELLED
    means a listener vetoed validation; the operation is aborted but
    neither passed nor failed is announced.
    """

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"


@dataclass
class ValidationResult:
    """Structured result of one dispatch.

    Truthiness tells the storage layer whether to proceed.

    Attributes:
        status: PASSED, FAILED, SKIPPED or CANCELLED
        event: Lifecycle event that triggered validation
        errors: Snapshot of the subject's accumulated error messages
        warnings: Snapshot of the subject's accumulated warning messages
        record: The record under validation
    """

    status: ValidationStatus
    event: str
    errors: MessageBag = field(default_factory=MessageBag)
    warnings: MessageBag = field(default_factory=MessageBag)
    record: Any = None

    @property
    def allowed(self) -> bool:
        return self.status in (ValidationStatus.PASSED, ValidationStatus.SKIPPED)

    def raise_for_failure(self) -> "ValidationResult":
        """Raise ValidationException if the attempt failed, else return self."""
        if self.status is ValidationStatus.FAILED:
            raise ValidationException(self.record, self.errors)
        return self

    def __bool__(self) -> bool:
        return self.allowed
