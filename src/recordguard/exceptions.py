"""Exception types raised by recordguard."""

from typing import Any


class RuleConfigurationError(Exception):
    """A rule group table or rule specification is malformed.

    Raised instead of silently validating against an empty or wrong
    rule set.
    """


class ValidationException(Exception):
    """A record failed validation while exception reporting was enabled.

    Attributes:
        record: The record that failed validation
        errors: MessageBag with the accumulated error messages
    """

    def __init__(self, record: Any, errors: Any):
        self.record = record
        self.errors = errors
        super().__init__(self._summary())

    def _summary(self) -> str:
        messages = self.errors.all() if self.errors is not None else []
        if not messages:
            return "The record failed validation"
        if len(messages) == 1:
            return messages[0]
        return f"{messages[0]} (and {len(messages) - 1} more error(s))"

    def get_errors(self) -> Any:
        return self.errors
