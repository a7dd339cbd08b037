"""recordguard — declarative validation for record persistence lifecycles.

Before a record is created, updated, deleted or restored, the rule groups
that apply to the event are resolved, run through the validation engine,
and the outcome either blocks the write or lets it proceed.

Usage:
    from recordguard import (
        LifecycleDispatcher,
        Record,
        RecordStore,
        Validating,
        register_builtins,
    )

    # At application startup
    register_builtins()
    store.observe(user_type, LifecycleDispatcher(events))

    subject = Validating(Record(user_type, {"name": "Ada"}), validator)
    if not store.save(subject):
        print(subject.errors.all())
"""

from recordguard.dispatcher import LifecycleDispatcher
from recordguard.engine import RuleRegistry, Validator, register_builtin_rules
from recordguard.events import EventBus, validated_event, validating_event
from recordguard.exceptions import RuleConfigurationError, ValidationException
from recordguard.messages import MessageBag
from recordguard.records import Record, RecordType, ValidationSettings
from recordguard.rules import (
    InjectorRegistry,
    RuleResolver,
    RuleType,
    register_builtin_injectors,
)
from recordguard.types import ValidationResult, ValidationStatus
from recordguard.validating import Validating


def register_builtins() -> None:
    """Register the built-in validation rules and identifier injectors.

    Called at application startup. Idempotent.
    """
    register_builtin_rules()
    register_builtin_injectors()


__all__ = [
    "EventBus",
    "InjectorRegistry",
    "LifecycleDispatcher",
    "MessageBag",
    "Record",
    "RecordType",
    "RuleConfigurationError",
    "RuleRegistry",
    "RuleResolver",
    "RuleType",
    "Validating",
    "ValidationException",
    "ValidationResult",
    "ValidationSettings",
    "ValidationStatus",
    "Validator",
    "register_builtins",
    "validated_event",
    "validating_event",
]
