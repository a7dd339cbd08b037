"""Record store: the persistence layer that runs lifecycle observers.

Observers are registered per record type with observe(). Before a write
the store calls the matching observer method (saving, deleting,
restoring); a falsy return aborts the write.
"""

import logging
from typing import Any, Protocol

from recordguard.engine.validator import Validator
from recordguard.persistence.adapter import StorageAdapter
from recordguard.persistence.query import AdapterQueryService
from recordguard.records import Record, RecordType
from recordguard.validating import Validating

logger = logging.getLogger(__name__)


class LifecycleObserver(Protocol):
    """Anything with saving/deleting/restoring hooks, e.g. LifecycleDispatcher."""

    def saving(self, subject: Validating, processing: str | None = None) -> Any: ...

    def deleting(self, subject: Validating) -> Any: ...

    def restoring(self, subject: Validating) -> Any: ...


class RecordStore:
    """Persists records through a StorageAdapter, gated by observers."""

    def __init__(self, adapter: StorageAdapter, validator: Validator | None = None):
        self.adapter = adapter
        self.validator = validator or Validator(AdapterQueryService(adapter))
        self._observers: dict[str, list[LifecycleObserver]] = {}

    def observe(self, record_type: RecordType | str, observer: LifecycleObserver) -> None:
        """Register an observer for every record of a type."""
        name = record_type if isinstance(record_type, str) else record_type.name
        self._observers.setdefault(name, []).append(observer)

    def subject(self, record: Record) -> Validating:
        """Validating capability for a record, checked against this store."""
        return Validating(record, self.validator)

    def observers(self, record_type: RecordType | str) -> list[LifecycleObserver]:
        name = record_type if isinstance(record_type, str) else record_type.name
        return list(self._observers.get(name, []))

    def _notify(self, event: str, subject: Validating, *args: Any) -> bool:
        for observer in self.observers(subject.record_type):
            if not getattr(observer, event)(subject, *args):
                logger.info(
                    "%s of %s aborted by %s",
                    event,
                    subject.record_type.name,
                    type(observer).__name__,
                )
                return False
        return True

    # -------------------------------------------------------------------------
    # Lifecycle operations
    # -------------------------------------------------------------------------

    def save(self, subject: Validating, processing: str | None = None) -> bool:
        """Create or update the record unless an observer blocks it.

        Args:
            subject: The record's validating capability
            processing: Optional custom state passed to saving observers

        Returns:
            True if the record was written
        """
        if not self._notify("saving", subject, processing):
            return False

        record = subject.record
        if record.exists:
            self.adapter.update(record)
        else:
            key = self.adapter.insert(record)
            record.set(record.key_name, key)
            record.exists = True
        return True

    def delete(self, subject: Validating) -> bool:
        """Delete (or soft delete) the record unless an observer blocks it."""
        record = subject.record
        if not record.exists:
            return False
        if not self._notify("deleting", subject):
            return False

        soft = record.record_type.soft_deletes
        self.adapter.delete(record, soft=soft)
        if not soft:
            record.exists = False
        return True

    def restore(self, subject: Validating) -> bool:
        """Restore a soft-deleted record unless an observer blocks it."""
        record = subject.record
        if not record.record_type.soft_deletes:
            raise ValueError(f"Record type '{record.record_type.name}' does not soft delete")
        if not self._notify("restoring", subject):
            return False

        self.adapter.restore(record)
        record.exists = True
        return True

    def force_save(self, subject: Validating, processing: str | None = None) -> bool:
        """Save without validation, restoring the previous toggle afterwards."""
        previous = subject.validating
        subject.validating = False
        logger.warning("Saving %s without validation", subject.record_type.name)
        try:
            return self.save(subject, processing)
        finally:
            subject.validating = previous

    def save_or_fail(self, subject: Validating, processing: str | None = None) -> bool:
        """Save, raising ValidationException if the record is invalid.

        The check covers the processing state's rule group as well as the
        default save groups.
        """
        keys = [processing] if processing else []
        if not subject.perform_validation(subject.get_rules(keys), inject=False):
            subject.throw_validation_exception()
        return self.save(subject, processing)

    def save_or_return(self, subject: Validating, processing: str | None = None) -> bool:
        """Save, returning False on invalid data even in exception mode."""
        previous = subject.throw_validation_exceptions
        subject.throw_validation_exceptions = False
        try:
            return self.save(subject, processing)
        finally:
            subject.throw_validation_exceptions = previous
