"""Record and record type definitions.

A RecordType carries the per-type validation configuration (rule group
table, toggles, custom messages). A Record is a plain bag of attributes
plus the identity information the storage layer supplies.
"""

from dataclasses import dataclass, field
from typing import Any

from recordguard.rules.types import RuleGroupTable


@dataclass
class ValidationSettings:
    """Per record type validation settings.

    Attributes:
        validating: Whether records are validated before persistence
        throw_validation_exceptions: Raise ValidationException instead of
            returning a falsy result on failure
        inject_unique_identifier: Rewrite unique rules to exclude the
            record's own identity
        messages: Custom messages keyed by "field.rule" or "rule"
        attribute_names: Display names substituted for :attribute
    """

    validating: bool = True
    throw_validation_exceptions: bool = False
    inject_unique_identifier: bool = True
    messages: dict[str, str] = field(default_factory=dict)
    attribute_names: dict[str, str] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ValidationSettings":
        """Create ValidationSettings from YAML/JSON dict."""
        return cls(
            validating=bool(data.get("validating", True)),
            throw_validation_exceptions=bool(
                data.get("throwValidationExceptions", False)
            ),
            inject_unique_identifier=bool(data.get("injectUniqueIdentifier", True)),
            messages=dict(data.get("messages") or {}),
            attribute_names=data.get("attributeNames"),
        )


@dataclass
class RecordType:
    """Configuration shared by every record of one type.

    Attributes:
        name: Record type name (e.g., "User"); namespaces lifecycle events
        table: Storage table name
        key_name: Identity column name
        rules: Rule group table, {"errors"|"warnings": {event: {field: spec}}}
        settings: Validation toggles and message overrides
        soft_deletes: Deletes set deleted_at instead of removing the row
    """

    name: str
    table: str
    key_name: str = "id"
    rules: RuleGroupTable = field(default_factory=dict)
    settings: ValidationSettings = field(default_factory=ValidationSettings)
    soft_deletes: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RecordType":
        """Create RecordType from YAML/JSON dict."""
        return cls(
            name=data["name"],
            table=data.get("table") or data["name"].lower(),
            key_name=data.get("key", "id"),
            rules=data.get("rules") or {},
            settings=ValidationSettings.from_dict(data),
            soft_deletes=bool(data.get("softDeletes", False)),
        )


@dataclass
class Record:
    """A record being persisted.

    Attributes:
        record_type: The record's type configuration
        attributes: Current field values
        exists: True once the record is stored
    """

    record_type: RecordType
    attributes: dict[str, Any] = field(default_factory=dict)
    exists: bool = False

    @property
    def key(self) -> Any:
        return self.attributes.get(self.record_type.key_name)

    @property
    def key_name(self) -> str:
        return self.record_type.key_name

    @property
    def table(self) -> str:
        return self.record_type.table

    @property
    def has_identity(self) -> bool:
        return self.key not in (None, "")

    def get(self, name: str, default: Any = None) -> Any:
        return self.attributes.get(name, default)

    def set(self, name: str, value: Any) -> None:
        self.attributes[name] = value
