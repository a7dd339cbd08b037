"""
metadata/validator.py — JSON Schema validation for rule table YAML files.

Usage:
    from recordguard.metadata.validator import validate_rules_dir, validate_yaml_file

    issues = validate_rules_dir(Path("rules"))
    for issue in issues:
        print(issue)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

logger = logging.getLogger(__name__)

_FIELD_SPEC: dict[str, Any] = {
    "oneOf": [
        {"type": "string"},
        {"type": "array", "items": {"type": "string"}},
    ]
}

_RULE_GROUPS: dict[str, Any] = {
    "type": "object",
    "additionalProperties": {
        "type": "object",
        "additionalProperties": _FIELD_SPEC,
    },
}

RULE_TABLE_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["recordType"],
    "additionalProperties": False,
    "properties": {
        "recordType": {
            "type": "object",
            "required": ["name"],
            "additionalProperties": False,
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "table": {"type": "string", "minLength": 1},
                "key": {"type": "string", "minLength": 1},
                "softDeletes": {"type": "boolean"},
                "validating": {"type": "boolean"},
                "throwValidationExceptions": {"type": "boolean"},
                "injectUniqueIdentifier": {"type": "boolean"},
                "messages": {
                    "type": "object",
                    "additionalProperties": {"type": "string"},
                },
                "attributeNames": {
                    "type": "object",
                    "additionalProperties": {"type": "string"},
                },
                "rules": {
                    "type": "object",
                    "additionalProperties": False,
                    "properties": {
                        "errors": _RULE_GROUPS,
                        "warnings": _RULE_GROUPS,
                    },
                },
            },
        }
    },
}

YAML_SUFFIXES = (".yaml", ".yml")


@dataclass
class ValidationIssue:
    """A single validation finding for a rule table YAML file."""

    file: Path
    message: str
    path: str = ""          # path within the document, e.g. "recordType/rules/errors"
    severity: str = "error" # "error" | "warning"

    def __str__(self) -> str:
        loc = f" at {self.path}" if self.path else ""
        return f"[{self.severity.upper()}] {self.file}{loc}: {self.message}"


def _json_path(error: ValidationError) -> str:
    return "/".join(str(part) for part in error.absolute_path)


def validate_document(data: Any, file: Path) -> list[ValidationIssue]:
    """Validate an already-parsed document against RULE_TABLE_SCHEMA."""
    validator = Draft202012Validator(RULE_TABLE_SCHEMA)
    issues = [
        ValidationIssue(file=file, message=error.message, path=_json_path(error))
        for error in sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))
    ]

    if not issues:
        rules = data["recordType"].get("rules") or {}
        if not rules.get("errors") and not rules.get("warnings"):
            issues.append(
                ValidationIssue(
                    file=file,
                    message="record type declares no rules",
                    path="recordType/rules",
                    severity="warning",
                )
            )
    return issues


def validate_yaml_file(path: Path) -> list[ValidationIssue]:
    """Parse and validate a single rule table YAML file."""
    try:
        with path.open() as fh:
            data = yaml.safe_load(fh)
    except yaml.YAMLError as e:
        return [ValidationIssue(file=path, message=f"YAML parse error: {e}")]

    if data is None:
        return [ValidationIssue(file=path, message="file is empty")]

    return validate_document(data, path)


def validate_rules_dir(rules_path: Path, strict: bool = False) -> list[ValidationIssue]:
    """Validate every YAML file in a rules directory.

    Args:
        rules_path: Directory containing rule table YAML files
        strict: Report warnings as errors

    Returns:
        All issues found, in file order
    """
    issues: list[ValidationIssue] = []
    files = sorted(p for p in rules_path.iterdir() if p.suffix in YAML_SUFFIXES)
    if not files:
        logger.warning("No rule table files found in %s", rules_path)

    for path in files:
        for issue in validate_yaml_file(path):
            if strict and issue.severity == "warning":
                issue.severity = "error"
            issues.append(issue)
    return issues
