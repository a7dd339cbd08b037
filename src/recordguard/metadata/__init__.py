"""Record type metadata: YAML rule tables and their schema validation."""

from recordguard.metadata.loader import RuleTableLoader, default_rules_path
from recordguard.metadata.validator import (
    RULE_TABLE_SCHEMA,
    ValidationIssue,
    validate_rules_dir,
    validate_yaml_file,
)

__all__ = [
    "RULE_TABLE_SCHEMA",
    "RuleTableLoader",
    "ValidationIssue",
    "default_rules_path",
    "validate_rules_dir",
    "validate_yaml_file",
]
