"""Load record types and their rule group tables from YAML files.

File format:
    recordType:
      name: User
      table: users
      key: id
      throwValidationExceptions: false
      messages:
        email.unique: That email is already registered.
      rules:
        errors:
          saving:
            email: required|email|unique
          creating:
            password: [required, "min:8"]
        warnings:
          saving:
            nickname: max:20
"""

import logging
import os
from pathlib import Path

import yaml

from recordguard.exceptions import RuleConfigurationError
from recordguard.metadata.validator import YAML_SUFFIXES, validate_document
from recordguard.records import RecordType
from recordguard.rules.parser import normalize_group

logger = logging.getLogger(__name__)

RULES_PATH_ENV = "RECORDGUARD_RULES_PATH"


def default_rules_path() -> Path:
    """Rules directory from RECORDGUARD_RULES_PATH, else ./rules."""
    return Path(os.environ.get(RULES_PATH_ENV) or Path.cwd() / "rules")


class RuleTableLoader:
    """Loads record type definitions from a directory of YAML files."""

    def __init__(self, rules_path: Path | None = None):
        self.rules_path = rules_path or default_rules_path()
        self._record_types: dict[str, RecordType] = {}

    def load_all(self) -> None:
        """Load every YAML file in the rules directory."""
        if not self.rules_path.is_dir():
            raise RuleConfigurationError(f"Rules directory not found: {self.rules_path}")
        for path in sorted(self.rules_path.iterdir()):
            if path.suffix in YAML_SUFFIXES:
                self.load_file(path)

    def load_file(self, path: Path) -> RecordType:
        """Load, check and register one record type file.

        Raises:
            RuleConfigurationError: If the file fails schema validation,
                declares a malformed rule group, or repeats a record type
        """
        with path.open() as fh:
            try:
                data = yaml.safe_load(fh)
            except yaml.YAMLError as e:
                raise RuleConfigurationError(f"{path}: YAML parse error: {e}") from e

        issues = [i for i in validate_document(data, path) if i.severity == "error"]
        if issues:
            raise RuleConfigurationError(
                f"{path} is not a valid rule table:\n"
                + "\n".join(f"  {issue}" for issue in issues)
            )

        record_type = RecordType.from_dict(data["recordType"])
        for type_name, groups in record_type.rules.items():
            for event, group in (groups or {}).items():
                normalize_group(group, name=f"{type_name}.{event}")

        if record_type.name in self._record_types:
            raise RuleConfigurationError(
                f"Record type '{record_type.name}' is declared more than once ({path})"
            )

        self._record_types[record_type.name] = record_type
        logger.debug("Loaded record type %s from %s", record_type.name, path)
        return record_type

    def get(self, name: str) -> RecordType | None:
        return self._record_types.get(name)

    def list_record_types(self) -> list[str]:
        return sorted(self._record_types.keys())
