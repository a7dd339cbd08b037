"""Rules CLI commands — check, resolve and validate."""

from pathlib import Path

import click
from sqlalchemy.exc import SQLAlchemyError

from recordguard import register_builtins
from recordguard.exceptions import RuleConfigurationError
from recordguard.metadata.loader import RuleTableLoader, default_rules_path
from recordguard.metadata.validator import validate_rules_dir, validate_yaml_file
from recordguard.persistence import StorageSettings, create_store
from recordguard.records import Record, RecordType
from recordguard.rules.types import RuleType
from recordguard.validating import Validating


@click.group()
def rules():
    """Rule table commands."""
    pass


@rules.command()
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Treat warnings as errors.",
)
@click.option(
    "--path",
    "target_path",
    default=None,
    type=click.Path(exists=True, path_type=Path),
    help="Rules directory or a single YAML file (default: $RECORDGUARD_RULES_PATH or ./rules).",
)
def check(strict: bool, target_path: Path | None):
    """Validate rule table YAML files."""
    rules_path = target_path or default_rules_path()
    if not rules_path.exists():
        click.echo(f"Error: Rules directory not found at {rules_path}", err=True)
        raise SystemExit(1)

    # ── Schema (JSON Schema) validation ─────────────────────────────────────
    if rules_path.is_file():
        issues = validate_yaml_file(rules_path)
        if strict:
            for issue in issues:
                issue.severity = "error"
    else:
        issues = validate_rules_dir(rules_path, strict=strict)

    errors = [i for i in issues if i.severity == "error"]
    warnings = [i for i in issues if i.severity == "warning"]

    for issue in issues:
        colour = "red" if issue.severity == "error" else "yellow"
        click.echo(click.style(str(issue), fg=colour))

    if errors:
        click.echo(
            click.style(
                f"\n{len(errors)} schema error(s) found"
                + (f", {len(warnings)} warning(s)" if warnings else ""),
                fg="red",
                bold=True,
            )
        )
        raise SystemExit(1)

    if warnings:
        click.echo(click.style(f"{len(warnings)} warning(s) found.", fg="yellow"))

    # ── Semantic (loader) validation ─────────────────────────────────────────
    loader = RuleTableLoader(rules_path if rules_path.is_dir() else rules_path.parent)
    try:
        if rules_path.is_file():
            loader.load_file(rules_path)
        else:
            loader.load_all()
    except RuleConfigurationError as e:
        click.echo(click.style(f"\nSemantic validation failed: {e}", fg="red"), err=True)
        raise SystemExit(1)

    names = loader.list_record_types()
    click.echo(f"\nLoaded {len(names)} record type(s):")
    for name in names:
        record_type = loader.get(name)
        events = sorted({e for groups in record_type.rules.values() for e in (groups or {})})
        click.echo(f"  ✓ {name} (table: {record_type.table}, events: {', '.join(events) or '-'})")

    click.echo(click.style("\nAll rule tables are valid.", fg="green", bold=True))


def _load_definition(rules_path: Path | None, record_type: str) -> RecordType:
    """Load the rules directory and look up one record type, or exit 1."""
    loader = RuleTableLoader(rules_path)
    try:
        loader.load_all()
    except RuleConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    definition = loader.get(record_type)
    if definition is None:
        click.echo(f"Error: Unknown record type '{record_type}'", err=True)
        raise SystemExit(1)
    return definition


@rules.command()
@click.argument("record_type")
@click.option(
    "--path",
    "rules_path",
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Rules directory (default: $RECORDGUARD_RULES_PATH or ./rules).",
)
@click.option("--event", "events", multiple=True, help="Extra rule group key; repeatable.")
@click.option("--key", default=None, help="Identity of the record; omit for a new record.")
@click.option(
    "--exists/--new",
    "exists",
    default=None,
    help="Whether the record is stored (default: stored when --key is given).",
)
@click.option(
    "--type",
    "rule_type",
    type=click.Choice([t.value for t in RuleType]),
    default=RuleType.ERRORS.value,
    show_default=True,
)
@click.option(
    "--only-requested",
    is_flag=True,
    default=False,
    help="Resolve only the --event groups (as for deleting/restoring).",
)
def resolve(
    record_type: str,
    rules_path: Path | None,
    events: tuple[str, ...],
    key: str | None,
    exists: bool | None,
    rule_type: str,
    only_requested: bool,
):
    """Show the resolved rule set for RECORD_TYPE."""
    register_builtins()
    definition = _load_definition(rules_path, record_type)

    attributes = {definition.key_name: key} if key is not None else {}
    record = Record(
        definition,
        attributes,
        exists=exists if exists is not None else key is not None,
    )
    resolved = Validating(record).get_rules(list(events), rule_type, only_requested)

    if not resolved:
        click.echo("No rules apply.")
        return

    for field_name, clauses in resolved.items():
        click.echo(f"{field_name}: {'|'.join(clauses)}")


@rules.command()
@click.argument("record_type")
@click.argument("key")
@click.option(
    "--path",
    "rules_path",
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Rules directory (default: $RECORDGUARD_RULES_PATH or ./rules).",
)
@click.option(
    "--database-url",
    default=None,
    help="Database URL (default: $DATABASE_URL, $RECORDGUARD_DB_PATH or sqlite:///recordguard.db).",
)
@click.option("--event", "events", multiple=True, help="Extra rule group key; repeatable.")
def validate(
    record_type: str,
    key: str,
    rules_path: Path | None,
    database_url: str | None,
    events: tuple[str, ...],
):
    """Validate the stored RECORD_TYPE row with identity KEY."""
    register_builtins()
    definition = _load_definition(rules_path, record_type)
    settings = StorageSettings(url=database_url) if database_url else StorageSettings.from_env()

    try:
        store = create_store(settings, [definition])
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    try:
        row = store.adapter.get(definition.table, definition.key_name, key)
        if row is None:
            click.echo(
                f"Error: No {definition.name} with {definition.key_name} '{key}'", err=True
            )
            raise SystemExit(1)

        subject = store.subject(Record(definition, row, exists=True))
        keys = list(events)
        subject.perform_warnings_validation(
            subject.get_rules(keys, RuleType.WARNINGS), inject=False
        )
        passed = subject.perform_validation(subject.get_rules(keys), inject=False)
    except SQLAlchemyError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    finally:
        store.adapter.engine.dispose()

    for field_name, messages in subject.warnings.to_dict().items():
        for message in messages:
            click.echo(click.style(f"  ! {field_name}: {message}", fg="yellow"))

    if not passed:
        for field_name, messages in subject.errors.to_dict().items():
            for message in messages:
                click.echo(click.style(f"  ✗ {field_name}: {message}", fg="red"))
        click.echo(
            click.style(
                f"\n{definition.name} {key} failed validation: "
                f"{subject.errors.count()} error(s)",
                fg="red",
                bold=True,
            )
        )
        raise SystemExit(1)

    click.echo(click.style(f"{definition.name} {key} is valid.", fg="green"))
