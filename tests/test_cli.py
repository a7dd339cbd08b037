"""Tests for recordguard CLI commands."""

from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner
from sqlalchemy import Column, Integer, MetaData, String, Table, create_engine, insert

from recordguard.cli.main import cli
from recordguard.metadata.loader import RULES_PATH_ENV


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def rules_dir(tmp_path):
    """A rules directory with one User record type."""
    path = tmp_path / "rules"
    path.mkdir()
    (path / "user.yaml").write_text(
        yaml.dump(
            {
                "recordType": {
                    "name": "User",
                    "table": "users",
                    "rules": {
                        "errors": {
                            "saving": {"email": "required|email|unique"},
                            "creating": {"password": "required|min:8"},
                            "deleting": {"role": "not_in:owner"},
                        },
                        "warnings": {"saving": {"nickname": "max:20"}},
                    },
                }
            }
        )
    )
    return path


def _write(path: Path, data: dict) -> None:
    path.write_text(yaml.dump(data))


class TestRulesCheck:
    def test_check_succeeds(self, runner, rules_dir):
        result = runner.invoke(cli, ["rules", "check", "--path", str(rules_dir)])
        assert result.exit_code == 0
        assert "Loaded 1 record type(s)" in result.output
        assert "User (table: users, events: creating, deleting, saving)" in result.output
        assert "All rule tables are valid" in result.output

    def test_check_single_file(self, runner, rules_dir):
        result = runner.invoke(cli, ["rules", "check", "--path", str(rules_dir / "user.yaml")])
        assert result.exit_code == 0

    def test_check_uses_env_path(self, runner, rules_dir, monkeypatch):
        monkeypatch.setenv(RULES_PATH_ENV, str(rules_dir))
        result = runner.invoke(cli, ["rules", "check"])
        assert result.exit_code == 0

    def test_check_reports_schema_errors(self, runner, rules_dir):
        _write(rules_dir / "broken.yaml", {"recordType": {"table": "x"}})
        result = runner.invoke(cli, ["rules", "check", "--path", str(rules_dir)])
        assert result.exit_code == 1
        assert "schema error(s) found" in result.output

    def test_check_warning_passes_unless_strict(self, runner, rules_dir):
        _write(rules_dir / "tag.yaml", {"recordType": {"name": "Tag"}})
        result = runner.invoke(cli, ["rules", "check", "--path", str(rules_dir)])
        assert result.exit_code == 0
        assert "1 warning(s) found" in result.output

        result = runner.invoke(cli, ["rules", "check", "--strict", "--path", str(rules_dir)])
        assert result.exit_code == 1

    def test_check_reports_duplicates(self, runner, rules_dir):
        _write(
            rules_dir / "user2.yaml",
            {"recordType": {"name": "User", "rules": {"errors": {"saving": {"a": "required"}}}}},
        )
        result = runner.invoke(cli, ["rules", "check", "--path", str(rules_dir)])
        assert result.exit_code == 1
        assert "declared more than once" in result.output

    def test_check_missing_directory(self, runner, tmp_path, monkeypatch):
        monkeypatch.setenv(RULES_PATH_ENV, str(tmp_path / "missing"))
        result = runner.invoke(cli, ["rules", "check"])
        assert result.exit_code == 1
        assert "Rules directory not found" in result.output


class TestRulesResolve:
    def test_resolve_new_record(self, runner, rules_dir):
        result = runner.invoke(cli, ["rules", "resolve", "User", "--path", str(rules_dir)])
        assert result.exit_code == 0
        assert result.output.splitlines() == [
            "email: required|email|unique:users,email",
            "password: required|min:8",
        ]

    def test_resolve_stored_record_injects_key(self, runner, rules_dir):
        result = runner.invoke(
            cli, ["rules", "resolve", "User", "--path", str(rules_dir), "--key", "7"]
        )
        assert result.exit_code == 0
        assert result.output.splitlines() == ["email: required|email|unique:users,email,7,id"]

    def test_resolve_only_requested(self, runner, rules_dir):
        result = runner.invoke(
            cli,
            [
                "rules", "resolve", "User", "--path", str(rules_dir),
                "--key", "7", "--event", "deleting", "--only-requested",
            ],
        )
        assert result.output.splitlines() == ["role: not_in:owner"]

    def test_resolve_warnings(self, runner, rules_dir):
        result = runner.invoke(
            cli, ["rules", "resolve", "User", "--path", str(rules_dir), "--type", "warnings"]
        )
        assert result.output.splitlines() == ["nickname: max:20"]

    def test_resolve_no_rules(self, runner, rules_dir):
        result = runner.invoke(
            cli,
            [
                "rules", "resolve", "User", "--path", str(rules_dir),
                "--event", "restoring", "--only-requested",
            ],
        )
        assert result.exit_code == 0
        assert "No rules apply." in result.output

    def test_resolve_unknown_record_type(self, runner, rules_dir):
        result = runner.invoke(cli, ["rules", "resolve", "Ghost", "--path", str(rules_dir)])
        assert result.exit_code == 1
        assert "Unknown record type 'Ghost'" in result.output


class TestRulesValidate:
    @pytest.fixture
    def database(self, tmp_path, monkeypatch):
        """A sqlite database with two stored users, selected via DATABASE_URL."""
        url = f"sqlite:///{tmp_path / 'app.db'}"
        engine = create_engine(url)
        metadata = MetaData()
        users = Table(
            "users",
            metadata,
            Column("id", Integer, primary_key=True),
            Column("email", String(200)),
            Column("role", String(20)),
            Column("nickname", String(100)),
        )
        metadata.create_all(engine)
        with engine.begin() as conn:
            conn.execute(
                insert(users),
                [
                    {"id": 7, "email": "ada@example.com", "role": "owner", "nickname": "ada"},
                    {
                        "id": 8,
                        "email": "not-an-email",
                        "role": None,
                        "nickname": "a very long nickname indeed",
                    },
                ],
            )
        engine.dispose()
        monkeypatch.setenv("DATABASE_URL", url)
        return url

    def test_valid_row(self, runner, rules_dir, database):
        result = runner.invoke(cli, ["rules", "validate", "User", "7", "--path", str(rules_dir)])
        assert result.exit_code == 0
        assert "User 7 is valid." in result.output

    def test_invalid_row(self, runner, rules_dir, database):
        result = runner.invoke(cli, ["rules", "validate", "User", "8", "--path", str(rules_dir)])
        assert result.exit_code == 1
        assert "✗ email: The email must be a valid email address." in result.output
        assert "! nickname: The nickname may not be greater than 20 characters." in result.output
        assert "failed validation: 1 error(s)" in result.output

    def test_extra_event_groups(self, runner, rules_dir, database):
        result = runner.invoke(
            cli,
            ["rules", "validate", "User", "7", "--path", str(rules_dir), "--event", "deleting"],
        )
        assert result.exit_code == 1
        assert "role:" in result.output

    def test_missing_row(self, runner, rules_dir, database):
        result = runner.invoke(cli, ["rules", "validate", "User", "99", "--path", str(rules_dir)])
        assert result.exit_code == 1
        assert "No User with id '99'" in result.output

    def test_unsupported_database_url(self, runner, rules_dir):
        result = runner.invoke(
            cli,
            [
                "rules", "validate", "User", "7", "--path", str(rules_dir),
                "--database-url", "mysql://localhost/app",
            ],
        )
        assert result.exit_code == 1
        assert "Unsupported database URL scheme" in result.output
