"""Tests for the storage adapter and the record store lifecycle."""

import pytest
from sqlalchemy import insert, select

from recordguard import ValidationException, validating_event


def insert_row(engine, adapter, table, **values):
    with engine.begin() as conn:
        conn.execute(insert(adapter.table(table)).values(**values))


def fetch(engine, adapter, table, key):
    t = adapter.table(table)
    with engine.connect() as conn:
        return conn.execute(select(t).where(t.c.id == key)).mappings().first()


# =============================================================================
# StorageAdapter
# =============================================================================


class TestStorageAdapter:
    def test_count_and_exclusion(self, engine, adapter):
        insert_row(engine, adapter, "users", id=1, name="ada")
        insert_row(engine, adapter, "users", id=2, name="ada")
        assert adapter.count("users", "name", "ada") == 2
        assert adapter.count("users", "name", "ada", exclude="1") == 1
        assert adapter.exists("users", "name", "ada", exclude=1, exclude_column="id")
        assert not adapter.exists("users", "name", "grace")

    def test_where_pairs(self, engine, adapter):
        insert_row(engine, adapter, "users", id=1, email="a@x.io", account_id=1)
        insert_row(engine, adapter, "users", id=2, email="a@x.io", account_id=None)
        assert adapter.count("users", "email", "a@x.io", where=[("account_id", "1")]) == 1
        assert adapter.count("users", "email", "a@x.io", where=[("account_id", "NULL")]) == 1
        assert adapter.count("users", "email", "a@x.io", where=[("account_id", "NOT_NULL")]) == 1
        assert adapter.count("users", "email", "a@x.io", where=[("account_id", "!1")]) == 0

    def test_get(self, engine, adapter):
        insert_row(engine, adapter, "widgets", id=4, slug="w")
        assert adapter.get("widgets", "id", "4")["slug"] == "w"
        assert adapter.get("widgets", "id", 99) is None


# =============================================================================
# RecordStore
# =============================================================================


class TestSave:
    def test_create_assigns_key(self, store, make_subject, user_type, engine, adapter):
        subject = make_subject(user_type, {"name": "ada", "email": "ada@example.com"})
        assert store.save(subject) is True
        assert subject.record.exists
        assert subject.record.key is not None
        assert fetch(engine, adapter, "users", subject.record.key)["name"] == "ada"

    def test_invalid_create_is_not_written(self, store, make_subject, user_type, engine, adapter):
        subject = make_subject(user_type, {"name": "ada", "email": "nope"})
        assert store.save(subject) is False
        assert not subject.record.exists
        assert adapter.count("users", "name", "ada") == 0
        assert subject.errors.has("email")

    def test_duplicate_name_blocked_on_create(self, store, make_subject, user_type, engine, adapter):
        insert_row(engine, adapter, "users", id=7, name="ada")
        subject = make_subject(user_type, {"name": "ada", "email": "a@b.co"})
        assert store.save(subject) is False
        assert subject.errors.get("name") == ["The name has already been taken."]

    def test_update_against_itself_passes(self, store, make_subject, user_type, engine, adapter):
        insert_row(engine, adapter, "users", id=7, name="ada", email="ada@example.com")
        subject = make_subject(
            user_type, {"id": 7, "name": "ada", "email": "new@example.com"}, exists=True
        )
        assert store.save(subject) is True
        assert fetch(engine, adapter, "users", 7)["email"] == "new@example.com"

    def test_update_colliding_with_other_row_fails(
        self, store, make_subject, user_type, engine, adapter
    ):
        insert_row(engine, adapter, "users", id=7, name="ada")
        insert_row(engine, adapter, "users", id=8, name="grace")
        subject = make_subject(user_type, {"id": 8, "name": "ada"}, exists=True)
        assert store.save(subject) is False
        assert fetch(engine, adapter, "users", 8)["name"] == "grace"

    def test_update_without_injection_collides_with_itself(
        self, store, make_subject, user_type, engine, adapter
    ):
        insert_row(engine, adapter, "users", id=7, name="ada")
        subject = make_subject(user_type, {"id": 7, "name": "ada"}, exists=True)
        subject.inject_unique_identifier = False
        assert store.save(subject) is False

    def test_exception_mode_raises_and_does_not_write(
        self, store, make_subject, user_type, adapter
    ):
        subject = make_subject(
            user_type, {"name": "", "email": "x"}, throw_validation_exceptions=True
        )
        with pytest.raises(ValidationException):
            store.save(subject)
        assert adapter.count("users", "email", "x") == 0

    def test_veto_aborts_write(self, store, events, make_subject, user_type, adapter):
        events.listen(validating_event("User"), lambda subject, event: "stop")
        subject = make_subject(user_type, {"name": "ada", "email": "a@b.co"})
        assert store.save(subject) is False
        assert adapter.count("users", "name", "ada") == 0
        assert subject.errors.is_empty()

    def test_disabled_validation_saves_invalid_record(self, store, make_subject, user_type, adapter):
        subject = make_subject(user_type, {"name": ""}, validating=False)
        assert store.save(subject) is True
        assert subject.record.exists

    def test_unobserved_type_saves_without_validation(self, adapter, make_subject, user_type):
        from recordguard.persistence import RecordStore

        subject = make_subject(user_type, {"name": ""})
        assert RecordStore(adapter).save(subject) is True


class TestSaveVariants:
    def test_force_save_restores_toggle(self, store, make_subject, user_type):
        subject = make_subject(user_type, {"name": ""})
        assert store.force_save(subject) is True
        assert subject.validating is True

    def test_force_save_restores_toggle_on_error(self, adapter, make_subject, user_type):
        from recordguard.persistence import RecordStore

        class Exploding:
            def saving(self, subject, processing=None):
                raise RuntimeError("boom")

        store = RecordStore(adapter)
        store.observe("User", Exploding())
        subject = make_subject(user_type, {"name": "x"})
        with pytest.raises(RuntimeError):
            store.force_save(subject)
        assert subject.validating is True

    def test_save_or_fail_raises(self, store, make_subject, user_type):
        subject = make_subject(user_type, {"name": ""})
        with pytest.raises(ValidationException):
            store.save_or_fail(subject)
        assert not subject.record.exists

    def test_save_or_fail_saves_valid_record(self, store, make_subject, user_type):
        subject = make_subject(user_type, {"name": "ada", "email": "a@b.co"})
        assert store.save_or_fail(subject) is True

    def test_save_or_fail_checks_processing_state(self, store, make_subject, widget_type, adapter):
        subject = make_subject(widget_type, {"slug": "w", "title": "Wid"})
        with pytest.raises(ValidationException) as excinfo:
            store.save_or_fail(subject, processing="publishing")
        assert excinfo.value.errors.get("title") == ["The title must be at least 5 characters."]
        assert adapter.count("widgets", "slug", "w") == 0

    def test_save_or_return_in_exception_mode(self, store, make_subject, user_type):
        subject = make_subject(user_type, {"name": ""}, throw_validation_exceptions=True)
        assert store.save_or_return(subject) is False
        assert subject.throw_validation_exceptions is True


class TestDeleteAndRestore:
    def test_soft_delete_and_restore(self, store, make_subject, widget_type, engine, adapter):
        insert_row(engine, adapter, "widgets", id=1, slug="w", title="Widget")
        subject = make_subject(widget_type, {"id": 1, "slug": "w", "title": "Widget"}, exists=True)
        assert store.delete(subject) is True
        assert fetch(engine, adapter, "widgets", 1)["deleted_at"] is not None
        assert store.restore(subject) is True
        assert fetch(engine, adapter, "widgets", 1)["deleted_at"] is None

    def test_delete_blocked_by_rules(self, store, make_subject, widget_type, engine, adapter):
        insert_row(engine, adapter, "widgets", id=1, slug="locked", title="Widget")
        subject = make_subject(widget_type, {"id": 1, "slug": "locked"}, exists=True)
        assert store.delete(subject) is False
        assert fetch(engine, adapter, "widgets", 1)["deleted_at"] is None

    def test_restore_blocked_by_rules(self, store, make_subject, widget_type, engine, adapter):
        insert_row(engine, adapter, "widgets", id=1, slug="w")
        subject = make_subject(widget_type, {"id": 1, "slug": "w"}, exists=True)
        assert store.restore(subject) is False

    def test_hard_delete(self, store, make_subject, user_type, engine, adapter):
        insert_row(engine, adapter, "users", id=3, name="ada")
        subject = make_subject(user_type, {"id": 3, "name": "ada"}, exists=True)
        assert store.delete(subject) is True
        assert not subject.record.exists
        assert fetch(engine, adapter, "users", 3) is None

    def test_delete_of_unsaved_record(self, store, make_subject, user_type):
        assert store.delete(make_subject(user_type, {"name": "x"})) is False

    def test_restore_requires_soft_deletes(self, store, make_subject, user_type):
        with pytest.raises(ValueError, match="does not soft delete"):
            store.restore(make_subject(user_type, {"id": 1}, exists=True))
