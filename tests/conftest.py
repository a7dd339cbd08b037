"""Shared fixtures for recordguard tests."""

import pytest
from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table, create_engine
from sqlalchemy.pool import StaticPool

from recordguard import (
    EventBus,
    InjectorRegistry,
    LifecycleDispatcher,
    Record,
    RecordType,
    RuleRegistry,
    Validating,
    ValidationSettings,
    Validator,
    register_builtins,
)
from recordguard.persistence import AdapterQueryService, RecordStore, StorageAdapter


@pytest.fixture(autouse=True)
def setup_registries():
    """Register built-in rules and injectors before each test."""
    RuleRegistry.clear()
    InjectorRegistry.clear()
    register_builtins()
    yield
    RuleRegistry.clear()
    InjectorRegistry.clear()


# =============================================================================
# Storage
# =============================================================================


@pytest.fixture
def engine():
    """In-memory SQLite engine with users and widgets tables."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    metadata = MetaData()
    Table(
        "users",
        metadata,
        Column("id", Integer, primary_key=True),
        Column("name", String(100)),
        Column("email", String(200)),
        Column("account_id", Integer),
    )
    Table(
        "widgets",
        metadata,
        Column("id", Integer, primary_key=True),
        Column("slug", String(100)),
        Column("title", String(200)),
        Column("deleted_at", DateTime, nullable=True),
    )
    metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def adapter(engine):
    return StorageAdapter(engine)


@pytest.fixture
def validator(adapter):
    return Validator(AdapterQueryService(adapter))


@pytest.fixture
def events():
    return EventBus()


@pytest.fixture
def dispatcher(events):
    return LifecycleDispatcher(events)


@pytest.fixture
def store(adapter, dispatcher, user_type, widget_type):
    store = RecordStore(adapter)
    store.observe(user_type, dispatcher)
    store.observe(widget_type, dispatcher)
    return store


# =============================================================================
# Record types
# =============================================================================


@pytest.fixture
def user_type():
    return RecordType(
        name="User",
        table="users",
        rules={
            "errors": {
                "saving": {"name": "required|unique:users"},
                "creating": {"email": "required|email"},
                "updating": {"email": "email"},
            },
        },
    )


@pytest.fixture
def widget_type():
    return RecordType(
        name="Widget",
        table="widgets",
        soft_deletes=True,
        rules={
            "errors": {
                "saving": {"slug": "required|unique", "title": "required|max:50"},
                "publishing": {"title": "min:5"},
                "deleting": {"slug": "not_in:locked"},
                "restoring": {"title": "required"},
            },
            "warnings": {
                "saving": {"title": "max:10"},
            },
        },
    )


@pytest.fixture
def make_subject(validator):
    """Factory for Validating subjects backed by the storage validator."""

    def _make(record_type, attributes=None, exists=False, **settings):
        if settings:
            record_type = RecordType(
                name=record_type.name,
                table=record_type.table,
                key_name=record_type.key_name,
                rules=record_type.rules,
                settings=ValidationSettings(**settings),
                soft_deletes=record_type.soft_deletes,
            )
        record = Record(record_type, dict(attributes or {}), exists=exists)
        return Validating(record, validator)

    return _make
