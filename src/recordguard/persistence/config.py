"""Storage settings and the record store factory.

Settings are read from the environment:
    DATABASE_URL          SQLAlchemy URL (sqlite or postgresql)
    RECORDGUARD_DB_PATH   sqlite file path, used when DATABASE_URL is unset
    RECORDGUARD_DB_ECHO   "1", "true", "yes" or "on" to log SQL statements

Usage:
    store = create_store(StorageSettings.from_env(), loader_record_types)
    subject = store.subject(Record(user_type, {"name": "Ada"}))
    store.save(subject)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from recordguard.dispatcher import LifecycleDispatcher
from recordguard.events import EventBus
from recordguard.persistence.adapter import StorageAdapter
from recordguard.persistence.store import RecordStore
from recordguard.records import RecordType

logger = logging.getLogger(__name__)

URL_ENV = "DATABASE_URL"
DB_PATH_ENV = "RECORDGUARD_DB_PATH"
ECHO_ENV = "RECORDGUARD_DB_ECHO"

DEFAULT_URL = "sqlite:///recordguard.db"
SUPPORTED_BACKENDS = ("sqlite", "postgresql")

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class StorageSettings:
    """Where records are stored and how the engine is built."""

    url: str = DEFAULT_URL
    echo: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> StorageSettings:
        """Read settings; DATABASE_URL wins over RECORDGUARD_DB_PATH."""
        env = os.environ if environ is None else environ
        url = env.get(URL_ENV)
        if not url and env.get(DB_PATH_ENV):
            url = f"sqlite:///{env[DB_PATH_ENV]}"
        return cls(
            url=url or DEFAULT_URL,
            echo=env.get(ECHO_ENV, "").strip().lower() in _TRUTHY,
        )

    @property
    def backend(self) -> str:
        """Database backend name, "sqlite" or "postgresql".

        Raises:
            ValueError: For any other URL scheme
        """
        scheme = self.url.split(":", 1)[0].split("+", 1)[0]
        if scheme not in SUPPORTED_BACKENDS:
            raise ValueError(f"Unsupported database URL scheme: {self.url}")
        return scheme

    @property
    def sqlalchemy_url(self) -> str:
        """URL with the psycopg (v3) driver selected for plain postgresql:// URLs."""
        if self.url.startswith("postgresql://"):
            return "postgresql+psycopg://" + self.url[len("postgresql://"):]
        return self.url

    def create_engine(self) -> Engine:
        logger.debug("Creating %s engine", self.backend)
        return create_engine(self.sqlalchemy_url, echo=self.echo)


def create_store(
    settings: StorageSettings | None = None,
    record_types: Iterable[RecordType] = (),
    events: EventBus | None = None,
) -> RecordStore:
    """Build a RecordStore with a lifecycle dispatcher observing each type.

    Args:
        settings: Storage settings (default: read from the environment)
        record_types: Record types whose writes are validated
        events: Event bus shared by the dispatcher and its listeners

    Returns:
        A store whose validator queries the same database
    """
    settings = settings or StorageSettings.from_env()
    store = RecordStore(StorageAdapter(settings.create_engine()))

    dispatcher = LifecycleDispatcher(events)
    names = []
    for record_type in record_types:
        store.observe(record_type, dispatcher)
        names.append(record_type.name)

    logger.info("Record store on %s observing %s", settings.backend, names or "nothing")
    return store
