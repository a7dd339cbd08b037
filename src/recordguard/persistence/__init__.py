"""Persistence layer - storage adapter, query service and record store."""

from recordguard.persistence.adapter import StorageAdapter
from recordguard.persistence.config import StorageSettings, create_store
from recordguard.persistence.query import AdapterQueryService
from recordguard.persistence.store import LifecycleObserver, RecordStore

__all__ = [
    "AdapterQueryService",
    "LifecycleObserver",
    "RecordStore",
    "StorageAdapter",
    "StorageSettings",
    "create_store",
]
