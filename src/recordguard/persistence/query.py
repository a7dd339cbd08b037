"""QueryService implementation backed by a StorageAdapter."""

import logging
from collections.abc import Sequence
from typing import Any

from recordguard.persistence.adapter import StorageAdapter

logger = logging.getLogger(__name__)


class AdapterQueryService:
    """QueryService implementation that wraps a StorageAdapter.

    This allows the unique and exists rules to query stored rows.
    """

    def __init__(self, adapter: StorageAdapter):
        self.adapter = adapter

    def count(
        self,
        table: str,
        column: str,
        value: Any,
        *,
        exclude: Any = None,
        exclude_column: str = "id",
        where: Sequence[tuple[str, str]] = (),
    ) -> int:
        total = self.adapter.count(
            table,
            column,
            value,
            exclude=exclude,
            exclude_column=exclude_column,
            where=where,
        )
        logger.debug(
            "Counted %d row(s) in %s where %s=%r (excluding %s=%r)",
            total,
            table,
            column,
            value,
            exclude_column,
            exclude,
        )
        return total

    def exists(
        self,
        table: str,
        column: str,
        value: Any,
        *,
        exclude: Any = None,
        exclude_column: str = "id",
        where: Sequence[tuple[str, str]] = (),
    ) -> bool:
        count = self.count(
            table,
            column,
            value,
            exclude=exclude,
            exclude_column=exclude_column,
            where=where,
        )
        return count > 0
