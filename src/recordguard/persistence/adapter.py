"""SQLAlchemy Core storage adapter.

Tables are reflected from the database on first use, so the adapter
works against any schema that has the record type's table and key
column. Soft-deletable tables need a ``deleted_at`` column.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Column, MetaData, Table, delete, func, insert, select, update
from sqlalchemy.engine import Engine

from recordguard.records import Record
from recordguard.rules.injectors import NULL_LITERAL

DELETED_AT = "deleted_at"
NOT_NULL_LITERAL = "NOT_NULL"


class StorageAdapter:
    """Reads and writes record rows through a SQLAlchemy engine."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self.metadata = MetaData()
        self._tables: dict[str, Table] = {}

    def table(self, name: str) -> Table:
        """Reflected table by name (cached)."""
        if name not in self._tables:
            self._tables[name] = Table(name, self.metadata, autoload_with=self.engine)
        return self._tables[name]

    def _values(self, table: Table, record: Record) -> dict[str, Any]:
        return {k: v for k, v in record.attributes.items() if k in table.c}

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def insert(self, record: Record) -> Any:
        """Insert a new row and return its key."""
        table = self.table(record.table)
        values = self._values(table, record)
        with self.engine.begin() as conn:
            result = conn.execute(insert(table).values(**values))
        if record.key is not None:
            return record.key
        return result.inserted_primary_key[0]

    def update(self, record: Record) -> int:
        """Update the row matching the record's key; returns rows affected."""
        table = self.table(record.table)
        values = self._values(table, record)
        values.pop(record.key_name, None)
        if not values:
            return 0
        key_column = table.c[record.key_name]
        with self.engine.begin() as conn:
            result = conn.execute(
                update(table)
                .where(key_column == _coerce(key_column, record.key))
                .values(**values)
            )
        return result.rowcount

    def delete(self, record: Record, soft: bool = False) -> int:
        """Delete the record's row, or stamp deleted_at when soft."""
        table = self.table(record.table)
        key_column = table.c[record.key_name]
        condition = key_column == _coerce(key_column, record.key)
        if soft:
            statement = update(table).where(condition).values(
                {DELETED_AT: datetime.now(timezone.utc)}
            )
        else:
            statement = delete(table).where(condition)
        with self.engine.begin() as conn:
            return conn.execute(statement).rowcount

    def restore(self, record: Record) -> int:
        """Clear deleted_at on a soft-deleted row."""
        table = self.table(record.table)
        key_column = table.c[record.key_name]
        with self.engine.begin() as conn:
            result = conn.execute(
                update(table)
                .where(key_column == _coerce(key_column, record.key))
                .values({DELETED_AT: None})
            )
        return result.rowcount

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, table_name: str, key_name: str, key: Any) -> dict[str, Any] | None:
        table = self.table(table_name)
        key_column = table.c[key_name]
        with self.engine.connect() as conn:
            row = conn.execute(
                select(table).where(key_column == _coerce(key_column, key))
            ).mappings().first()
        return dict(row) if row else None

    def count(
        self,
        table_name: str,
        column: str,
        value: Any,
        *,
        exclude: Any = None,
        exclude_column: str = "id",
        where: Sequence[tuple[str, str]] = (),
    ) -> int:
        """Count rows with column == value, minus an excluded identity.

        Extra where pairs compare a column to a literal; ``NULL`` and
        ``NOT_NULL`` test for nullness and a leading ``!`` negates.
        """
        table = self.table(table_name)
        target = table.c[column]
        statement = select(func.count()).select_from(table).where(
            target == _coerce(target, value)
        )

        if exclude is not None:
            exclude_col = table.c[exclude_column]
            statement = statement.where(exclude_col != _coerce(exclude_col, exclude))

        for where_column, where_value in where:
            col = table.c[where_column]
            if where_value.upper() == NULL_LITERAL:
                statement = statement.where(col.is_(None))
            elif where_value.upper() == NOT_NULL_LITERAL:
                statement = statement.where(col.is_not(None))
            elif where_value.startswith("!"):
                statement = statement.where(col != _coerce(col, where_value[1:]))
            else:
                statement = statement.where(col == _coerce(col, where_value))

        with self.engine.connect() as conn:
            return conn.execute(statement).scalar_one()

    def exists(
        self,
        table_name: str,
        column: str,
        value: Any,
        *,
        exclude: Any = None,
        exclude_column: str = "id",
        where: Sequence[tuple[str, str]] = (),
    ) -> bool:
        return (
            self.count(
                table_name,
                column,
                value,
                exclude=exclude,
                exclude_column=exclude_column,
                where=where,
            )
            > 0
        )


def _coerce(column: Column, value: Any) -> Any:
    """Convert string parameters from rule clauses to the column's type."""
    if not isinstance(value, str):
        return value
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return value
    if python_type in (int, float):
        try:
            return python_type(value)
        except ValueError:
            return value
    return value
