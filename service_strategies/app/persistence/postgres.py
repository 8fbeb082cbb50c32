"""
PostgreSQL record store for the strategy service.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import asyncpg

from shared.errors import RecordConflictError, StoreError
from shared.logging import get_logger
from ..records import ColumnType, RecordKind, RecordSchema, SCHEMAS, get_schema
from .base import RecordStore


SQL_TYPES = {
    ColumnType.TEXT: "TEXT",
    ColumnType.INTEGER: "INTEGER",
    ColumnType.NUMERIC: "NUMERIC(12, 2)",
    ColumnType.DATE: "DATE",
}


def _affected_rows(status: str) -> int:
    """Parse the row count from a command status such as ``UPDATE 1``."""
    try:
        return int(status.split()[-1])
    except (AttributeError, IndexError, ValueError):
        return 0


class PostgreSQLRecordStore(RecordStore):
    """asyncpg-backed record store."""

    def __init__(
        self,
        dsn: str,
        *,
        min_size: int = 2,
        max_size: int = 10,
        command_timeout: float = 30.0,
        ensure_schema: bool = True,
    ):
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self.command_timeout = command_timeout
        self.ensure_schema = ensure_schema
        self.logger = get_logger("strategies.persistence.postgres")
        self.pool: Optional[asyncpg.Pool] = None

    async def start(self):
        """Start the persistence layer."""
        try:
            self.pool = await asyncpg.create_pool(
                self.dsn,
                min_size=self.min_size,
                max_size=self.max_size,
                command_timeout=self.command_timeout
            )
            if self.ensure_schema:
                await self._create_tables()

            self.logger.info("PostgreSQL record store started", max_size=self.max_size)

        except (asyncpg.PostgresError, OSError, asyncio.TimeoutError) as e:
            self.logger.error("Failed to start PostgreSQL record store", error=str(e))
            raise StoreError("Failed to connect to record store", {"error": str(e)}, code="POSTGRES_START_FAILED")

    async def stop(self):
        """Stop the persistence layer."""
        if self.pool:
            await self.pool.close()
            self.pool = None
            self.logger.info("PostgreSQL record store stopped")

    async def health_check(self) -> bool:
        """Check database connectivity."""
        if self.pool is None:
            return False
        try:
            async with self.pool.acquire(timeout=self.command_timeout) as conn:
                await conn.fetchval("SELECT 1")
            return True
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError):
            return False

    @asynccontextmanager
    async def _connection(self, operation: str, schema: RecordSchema, key: Any = None):
        """Acquire a pooled connection, translating driver errors to StoreError."""
        if self.pool is None:
            raise StoreError("Record store is not started", {"operation": operation})

        details = {"operation": operation, "kind": schema.kind.value}
        if key is not None:
            details["key"] = key

        try:
            async with self.pool.acquire(timeout=self.command_timeout) as conn:
                yield conn
        except asyncpg.UniqueViolationError as e:
            raise RecordConflictError(f"{schema.kind.value} {key} already exists", {**details, "error": str(e)})
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError) as e:
            self.logger.error("Record store query failed", error=str(e), **details)
            raise StoreError(f"Record store {operation} failed", {**details, "error": str(e)})

    async def _create_tables(self):
        """Create database tables."""
        async with self.pool.acquire() as conn:
            for schema in SCHEMAS.values():
                columns = ",\n".join(
                    f"{column.name} {SQL_TYPES[column.type]}" for column in schema.columns
                )
                await conn.execute(f"""
                    CREATE TABLE IF NOT EXISTS {schema.table} (
                        {schema.key.name} {SQL_TYPES[schema.key.type]} PRIMARY KEY,
                        {columns}
                    );
                """)

                if schema.items:
                    item_columns = ",\n".join(
                        f"{column.name} {SQL_TYPES[column.type]}" for column in schema.items.columns
                    )
                    await conn.execute(f"""
                        CREATE TABLE IF NOT EXISTS {schema.items.table} (
                            id BIGSERIAL PRIMARY KEY,
                            {schema.key.name} {SQL_TYPES[schema.key.type]} NOT NULL
                                REFERENCES {schema.table}({schema.key.name}) ON DELETE CASCADE,
                            {item_columns}
                        );
                    """)
                    await conn.execute(f"""
                        CREATE INDEX IF NOT EXISTS idx_{schema.items.table}_{schema.key.name}
                        ON {schema.items.table}({schema.key.name});
                    """)

    def _select_list(self, schema: RecordSchema) -> str:
        return ", ".join([schema.key.name] + schema.field_names)

    async def _load_items(self, conn, schema: RecordSchema, key: Any) -> List[Dict[str, Any]]:
        names = [column.name for column in schema.items.columns]
        rows = await conn.fetch(
            f"SELECT {', '.join(names)} FROM {schema.items.table} "
            f"WHERE {schema.key.name} = $1 ORDER BY order_line_number, id",
            key
        )
        return [schema.items.normalize(dict(row)) for row in rows]

    async def _insert_items(self, conn, schema: RecordSchema, key: Any, items: List[Dict[str, Any]]):
        if not items:
            return
        columns = schema.items.columns
        placeholders = ", ".join(f"${index}" for index in range(2, len(columns) + 2))
        await conn.executemany(
            f"INSERT INTO {schema.items.table} ({schema.key.name}, "
            f"{', '.join(column.name for column in columns)}) VALUES ($1, {placeholders})",
            [
                [key] + [column.to_db(item.get(column.name)) for column in columns]
                for item in items
            ]
        )

    async def get(self, kind: RecordKind, key: Any) -> Optional[Dict[str, Any]]:
        """Load a record by key, including line items where the kind has them."""
        schema = get_schema(kind)
        key = schema.coerce_key(key)
        async with self._connection("get", schema, key) as conn:
            row = await conn.fetchrow(
                f"SELECT {self._select_list(schema)} FROM {schema.table} WHERE {schema.key.name} = $1",
                key
            )
            if not row:
                return None

            record = schema.from_row(dict(row))
            if schema.items:
                record[schema.items.field] = await self._load_items(conn, schema, key)
            return record

    async def get_all(self, kind: RecordKind, limit: int) -> List[Dict[str, Any]]:
        """Load up to ``limit`` records ordered by key (headers only)."""
        schema = get_schema(kind)
        async with self._connection("get_all", schema) as conn:
            rows = await conn.fetch(
                f"SELECT {self._select_list(schema)} FROM {schema.table} "
                f"ORDER BY {schema.key.name} LIMIT $1",
                max(0, int(limit))
            )
            return [schema.from_row(dict(row)) for row in rows]

    async def create(self, kind: RecordKind, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a record and its line items in one transaction."""
        schema = get_schema(kind)
        record = schema.build_record(payload)
        key = record[schema.key.name]
        columns = [schema.key] + list(schema.columns)
        placeholders = ", ".join(f"${index}" for index in range(1, len(columns) + 1))

        async with self._connection("create", schema, key) as conn:
            async with conn.transaction():
                await conn.execute(
                    f"INSERT INTO {schema.table} ({', '.join(column.name for column in columns)}) "
                    f"VALUES ({placeholders})",
                    *[column.to_db(record[column.name]) for column in columns]
                )
                if schema.items:
                    await self._insert_items(conn, schema, key, record[schema.items.field])

        self.logger.info("Record created", kind=schema.kind.value, key=key)
        return record

    async def update(self, kind: RecordKind, key: Any, payload: Dict[str, Any]) -> bool:
        """Update the fields present in ``payload``; line items are replaced wholesale."""
        schema = get_schema(kind)
        key = schema.coerce_key(key)
        changes = schema.normalize(payload)
        columns = [column for column in schema.columns if column.name in changes]

        async with self._connection("update", schema, key) as conn:
            async with conn.transaction():
                if columns:
                    assignments = ", ".join(
                        f"{column.name} = ${index}" for index, column in enumerate(columns, start=2)
                    )
                    status = await conn.execute(
                        f"UPDATE {schema.table} SET {assignments} WHERE {schema.key.name} = $1",
                        key,
                        *[column.to_db(changes[column.name]) for column in columns]
                    )
                    exists = _affected_rows(status) > 0
                else:
                    exists = await conn.fetchval(
                        f"SELECT 1 FROM {schema.table} WHERE {schema.key.name} = $1", key
                    ) is not None

                if exists and schema.items and schema.items.field in changes:
                    await conn.execute(
                        f"DELETE FROM {schema.items.table} WHERE {schema.key.name} = $1", key
                    )
                    await self._insert_items(conn, schema, key, changes[schema.items.field])

        if not exists:
            self.logger.warning("Record not found for update", kind=schema.kind.value, key=key)
        return exists

    async def delete(self, kind: RecordKind, key: Any) -> bool:
        """Delete a record; line items go with it."""
        schema = get_schema(kind)
        key = schema.coerce_key(key)
        async with self._connection("delete", schema, key) as conn:
            status = await conn.execute(
                f"DELETE FROM {schema.table} WHERE {schema.key.name} = $1", key
            )

        if _affected_rows(status) > 0:
            self.logger.info("Record deleted", kind=schema.kind.value, key=key)
            return True

        self.logger.warning("Record not found for deletion", kind=schema.kind.value, key=key)
        return False
