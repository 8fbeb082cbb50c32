"""
Record schemas for the strategy service.

Three record kinds (product, customer, order) share one schema
description used by every record store and strategy.
"""

from .models import (
    Column,
    ColumnType,
    ItemsTable,
    RecordKind,
    RecordSchema,
    SCHEMAS,
    get_schema,
)

__all__ = [
    "Column",
    "ColumnType",
    "ItemsTable",
    "RecordKind",
    "RecordSchema",
    "SCHEMAS",
    "get_schema",
]
