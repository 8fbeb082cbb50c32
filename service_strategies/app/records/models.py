"""
Record schemas for products, customers and orders.

Records cross every boundary as plain dicts with JSON-friendly values:
integers as ``int``, numeric columns as ``float``, dates as ISO-8601
strings. Both record stores and the cache agree on this shape, so a
value read from the cache compares equal to one read from the store.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from shared.errors import ValidationError


class RecordKind(str, Enum):
    """Record kinds held by the record store."""
    PRODUCT = "product"
    CUSTOMER = "customer"
    ORDER = "order"

    @property
    def plural(self) -> str:
        return f"{self.value}s"

    @classmethod
    def parse(cls, kind: Union["RecordKind", str]) -> "RecordKind":
        """Resolve a kind from an enum member, its value or its plural."""
        if isinstance(kind, cls):
            return kind
        name = str(kind).strip().lower()
        for member in cls:
            if name in (member.value, member.plural):
                return member
        raise ValidationError(f"Unknown record kind: {kind}", {"kind": str(kind)})


class ColumnType(str, Enum):
    """Column value types."""
    TEXT = "text"
    INTEGER = "integer"
    NUMERIC = "numeric"
    DATE = "date"


@dataclass(frozen=True)
class Column:
    """A named, typed record field."""
    name: str
    type: ColumnType = ColumnType.TEXT

    def coerce(self, value: Any) -> Any:
        """Convert a value to its JSON-friendly form for this column."""
        if value is None:
            return None
        try:
            if self.type is ColumnType.INTEGER:
                if isinstance(value, bool):
                    raise TypeError("booleans are not integers")
                if isinstance(value, float) and not value.is_integer():
                    raise ValueError("fractional value")
                return int(value)
            if self.type is ColumnType.NUMERIC:
                if isinstance(value, bool):
                    raise TypeError("booleans are not numbers")
                return float(value)
            if self.type is ColumnType.DATE:
                if isinstance(value, datetime):
                    return value.date().isoformat()
                if isinstance(value, date):
                    return value.isoformat()
                return date.fromisoformat(str(value)[:10]).isoformat()
            return str(value)
        except (TypeError, ValueError, ArithmeticError) as e:
            raise ValidationError(
                f"Invalid value for field {self.name}",
                {"field": self.name, "type": self.type.value, "error": str(e)}
            )

    def to_db(self, value: Any) -> Any:
        """Convert a normalized value to the type the database driver expects."""
        if value is None:
            return None
        if self.type is ColumnType.NUMERIC:
            return Decimal(str(value))
        if self.type is ColumnType.DATE:
            return date.fromisoformat(value)
        return value


@dataclass(frozen=True)
class ItemsTable:
    """Child rows embedded in a record as a list (order line items)."""
    table: str
    field: str
    columns: Tuple[Column, ...]

    def normalize(self, item: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(item, dict):
            raise ValidationError(f"Invalid {self.field} entry", {"field": self.field})
        return {column.name: column.coerce(item.get(column.name)) for column in self.columns}


@dataclass(frozen=True)
class RecordSchema:
    """Shape of one record kind."""
    kind: RecordKind
    table: str
    key: Column
    columns: Tuple[Column, ...]
    items: Optional[ItemsTable] = None

    @property
    def field_names(self) -> List[str]:
        return [column.name for column in self.columns]

    def coerce_key(self, key: Any) -> Any:
        """Normalize a record key, rejecting empty keys."""
        if key is None or (isinstance(key, str) and not key.strip()):
            raise ValidationError(f"Missing {self.key.name}", {"kind": self.kind.value})
        return self.key.coerce(key.strip() if isinstance(key, str) else key)

    def key_of(self, payload: Dict[str, Any]) -> Any:
        """Extract the record key from a create payload."""
        return self.coerce_key(payload.get(self.key.name))

    def normalize(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Keep known writable fields of a payload, coerced to column types.

        The key and unknown fields are dropped; absent fields stay absent.
        """
        if not isinstance(payload, dict):
            raise ValidationError("Payload must be a mapping", {"kind": self.kind.value})

        normalized = {
            column.name: column.coerce(payload[column.name])
            for column in self.columns
            if column.name in payload
        }
        if self.items and self.items.field in payload:
            normalized[self.items.field] = [
                self.items.normalize(item) for item in (payload[self.items.field] or [])
            ]
        return normalized

    def build_record(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Build a complete record from a create payload."""
        values = self.normalize(payload)
        record = {self.key.name: self.key_of(payload)}
        for column in self.columns:
            record[column.name] = values.get(column.name)
        if self.items:
            record[self.items.field] = values.get(self.items.field, [])
        return record

    def merge(self, current: Dict[str, Any], payload: Dict[str, Any]) -> Dict[str, Any]:
        """Overlay a write payload on the current record."""
        merged = dict(current)
        merged.update(self.normalize(payload))
        return merged

    def from_row(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Normalize a raw database row into a record."""
        record = {self.key.name: self.key.coerce(row.get(self.key.name))}
        for column in self.columns:
            record[column.name] = column.coerce(row.get(column.name))
        return record


SCHEMAS: Dict[RecordKind, RecordSchema] = {
    RecordKind.PRODUCT: RecordSchema(
        kind=RecordKind.PRODUCT,
        table="products",
        key=Column("product_code"),
        columns=(
            Column("product_name"),
            Column("product_line"),
            Column("product_scale"),
            Column("product_vendor"),
            Column("product_description"),
            Column("quantity_in_stock", ColumnType.INTEGER),
            Column("buy_price", ColumnType.NUMERIC),
            Column("msrp", ColumnType.NUMERIC),
        ),
    ),
    RecordKind.CUSTOMER: RecordSchema(
        kind=RecordKind.CUSTOMER,
        table="customers",
        key=Column("customer_number", ColumnType.INTEGER),
        columns=(
            Column("customer_name"),
            Column("contact_last_name"),
            Column("contact_first_name"),
            Column("phone"),
            Column("address_line1"),
            Column("address_line2"),
            Column("city"),
            Column("state"),
            Column("postal_code"),
            Column("country"),
            Column("sales_rep_employee_number", ColumnType.INTEGER),
            Column("credit_limit", ColumnType.NUMERIC),
        ),
    ),
    RecordKind.ORDER: RecordSchema(
        kind=RecordKind.ORDER,
        table="orders",
        key=Column("order_number", ColumnType.INTEGER),
        columns=(
            Column("order_date", ColumnType.DATE),
            Column("required_date", ColumnType.DATE),
            Column("shipped_date", ColumnType.DATE),
            Column("status"),
            Column("comments"),
            Column("customer_number", ColumnType.INTEGER),
        ),
        items=ItemsTable(
            table="order_details",
            field="items",
            columns=(
                Column("product_code"),
                Column("quantity_ordered", ColumnType.INTEGER),
                Column("price_each", ColumnType.NUMERIC),
                Column("order_line_number", ColumnType.INTEGER),
            ),
        ),
    ),
}


def get_schema(kind: Union[RecordKind, str]) -> RecordSchema:
    """Look up the schema for a record kind."""
    return SCHEMAS[RecordKind.parse(kind)]
