"""
Unit tests for record schemas.
"""

import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from shared.errors import ValidationError
from service_strategies.app.records import RecordKind, get_schema


class TestRecordKind:
    """Test cases for RecordKind parsing."""

    @pytest.mark.parametrize("value", ["product", "products", "PRODUCTS", " product ", RecordKind.PRODUCT])
    def test_parse_accepts_value_and_plural(self, value):
        assert RecordKind.parse(value) is RecordKind.PRODUCT

    def test_parse_unknown_kind(self):
        with pytest.raises(ValidationError) as exc_info:
            RecordKind.parse("employees")

        assert exc_info.value.code == "VALIDATION_ERROR"
        assert exc_info.value.details["kind"] == "employees"


class TestRecordSchema:
    """Test cases for RecordSchema."""

    def test_build_record_fills_missing_fields(self):
        schema = get_schema(RecordKind.PRODUCT)

        record = schema.build_record({"product_code": "S10_1678", "quantity_in_stock": "7933"})

        assert record["product_code"] == "S10_1678"
        assert record["quantity_in_stock"] == 7933
        assert record["msrp"] is None
        assert set(record) == {"product_code", *schema.field_names}

    def test_build_record_requires_key(self):
        schema = get_schema(RecordKind.PRODUCT)

        with pytest.raises(ValidationError):
            schema.build_record({"product_name": "No code"})

        with pytest.raises(ValidationError):
            schema.build_record({"product_code": "   "})

    def test_normalize_drops_key_and_unknown_fields(self):
        schema = get_schema(RecordKind.PRODUCT)

        values = schema.normalize({"product_code": "X", "buy_price": "12.5", "color": "red"})

        assert values == {"buy_price": 12.5}

    def test_normalize_rejects_bad_values(self):
        schema = get_schema(RecordKind.PRODUCT)

        with pytest.raises(ValidationError) as exc_info:
            schema.normalize({"quantity_in_stock": "lots"})
        assert exc_info.value.details["field"] == "quantity_in_stock"

        with pytest.raises(ValidationError):
            schema.normalize({"quantity_in_stock": 1.5})

        with pytest.raises(ValidationError):
            schema.normalize({"quantity_in_stock": True})

    def test_normalize_rejects_non_mapping(self):
        with pytest.raises(ValidationError):
            get_schema(RecordKind.CUSTOMER).normalize(["not", "a", "dict"])

    def test_integer_key_coercion(self):
        schema = get_schema(RecordKind.CUSTOMER)

        assert schema.coerce_key("103") == 103
        with pytest.raises(ValidationError):
            schema.coerce_key("abc")

    def test_order_dates_and_items(self):
        schema = get_schema(RecordKind.ORDER)

        record = schema.build_record({
            "order_number": 10100,
            "order_date": "2003-01-06T00:00:00",
            "items": [{"product_code": "P1", "quantity_ordered": "30", "price_each": "136.00"}],
        })

        assert record["order_date"] == "2003-01-06"
        assert record["shipped_date"] is None
        assert record["items"] == [
            {"product_code": "P1", "quantity_ordered": 30, "price_each": 136.0, "order_line_number": None}
        ]

    def test_order_without_items(self):
        record = get_schema(RecordKind.ORDER).build_record({"order_number": 1})

        assert record["items"] == []

    def test_merge_overlays_payload(self):
        schema = get_schema(RecordKind.PRODUCT)
        current = schema.build_record({"product_code": "P1", "product_name": "Widget", "quantity_in_stock": 10})

        merged = schema.merge(current, {"quantity_in_stock": 20, "product_code": "P9"})

        assert merged["quantity_in_stock"] == 20
        assert merged["product_name"] == "Widget"
        assert merged["product_code"] == "P1"
        assert current["quantity_in_stock"] == 10

    def test_column_to_db(self):
        from datetime import date
        from decimal import Decimal

        schema = get_schema(RecordKind.ORDER)
        order_date = next(c for c in schema.columns if c.name == "order_date")
        price = next(c for c in schema.items.columns if c.name == "price_each")

        assert order_date.to_db("2003-01-06") == date(2003, 1, 6)
        assert price.to_db(136.5) == Decimal("136.5")
        assert price.to_db(None) is None
