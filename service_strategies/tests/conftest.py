"""
Shared fixtures for strategy service tests.
"""

import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_strategies.app.cache import MemoryCacheStore
from service_strategies.app.persistence import MemoryRecordStore
from service_strategies.app.records import RecordKind


PRODUCTS = [
    {
        "product_code": "P1",
        "product_name": "1969 Harley Davidson Ultimate Chopper",
        "product_line": "Motorcycles",
        "quantity_in_stock": 10,
        "buy_price": 48.81,
        "msrp": 95.70,
    },
    {
        "product_code": "P2",
        "product_name": "1952 Alpine Renault 1300",
        "product_line": "Classic Cars",
        "quantity_in_stock": 7305,
        "buy_price": 98.58,
        "msrp": 214.30,
    },
    {
        "product_code": "P3",
        "product_name": "1996 Moto Guzzi 1100i",
        "product_line": "Motorcycles",
        "quantity_in_stock": 6625,
        "buy_price": 68.99,
        "msrp": 118.94,
    },
]

CUSTOMERS = [
    {"customer_number": 103, "customer_name": "Atelier graphique", "city": "Nantes", "credit_limit": 21000},
    {"customer_number": 112, "customer_name": "Signal Gift Stores", "city": "Las Vegas", "credit_limit": 71800},
]

ORDERS = [
    {
        "order_number": 10100,
        "order_date": "2003-01-06",
        "status": "Shipped",
        "customer_number": 103,
        "items": [
            {"product_code": "P1", "quantity_ordered": 30, "price_each": 136.0, "order_line_number": 1},
            {"product_code": "P2", "quantity_ordered": 50, "price_each": 55.09, "order_line_number": 2},
        ],
    },
]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def record_store():
    """Record store seeded with products, customers and orders."""
    store = MemoryRecordStore()
    store.seed(RecordKind.PRODUCT, PRODUCTS)
    store.seed(RecordKind.CUSTOMER, CUSTOMERS)
    store.seed(RecordKind.ORDER, ORDERS)
    return store


@pytest.fixture
def cache_store(clock):
    return MemoryCacheStore(clock=clock)
