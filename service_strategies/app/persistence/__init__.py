"""
Persistence package for the strategy service.

The record store is the authoritative copy of every record. A
PostgreSQL implementation backs real deployments; the in-memory one
serves tests and infrastructure-free benchmarking.
"""

from .base import RecordStore
from .memory import MemoryRecordStore
from .postgres import PostgreSQLRecordStore

__all__ = ["RecordStore", "MemoryRecordStore", "PostgreSQLRecordStore"]
