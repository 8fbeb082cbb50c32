"""
JSON encoding of cache values.
"""

import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from shared.errors import CacheError


def _default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dumps(value: Any) -> str:
    """Serialize a cache value."""
    try:
        return json.dumps(value, default=_default, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise CacheError("Failed to serialize cache value", {"error": str(e)})


def loads(data: Any) -> Any:
    """Deserialize a cache value; ``None`` stays ``None``."""
    if data is None:
        return None
    if isinstance(data, bytes):
        data = data.decode("utf-8")
    try:
        return json.loads(data)
    except ValueError as e:
        raise CacheError("Failed to deserialize cache value", {"error": str(e)})
