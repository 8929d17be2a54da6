"""
Conversion of ORM and pydantic-adjacent values into plain JSON types.
"""
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID


def _scalar(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    return value


def make_json_serializable(data: Any) -> Any:
    """Walk dicts, lists and tuples; enums, decimals, dates and UUIDs become JSON scalars."""
    if isinstance(data, dict):
        return {str(key): make_json_serializable(value) for key, value in data.items()}
    if isinstance(data, (list, tuple)):
        return [make_json_serializable(item) for item in data]
    return _scalar(data)
