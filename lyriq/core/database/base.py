"""
Base database models and utilities.

This module provides the foundational database components used across
all entities in the centralized database layer using SQLModel.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List

from pydantic import ConfigDict
from sqlmodel import SQLModel


class Base(SQLModel):
    """Base class for all SQLModel entities."""

    model_config = ConfigDict(arbitrary_types_allowed=True)


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, matching the ``TIMESTAMP WITHOUT TIME ZONE`` columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def load_json_list(raw: str | None) -> List[Any]:
    """Decode a JSON array column, tolerating empty or malformed values."""
    try:
        value = json.loads(raw) if raw else []
    except (json.JSONDecodeError, TypeError):
        return []
    return value if isinstance(value, list) else []


def load_json_dict(raw: str | None) -> dict:
    """Decode a JSON object column, tolerating empty or malformed values."""
    try:
        value = json.loads(raw) if raw else {}
    except (json.JSONDecodeError, TypeError):
        return {}
    return value if isinstance(value, dict) else {}


def encode_json_fields(data: Dict[str, Any], json_fields: Iterable[str]) -> Dict[str, Any]:
    """Copy ``data`` with the values of ``json_fields`` serialized to JSON text.

    Entities keep list and dict values in text columns; API payloads carry
    them as native Python values.
    """
    fields = set(json_fields)
    encoded: Dict[str, Any] = {}
    for key, value in data.items():
        if key in fields and value is not None and not isinstance(value, str):
            value = json.dumps(value)
        encoded[key] = value
    return encoded
