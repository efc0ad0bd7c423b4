"""Validators shared by read schemas whose entities store lists as JSON text."""

from __future__ import annotations

from typing import Any

from lyriq.core.database.base import load_json_dict, load_json_list


def decode_json_list(value: Any) -> Any:
    if isinstance(value, str):
        return load_json_list(value)
    return value if value is not None else []


def decode_json_dict(value: Any) -> Any:
    if isinstance(value, str):
        return load_json_dict(value)
    return value if value is not None else {}
