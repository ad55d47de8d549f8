"""
Document Sanitizer

The document store rejects explicit "absent" markers, so every document
passes through ``strip_absent`` right before it is written.
"""
from typing import Any


class _Unset:
    """Marker for a field that was deliberately left out."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()


def is_absent(value: Any) -> bool:
    """True for None and UNSET."""
    return value is None or value is UNSET


def strip_absent(value: Any) -> Any:
    """
    Recursively drop mapping entries whose value is absent.

    Lists and tuples are rebuilt element by element (elements are
    recursed, never dropped), mappings key by key, and scalars are
    returned as they are. The input is not modified.
    """
    if isinstance(value, dict):
        return {
            key: strip_absent(item)
            for key, item in value.items()
            if not is_absent(item)
        }
    if isinstance(value, (list, tuple)):
        return [strip_absent(item) for item in value]
    return value
