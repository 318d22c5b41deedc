"""Key presence checks and length sanitizing for raw input mappings.

These helpers are pure; callers decide which exception to raise.
"""
from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

__all__ = [
    "missing_keys",
    "contains_all_keys",
    "contains_any_key",
    "sanitize_length",
]


def _present(data: Mapping[str, Any], key: str) -> bool:
    return data.get(key) is not None


def missing_keys(data: Mapping[str, Any], keys: Iterable[str]) -> List[str]:
    """Return the *keys* absent from *data* (``None`` counts as absent), in order."""
    return [k for k in keys if not _present(data, k)]


def contains_all_keys(data: Mapping[str, Any], keys: Iterable[str]) -> bool:
    return not missing_keys(data, keys)


def contains_any_key(data: Mapping[str, Any], keys: Iterable[str]) -> bool:
    return any(_present(data, k) for k in keys)


def sanitize_length(value: Optional[str], max_len: int) -> Optional[str]:
    """Truncate *value* to at most *max_len* characters; ``None`` passes through."""
    if value is None:
        return None
    return value[:max_len]
