"""Process-wide store of named runtime settings."""

from __future__ import annotations

from typing import Any

_values: dict[str, Any] = {}


def get_value(key: str) -> Any:
    """Return the value stored under key, registering None for unknown keys."""
    return _values.setdefault(key, None)


def set_value(key: str, value: Any) -> None:
    """Store value under key."""
    _values[key] = value


def clear() -> None:
    """Remove every stored setting."""
    _values.clear()