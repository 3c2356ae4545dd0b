"""Per-key memoization of resolved environment values."""

from __future__ import annotations

from typing import Any, Dict

_UNSET = object()


class EnvCache:
    """Hold the first resolved value per key until ``clear()`` is called."""

    def __init__(self) -> None:
        self._values: Dict[str, Any] = {}

    def lookup(self, key: str, default: Any = _UNSET) -> Any:
        """Return the cached value for ``key``; raise ``KeyError`` when absent and no default given."""

        if key in self._values:
            return self._values[key]
        if default is _UNSET:
            raise KeyError(key)
        return default

    def store(self, key: str, value: Any) -> None:
        self._values[key] = value

    def clear(self) -> None:
        self._values.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)


__all__ = ["EnvCache"]
