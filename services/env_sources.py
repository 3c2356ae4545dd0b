"""Raw key/value sources the environment service reads from.

A source only needs a ``lookup(key)`` method returning the raw string or
``None``. The host application picks one when it builds an ``EnvService``:

- ``ProcessEnvSource`` reads ``os.environ`` at call time.
- ``StaticEnvSource`` serves a map injected ahead of time, e.g. a JSON
  artifact written by a build step or a ``.env`` file read without touching
  the process environment.
- ``ChainedEnvSource`` returns the first hit across several sources.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Protocol, Sequence, runtime_checkable

from dotenv import dotenv_values

from core.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class EnvSource(Protocol):
    def lookup(self, key: str) -> Optional[str]:
        ...


class ProcessEnvSource:
    """Read variables from the live process environment."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None) -> None:
        self._environ = environ

    def lookup(self, key: str) -> Optional[str]:
        environ = self._environ if self._environ is not None else os.environ
        return environ.get(key)

    def __repr__(self) -> str:
        return "ProcessEnvSource()"


class StaticEnvSource:
    """Serve a fixed map of variables prepared before the service starts."""

    def __init__(self, values: Optional[Mapping[str, Any]] = None) -> None:
        self._values: Dict[str, Optional[str]] = {
            str(key): None if value is None else str(value) for key, value in (values or {}).items()
        }

    @classmethod
    def from_json_file(cls, path: Path | str, *, root_key: Optional[str] = None) -> "StaticEnvSource":
        """Load a JSON object of variables, optionally nested under ``root_key``.

        Missing files yield an empty source; unreadable or malformed files raise.
        """

        json_path = Path(path)
        try:
            payload = json.loads(json_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.debug("Injected environment file %s not found; using empty map.", json_path)
            return cls()
        if root_key is not None:
            payload = payload.get(root_key, {}) if isinstance(payload, Mapping) else None
        if not isinstance(payload, Mapping):
            raise ValueError(f"Injected environment file {json_path} must contain a JSON object.")
        logger.debug("Loaded %d injected environment variables from %s", len(payload), json_path)
        return cls(payload)

    @classmethod
    def from_dotenv(cls, path: Path | str, *, interpolate: bool = True) -> "StaticEnvSource":
        """Read a ``.env`` file without exporting it into ``os.environ``."""

        values = dotenv_values(dotenv_path=Path(path), interpolate=interpolate)
        return cls(values)

    def lookup(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def keys(self) -> Sequence[str]:
        return list(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"StaticEnvSource(keys={len(self._values)})"


class ChainedEnvSource:
    """Return the first non-``None`` value across ``sources`` in order."""

    def __init__(self, *sources: EnvSource) -> None:
        if not sources:
            raise ValueError("ChainedEnvSource requires at least one source.")
        self._sources = tuple(sources)

    def lookup(self, key: str) -> Optional[str]:
        for source in self._sources:
            value = source.lookup(key)
            if value is not None:
                return value
        return None

    def __repr__(self) -> str:
        return f"ChainedEnvSource({', '.join(repr(source) for source in self._sources)})"


__all__ = ["ChainedEnvSource", "EnvSource", "ProcessEnvSource", "StaticEnvSource"]
