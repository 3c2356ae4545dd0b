"""Configuration for the environment service itself."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from services.env_sources import EnvSource, ProcessEnvSource

DEFAULT_MODE_KEY = "NODE_ENV"
_TRUTHY = {"1", "true", "yes", "on"}


def _flag(raw: Optional[str], default: bool) -> bool:
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass(frozen=True, slots=True)
class EnvSettings:
    """Knobs read once when the service is built."""

    mode_key: str = DEFAULT_MODE_KEY
    reject_empty: bool = False
    dotenv_path: Optional[Path] = None

    @classmethod
    def from_source(cls, source: Optional[EnvSource] = None) -> "EnvSettings":
        """Read ``ENV_MODE_KEY``, ``ENV_REJECT_EMPTY`` and ``ENV_DOTENV_PATH``."""

        source = source if source is not None else ProcessEnvSource()
        mode_key = (source.lookup("ENV_MODE_KEY") or "").strip() or DEFAULT_MODE_KEY
        dotenv_raw = (source.lookup("ENV_DOTENV_PATH") or "").strip()
        return cls(
            mode_key=mode_key,
            reject_empty=_flag(source.lookup("ENV_REJECT_EMPTY"), False),
            dotenv_path=Path(dotenv_raw) if dotenv_raw else None,
        )


__all__ = ["DEFAULT_MODE_KEY", "EnvSettings"]
