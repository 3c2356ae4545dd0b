"""Helpers for loading optional .env files and validating required variables."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

from core.logging import get_logger
from services.env_errors import RequiredValueError
from services.env_sources import EnvSource, ProcessEnvSource

logger = get_logger(__name__)


def load_dotenv_if_available(path: Path | None = None, *, override: bool = False) -> bool:
    """Load environment variables from a .env file when the file exists.

    Returns ``True`` when a file was found and read. Existing process
    variables win unless ``override`` is set.
    """

    env_path = path or Path(".env")
    if not env_path.exists():
        logger.debug("No .env file at %s; skipping.", env_path)
        return False
    try:
        load_dotenv(dotenv_path=env_path, override=override)
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Failed to load .env file %s: %s", env_path, exc)
        return False
    logger.debug("Loaded environment variables from %s", env_path)
    return True


def require_env_vars(
    required: Sequence[str],
    *,
    context: str | None = None,
    source: Optional[EnvSource] = None,
) -> None:
    """Raise ``RequiredValueError`` when one or more required variables are missing or blank."""

    source = source if source is not None else ProcessEnvSource()
    missing = [name for name in required if not (source.lookup(name) or "").strip()]
    if not missing:
        return

    prefix = f"[{context}] " if context else ""
    message = (
        f"{prefix}Missing required environment variables: {', '.join(sorted(missing))}. "
        "Populate your .env or configure runtime secrets."
    )
    raise RequiredValueError(message, metadata={"missing": sorted(missing)})


__all__ = ["load_dotenv_if_available", "require_env_vars"]
