"""Environment variable helpers.

Thin module-level wrappers around a process-wide :class:`EnvService`. The
service is built lazily from the live process environment; applications that
read from another source (an injected map, a ``.env`` file) call
:func:`configure_env` once at startup.
"""

from __future__ import annotations

from typing import Any, Optional

from core.env_utils import load_dotenv_if_available
from core.logging import get_logger
from services.env_cache import EnvCache
from services.env_options import MISSING
from services.env_service import EnvService, Validator
from services.env_settings import EnvSettings
from services.env_sources import EnvSource, ProcessEnvSource

logger = get_logger(__name__)

_SERVICE: Optional[EnvService] = None


def _build_default_service() -> EnvService:
    source = ProcessEnvSource()
    settings = EnvSettings.from_source(source)
    if settings.dotenv_path is not None:
        load_dotenv_if_available(settings.dotenv_path)
    return EnvService(source, settings=settings)


def get_env_service() -> EnvService:
    global _SERVICE
    if _SERVICE is None:
        _SERVICE = _build_default_service()
    return _SERVICE


def configure_env(
    source: Optional[EnvSource] = None,
    *,
    settings: Optional[EnvSettings] = None,
    cache: Optional[EnvCache] = None,
) -> EnvService:
    """Replace the process-wide service, e.g. to read from an injected map."""

    global _SERVICE
    source = source if source is not None else ProcessEnvSource()
    _SERVICE = EnvService(source, settings=settings or EnvSettings.from_source(source), cache=cache)
    logger.debug("Environment service configured with %r.", source)
    return _SERVICE


def reset_env() -> None:
    """Drop the process-wide service so the next call rebuilds it."""

    global _SERVICE
    _SERVICE = None


def env_get(key: str, options: Any = MISSING) -> Any:
    return get_env_service().get(key, options)


def env_str(key: str, options: Any = MISSING) -> Any:
    return get_env_service().string(key, options)


def env_number(key: str, options: Any = MISSING) -> Any:
    return get_env_service().number(key, options)


def env_bool(key: str, options: Any = MISSING) -> Any:
    return get_env_service().boolean(key, options)


def env_array(key: str, options: Any = MISSING) -> Any:
    return get_env_service().array(key, options)


def env_object(key: str, options: Any = MISSING) -> Any:
    return get_env_service().object(key, options)


def env_json(key: str, options: Any = MISSING) -> Any:
    return get_env_service().json(key, options)


def env_enum(key: str, enums: Any = MISSING, default: Any = MISSING, options: Any = MISSING) -> Any:
    return get_env_service().enum(key, enums, default, options)


def env_email(key: str, options: Any = MISSING) -> Any:
    return get_env_service().email(key, options)


def env_url(key: str, options: Any = MISSING) -> Any:
    return get_env_service().url(key, options)


def env_host(key: str, options: Any = MISSING) -> Any:
    return get_env_service().host(key, options)


def env_custom(key: str, validator: Validator[Any], options: Any = MISSING) -> Any:
    return get_env_service().custom(key, validator, options)


def env_is(name: str) -> bool:
    return get_env_service().is_(name)


def is_production() -> bool:
    return get_env_service().is_production()


def is_prod() -> bool:
    return get_env_service().is_prod()


def is_not_production() -> bool:
    return get_env_service().is_not_production()


def is_not_prod() -> bool:
    return get_env_service().is_not_prod()


def is_testing() -> bool:
    return get_env_service().is_testing()


def clear_env_cache() -> None:
    """Forget every memoized value; the next access re-reads the source."""

    get_env_service().clear_cache()


__all__ = [
    "MISSING",
    "clear_env_cache",
    "configure_env",
    "env_array",
    "env_bool",
    "env_custom",
    "env_email",
    "env_enum",
    "env_get",
    "env_host",
    "env_is",
    "env_json",
    "env_number",
    "env_object",
    "env_str",
    "env_url",
    "get_env_service",
    "is_not_prod",
    "is_not_production",
    "is_prod",
    "is_production",
    "is_testing",
    "reset_env",
]
