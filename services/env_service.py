"""Typed, validated and memoized access to environment variables.

Every accessor funnels through :meth:`EnvService.custom`, which owns the
required-value check and the per-key cache; the accessors only differ by the
validator they hand to it. Callers may pass nothing, a bare default value, an
options mapping / :class:`EnvOptions`, or (for :meth:`EnvService.get`) a
validator callable.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

from core.logging import get_logger
from services.env_cache import EnvCache
from services.env_errors import (
    InvalidBooleanError,
    InvalidEmailError,
    InvalidEnumError,
    InvalidHostError,
    InvalidJsonError,
    InvalidNumberError,
    InvalidObjectError,
    InvalidUrlError,
    RequiredValueError,
)
from services.env_options import MISSING, EnvOptions, coerce_options, normalize_options
from services.env_settings import EnvSettings
from services.env_sources import EnvSource, ProcessEnvSource
from services.env_validators import (
    DEFAULT_URL_PROTOCOLS,
    is_boolean_literal,
    is_email,
    is_ip,
    is_numeric,
    is_url,
    parse_boolean,
    parse_number,
)

T = TypeVar("T")
Validator = Callable[[str, Optional[str], EnvOptions], T]

logger = get_logger(__name__)

_SCALAR_TYPES = (str, int, float, bool)


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def _is_plain_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _matches_default(value: Any, default: Any) -> bool:
    if value is default:
        return True
    if _is_plain_number(value) and _is_plain_number(default):
        return value == default
    if isinstance(value, _SCALAR_TYPES) and type(value) is type(default):
        return value == default
    return False


def _coerce_object_value(raw: str) -> Any:
    if is_numeric(raw):
        return parse_number(raw)
    if raw.lower() in {"true", "false"}:
        return parse_boolean(raw)
    return raw


class EnvService:
    """Resolve environment variables from ``source`` and memoize them in ``cache``."""

    def __init__(
        self,
        source: Optional[EnvSource] = None,
        *,
        cache: Optional[EnvCache] = None,
        settings: Optional[EnvSettings] = None,
    ) -> None:
        self._source = source if source is not None else ProcessEnvSource()
        self._cache = cache if cache is not None else EnvCache()
        self._settings = settings or EnvSettings()

    @property
    def source(self) -> EnvSource:
        return self._source

    @property
    def cache(self) -> EnvCache:
        return self._cache

    @property
    def settings(self) -> EnvSettings:
        return self._settings

    # ------------------------------------------------------------------ core

    def custom(self, key: str, validator: Validator[T], options: Any = MISSING) -> T:
        """Resolve ``key`` through ``validator``, enforcing required-ness and caching.

        A cached key is returned without looking at the source again. Results
        matching the configured default are not cached so a later call can
        still pick up a value that appears afterwards.
        """

        if key in self._cache:
            logger.debug("Environment variable %s served from cache.", key)
            return self._cache.lookup(key)

        raw = self._source.lookup(key)
        opts = normalize_options(options)

        if not opts.optional and _is_empty(raw):
            raise RequiredValueError(f"Value for {key} is required.", key=key)

        value = validator(key, raw, opts)

        if _matches_default(value, opts.default):
            logger.debug("Environment variable %s resolved to its default.", key)
        else:
            self._cache.store(key, value)
        return value

    def get(self, key: str, options: Any = MISSING) -> Any:
        """Dispatch to the accessor named by ``options.type`` (``string`` by default)."""

        if options is MISSING:
            return self.string(key)
        if callable(options):
            return self.custom(key, options)

        handlers: Dict[str, Callable[[str, Any], Any]] = {
            "string": self.string,
            "number": self.number,
            "boolean": self.boolean,
            "array": self.array,
            "object": self.object,
            "json": self.json,
            "enum": self.enum,
            "email": self.email,
            "url": self.url,
            "host": self.host,
        }
        shape = coerce_options(options).type or "string"
        return handlers.get(shape, self.string)(key, options)

    def raw_value(self, key: str) -> Optional[str]:
        """Return the unvalidated, uncached value straight from the source."""

        return self._source.lookup(key)

    def clear_cache(self) -> None:
        logger.debug("Clearing %d cached environment values.", len(self._cache))
        self._cache.clear()

    # ------------------------------------------------------------- accessors

    def string(self, key: str, options: Any = MISSING) -> Any:
        return self.custom(key, self._validate_string, options)

    def number(self, key: str, options: Any = MISSING) -> Any:
        return self.custom(key, self._validate_number, options)

    def boolean(self, key: str, options: Any = MISSING) -> Any:
        return self.custom(key, self._validate_boolean, options)

    def array(self, key: str, options: Any = MISSING) -> Any:
        return self.custom(key, self._validate_array, options)

    def object(self, key: str, options: Any = MISSING) -> Any:
        return self.custom(key, self._validate_object, options)

    def json(self, key: str, options: Any = MISSING) -> Any:
        return self.custom(key, self._validate_json, options)

    def enum(
        self,
        key: str,
        enums: Any = MISSING,
        default: Any = MISSING,
        options: Any = MISSING,
    ) -> Any:
        """Resolve ``key`` as one of the allowed values.

        Preferred form: ``enum(key, {"enums": [...], "default": ...})``. The
        positional form ``enum(key, ["a", "b"], "a")`` is also accepted; there
        the variable is optional exactly when a default is given.
        """

        if isinstance(enums, (list, tuple)):
            record = coerce_options(options).model_dump(exclude_unset=True)
            record["enums"] = list(enums)
            record["optional"] = default is not MISSING
            if default is not MISSING:
                record["default"] = default
            opts = coerce_options(record)
        else:
            opts = coerce_options(options if enums is MISSING else enums)
        if opts.enums is None:
            opts.enums = []
        return self.custom(key, self._validate_enum, opts)

    def email(self, key: str, options: Any = MISSING) -> Any:
        return self.custom(key, self._validate_email, options)

    def url(self, key: str, options: Any = MISSING) -> Any:
        return self.custom(key, self._validate_url, options)

    def host(self, key: str, options: Any = MISSING) -> Any:
        return self.custom(key, self._validate_host, options)

    # ------------------------------------------------------------ validators

    def _validate_string(self, key: str, value: Optional[str], opts: EnvOptions) -> Any:
        if opts.format == "url":
            return self._validate_url(key, value, opts)
        if opts.format == "host":
            return self._validate_host(key, value, opts)
        if opts.format == "email":
            return self._validate_email(key, value, opts)
        return str(value) if value is not None else opts.default

    def _validate_number(self, key: str, value: Optional[str], opts: EnvOptions) -> Any:
        if value is None:
            if isinstance(opts.default, str) and is_numeric(opts.default.strip()):
                return parse_number(opts.default.strip())
            return opts.default
        literal = value.strip()
        if not is_numeric(literal):
            raise InvalidNumberError(
                f"Value for {key} must be a valid number, received: {value}",
                key=key,
            )
        return parse_number(literal)

    def _validate_boolean(self, key: str, value: Optional[str], opts: EnvOptions) -> Any:
        if value is None:
            return opts.default
        literal = value.strip()
        if not is_boolean_literal(literal):
            raise InvalidBooleanError(
                f"Value for {key} must be a valid boolean, received: {value}",
                key=key,
            )
        return parse_boolean(literal)

    def _rejects_empty(self, opts: EnvOptions) -> bool:
        if opts.optional:
            return False
        if opts.reject_empty is not None:
            return opts.reject_empty
        return self._settings.reject_empty

    def _validate_array(self, key: str, value: Optional[str], opts: EnvOptions) -> Any:
        if value is None:
            return opts.default
        items: List[str] = [item.strip() for item in value.split(opts.resolved_separator())]
        if self._rejects_empty(opts) and not any(items):
            raise RequiredValueError(f"Value for {key} must contain at least one item.", key=key)
        return items

    def _validate_object(self, key: str, value: Optional[str], opts: EnvOptions) -> Any:
        if value is None:
            return opts.default
        result: Dict[str, Any] = {}
        for segment in value.split(opts.resolved_separator()):
            if not segment.strip():
                continue
            name, colon, raw_item = segment.partition(":")
            name = name.strip()
            if not colon or not name:
                raise InvalidObjectError(
                    f"Value for {key} must be a list of key:value pairs, received segment: {segment.strip()}",
                    key=key,
                    metadata={"segment": segment.strip()},
                )
            result[name] = _coerce_object_value(raw_item.strip())
        if self._rejects_empty(opts) and not result:
            raise RequiredValueError(f"Value for {key} must contain at least one entry.", key=key)
        return result

    def _validate_json(self, key: str, value: Optional[str], opts: EnvOptions) -> Any:
        try:
            return json.loads(value)  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            if not opts.optional:
                raise InvalidJsonError(f"Value for {key} must be valid JSON. Error: {exc}", key=key) from exc
            return opts.default

    def _validate_enum(self, key: str, value: Optional[str], opts: EnvOptions) -> Any:
        allowed: Sequence[str] = opts.enums or []
        if not opts.optional and (value is None or value not in allowed):
            raise InvalidEnumError(
                f"Value for {key} must be one of: {', '.join(allowed)}. Received: {value}",
                key=key,
                metadata={"enums": list(allowed)},
            )
        return value if value is not None else opts.default

    def _validate_email(self, key: str, value: Optional[str], opts: EnvOptions) -> Any:
        if value is None:
            return opts.default
        if not is_email(value, require_tld=opts.tld if opts.tld is not None else True):
            raise InvalidEmailError(f"Value for {key} must be a valid email. Received: {value}", key=key)
        return str(value)

    def _validate_url(self, key: str, value: Optional[str], opts: EnvOptions) -> Any:
        if value is None:
            return opts.default
        if not is_url(value, **self._url_flags(opts)):
            raise InvalidUrlError(f"Value for {key} must be a valid URL. Received: {value}", key=key)
        return str(value)

    def _validate_host(self, key: str, value: Optional[str], opts: EnvOptions) -> Any:
        if value is None:
            return opts.default
        if not is_ip(value, opts.version or 4) and not is_url(value, **self._url_flags(opts)):
            raise InvalidHostError(
                f"Value for {key} must be a valid host (URL or IP). Received: {value}",
                key=key,
            )
        return str(value)

    @staticmethod
    def _url_flags(opts: EnvOptions) -> Dict[str, Any]:
        return {
            "require_tld": opts.tld if opts.tld is not None else True,
            "require_protocol": opts.protocol if opts.protocol is not None else True,
            "protocols": opts.protocols or DEFAULT_URL_PROTOCOLS,
        }

    # ------------------------------------------------------------ mode checks

    def is_(self, name: str) -> bool:
        """Return ``True`` when the mode variable (``NODE_ENV`` by default) equals ``name``."""

        return self.string(self._settings.mode_key, None) == name

    def is_production(self) -> bool:
        return self.is_("production") or self.is_("prod")

    def is_prod(self) -> bool:
        return self.is_production()

    def is_not_production(self) -> bool:
        return not self.is_production()

    def is_not_prod(self) -> bool:
        return self.is_not_production()

    def is_testing(self) -> bool:
        return self.is_("test") or self.is_("testing")


__all__ = ["EnvService", "Validator"]
