"""Canonical options record shared by every typed environment accessor."""

from __future__ import annotations

from typing import Any, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from services.env_errors import InvalidOptionsError

StringFormat = Literal["url", "host", "email"]

DEFAULT_SEPARATOR = ","


class _Missing:
    """Marker for "no options argument was passed"."""

    _instance: Optional["_Missing"] = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class EnvOptions(BaseModel):
    """Options accepted by the typed accessors.

    ``default`` counts as explicitly set whenever it appears in
    ``model_fields_set``, so ``None``, ``False`` and ``0`` are valid defaults.
    """

    model_config = ConfigDict(extra="allow", arbitrary_types_allowed=True)

    type: Optional[str] = Field(None, description="Shape used by dispatch; unknown shapes read as strings.")
    format: Optional[StringFormat] = Field(None, description="Sub-shape for the string accessor.")
    default: Any = Field(None, description="Value substituted when the variable is absent.")
    optional: Optional[bool] = Field(None, description="Tolerate a missing or blank value.")
    separator: Optional[str] = Field(None, min_length=1, description="Item separator for array/object.")
    tld: Optional[bool] = Field(None, description="Require a top-level domain (email/url/host).")
    protocol: Optional[bool] = Field(None, description="Require a URL scheme (url/host).")
    protocols: Optional[List[str]] = Field(None, min_length=1, description="URL schemes accepted by url/host.")
    version: Optional[Literal[4, 6]] = Field(None, description="IP version accepted by host.")
    enums: Optional[List[str]] = Field(None, description="Allowed values for enum.")
    reject_empty: Optional[bool] = Field(None, description="Reject array/object results with no items.")

    @property
    def has_default(self) -> bool:
        return "default" in self.model_fields_set

    def resolved_separator(self) -> str:
        return self.separator or DEFAULT_SEPARATOR


def _from_mapping(raw: Mapping[str, Any]) -> EnvOptions:
    try:
        return EnvOptions.model_validate(dict(raw))
    except ValidationError as exc:
        errors = [
            f"{'.'.join(str(part) for part in error['loc']) or 'options'}: {error['msg']}"
            for error in exc.errors()
        ]
        raise InvalidOptionsError(
            f"Invalid environment options: {'; '.join(errors)}",
            metadata={"errors": errors},
        ) from exc


def coerce_options(raw: Any) -> EnvOptions:
    """Turn any call-site argument into an ``EnvOptions`` without defaulting.

    Mappings and ``EnvOptions`` are options records; any other value (scalars,
    ``None``, lists) is a bare default. ``MISSING`` yields an empty record.
    """

    if raw is MISSING:
        return EnvOptions()
    if isinstance(raw, EnvOptions):
        return raw.model_copy()
    if isinstance(raw, Mapping):
        return _from_mapping(raw)
    return EnvOptions(default=raw)


def normalize_options(raw: Any = MISSING) -> EnvOptions:
    """Return the canonical options record with ``optional``/``default`` resolved."""

    options = coerce_options(raw)
    if options.optional is None:
        options.optional = options.has_default
    return options


__all__ = [
    "DEFAULT_SEPARATOR",
    "EnvOptions",
    "MISSING",
    "StringFormat",
    "coerce_options",
    "normalize_options",
]
