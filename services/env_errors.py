"""Exception types raised while resolving environment variables."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Mapping, Optional


@dataclass(slots=True, eq=False)
class EnvError(RuntimeError):
    """Base error for every environment lookup or validation failure."""

    code: ClassVar[str] = "ENV-500"

    message: str
    key: Optional[str] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        RuntimeError.__init__(self, self.message)

    def to_detail(self) -> Dict[str, Any]:
        detail: Dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.key:
            detail["key"] = self.key
        if self.metadata:
            detail["metadata"] = dict(self.metadata)
        return detail


class RequiredValueError(EnvError):
    """Raised when a required variable is missing or blank."""

    code = "ENV-REQUIRED"


class InvalidNumberError(EnvError):
    code = "ENV-NUMBER"


class InvalidBooleanError(EnvError):
    code = "ENV-BOOLEAN"


class InvalidJsonError(EnvError):
    code = "ENV-JSON"


class InvalidEnumError(EnvError):
    code = "ENV-ENUM"


class InvalidEmailError(EnvError):
    code = "ENV-EMAIL"


class InvalidUrlError(EnvError):
    code = "ENV-URL"


class InvalidHostError(EnvError):
    code = "ENV-HOST"


class InvalidObjectError(EnvError):
    """Raised when a ``key:value`` list contains a malformed pair."""

    code = "ENV-OBJECT"


class InvalidOptionsError(EnvError):
    """Raised when an options record cannot be normalized."""

    code = "ENV-OPTIONS"


__all__ = [
    "EnvError",
    "RequiredValueError",
    "InvalidNumberError",
    "InvalidBooleanError",
    "InvalidJsonError",
    "InvalidEnumError",
    "InvalidEmailError",
    "InvalidUrlError",
    "InvalidHostError",
    "InvalidObjectError",
    "InvalidOptionsError",
]
