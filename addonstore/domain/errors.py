"""
Error kinds and the structured error shared by every content operation.

Domain failures never cross a component boundary as exceptions: operations
return an output carrying a ContentError. The exceptions defined here are
raised by adapters (RepositoryError) or for programming errors.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    INVALID_TYPE = "InvalidType"
    INVALID_IDENTIFIER = "InvalidIdentifier"
    USER_NOT_FOUND = "UserNotFound"
    UNKNOWN_ADDON = "UnknownAddon"
    CONTENT_NOT_FOUND = "ContentNotFound"
    STORAGE_ERROR = "StorageError"
    LEDGER_ERROR = "LedgerError"


# Caller-correctable failures carry code 1, system failures code 0.
CALLER_ERROR_CODE = 1
SYSTEM_ERROR_CODE = 0

SYSTEM_KINDS = frozenset({ErrorKind.STORAGE_ERROR, ErrorKind.LEDGER_ERROR})


@dataclass(frozen=True)
class ContentError:
    """Structured failure: {code, kind, origin, message}."""

    code: int
    kind: ErrorKind
    origin: str
    message: str

    @classmethod
    def of(cls, kind: ErrorKind, origin: str, message: str) -> ContentError:
        code = SYSTEM_ERROR_CODE if kind in SYSTEM_KINDS else CALLER_ERROR_CODE
        return cls(code=code, kind=kind, origin=origin, message=message)

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data


class RepositoryError(Exception):
    """Raised by repository adapters when the underlying store fails."""


class InvalidIdentifierError(ValueError):
    """Raised when a value is not a structurally valid identifier."""

    def __init__(self, raw: object) -> None:
        self.raw = raw
        super().__init__(f"{raw!r} is not a valid identifier")


class RegistryLockedError(RuntimeError):
    """Raised when an addon registers after the registry was locked."""


class RegistryNotLockedError(RuntimeError):
    """Raised when a content store is built over a registry still open."""


class DuplicateAddonError(ValueError):
    """Raised when an addon id is registered twice."""
