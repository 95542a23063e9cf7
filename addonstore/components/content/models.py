"""
Content component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from addonstore.domain.entities import AddonDescriptor, ContentRecord
from addonstore.domain.errors import ContentError

# --- Configuration ---


@dataclass(frozen=True)
class HistoryPolicy:
    """How update reasons are recorded in history entries."""

    default_reason: str = "update"
    max_reason_length: int = 500

    def reason_for(self, reason: str | None) -> str:
        text = (reason or "").strip() or self.default_reason
        return text[: self.max_reason_length]


# --- Input Models ---


@dataclass(frozen=True)
class CreatePayload:
    """Payload of a create request. owner is an unvalidated external id."""

    content: Any
    owner: Any = None


@dataclass(frozen=True)
class CreateContentInput:
    addon: AddonDescriptor
    type: str
    payload: CreatePayload


@dataclass(frozen=True)
class GetContentInput:
    record_id: Any


@dataclass(frozen=True)
class UpdateContentInput:
    record_id: Any
    content: Any
    reason: str = ""


@dataclass(frozen=True)
class TransferOwnershipInput:
    """Move a record to new_owner, or clear its owner when new_owner is None."""

    record_id: Any
    new_owner: Any = None
    reason: str = ""


@dataclass(frozen=True)
class DeleteContentInput:
    record_id: Any


@dataclass(frozen=True)
class ListOwnedInput:
    owner: Any


# --- Output Models ---


@dataclass(frozen=True)
class ContentResult:
    """Result of a single-record operation: a record or a tagged error."""

    record: ContentRecord | None = None
    error: ContentError | None = None
    success: bool = True


@dataclass(frozen=True)
class ContentListResult:
    records: list[ContentRecord] = field(default_factory=list)
    error: ContentError | None = None
    success: bool = True
