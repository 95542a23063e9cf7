from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(UTC)


# --- Addons ---


class AddonDescriptor(BaseModel):
    """An addon and the content types it declares.

    Declared types are stored lowercase so lookups against a lowercased
    candidate type are exact.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    name: str
    types: frozenset[str] = Field(default_factory=frozenset)

    @field_validator("types", mode="before")
    @classmethod
    def _lowercase_types(cls, value: Any) -> frozenset[str]:
        if isinstance(value, str):
            value = [value]
        return frozenset(str(t).lower() for t in value)


# --- Users ---


class User(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    name: str
    created_at: datetime = Field(default_factory=_utcnow)


# --- Content ---


class HistoryEntry(BaseModel):
    """State of a record captured before a mutation was applied."""

    model_config = ConfigDict(frozen=True)

    content: Any = None
    owner: UUID | None = None
    date: datetime
    reason: str


class ContentRecord(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    addon_id: UUID
    type: str
    owner: UUID | None = None

    # Addon-defined payload, stored and returned verbatim
    content: Any = None

    # Append-only, oldest first
    history: list[HistoryEntry] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
