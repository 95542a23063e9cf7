"""
Content component port definitions.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Protocol
from uuid import UUID

from addonstore.domain.entities import ContentRecord, User


class ContentRepoPort(Protocol):
    """
    Repository interface for content records, keyed by canonical id.

    Implementations raise RepositoryError when the underlying store fails.
    """

    async def insert(self, record: ContentRecord) -> ContentRecord:
        """Persist a new record."""
        ...

    async def get(self, record_id: UUID) -> ContentRecord | None:
        """Get a record by id."""
        ...

    async def get_many(self, record_ids: Iterable[UUID]) -> list[ContentRecord]:
        """Get the records that exist among record_ids, in the given order."""
        ...

    async def modify(
        self,
        record_id: UUID,
        change: Callable[[ContentRecord], ContentRecord],
    ) -> ContentRecord | None:
        """
        Atomically read a record, apply change and write the result.

        Returns the written record, or None if no record has that id.
        """
        ...

    async def delete(self, record_id: UUID) -> ContentRecord | None:
        """Delete a record. Returns it as it was when removed, or None if absent."""
        ...


class UserStorePort(Protocol):
    """User store collaborator, used to check that owners exist."""

    async def get_by_id(self, user_id: UUID) -> User | None:
        """Get user by ID."""
        ...


class TimePort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
