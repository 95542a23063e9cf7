"""
In-memory repositories.

Used for the "memory" store backend and in tests. Records are deep-copied on
the way in and out so callers can never mutate stored state in place. No
method awaits between reading and writing shared state, which makes each
operation atomic under asyncio scheduling.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from uuid import UUID

from addonstore.domain.entities import ContentRecord, User
from addonstore.domain.errors import RepositoryError


class InMemoryContentRepo:
    def __init__(self) -> None:
        self._records: dict[UUID, ContentRecord] = {}

    async def insert(self, record: ContentRecord) -> ContentRecord:
        if record.id in self._records:
            raise RepositoryError(f"Content {record.id} already exists")
        self._records[record.id] = record.model_copy(deep=True)
        return record.model_copy(deep=True)

    async def get(self, record_id: UUID) -> ContentRecord | None:
        record = self._records.get(record_id)
        return record.model_copy(deep=True) if record else None

    async def get_many(self, record_ids: Iterable[UUID]) -> list[ContentRecord]:
        return [
            self._records[rid].model_copy(deep=True)
            for rid in record_ids
            if rid in self._records
        ]

    async def modify(
        self,
        record_id: UUID,
        change: Callable[[ContentRecord], ContentRecord],
    ) -> ContentRecord | None:
        current = self._records.get(record_id)
        if current is None:
            return None
        updated = change(current.model_copy(deep=True))
        self._records[record_id] = updated.model_copy(deep=True)
        return updated

    async def delete(self, record_id: UUID) -> ContentRecord | None:
        return self._records.pop(record_id, None)

    def __len__(self) -> int:
        return len(self._records)


class InMemoryUserStore:
    def __init__(self) -> None:
        self._users: dict[UUID, User] = {}

    def add(self, user: User) -> User:
        self._users[user.id] = user
        return user

    async def save(self, user: User) -> User:
        return self.add(user)

    async def get_by_id(self, user_id: UUID) -> User | None:
        return self._users.get(user_id)


class InMemoryLedgerRepo:
    def __init__(self) -> None:
        self._links: dict[UUID, set[UUID]] = {}

    async def add(self, owner: UUID, record_id: UUID) -> None:
        self._links.setdefault(owner, set()).add(record_id)

    async def remove(self, owner: UUID, record_id: UUID) -> None:
        owned = self._links.get(owner)
        if owned is None:
            return
        owned.discard(record_id)
        if not owned:
            del self._links[owner]

    async def list_for(self, owner: UUID) -> set[UUID]:
        return set(self._links.get(owner, ()))
