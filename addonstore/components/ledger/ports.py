"""
Ledger component port definitions.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID


class LedgerRepoPort(Protocol):
    """
    Storage for owner -> record links.

    add and remove must be atomic set operations on a single link; they are
    never implemented as a read-modify-write of the owner's whole set.
    """

    async def add(self, owner: UUID, record_id: UUID) -> None:
        """Link record_id to owner. Adding an existing link is a no-op."""
        ...

    async def remove(self, owner: UUID, record_id: UUID) -> None:
        """Unlink record_id from owner. Removing a missing link is a no-op."""
        ...

    async def list_for(self, owner: UUID) -> set[UUID]:
        """All record ids linked to owner."""
        ...
