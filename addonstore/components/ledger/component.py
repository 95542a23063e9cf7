"""
Ledger component.

Maintains the set of record ids each user owns. The content store calls
attach/detach alongside every write that changes a record's owner; repository
failures are reported as LedgerError outputs rather than raised.
"""

from __future__ import annotations

import logging
from uuid import UUID

from addonstore.domain.errors import ContentError, ErrorKind, RepositoryError

from .models import LedgerLookupOutput, LedgerOutput
from .ports import LedgerRepoPort

logger = logging.getLogger(__name__)


def _ledger_error(origin: str, message: str) -> ContentError:
    return ContentError.of(ErrorKind.LEDGER_ERROR, origin, message)


class OwnershipLedger:
    def __init__(self, repo: LedgerRepoPort) -> None:
        self._repo = repo

    async def attach(self, owner: UUID, record_id: UUID) -> LedgerOutput:
        try:
            await self._repo.add(owner, record_id)
        except RepositoryError as e:
            logger.error("Failed to attach %s to owner %s: %s", record_id, owner, e)
            return LedgerOutput(
                error=_ledger_error(
                    "ledger.attach",
                    f"Could not add content {record_id} to user {owner}: {e}",
                ),
                success=False,
            )
        return LedgerOutput()

    async def detach(self, owner: UUID, record_id: UUID) -> LedgerOutput:
        try:
            await self._repo.remove(owner, record_id)
        except RepositoryError as e:
            logger.error("Failed to detach %s from owner %s: %s", record_id, owner, e)
            return LedgerOutput(
                error=_ledger_error(
                    "ledger.detach",
                    f"Could not remove content {record_id} from user {owner}: {e}",
                ),
                success=False,
            )
        return LedgerOutput()

    async def lookup(self, owner: UUID) -> LedgerLookupOutput:
        try:
            record_ids = await self._repo.list_for(owner)
        except RepositoryError as e:
            logger.error("Failed to look up content owned by %s: %s", owner, e)
            return LedgerLookupOutput(
                error=_ledger_error(
                    "ledger.lookup", f"Could not list content of user {owner}: {e}"
                ),
                success=False,
            )
        return LedgerLookupOutput(record_ids=frozenset(record_ids))
