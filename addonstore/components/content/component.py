"""
Content component - record lifecycle, ownership and edit history.

Operations:
- create: validate addon, type and owner, persist, link owner in the ledger
- get: fetch a record by id
- update: replace content, appending the prior state to history
- transfer_ownership: move a record to another owner (or none)
- delete: unlink from the ledger and remove the record
- list_owned: records linked to an owner in the ledger

Record lifecycle:
- NonExistent -> Active (create)
- Active -> Active (update, transfer_ownership; history grows)
- Active -> Deleted (delete, terminal)

Invariants:
- id, addon_id and type never change after create
- history is append-only and each entry holds the state before a mutation
- an owned record's id is in its owner's ledger set

Writes that touch both the repository and the ledger run write-then-link.
When the second step fails, the first is undone by a compensating write so
the ledger never references a missing record and a failed operation leaves
no owner link behind.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

from addonstore.components.identity import try_normalize
from addonstore.components.ledger import OwnershipLedger
from addonstore.components.registry import AddonRegistry, is_valid_type
from addonstore.domain.entities import AddonDescriptor, ContentRecord, HistoryEntry
from addonstore.domain.errors import (
    ContentError,
    ErrorKind,
    RegistryNotLockedError,
    RepositoryError,
)

from .models import (
    ContentListResult,
    ContentResult,
    CreateContentInput,
    CreatePayload,
    DeleteContentInput,
    GetContentInput,
    HistoryPolicy,
    ListOwnedInput,
    TransferOwnershipInput,
    UpdateContentInput,
)
from .ports import ContentRepoPort, TimePort, UserStorePort

logger = logging.getLogger(__name__)

ROLLBACK_REASON = "ownership transfer rolled back"


@dataclass(frozen=True)
class ContentDeps:
    """Collaborators shared by every content operation."""

    repo: ContentRepoPort
    users: UserStorePort
    ledger: OwnershipLedger
    registry: AddonRegistry
    time: TimePort
    history: HistoryPolicy = field(default_factory=HistoryPolicy)


# --- Helpers ---


def _fail(kind: ErrorKind, origin: str, message: str) -> ContentResult:
    logger.warning("%s rejected (%s): %s", origin, kind.value, message)
    return ContentResult(error=ContentError.of(kind, origin, message), success=False)


def _storage_failure(origin: str, action: str, error: RepositoryError) -> ContentResult:
    logger.error("%s: %s failed: %s", origin, action, error)
    return ContentResult(
        error=ContentError.of(ErrorKind.STORAGE_ERROR, origin, f"{action} failed: {error}"),
        success=False,
    )


def _snapshot(record: ContentRecord, date: datetime, reason: str) -> HistoryEntry:
    return HistoryEntry(
        content=copy.deepcopy(record.content),
        owner=record.owner,
        date=date,
        reason=reason,
    )


async def _resolve_owner(
    raw: object, deps: ContentDeps, origin: str
) -> tuple[UUID | None, ContentResult | None]:
    """Validate an external owner id and check the user exists."""
    owner = try_normalize(raw)
    if owner is None:
        return None, _fail(
            ErrorKind.INVALID_IDENTIFIER,
            origin,
            f"The owner {raw!r} is not a valid identifier",
        )

    try:
        user = await deps.users.get_by_id(owner)
    except RepositoryError as e:
        return None, _storage_failure(origin, f"Looking up user {owner}", e)

    if user is None:
        return None, _fail(ErrorKind.USER_NOT_FOUND, origin, f"The owner {owner} is not found")

    return owner, None


def _invalid_record_id(raw: object, origin: str) -> ContentResult:
    return _fail(
        ErrorKind.INVALID_IDENTIFIER,
        origin,
        f"The content id {raw!r} is not a valid identifier",
    )


def _not_found(record_id: UUID, origin: str) -> ContentResult:
    return _fail(ErrorKind.CONTENT_NOT_FOUND, origin, f"Content {record_id} not found")


# --- Component Entry Points ---


async def run_create(inp: CreateContentInput, *, deps: ContentDeps) -> ContentResult:
    """
    Create a record for an addon.

    Args:
        inp: Addon descriptor, content type and payload.
        deps: Content collaborators.

    Returns:
        ContentResult with the persisted record, or one of InvalidIdentifier,
        UnknownAddon, InvalidType, UserNotFound, StorageError, LedgerError.
    """
    origin = "content.create"

    addon_id = try_normalize(inp.addon.id)
    if addon_id is None:
        return _fail(
            ErrorKind.INVALID_IDENTIFIER,
            origin,
            f"The addon id {inp.addon.id!r} is not a valid identifier",
        )

    # Validate against the registered declaration, not the caller's copy
    addon = deps.registry.get(addon_id)
    if addon is None:
        return _fail(ErrorKind.UNKNOWN_ADDON, origin, f"The addon {addon_id} is not registered")

    content_type = inp.type.lower()
    if not is_valid_type(addon, content_type):
        return _fail(
            ErrorKind.INVALID_TYPE,
            origin,
            f"The type {inp.type} is not defined in the addon {addon.name}",
        )

    owner: UUID | None = None
    if inp.payload.owner is not None:
        owner, failure = await _resolve_owner(inp.payload.owner, deps, origin)
        if failure is not None:
            return failure

    now = deps.time.now_utc()
    record = ContentRecord(
        id=uuid4(),
        addon_id=addon.id,
        type=content_type,
        owner=owner,
        content=inp.payload.content,
        history=[],
        created_at=now,
        updated_at=now,
    )

    try:
        saved = await deps.repo.insert(record)
    except RepositoryError as e:
        return _storage_failure(origin, f"Inserting content {record.id}", e)

    if owner is not None:
        linked = await deps.ledger.attach(owner, saved.id)
        if not linked.success:
            await _discard(saved.id, deps, origin)
            return ContentResult(error=linked.error, success=False)

    logger.info("Created %s content %s for addon %s", content_type, saved.id, addon.name)
    return ContentResult(record=saved)


async def _discard(record_id: UUID, deps: ContentDeps, origin: str) -> None:
    """Remove a record whose ledger link could not be written."""
    try:
        await deps.repo.delete(record_id)
    except RepositoryError:
        logger.exception("%s: could not discard unlinked content %s", origin, record_id)


async def run_get(inp: GetContentInput, *, deps: ContentDeps) -> ContentResult:
    origin = "content.get"

    record_id = try_normalize(inp.record_id)
    if record_id is None:
        return _invalid_record_id(inp.record_id, origin)

    try:
        record = await deps.repo.get(record_id)
    except RepositoryError as e:
        return _storage_failure(origin, f"Reading content {record_id}", e)

    if record is None:
        return _not_found(record_id, origin)
    return ContentResult(record=record)


async def run_update(inp: UpdateContentInput, *, deps: ContentDeps) -> ContentResult:
    """
    Replace a record's content.

    The previous content and owner are appended to history in the same
    atomic repository write that installs the new content.
    """
    origin = "content.update"

    record_id = try_normalize(inp.record_id)
    if record_id is None:
        return _invalid_record_id(inp.record_id, origin)

    reason = deps.history.reason_for(inp.reason)
    now = deps.time.now_utc()

    def change(current: ContentRecord) -> ContentRecord:
        return current.model_copy(
            update={
                "history": [*current.history, _snapshot(current, now, reason)],
                "content": inp.content,
                "updated_at": now,
            }
        )

    try:
        updated = await deps.repo.modify(record_id, change)
    except RepositoryError as e:
        return _storage_failure(origin, f"Updating content {record_id}", e)

    if updated is None:
        return _not_found(record_id, origin)

    logger.info("Updated content %s (history: %d)", record_id, len(updated.history))
    return ContentResult(record=updated)


async def run_transfer_ownership(
    inp: TransferOwnershipInput, *, deps: ContentDeps
) -> ContentResult:
    """
    Move a record to a new owner, or clear its owner.

    Order: link the new owner, write the record, unlink the previous owner.
    A failed record write unlinks the new owner again. A failed unlink of the
    previous owner transfers the record back and reports LedgerError.
    Transferring to the current owner changes nothing.
    """
    origin = "content.transfer_ownership"

    record_id = try_normalize(inp.record_id)
    if record_id is None:
        return _invalid_record_id(inp.record_id, origin)

    new_owner: UUID | None = None
    if inp.new_owner is not None:
        new_owner, failure = await _resolve_owner(inp.new_owner, deps, origin)
        if failure is not None:
            return failure

    try:
        current = await deps.repo.get(record_id)
    except RepositoryError as e:
        return _storage_failure(origin, f"Reading content {record_id}", e)

    if current is None:
        return _not_found(record_id, origin)
    if current.owner == new_owner:
        return ContentResult(record=current)

    if new_owner is not None:
        linked = await deps.ledger.attach(new_owner, record_id)
        if not linked.success:
            return ContentResult(error=linked.error, success=False)

    reason = deps.history.reason_for(inp.reason)
    moved = await _write_owner(record_id, new_owner, reason, deps)
    if not moved.success or moved.record is None:
        if new_owner is not None:
            await _unlink_quietly(new_owner, record_id, origin, deps)
        if moved.error is None:
            return _not_found(record_id, origin)
        return ContentResult(
            error=ContentError.of(moved.error.kind, origin, moved.error.message),
            success=False,
        )

    # The owner actually replaced is the one recorded in the newest snapshot
    previous = moved.record.history[-1].owner
    if previous is not None and previous != new_owner:
        unlinked = await deps.ledger.detach(previous, record_id)
        if not unlinked.success:
            restored = await _write_owner(record_id, previous, ROLLBACK_REASON, deps)
            if restored.success:
                if new_owner is not None:
                    await _unlink_quietly(new_owner, record_id, origin, deps)
            else:
                # Record still belongs to new_owner, so its link must stay
                logger.error(
                    "%s: could not transfer %s back to %s; left with %s",
                    origin,
                    record_id,
                    previous,
                    new_owner,
                )
            return ContentResult(error=unlinked.error, success=False)

    logger.info("Transferred content %s from %s to %s", record_id, previous, new_owner)
    return ContentResult(record=moved.record)


async def _write_owner(
    record_id: UUID, owner: UUID | None, reason: str, deps: ContentDeps
) -> ContentResult:
    now = deps.time.now_utc()

    def change(current: ContentRecord) -> ContentRecord:
        return current.model_copy(
            update={
                "history": [*current.history, _snapshot(current, now, reason)],
                "owner": owner,
                "updated_at": now,
            }
        )

    try:
        updated = await deps.repo.modify(record_id, change)
    except RepositoryError as e:
        return _storage_failure("content.write_owner", f"Updating owner of {record_id}", e)

    if updated is None:
        return ContentResult(success=False)
    return ContentResult(record=updated)


async def _unlink_quietly(owner: UUID, record_id: UUID, origin: str, deps: ContentDeps) -> None:
    out = await deps.ledger.detach(owner, record_id)
    if not out.success:
        logger.error("%s: dangling ledger link %s -> %s left behind", origin, owner, record_id)


async def run_delete(inp: DeleteContentInput, *, deps: ContentDeps) -> ContentResult:
    """
    Delete a record, unlinking it from its owner first.

    The owner is checked again on the removed record, since a concurrent
    transfer can relink it to someone else in between.

    Returns:
        ContentResult carrying the record as it was removed.
    """
    origin = "content.delete"

    record_id = try_normalize(inp.record_id)
    if record_id is None:
        return _invalid_record_id(inp.record_id, origin)

    try:
        record = await deps.repo.get(record_id)
    except RepositoryError as e:
        return _storage_failure(origin, f"Reading content {record_id}", e)

    if record is None:
        return _not_found(record_id, origin)

    if record.owner is not None:
        unlinked = await deps.ledger.detach(record.owner, record_id)
        if not unlinked.success:
            return ContentResult(error=unlinked.error, success=False)

    try:
        deleted = await deps.repo.delete(record_id)
    except RepositoryError as e:
        if record.owner is not None:
            relinked = await deps.ledger.attach(record.owner, record_id)
            if not relinked.success:
                logger.error("%s: owner link of %s could not be restored", origin, record_id)
        return _storage_failure(origin, f"Deleting content {record_id}", e)

    if deleted is None:
        return _not_found(record_id, origin)

    # A transfer may have landed between the read and the delete
    if deleted.owner is not None and deleted.owner != record.owner:
        await _unlink_quietly(deleted.owner, record_id, origin, deps)

    logger.info("Deleted content %s", record_id)
    return ContentResult(record=deleted)


async def run_list_owned(inp: ListOwnedInput, *, deps: ContentDeps) -> ContentListResult:
    origin = "content.list_owned"

    owner = try_normalize(inp.owner)
    if owner is None:
        failure = _fail(
            ErrorKind.INVALID_IDENTIFIER,
            origin,
            f"The owner {inp.owner!r} is not a valid identifier",
        )
        return ContentListResult(error=failure.error, success=False)

    lookup = await deps.ledger.lookup(owner)
    if not lookup.success:
        return ContentListResult(error=lookup.error, success=False)

    try:
        records = await deps.repo.get_many(sorted(lookup.record_ids, key=str))
    except RepositoryError as e:
        failure = _storage_failure(origin, f"Reading content of {owner}", e)
        return ContentListResult(error=failure.error, success=False)

    return ContentListResult(records=records)


ContentInput = (
    CreateContentInput
    | GetContentInput
    | UpdateContentInput
    | TransferOwnershipInput
    | DeleteContentInput
    | ListOwnedInput
)


async def run(inp: ContentInput, *, deps: ContentDeps) -> ContentResult | ContentListResult:
    """
    Main entry point for the content component.

    Dispatches to the appropriate handler based on input type.
    """
    if isinstance(inp, CreateContentInput):
        return await run_create(inp, deps=deps)

    elif isinstance(inp, GetContentInput):
        return await run_get(inp, deps=deps)

    elif isinstance(inp, UpdateContentInput):
        return await run_update(inp, deps=deps)

    elif isinstance(inp, TransferOwnershipInput):
        return await run_transfer_ownership(inp, deps=deps)

    elif isinstance(inp, DeleteContentInput):
        return await run_delete(inp, deps=deps)

    elif isinstance(inp, ListOwnedInput):
        return await run_list_owned(inp, deps=deps)

    else:
        raise ValueError(f"Unknown input type: {type(inp)}")


# --- Store Facade ---


class ContentStore:
    """
    Content store bound to one set of collaborators.

    Built only over a locked registry.
    """

    def __init__(self, deps: ContentDeps) -> None:
        if not deps.registry.is_locked:
            raise RegistryNotLockedError("Lock the addon registry before serving content")
        self.deps = deps

    @property
    def registry(self) -> AddonRegistry:
        return self.deps.registry

    async def create(
        self, addon: AddonDescriptor, type: str, payload: CreatePayload
    ) -> ContentResult:
        return await run_create(
            CreateContentInput(addon=addon, type=type, payload=payload), deps=self.deps
        )

    async def get(self, record_id: object) -> ContentResult:
        return await run_get(GetContentInput(record_id=record_id), deps=self.deps)

    async def update(self, record_id: object, content: object, reason: str = "") -> ContentResult:
        return await run_update(
            UpdateContentInput(record_id=record_id, content=content, reason=reason),
            deps=self.deps,
        )

    async def transfer_ownership(
        self, record_id: object, new_owner: object, reason: str = ""
    ) -> ContentResult:
        return await run_transfer_ownership(
            TransferOwnershipInput(record_id=record_id, new_owner=new_owner, reason=reason),
            deps=self.deps,
        )

    async def delete(self, record_id: object) -> ContentResult:
        return await run_delete(DeleteContentInput(record_id=record_id), deps=self.deps)

    async def list_owned(self, owner: object) -> ContentListResult:
        return await run_list_owned(ListOwnedInput(owner=owner), deps=self.deps)
