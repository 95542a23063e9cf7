from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from addonstore.domain.errors import ContentError


@dataclass(frozen=True)
class LedgerOutput:
    error: ContentError | None = None
    success: bool = True


@dataclass(frozen=True)
class LedgerLookupOutput:
    record_ids: frozenset[UUID] = field(default_factory=frozenset)
    error: ContentError | None = None
    success: bool = True
