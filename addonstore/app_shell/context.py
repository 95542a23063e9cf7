"""
Store bootstrap.

Builds the repositories for the configured backend, registers configured and
caller-supplied addons, locks the registry and wires the content store.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from addonstore.adapters.clock import SystemClock
from addonstore.adapters.memory import (
    InMemoryContentRepo,
    InMemoryLedgerRepo,
    InMemoryUserStore,
)
from addonstore.adapters.sqlite.migrator import SQLiteMigrator
from addonstore.adapters.sqlite.repos import (
    SQLiteContentRepo,
    SQLiteLedgerRepo,
    SQLiteUserStore,
)
from addonstore.app_shell.config import resolve_db_path
from addonstore.components.content import (
    ContentDeps,
    ContentRepoPort,
    ContentStore,
    HistoryPolicy,
    TimePort,
)
from addonstore.components.ledger import LedgerRepoPort, OwnershipLedger
from addonstore.components.registry import AddonRegistry
from addonstore.domain.entities import AddonDescriptor
from addonstore.rules.models import Rules

logger = logging.getLogger(__name__)


def build_registry(rules: Rules, addons: Iterable[AddonDescriptor] = ()) -> AddonRegistry:
    """Register configured addons, then addons, and lock."""
    registry = AddonRegistry()
    for configured in rules.addons:
        registry.register(
            AddonDescriptor(id=configured.id, name=configured.name, types=configured.types)
        )
    for addon in addons:
        registry.register(addon)
    registry.lock()
    return registry


@dataclass
class StoreContext:
    rules: Rules
    registry: AddonRegistry
    store: ContentStore
    users: InMemoryUserStore | SQLiteUserStore
    content_repo: ContentRepoPort
    ledger_repo: LedgerRepoPort
    db_path: Path | None = None

    @classmethod
    def create(
        cls,
        rules: Rules,
        *,
        base_dir: Path | None = None,
        addons: Iterable[AddonDescriptor] = (),
        time: TimePort | None = None,
    ) -> StoreContext:
        base_dir = base_dir or Path.cwd()
        db_path: Path | None = None

        users: InMemoryUserStore | SQLiteUserStore
        content_repo: ContentRepoPort
        ledger_repo: LedgerRepoPort

        if rules.store.backend == "sqlite":
            db_path = resolve_db_path(rules, base_dir)
            db_path.parent.mkdir(parents=True, exist_ok=True)
            migrations_dir = Path(rules.store.migrations_dir)
            if not migrations_dir.is_absolute():
                migrations_dir = base_dir / migrations_dir
            SQLiteMigrator(str(db_path), str(migrations_dir)).run_migrations()

            users = SQLiteUserStore(str(db_path))
            content_repo = SQLiteContentRepo(str(db_path))
            ledger_repo = SQLiteLedgerRepo(str(db_path))
            logger.info("Using SQLite store at %s", db_path)
        else:
            users = InMemoryUserStore()
            content_repo = InMemoryContentRepo()
            ledger_repo = InMemoryLedgerRepo()
            logger.info("Using in-memory store")

        registry = build_registry(rules, addons)
        deps = ContentDeps(
            repo=content_repo,
            users=users,
            ledger=OwnershipLedger(ledger_repo),
            registry=registry,
            time=time or SystemClock(),
            history=HistoryPolicy(
                default_reason=rules.history.default_reason,
                max_reason_length=rules.history.max_reason_length,
            ),
        )

        return cls(
            rules=rules,
            registry=registry,
            store=ContentStore(deps),
            users=users,
            content_repo=content_repo,
            ledger_repo=ledger_repo,
            db_path=db_path,
        )
