"""
Registry component.

The registry is built at startup and passed to the content store. It has two
states:

- open: addons may register
- locked: registrations are refused, the registry serves lookups

A content store can only be built over a locked registry, so the set of
addons is fixed for the lifetime of a running store.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from uuid import UUID

from addonstore.domain.entities import AddonDescriptor
from addonstore.domain.errors import DuplicateAddonError, RegistryLockedError

logger = logging.getLogger(__name__)


class RegistryState(StrEnum):
    OPEN = "open"
    LOCKED = "locked"


def is_valid_type(addon: AddonDescriptor, content_type: str) -> bool:
    """Case-sensitive check of content_type against the addon's declared types."""
    return content_type in addon.types


class AddonRegistry:
    def __init__(self) -> None:
        self._addons: dict[UUID, AddonDescriptor] = {}
        self._state = RegistryState.OPEN

    @property
    def state(self) -> RegistryState:
        return self._state

    @property
    def is_locked(self) -> bool:
        return self._state is RegistryState.LOCKED

    def register(self, addon: AddonDescriptor) -> AddonDescriptor:
        if self.is_locked:
            raise RegistryLockedError(
                f"Cannot register addon '{addon.name}': registry is locked"
            )
        if addon.id in self._addons:
            raise DuplicateAddonError(f"Addon {addon.id} is already registered")

        self._addons[addon.id] = addon
        logger.info(
            "Registered addon %s (%s) with types %s",
            addon.name,
            addon.id,
            sorted(addon.types),
        )
        return addon

    def lock(self) -> None:
        if self.is_locked:
            return
        self._state = RegistryState.LOCKED
        logger.info("Addon registry locked with %d addon(s)", len(self._addons))

    def get(self, addon_id: UUID) -> AddonDescriptor | None:
        return self._addons.get(addon_id)

    def addons(self) -> list[AddonDescriptor]:
        return sorted(self._addons.values(), key=lambda a: a.name)

    def __len__(self) -> int:
        return len(self._addons)

    def __contains__(self, addon_id: object) -> bool:
        return addon_id in self._addons
