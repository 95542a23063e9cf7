"""
Registry component unit tests.
"""

from __future__ import annotations

from uuid import uuid4

import pytest

from addonstore.components.registry import AddonRegistry, RegistryState, is_valid_type
from addonstore.domain.entities import AddonDescriptor
from addonstore.domain.errors import DuplicateAddonError, RegistryLockedError


@pytest.fixture
def blog() -> AddonDescriptor:
    return AddonDescriptor(id=uuid4(), name="blog", types=["post", "page"])


class TestIsValidType:
    def test_declared_type(self, blog: AddonDescriptor) -> None:
        assert is_valid_type(blog, "post")

    def test_undeclared_type(self, blog: AddonDescriptor) -> None:
        assert not is_valid_type(blog, "comment")

    def test_case_sensitive(self, blog: AddonDescriptor) -> None:
        assert not is_valid_type(blog, "Post")

    def test_declared_types_are_lowercased(self) -> None:
        addon = AddonDescriptor(id=uuid4(), name="wiki", types=["Article"])
        assert addon.types == frozenset({"article"})
        assert is_valid_type(addon, "article")


class TestAddonRegistry:
    def test_starts_open(self) -> None:
        registry = AddonRegistry()
        assert registry.state is RegistryState.OPEN
        assert not registry.is_locked
        assert len(registry) == 0

    def test_register_and_get(self, blog: AddonDescriptor) -> None:
        registry = AddonRegistry()
        registry.register(blog)

        assert registry.get(blog.id) == blog
        assert blog.id in registry
        assert registry.get(uuid4()) is None

    def test_duplicate_rejected(self, blog: AddonDescriptor) -> None:
        registry = AddonRegistry()
        registry.register(blog)

        with pytest.raises(DuplicateAddonError):
            registry.register(blog)

    def test_register_after_lock_rejected(self, blog: AddonDescriptor) -> None:
        registry = AddonRegistry()
        registry.lock()

        with pytest.raises(RegistryLockedError):
            registry.register(blog)
        assert blog.id not in registry

    def test_lock_is_idempotent(self, blog: AddonDescriptor) -> None:
        registry = AddonRegistry()
        registry.register(blog)
        registry.lock()
        registry.lock()

        assert registry.state is RegistryState.LOCKED
        assert registry.get(blog.id) == blog

    def test_addons_sorted_by_name(self) -> None:
        registry = AddonRegistry()
        wiki = registry.register(AddonDescriptor(id=uuid4(), name="wiki", types=["article"]))
        blog = registry.register(AddonDescriptor(id=uuid4(), name="blog", types=["post"]))

        assert registry.addons() == [blog, wiki]
