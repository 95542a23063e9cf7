from pathlib import Path
from uuid import UUID

import pytest

from addonstore.app_shell.context import StoreContext
from addonstore.domain.entities import AddonDescriptor
from addonstore.rules.models import ProjectRules, Rules, StoreRules

PROJECT_ROOT = Path(__file__).parent.parent

BLOG = AddonDescriptor(
    id=UUID("9a5d8f3e-2c1b-4e7a-b6d5-0f1e2d3c4b5a"), name="blog", types=["post"]
)


def make_rules(backend: str, db_path: str = "addonstore.db") -> Rules:
    return Rules(
        project=ProjectRules(slug="addonstore-test", rules_version="1"),
        store=StoreRules(
            backend=backend,  # type: ignore[arg-type]
            db_path=db_path,
            migrations_dir=str(PROJECT_ROOT / "migrations"),
        ),
    )


@pytest.fixture
def blog() -> AddonDescriptor:
    return BLOG


@pytest.fixture
def memory_ctx() -> StoreContext:
    """StoreContext over in-memory repositories with the blog addon."""
    return StoreContext.create(make_rules("memory"), addons=[BLOG])


@pytest.fixture
def sqlite_ctx(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> StoreContext:
    """StoreContext backed by a migrated temporary SQLite database."""
    monkeypatch.delenv("ADDONSTORE_DATA_DIR", raising=False)
    return StoreContext.create(
        make_rules("sqlite", str(tmp_path / "addonstore.db")), addons=[BLOG]
    )


@pytest.fixture(params=["memory", "sqlite"])
def ctx(request: pytest.FixtureRequest) -> StoreContext:
    """Both backends, for properties that must hold regardless of storage."""
    return request.getfixturevalue(f"{request.param}_ctx")
