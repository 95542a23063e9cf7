"""
Rules loading and ops validation tests.
"""

from pathlib import Path
from uuid import UUID

import pytest

from addonstore.app_shell.config import resolve_db_path, validate_ops_rules
from addonstore.rules.loader import load_rules
from addonstore.rules.models import Rules

PROJECT_ROOT = Path(__file__).parent.parent.parent

MINIMAL = """
project:
  slug: demo
  rules_version: "1"
"""


def test_project_rules_file_loads() -> None:
    rules = load_rules(PROJECT_ROOT / "rules.yaml")

    assert rules.project.slug == "addonstore"
    assert rules.store.backend == "sqlite"
    assert rules.addons[0].name == "blog"
    assert rules.addons[0].id == UUID("3b0f6c52-8d1e-4a57-9c2b-7e4d5a6f1029")


def test_defaults(tmp_path: Path) -> None:
    path = tmp_path / "rules.yaml"
    path.write_text(MINIMAL)

    rules = load_rules(path)

    assert rules.history.default_reason == "update"
    assert rules.history.max_reason_length == 500
    assert rules.logging.level == "INFO"
    assert rules.addons == []


def test_markdown_fenced_yaml(tmp_path: Path) -> None:
    path = tmp_path / "rules.md"
    path.write_text(f"# Rules\n\n```yaml{MINIMAL}```\n\ntrailing prose: ignored\n")

    assert load_rules(path).project.slug == "demo"


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_rules(tmp_path / "absent.yaml")


def test_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "rules.yaml"
    path.write_text("project: [unclosed")

    with pytest.raises(ValueError, match="Invalid YAML"):
        load_rules(path)


def test_schema_violation(tmp_path: Path) -> None:
    path = tmp_path / "rules.yaml"
    path.write_text(MINIMAL + "addons:\n  - id: not-a-uuid\n    name: x\n    types: [a]\n")

    with pytest.raises(ValueError, match="Rules validation failed"):
        load_rules(path)


def test_addon_needs_a_type(tmp_path: Path) -> None:
    path = tmp_path / "rules.yaml"
    path.write_text(
        MINIMAL + "addons:\n  - id: 3b0f6c52-8d1e-4a57-9c2b-7e4d5a6f1029\n    name: x\n    types: []\n"
    )

    with pytest.raises(ValueError):
        load_rules(path)


class TestOps:
    def _rules(self, required: list[str]) -> Rules:
        return Rules.model_validate(
            {"project": {"slug": "demo", "rules_version": "1"}, "ops": {"required_env": required}}
        )

    def test_required_env_present(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ADDONSTORE_TEST_VAR", "1")
        validate_ops_rules(self._rules(["ADDONSTORE_TEST_VAR"]))

    def test_required_env_missing_exits(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ADDONSTORE_TEST_VAR", raising=False)
        with pytest.raises(SystemExit):
            validate_ops_rules(self._rules(["ADDONSTORE_TEST_VAR"]))


class TestResolveDbPath:
    def test_relative_to_base_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ADDONSTORE_DATA_DIR", raising=False)
        rules = Rules.model_validate(
            {"project": {"slug": "d", "rules_version": "1"}, "store": {"db_path": "data/x.db"}}
        )
        assert resolve_db_path(rules, tmp_path) == tmp_path / "data" / "x.db"

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ADDONSTORE_DATA_DIR", str(tmp_path / "elsewhere"))
        rules = Rules.model_validate(
            {"project": {"slug": "d", "rules_version": "1"}, "store": {"db_path": "data/x.db"}}
        )
        assert resolve_db_path(rules, Path("/unused")) == tmp_path / "elsewhere" / "x.db"


def test_indented_yml_fence(tmp_path: Path) -> None:
    path = tmp_path / "rules.md"
    path.write_text(f"Intro\n\n  ```yml\n{MINIMAL}  ```\n\n```yaml\nproject: other\n```\n")

    assert load_rules(path).project.slug == "demo"
