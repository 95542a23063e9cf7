import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from addonstore.rules.models import Rules

# A ```yaml (or ```yml) block in a markdown document
_FENCED_YAML = re.compile(r"^[ \t]*```ya?ml[^\n]*\n(.*?)^[ \t]*```", re.MULTILINE | re.DOTALL)


def _yaml_source(text: str) -> str:
    """Return the first fenced YAML block of text, or text itself."""
    match = _FENCED_YAML.search(text)
    return match.group(1) if match else text


def load_rules(path: Path) -> Rules:
    """
    Load and validate the rules file.
    Raises FileNotFoundError if file missing.
    Raises ValueError if the YAML or the schema is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    try:
        data = yaml.safe_load(_yaml_source(path.read_text()))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    try:
        return Rules.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Rules validation failed:\n{e}") from e
