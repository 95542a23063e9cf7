import logging
import os
import sys
from pathlib import Path

from addonstore.rules.models import LogLevel, Rules

logger = logging.getLogger(__name__)

DATA_DIR_ENV = "ADDONSTORE_DATA_DIR"


def configure_logging(level: LogLevel = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def validate_ops_rules(rules: Rules) -> None:
    """
    Validate operational requirements before startup.
    Exits the process when required environment variables are missing.
    """
    missing = [env_var for env_var in rules.ops.required_env if env_var not in os.environ]

    if missing:
        logger.critical("Missing required environment variables: %s", ", ".join(missing))
        sys.exit(1)

    logger.info("Configuration validated.")


def resolve_db_path(rules: Rules, base_dir: Path) -> Path:
    """
    Database location: ADDONSTORE_DATA_DIR/<file name> when the variable is
    set, otherwise store.db_path relative to base_dir.
    """
    configured = Path(rules.store.db_path)
    data_dir = os.environ.get(DATA_DIR_ENV)
    if data_dir:
        return Path(data_dir) / configured.name
    if configured.is_absolute():
        return configured
    return base_dir / configured
