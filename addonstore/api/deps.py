import os
from functools import lru_cache
from pathlib import Path

from fastapi import Request

from addonstore.app_shell.context import StoreContext
from addonstore.components.content import ContentStore


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.rules_path = Path(os.environ.get("ADDONSTORE_RULES", self.base_dir / "rules.yaml"))


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Context ---
def get_context(request: Request) -> StoreContext:
    ctx: StoreContext = request.app.state.ctx
    return ctx


def get_store(request: Request) -> ContentStore:
    return get_context(request).store
