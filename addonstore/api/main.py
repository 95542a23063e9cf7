import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from addonstore.api.deps import get_settings
from addonstore.api.routes import content
from addonstore.app_shell.config import configure_logging, validate_ops_rules
from addonstore.app_shell.context import StoreContext
from addonstore.rules.loader import load_rules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the store context from the rules file unless one was supplied."""
    if getattr(app.state, "ctx", None) is None:
        settings = get_settings()
        # Fail fast on a missing or invalid rules file
        rules = load_rules(settings.rules_path)
        configure_logging(rules.logging.level)
        validate_ops_rules(rules)
        app.state.ctx = StoreContext.create(rules, base_dir=settings.base_dir)
        logger.info("Rules loaded from %s", settings.rules_path)

    yield


def create_app(ctx: StoreContext | None = None) -> FastAPI:
    """
    Build the HTTP app. The registry in ctx is already locked, so the
    set of addons served is fixed for the app's lifetime.
    """
    app = FastAPI(title="addonstore API", version="0.1.0", lifespan=lifespan)
    app.state.ctx = ctx

    app.include_router(content.router, tags=["Content"])

    @app.get("/health")
    def health_check() -> dict[str, Any]:
        current: StoreContext | None = app.state.ctx
        return {
            "status": "ok",
            "addons": len(current.registry) if current else 0,
        }

    return app
