from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class StoreRules(BaseModel):
    backend: Literal["sqlite", "memory"] = "sqlite"
    db_path: str = "data/addonstore.db"
    migrations_dir: str = "migrations"


class HistoryRules(BaseModel):
    default_reason: str = "update"
    max_reason_length: int = Field(default=500, ge=1)


class LoggingRules(BaseModel):
    level: LogLevel = "INFO"


class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)


class AddonRules(BaseModel):
    """An addon preloaded into the registry at startup."""

    id: UUID
    name: str
    types: list[str] = Field(min_length=1)


class Rules(BaseModel):
    project: ProjectRules
    store: StoreRules = Field(default_factory=StoreRules)
    history: HistoryRules = Field(default_factory=HistoryRules)
    logging: LoggingRules = Field(default_factory=LoggingRules)
    ops: OpsRules = Field(default_factory=OpsRules)
    addons: list[AddonRules] = Field(default_factory=list)
