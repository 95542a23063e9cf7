from typing import Any

from pydantic import BaseModel


# --- Content ---
class ContentCreateRequest(BaseModel):
    type: str
    content: Any = None
    owner: str | None = None


class ContentUpdateRequest(BaseModel):
    content: Any
    reason: str = ""


class OwnerTransferRequest(BaseModel):
    owner: str | None = None
    reason: str = ""
