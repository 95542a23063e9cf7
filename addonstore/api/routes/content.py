"""
Content routes.

Maps HTTP requests onto content store operations and results back onto
responses. Failures are reported through the result/error channel: the
structured error when ?return_error=true, a bare false otherwise.
"""

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from addonstore.api.deps import get_context, get_store
from addonstore.api.schemas import (
    ContentCreateRequest,
    ContentUpdateRequest,
    OwnerTransferRequest,
)
from addonstore.app_shell.context import StoreContext
from addonstore.components.content import (
    ContentListResult,
    ContentResult,
    ContentStore,
    CreatePayload,
)
from addonstore.components.identity import try_normalize
from addonstore.domain.errors import ContentError, ErrorKind
from addonstore.shell.channel import resolve, resolve_flag

router = APIRouter()

STATUS_BY_KIND = {
    ErrorKind.INVALID_TYPE: 400,
    ErrorKind.INVALID_IDENTIFIER: 400,
    ErrorKind.USER_NOT_FOUND: 404,
    ErrorKind.UNKNOWN_ADDON: 404,
    ErrorKind.CONTENT_NOT_FOUND: 404,
    ErrorKind.STORAGE_ERROR: 500,
    ErrorKind.LEDGER_ERROR: 500,
}


def _respond(
    result: ContentResult | ContentListResult,
    return_error: bool,
    *,
    status_code: int = 200,
    flag: bool = False,
) -> JSONResponse:
    if result.success:
        body: Any = resolve_flag(result) if flag else resolve(result)  # type: ignore[arg-type]
        return JSONResponse(status_code=status_code, content=jsonable_encoder(body))

    status = STATUS_BY_KIND.get(result.error.kind, 500) if result.error else 500
    return JSONResponse(status_code=status, content=resolve(result, return_error))


@router.post("/addons/{addon_id}/content")
async def create_content(
    addon_id: str,
    body: ContentCreateRequest,
    return_error: bool = False,
    ctx: StoreContext = Depends(get_context),
) -> JSONResponse:
    canonical = try_normalize(addon_id)
    addon = ctx.registry.get(canonical) if canonical else None
    if addon is None:
        kind = ErrorKind.UNKNOWN_ADDON if canonical else ErrorKind.INVALID_IDENTIFIER
        failed = ContentResult(
            error=ContentError.of(kind, "api.create_content", f"Addon {addon_id} is not available"),
            success=False,
        )
        return _respond(failed, return_error)

    result = await ctx.store.create(
        addon, body.type, CreatePayload(content=body.content, owner=body.owner)
    )
    return _respond(result, return_error, status_code=201)


@router.get("/content/{record_id}")
async def get_content(
    record_id: str,
    return_error: bool = False,
    store: ContentStore = Depends(get_store),
) -> JSONResponse:
    return _respond(await store.get(record_id), return_error)


@router.patch("/content/{record_id}")
async def update_content(
    record_id: str,
    body: ContentUpdateRequest,
    return_error: bool = False,
    store: ContentStore = Depends(get_store),
) -> JSONResponse:
    result = await store.update(record_id, body.content, body.reason)
    return _respond(result, return_error)


@router.put("/content/{record_id}/owner")
async def transfer_owner(
    record_id: str,
    body: OwnerTransferRequest,
    return_error: bool = False,
    store: ContentStore = Depends(get_store),
) -> JSONResponse:
    result = await store.transfer_ownership(record_id, body.owner, body.reason)
    return _respond(result, return_error)


@router.delete("/content/{record_id}")
async def delete_content(
    record_id: str,
    return_error: bool = False,
    store: ContentStore = Depends(get_store),
) -> JSONResponse:
    return _respond(await store.delete(record_id), return_error, flag=True)


@router.get("/users/{user_id}/content")
async def list_user_content(
    user_id: str,
    return_error: bool = False,
    store: ContentStore = Depends(get_store),
) -> JSONResponse:
    return _respond(await store.list_owned(user_id), return_error)
