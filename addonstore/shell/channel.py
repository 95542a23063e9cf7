"""
Result/error channel for transport callers.

The core always returns a typed result. Callers at the transport boundary
pick how failures are reported:

- return_error=True: the structured error {code, kind, origin, message}
- return_error=False: a bare False

Success resolves to the produced record (or records), never to True. Delete
has no produced record, so resolve_flag reports its success as True.
"""

from __future__ import annotations

from typing import Any

from addonstore.components.content import ContentListResult, ContentResult
from addonstore.domain.entities import ContentRecord

Failure = dict[str, Any] | bool


def _failure(result: ContentResult | ContentListResult, return_error: bool) -> Failure:
    if not return_error or result.error is None:
        return False
    return result.error.as_dict()


def resolve(
    result: ContentResult | ContentListResult,
    return_error: bool = False,
) -> ContentRecord | list[ContentRecord] | Failure:
    if not result.success:
        return _failure(result, return_error)
    if isinstance(result, ContentListResult):
        return result.records
    return result.record  # type: ignore[return-value]


def resolve_flag(result: ContentResult, return_error: bool = False) -> Failure:
    if not result.success:
        return _failure(result, return_error)
    return True
