"""
Content component - addon content lifecycle, ownership and edit history.
"""

from .component import (
    ContentDeps,
    ContentStore,
    run,
    run_create,
    run_delete,
    run_get,
    run_list_owned,
    run_transfer_ownership,
    run_update,
)
from .models import (
    ContentListResult,
    ContentResult,
    CreateContentInput,
    CreatePayload,
    DeleteContentInput,
    GetContentInput,
    HistoryPolicy,
    ListOwnedInput,
    TransferOwnershipInput,
    UpdateContentInput,
)
from .ports import ContentRepoPort, TimePort, UserStorePort

__all__ = [
    # Entry points
    "run",
    "run_create",
    "run_delete",
    "run_get",
    "run_list_owned",
    "run_transfer_ownership",
    "run_update",
    "ContentDeps",
    "ContentStore",
    # Input models
    "CreateContentInput",
    "CreatePayload",
    "DeleteContentInput",
    "GetContentInput",
    "ListOwnedInput",
    "TransferOwnershipInput",
    "UpdateContentInput",
    "HistoryPolicy",
    # Output models
    "ContentListResult",
    "ContentResult",
    # Ports
    "ContentRepoPort",
    "TimePort",
    "UserStorePort",
]
