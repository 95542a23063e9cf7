"""
Ledger component - reverse index from a user to the records they own.
"""

from .component import OwnershipLedger
from .models import LedgerLookupOutput, LedgerOutput
from .ports import LedgerRepoPort

__all__ = [
    "OwnershipLedger",
    "LedgerLookupOutput",
    "LedgerOutput",
    "LedgerRepoPort",
]
