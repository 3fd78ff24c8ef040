"""Core domain logic for the Loanbook ledger engine.

This package contains zero external dependencies and represents
the pure business logic of the application. All adapters and
external integrations are handled by the adapters package.
"""

from .catalog import Catalog
from .errors import (
    InvalidArgumentError,
    InvalidStateError,
    LoanbookError,
    NotFoundError,
)
from .ledger import LoanLedger
from .loan_service import LoanService
from .models import (
    AddResult,
    BorrowResult,
    BorrowStatus,
    FilterKind,
    ItemRecord,
    ItemView,
    LoanRecord,
    LoanStatus,
    LoanView,
    ReturnResult,
    ReturnStatus,
    TransactionFilter,
)

__all__ = [
    "AddResult",
    "BorrowResult",
    "BorrowStatus",
    "Catalog",
    "FilterKind",
    "InvalidArgumentError",
    "InvalidStateError",
    "ItemRecord",
    "ItemView",
    "LoanLedger",
    "LoanRecord",
    "LoanService",
    "LoanStatus",
    "LoanView",
    "LoanbookError",
    "NotFoundError",
    "ReturnResult",
    "ReturnStatus",
    "TransactionFilter",
]
