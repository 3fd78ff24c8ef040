"""Port interfaces for the Loanbook ledger engine.

These abstract base classes define the boundaries between core
domain logic and external adapters. Implementations live in the
adapters/ package.

Port Interface Categories:

1. **Driven Ports** (core calls out to adapters)
   - ClockPort: Source of loan timestamps

2. **Driving Ports** (adapters/external systems call into core)
   - InventoryPort: Stock management, borrow/return, transaction history
"""

from abc import ABC, abstractmethod
from datetime import datetime

from .models import (
    AddResult,
    BorrowResult,
    ItemView,
    LoanView,
    ReturnResult,
    TransactionFilter,
)


# ============================================================================
# DRIVEN PORTS (Core calls out to adapters)
# ============================================================================


class ClockPort(ABC):
    """Port for reading the current time.

    Borrow and return timestamps come from here so tests can control
    ordering without sleeping.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time as a timezone-aware datetime."""


# ============================================================================
# DRIVING PORTS (External systems call into core)
# ============================================================================


class InventoryPort(ABC):
    """Port for everything a front-end (CLI, API) may ask of the engine.

    Malformed input raises InvalidArgumentError. Expected business outcomes
    of borrow and return come back as result objects, never as exceptions.
    """

    @abstractmethod
    async def add_or_increase(self, name: str, qty: int) -> AddResult:
        """Add stock by name, merging into an existing same-named item.

        Raises:
            InvalidArgumentError: Blank name or non-positive qty.
        """

    @abstractmethod
    async def reduce_quantity(self, item_id: int, qty: int) -> ItemView:
        """Remove stock from an item.

        Raises:
            NotFoundError: Unknown item id.
            InvalidArgumentError: qty not in 1..total.
            InvalidStateError: Stock would fall below what is lent out.
        """

    @abstractmethod
    async def delete_item(self, item_id: int) -> bool:
        """Remove an item with nothing lent out. False if it does not exist.

        Raises:
            InvalidStateError: Units of the item are still borrowed.
        """

    @abstractmethod
    async def get_item(self, item_id: int) -> ItemView:
        """Return one item.

        Raises:
            NotFoundError: Unknown item id.
        """

    @abstractmethod
    async def search(self, keyword: str) -> list[ItemView]:
        """Case-insensitive name containment search, in catalog order."""

    @abstractmethod
    async def list_all(self) -> list[ItemView]:
        """All items in catalog order."""

    @abstractmethod
    async def borrow(self, actor_id: str, item_id: int, qty: int) -> BorrowResult:
        """Lend ``qty`` units of an item to an actor.

        Returns:
            BorrowResult with SUCCESS, INSUFFICIENT_STOCK, NOT_FOUND or
            POLICY_VIOLATION.
        """

    @abstractmethod
    async def return_items(self, actor_id: str, item_id: int, qty: int) -> ReturnResult:
        """Take back ``qty`` units from an actor.

        Returns:
            ReturnResult with SUCCESS (carrying accepted, requested and owed
            quantities), NOTHING_TO_RETURN, NOT_FOUND or EXCEEDS_OUTSTANDING.
        """

    @abstractmethod
    async def list_transactions(
        self, transaction_filter: TransactionFilter | None = None
    ) -> list[LoanView]:
        """Ledger records in ledger order, optionally filtered."""
