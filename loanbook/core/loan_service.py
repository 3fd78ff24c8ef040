"""Loan service: implements InventoryPort on top of Catalog and LoanLedger.

This is the core service that applies the borrow and return policies,
keeps each item's available count in step with the ledger's open loans,
and serializes every mutation behind a single lock.
"""

import asyncio
import logging

from .catalog import Catalog
from .errors import InvalidArgumentError, InvalidStateError, NotFoundError
from .ledger import LoanLedger
from .models import (
    AddResult,
    BorrowResult,
    BorrowStatus,
    FilterKind,
    ItemView,
    LoanView,
    ReturnResult,
    ReturnStatus,
    TransactionFilter,
)
from .ports import ClockPort, InventoryPort

logger = logging.getLogger(__name__)


def _validate_actor(actor_id: str) -> str:
    if not isinstance(actor_id, str) or not actor_id.strip():
        raise InvalidArgumentError("actor_id must be a non-empty string")
    return actor_id.strip()


def _validate_qty(qty: int) -> None:
    if isinstance(qty, bool) or not isinstance(qty, int) or qty <= 0:
        raise InvalidArgumentError(f"quantity must be a positive integer, got {qty!r}")


class LoanService(InventoryPort):
    """Core implementation of InventoryPort.

    Coordinates the catalog (stock levels) and the ledger (who holds what).
    The debit of an item and the ledger entry for it happen under the same
    lock acquisition, as do the outstanding check and the close on return.
    """

    def __init__(
        self,
        catalog: Catalog,
        ledger: LoanLedger,
        clock: ClockPort,
        forbid_concurrent_loans: bool = False,
        cap_over_returns: bool = True,
    ):
        """Initialize the loan service.

        Args:
            catalog: Item catalog owned by this service.
            ledger: Loan ledger owned by this service.
            clock: ClockPort implementation for loan timestamps.
            forbid_concurrent_loans: Reject a borrow while the actor has any
                open loan.
            cap_over_returns: Accept an over-return up to what is owed. When
                False, over-returns are rejected outright.
        """
        self.catalog = catalog
        self.ledger = ledger
        self.clock = clock
        self.forbid_concurrent_loans = forbid_concurrent_loans
        self.cap_over_returns = cap_over_returns
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Stock management
    # ------------------------------------------------------------------

    async def add_or_increase(self, name: str, qty: int) -> AddResult:
        async with self._lock:
            record, merged = self.catalog.add_or_increase(name, qty)
            view = record.to_view()

        logger.info(
            f"{'Increased' if merged else 'Created'} item #{view.id} {view.name!r}",
            extra={"item_id": view.id, "qty": qty, "merged": merged},
        )
        return AddResult(item=view, merged=merged)

    async def reduce_quantity(self, item_id: int, qty: int) -> ItemView:
        async with self._lock:
            try:
                record = self.catalog.reduce_quantity(item_id, qty)
            except InvalidStateError as e:
                logger.warning(
                    f"Refused to reduce item #{item_id}: {e}",
                    extra={"item_id": item_id, "qty": qty},
                )
                raise
            view = record.to_view()

        logger.info(
            f"Reduced item #{item_id} by {qty}",
            extra={"item_id": item_id, "qty": qty, "total": view.total},
        )
        return view

    async def delete_item(self, item_id: int) -> bool:
        async with self._lock:
            deleted = self.catalog.delete(item_id)

        if deleted:
            logger.info(f"Deleted item #{item_id}", extra={"item_id": item_id})
        return deleted

    async def get_item(self, item_id: int) -> ItemView:
        async with self._lock:
            record = self.catalog.find_by_id(item_id)
            if record is None:
                raise NotFoundError(item_id)
            return record.to_view()

    async def search(self, keyword: str) -> list[ItemView]:
        async with self._lock:
            return [r.to_view() for r in self.catalog.search_by_name(keyword)]

    async def list_all(self) -> list[ItemView]:
        async with self._lock:
            return [r.to_view() for r in self.catalog.list_all()]

    # ------------------------------------------------------------------
    # Borrow / return
    # ------------------------------------------------------------------

    async def borrow(self, actor_id: str, item_id: int, qty: int) -> BorrowResult:
        """Lend units of an item to an actor.

        Steps, all under the service lock:
        1. Policy gate (only if forbid_concurrent_loans is set)
        2. Item lookup
        3. Availability debit on the item
        4. Ledger entry; the debit is undone if this fails

        Raises:
            InvalidArgumentError: Blank actor id or non-positive qty.
        """
        actor_id = _validate_actor(actor_id)
        _validate_qty(qty)

        def rejected(
            status: BorrowStatus, message: str, item: ItemView | None = None
        ) -> BorrowResult:
            logger.info(
                f"Borrow rejected ({status.value}): {message}",
                extra={"actor_id": actor_id, "item_id": item_id, "qty": qty},
            )
            return BorrowResult(
                status=status,
                actor_id=actor_id,
                item_id=item_id,
                requested_qty=qty,
                message=message,
                item=item,
            )

        async with self._lock:
            if self.forbid_concurrent_loans and self.ledger.has_any_open(actor_id):
                return rejected(
                    BorrowStatus.POLICY_VIOLATION,
                    f"{actor_id} must return outstanding items first",
                )

            item = self.catalog.find_by_id(item_id)
            if item is None:
                return rejected(BorrowStatus.NOT_FOUND, f"Item {item_id} not found")

            if not item.borrow(qty):
                return rejected(
                    BorrowStatus.INSUFFICIENT_STOCK,
                    f"Only {item.available} of {item.name!r} available, requested {qty}",
                    item=item.to_view(),
                )

            try:
                self.ledger.open(actor_id, item.id, item.name, qty, self.clock.now())
            except Exception:
                # Keep stock and ledger in step
                item.give_back(qty)
                raise
            view = item.to_view()

        logger.info(
            f"{actor_id} borrowed {qty} x item #{item_id}",
            extra={"actor_id": actor_id, "item_id": item_id, "qty": qty},
        )
        return BorrowResult(
            status=BorrowStatus.SUCCESS,
            actor_id=actor_id,
            item_id=item_id,
            requested_qty=qty,
            message=f"Borrowed {qty} x {view.name!r}",
            item=view,
        )

    async def return_items(self, actor_id: str, item_id: int, qty: int) -> ReturnResult:
        """Take back units of an item from an actor.

        Over-returns are capped at the amount owed (or rejected when
        cap_over_returns is off). The ledger closes the actor's newest
        open loans first.

        Raises:
            InvalidArgumentError: Blank actor id or non-positive qty.
            InvalidStateError: Stock and ledger disagree; indicates a bug.
        """
        actor_id = _validate_actor(actor_id)
        _validate_qty(qty)

        def rejected(status: ReturnStatus, message: str, owed: int = 0) -> ReturnResult:
            logger.info(
                f"Return rejected ({status.value}): {message}",
                extra={"actor_id": actor_id, "item_id": item_id, "qty": qty},
            )
            return ReturnResult(
                status=status,
                actor_id=actor_id,
                item_id=item_id,
                requested_qty=qty,
                accepted_qty=0,
                owed_qty=owed,
                message=message,
            )

        async with self._lock:
            item = self.catalog.find_by_id(item_id)
            if item is None:
                return rejected(ReturnStatus.NOT_FOUND, f"Item {item_id} not found")

            outstanding = self.ledger.outstanding_for(actor_id, item_id)
            if outstanding == 0:
                return rejected(
                    ReturnStatus.NOTHING_TO_RETURN,
                    f"{actor_id} has no open loans of item #{item_id}",
                )
            if qty > outstanding and not self.cap_over_returns:
                return rejected(
                    ReturnStatus.EXCEEDS_OUTSTANDING,
                    f"{actor_id} owes only {outstanding} of item #{item_id}, "
                    f"cannot return {qty}",
                    owed=outstanding,
                )

            accepted = min(qty, outstanding)
            now = self.clock.now()
            try:
                item.give_back(accepted)
            except InvalidStateError:
                logger.error(
                    f"Stock for item #{item_id} disagrees with ledger",
                    extra={
                        "actor_id": actor_id,
                        "item_id": item_id,
                        "accepted": accepted,
                        "borrowed": item.borrowed,
                    },
                )
                raise

            try:
                closed = self.ledger.close(actor_id, item_id, accepted, now)
            except Exception:
                # Keep stock and ledger in step
                item.borrow(accepted)
                raise
            closed_qty = sum(r.quantity for r in closed)
            if closed_qty != accepted:
                raise InvalidStateError(
                    f"ledger closed {closed_qty} of item #{item_id}, expected {accepted}"
                )
            view = item.to_view()

        if accepted < qty:
            message = (
                f"Requested {qty} but {actor_id} owed only {outstanding}; "
                f"accepted {accepted} x {view.name!r}"
            )
            logger.warning(
                f"Over-return capped for {actor_id} on item #{item_id}",
                extra={
                    "actor_id": actor_id,
                    "item_id": item_id,
                    "requested": qty,
                    "accepted": accepted,
                },
            )
        else:
            message = f"Returned {accepted} x {view.name!r}"
            logger.info(
                f"{actor_id} returned {accepted} x item #{item_id}",
                extra={"actor_id": actor_id, "item_id": item_id, "qty": accepted},
            )

        return ReturnResult(
            status=ReturnStatus.SUCCESS,
            actor_id=actor_id,
            item_id=item_id,
            requested_qty=qty,
            accepted_qty=accepted,
            owed_qty=outstanding,
            message=message,
            item=view,
        )

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    async def list_transactions(
        self, transaction_filter: TransactionFilter | None = None
    ) -> list[LoanView]:
        transaction_filter = transaction_filter or TransactionFilter.all()
        async with self._lock:
            if transaction_filter.kind is FilterKind.OPEN_ONLY:
                records = self.ledger.list_open()
            elif transaction_filter.kind is FilterKind.BY_ACTOR:
                records = self.ledger.list_by_actor(transaction_filter.actor_id or "")
            else:
                records = self.ledger.list_all()
            return [r.to_view() for r in records]
