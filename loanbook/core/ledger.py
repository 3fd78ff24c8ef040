"""Loan ledger: the ordered list of borrow transactions.

Records are appended when a loan opens. Returns close records in place,
most recent first, splitting a record when only part of it is returned so
that history keeps exact quantities and timestamps.
"""

import logging
from datetime import datetime

from .errors import InvalidArgumentError
from .models import LoanRecord, same_actor

logger = logging.getLogger(__name__)


class LoanLedger:
    """Append-only (apart from splitting) sequence of LoanRecords.

    Insertion order is significant: closing walks it backwards.
    Pure data structure; no locking. LoanService serializes access.
    """

    def __init__(self) -> None:
        self._records: list[LoanRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    def open(
        self,
        actor_id: str,
        item_id: int,
        item_name: str,
        qty: int,
        now: datetime,
    ) -> LoanRecord:
        """Record a new open loan. Admission is decided by the caller."""
        record = LoanRecord(
            actor_id=actor_id,
            item_id=item_id,
            item_name=item_name,
            quantity=qty,
            borrowed_at=now,
        )
        self._records.append(record)
        return record

    def outstanding_for(self, actor_id: str, item_id: int) -> int:
        """Sum of open quantity held by ``actor_id`` for ``item_id``."""
        return sum(
            r.quantity for r in self._records if r.is_open and r.matches(actor_id, item_id)
        )

    def outstanding_for_item(self, item_id: int) -> int:
        """Sum of open quantity across all actors for ``item_id``."""
        return sum(r.quantity for r in self._records if r.is_open and r.item_id == item_id)

    def has_any_open(self, actor_id: str) -> bool:
        return any(r.is_open and same_actor(r.actor_id, actor_id) for r in self._records)

    def close(
        self, actor_id: str, item_id: int, qty: int, now: datetime
    ) -> list[LoanRecord]:
        """Close ``qty`` units of the actor's open loans for an item, newest first.

        A record fully covered by the remaining amount is closed in place.
        A record larger than the remaining amount is replaced, at the same
        position, by a closed fragment of the remaining amount followed by
        an open fragment holding the rest.

        The caller guarantees qty <= outstanding_for(actor_id, item_id); no
        clamping happens here.

        Returns:
            The closed records (or fragments) produced, newest first.
        """
        if isinstance(qty, bool) or not isinstance(qty, int) or qty <= 0:
            raise InvalidArgumentError(f"quantity must be a positive integer, got {qty!r}")

        remaining = qty
        closed: list[LoanRecord] = []
        index = len(self._records) - 1
        while index >= 0 and remaining > 0:
            record = self._records[index]
            if record.is_open and record.matches(actor_id, item_id):
                if record.quantity <= remaining:
                    done = record.close(now)
                    self._records[index] = done
                    remaining -= record.quantity
                else:
                    done, still_open = record.split(remaining, now)
                    self._records[index : index + 1] = [done, still_open]
                    remaining = 0
                closed.append(done)
            index -= 1

        if remaining:
            logger.warning(
                f"Ledger close left {remaining} unmatched for actor {actor_id!r} "
                f"item #{item_id}",
                extra={"actor_id": actor_id, "item_id": item_id, "unmatched": remaining},
            )
        return closed

    def list_all(self) -> list[LoanRecord]:
        return list(self._records)

    def list_open(self) -> list[LoanRecord]:
        return [r for r in self._records if r.is_open]

    def list_by_actor(self, actor_id: str) -> list[LoanRecord]:
        return [r for r in self._records if same_actor(r.actor_id, actor_id)]


__all__ = ["LoanLedger"]
