"""Domain models for the Loanbook ledger engine.

All models in this module use only Python standard library types,
ensuring zero external dependencies in the core domain.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from .errors import InvalidArgumentError, InvalidStateError

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _format_timestamp(value: datetime | None) -> str:
    return "" if value is None else value.strftime(TIMESTAMP_FORMAT)


def _require_positive(qty: int, what: str = "quantity") -> None:
    if isinstance(qty, bool) or not isinstance(qty, int) or qty <= 0:
        raise InvalidArgumentError(f"{what} must be a positive integer, got {qty!r}")


def normalize_name(name: str) -> str:
    """Lookup key for an item name: trimmed and case-folded."""
    return name.strip().casefold()


def same_actor(left: str, right: str) -> bool:
    """Actor ids compare case-insensitively."""
    return left.strip().casefold() == right.strip().casefold()


@dataclass(frozen=True)
class ItemView:
    """Read-only snapshot of an item's stock levels."""

    id: int
    name: str
    total: int
    available: int
    borrowed: int

    def describe(self) -> str:
        """One-line rendering, e.g. ``#1001 Ball — total=8, available=5``."""
        return f"#{self.id} {self.name} — total={self.total}, available={self.available}"


@dataclass
class ItemRecord:
    """A borrowable item with total and available counts.

    Invariants:
        0 <= available <= total, so borrowed = total - available is never
        negative and never exceeds total.

    Note: ``id`` and ``name`` are fixed at creation. Only the catalog
    creates records, and only the methods below change the counts.
    """

    id: int
    name: str
    total: int
    available: int | None = None

    def __post_init__(self) -> None:
        """Validate item invariants on creation."""
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidArgumentError("name must be a non-empty string")
        self.name = self.name.strip()
        if self.total < 0:
            raise InvalidArgumentError(f"total must be >= 0, got {self.total}")
        if self.available is None:
            self.available = self.total
        if not 0 <= self.available <= self.total:
            raise InvalidArgumentError(
                f"available must be between 0 and total ({self.total}), "
                f"got {self.available}"
            )

    @property
    def borrowed(self) -> int:
        return self.total - self.available

    def add_quantity(self, qty: int) -> None:
        """Grow stock: both total and available increase by qty."""
        _require_positive(qty)
        self.total += qty
        self.available += qty

    def remove_quantity(self, qty: int) -> None:
        """Shrink stock by qty without touching units already lent out.

        Raises:
            InvalidArgumentError: If qty is not in 1..total.
            InvalidStateError: If total would drop below the borrowed count.
        """
        _require_positive(qty)
        if qty > self.total:
            raise InvalidArgumentError(
                f"cannot remove {qty} from item #{self.id}: only {self.total} in stock"
            )
        borrowed = self.borrowed
        if self.total - qty < borrowed:
            raise InvalidStateError(
                f"cannot remove {qty} from item #{self.id}: {borrowed} currently borrowed "
                f"out of {self.total}"
            )
        self.total -= qty
        self.available = self.total - borrowed

    def borrow(self, qty: int) -> bool:
        """Debit available stock. Returns False, changing nothing, if short."""
        _require_positive(qty)
        if qty > self.available:
            return False
        self.available -= qty
        return True

    def give_back(self, qty: int) -> None:
        """Credit returned units back to available stock.

        Raises:
            InvalidStateError: If more is returned than is currently lent out.
        """
        _require_positive(qty)
        if self.available + qty > self.total:
            raise InvalidStateError(
                f"cannot return {qty} of item #{self.id}: only {self.borrowed} lent out"
            )
        self.available += qty

    def to_view(self) -> ItemView:
        return ItemView(
            id=self.id,
            name=self.name,
            total=self.total,
            available=self.available,
            borrowed=self.borrowed,
        )


class LoanStatus(Enum):
    """Whether a loan record still represents unreturned units."""

    OPEN = "open"
    CLOSED = "closed"


@dataclass(frozen=True)
class LoanView:
    """Read-only projection of a loan record for callers."""

    actor_id: str
    item_id: int
    item_name: str
    quantity: int
    borrowed_at: datetime
    returned_at: datetime | None
    status: LoanStatus

    def describe(self) -> str:
        """One table row: actor | item | qty | borrowed | returned | status."""
        return (
            f"{self.actor_id:<10} | #{self.item_id} {self.item_name:<22} | "
            f"{self.quantity:>3} | {_format_timestamp(self.borrowed_at)} | "
            f"{_format_timestamp(self.returned_at):<19} | {self.status.name}"
        )


@dataclass(frozen=True)
class LoanRecord:
    """One loan transaction line in the ledger.

    A record is open while ``returned_at`` is None. Records are immutable;
    closing or splitting produces new records that the ledger swaps in at
    the same position.
    """

    actor_id: str
    item_id: int
    item_name: str  # snapshot taken when the loan was opened
    quantity: int
    borrowed_at: datetime
    returned_at: datetime | None = None

    def __post_init__(self) -> None:
        """Validate loan record invariants on creation."""
        if not self.actor_id or not self.actor_id.strip():
            raise InvalidArgumentError("actor_id must be a non-empty string")
        _require_positive(self.quantity)

    @property
    def is_open(self) -> bool:
        return self.returned_at is None

    @property
    def status(self) -> LoanStatus:
        return LoanStatus.OPEN if self.is_open else LoanStatus.CLOSED

    def matches(self, actor_id: str, item_id: int) -> bool:
        return self.item_id == item_id and same_actor(self.actor_id, actor_id)

    def close(self, when: datetime) -> "LoanRecord":
        """Return a closed copy of this record with its full quantity."""
        if not self.is_open:
            raise InvalidStateError("loan record is already closed")
        return replace(self, returned_at=when)

    def split(self, qty: int, when: datetime) -> tuple["LoanRecord", "LoanRecord"]:
        """Split off ``qty`` as a closed record; the remainder stays open.

        Both fragments keep the original borrow timestamp.

        Returns:
            (closed fragment, still-open fragment)
        """
        if not self.is_open:
            raise InvalidStateError("loan record is already closed")
        if not 0 < qty < self.quantity:
            raise InvalidArgumentError(
                f"split quantity must be between 1 and {self.quantity - 1}, got {qty}"
            )
        closed = replace(self, quantity=qty, returned_at=when)
        still_open = replace(self, quantity=self.quantity - qty)
        return closed, still_open

    def to_view(self) -> LoanView:
        return LoanView(
            actor_id=self.actor_id,
            item_id=self.item_id,
            item_name=self.item_name,
            quantity=self.quantity,
            borrowed_at=self.borrowed_at,
            returned_at=self.returned_at,
            status=self.status,
        )


class FilterKind(Enum):
    """Which slice of the ledger a transaction listing covers."""

    ALL = "all"
    OPEN_ONLY = "open"
    BY_ACTOR = "actor"


@dataclass(frozen=True)
class TransactionFilter:
    """Selects ledger records for listing."""

    kind: FilterKind = FilterKind.ALL
    actor_id: str | None = None

    def __post_init__(self) -> None:
        if self.kind is FilterKind.BY_ACTOR and (
            not self.actor_id or not self.actor_id.strip()
        ):
            raise InvalidArgumentError("actor_id is required for a by-actor filter")

    @classmethod
    def all(cls) -> "TransactionFilter":
        return cls(FilterKind.ALL)

    @classmethod
    def open_only(cls) -> "TransactionFilter":
        return cls(FilterKind.OPEN_ONLY)

    @classmethod
    def by_actor(cls, actor_id: str) -> "TransactionFilter":
        return cls(FilterKind.BY_ACTOR, actor_id)


@dataclass(frozen=True)
class AddResult:
    """Outcome of adding stock by name."""

    item: ItemView
    merged: bool  # True when an existing record with the same name was increased


class BorrowStatus(Enum):
    SUCCESS = "success"
    INSUFFICIENT_STOCK = "insufficient_stock"
    NOT_FOUND = "not_found"
    POLICY_VIOLATION = "policy_violation"


@dataclass(frozen=True)
class BorrowResult:
    """Outcome of a borrow request."""

    status: BorrowStatus
    actor_id: str
    item_id: int
    requested_qty: int
    message: str
    item: ItemView | None = None

    @property
    def ok(self) -> bool:
        return self.status is BorrowStatus.SUCCESS


class ReturnStatus(Enum):
    """Outcomes of a return request.

    EXCEEDS_OUTSTANDING is only produced when over-return capping is
    switched off.
    """

    SUCCESS = "success"
    NOTHING_TO_RETURN = "nothing_to_return"
    NOT_FOUND = "not_found"
    EXCEEDS_OUTSTANDING = "exceeds_outstanding"


@dataclass(frozen=True)
class ReturnResult:
    """Outcome of a return request.

    On success ``accepted_qty`` is what was actually recorded, which is less
    than ``requested_qty`` when the request was capped at ``owed_qty``.
    """

    status: ReturnStatus
    actor_id: str
    item_id: int
    requested_qty: int
    accepted_qty: int
    owed_qty: int
    message: str
    item: ItemView | None = None

    @property
    def ok(self) -> bool:
        return self.status is ReturnStatus.SUCCESS

    @property
    def capped(self) -> bool:
        return self.ok and self.accepted_qty < self.requested_qty
