"""Failure taxonomy for the Loanbook ledger engine.

Expected business outcomes (insufficient stock, nothing to return, policy
rejections) are not exceptions; they are reported through result objects
in models.py. The exceptions here cover malformed input, unknown items,
and operations that would break the stock invariants.
"""


class LoanbookError(Exception):
    """Base class for all errors raised by the ledger engine."""


class InvalidArgumentError(LoanbookError, ValueError):
    """Malformed input: blank name or actor id, non-positive quantity."""


class NotFoundError(LoanbookError, LookupError):
    """No item exists with the requested identifier."""

    def __init__(self, item_id: int):
        super().__init__(f"Item {item_id} not found")
        self.item_id = item_id


class InvalidStateError(LoanbookError):
    """The operation would violate the total/available/borrowed invariant.

    Never reachable through LoanService.borrow or LoanService.return_items;
    seeing one from those paths means a bug.
    """


__all__ = [
    "InvalidArgumentError",
    "InvalidStateError",
    "LoanbookError",
    "NotFoundError",
]
