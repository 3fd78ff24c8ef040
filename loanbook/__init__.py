"""Loanbook: borrow/return ledger engine for a pool of lendable items."""

__version__ = "0.1.0"
