"""External adapters for the Loanbook ledger engine.

Adapter Organization:

- clock.py: System clock implementing ClockPort
- cli/: Command handlers that drive InventoryPort from a terminal
"""
