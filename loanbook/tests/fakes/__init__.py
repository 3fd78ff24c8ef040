"""Fake/mock implementations of core ports for testing.

- FakeClock: Deterministic, steadily advancing timestamps
- FakeInventoryPort: Captured inventory operations with canned results
"""

from .clock import FakeClock
from .inventory import FakeInventoryPort

__all__ = ["FakeClock", "FakeInventoryPort"]
