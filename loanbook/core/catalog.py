"""In-memory catalog of borrowable items.

Item identity is keyed by name: adding stock under a name that already
exists (compared case-insensitively) increases that record instead of
creating a second one.
"""

import logging

from .errors import InvalidArgumentError, InvalidStateError, NotFoundError
from .models import ItemRecord, normalize_name

logger = logging.getLogger(__name__)

DEFAULT_FIRST_ITEM_ID = 1001


class Catalog:
    """Items keyed by a generated integer id, kept in insertion order.

    Pure data structure; no locking. LoanService serializes access.
    """

    def __init__(self, first_item_id: int = DEFAULT_FIRST_ITEM_ID):
        if first_item_id <= 0:
            raise InvalidArgumentError(
                f"first_item_id must be positive, got {first_item_id}"
            )
        self._items: dict[int, ItemRecord] = {}
        self._next_id = first_item_id

    def __len__(self) -> int:
        return len(self._items)

    def _allocate_id(self) -> int:
        item_id = self._next_id
        self._next_id += 1
        return item_id

    def add_or_increase(self, name: str, qty: int) -> tuple[ItemRecord, bool]:
        """Add stock under ``name``, merging into an existing record if any.

        Args:
            name: Item name; trimmed, must not be blank.
            qty: Units to add; must be positive.

        Returns:
            (record, merged) where merged is True if an existing record
            was increased rather than a new one created.

        Raises:
            InvalidArgumentError: If name is blank or qty is not positive.
        """
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgumentError("name must be a non-empty string")
        if isinstance(qty, bool) or not isinstance(qty, int) or qty <= 0:
            raise InvalidArgumentError(f"quantity must be a positive integer, got {qty!r}")

        existing = self.find_by_name_exact(name)
        if existing is not None:
            existing.add_quantity(qty)
            logger.debug(
                f"Merged {qty} into existing item #{existing.id}",
                extra={"item_id": existing.id, "qty": qty},
            )
            return existing, True

        record = ItemRecord(id=self._allocate_id(), name=name, total=qty)
        self._items[record.id] = record
        logger.debug(
            f"Created item #{record.id} {record.name!r}",
            extra={"item_id": record.id, "qty": qty},
        )
        return record, False

    def find_by_id(self, item_id: int) -> ItemRecord | None:
        return self._items.get(item_id)

    def find_by_name_exact(self, name: str) -> ItemRecord | None:
        """Case-insensitive exact name lookup."""
        if name is None:
            return None
        key = normalize_name(name)
        for record in self._items.values():
            if normalize_name(record.name) == key:
                return record
        return None

    def search_by_name(self, keyword: str | None) -> list[ItemRecord]:
        """Case-insensitive substring match; a blank keyword matches everything."""
        if keyword is not None and not isinstance(keyword, str):
            raise InvalidArgumentError(f"search keyword must be a string, got {keyword!r}")
        key = (keyword or "").casefold()
        return [r for r in self._items.values() if key in r.name.casefold()]

    def list_all(self) -> list[ItemRecord]:
        return list(self._items.values())

    def reduce_quantity(self, item_id: int, qty: int) -> ItemRecord:
        """Remove stock from an item.

        Raises:
            NotFoundError: If no item has this id.
            InvalidArgumentError: If qty is not in 1..total.
            InvalidStateError: If total would drop below the borrowed count.
        """
        record = self.find_by_id(item_id)
        if record is None:
            raise NotFoundError(item_id)
        record.remove_quantity(qty)
        return record

    def delete(self, item_id: int) -> bool:
        """Remove an item entirely. Returns False if it does not exist.

        Raises:
            InvalidStateError: If some of the item's units are still lent out.
        """
        record = self.find_by_id(item_id)
        if record is None:
            return False
        if record.borrowed > 0:
            raise InvalidStateError(
                f"cannot delete item #{item_id}: {record.borrowed} still borrowed"
            )
        del self._items[item_id]
        return True


__all__ = ["Catalog", "DEFAULT_FIRST_ITEM_ID"]
