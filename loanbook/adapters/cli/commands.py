"""CLI command implementations for Loanbook.

Provides stock management and borrow/return actions through a command-line
interface.

This adapter maps CLI commands (add, reduce, delete, get, search, list, borrow,
return, history) to InventoryPort operations. It handles CLI-specific
formatting and error reporting; every command returns a JSON-serialisable
dictionary with a "status" of "success" or "error".
"""

import logging
from dataclasses import asdict
from typing import Any

from loanbook.core.errors import LoanbookError
from loanbook.core.models import ItemView, LoanView, TransactionFilter
from loanbook.core.ports import InventoryPort

logger = logging.getLogger(__name__)

TRANSACTION_TABLE_HEADER = (
    "actor      | #id item name              | qty | borrowed_at         "
    "| returned_at         | status"
)


def item_to_dict(item: ItemView) -> dict[str, Any]:
    return asdict(item)


def loan_to_dict(loan: LoanView) -> dict[str, Any]:
    return {
        "actor_id": loan.actor_id,
        "item_id": loan.item_id,
        "item_name": loan.item_name,
        "quantity": loan.quantity,
        "borrowed_at": loan.borrowed_at.isoformat(),
        "returned_at": loan.returned_at.isoformat() if loan.returned_at else None,
        "status": loan.status.value,
    }


class CLICommandHandler:
    """Handles CLI commands by delegating to InventoryPort."""

    def __init__(self, inventory: InventoryPort):
        """Initialize the CLI command handler.

        Args:
            inventory: InventoryPort implementation to execute commands.
        """
        self.inventory = inventory

    @staticmethod
    def _error(operation: str, error: Exception, **fields: Any) -> dict[str, Any]:
        logger.error(f"Failed to {operation}: {error}")
        return {
            "status": "error",
            "operation": operation,
            **fields,
            "message": str(error),
        }

    async def add_item(self, name: str, quantity: int) -> dict[str, Any]:
        """Add stock by name; an existing name is increased instead of duplicated.

        Args:
            name: Item name.
            quantity: Units to add.

        Returns:
            Dictionary with the resulting item and whether it was merged.
        """
        try:
            result = await self.inventory.add_or_increase(name, quantity)
        except LoanbookError as e:
            return self._error("add", e, name=name)

        return {
            "status": "success",
            "operation": "add",
            "merged": result.merged,
            "item": item_to_dict(result.item),
            "message": (
                f"Name already listed, increased {result.item.describe()}"
                if result.merged
                else f"Created {result.item.describe()}"
            ),
        }

    async def reduce_item(self, item_id: int, quantity: int) -> dict[str, Any]:
        """Remove stock from an item."""
        try:
            item = await self.inventory.reduce_quantity(item_id, quantity)
        except LoanbookError as e:
            return self._error("reduce", e, item_id=item_id)

        return {
            "status": "success",
            "operation": "reduce",
            "item": item_to_dict(item),
            "message": f"Reduced {item.describe()}",
        }

    async def delete_item(self, item_id: int) -> dict[str, Any]:
        try:
            deleted = await self.inventory.delete_item(item_id)
        except LoanbookError as e:
            return self._error("delete", e, item_id=item_id)

        if not deleted:
            return {
                "status": "error",
                "operation": "delete",
                "item_id": item_id,
                "message": f"Item {item_id} not found",
            }
        return {
            "status": "success",
            "operation": "delete",
            "item_id": item_id,
            "message": f"Item {item_id} deleted",
        }

    async def get_item(self, item_id: int) -> dict[str, Any]:
        try:
            item = await self.inventory.get_item(item_id)
        except LoanbookError as e:
            return self._error("get", e, item_id=item_id)

        return {
            "status": "success",
            "operation": "get",
            "item": item_to_dict(item),
            "message": item.describe(),
        }

    async def search_items(self, keyword: str, output_format: str = "json") -> dict[str, Any]:
        """Search items by name fragment."""
        try:
            items = await self.inventory.search(keyword)
        except LoanbookError as e:
            return self._error("search", e)
        return self._format_items("search", items, output_format)

    async def list_items(self, output_format: str = "json") -> dict[str, Any]:
        items = await self.inventory.list_all()
        return self._format_items("list", items, output_format)

    def _format_items(
        self, operation: str, items: list[ItemView], output_format: str
    ) -> dict[str, Any]:
        if output_format == "json":
            data: Any = [item_to_dict(i) for i in items]
        elif output_format == "text":
            data = "\n".join(i.describe() for i in items) if items else "No items"
        else:
            return {
                "status": "error",
                "operation": operation,
                "message": f"Unsupported format: {output_format}",
            }
        return {
            "status": "success",
            "operation": operation,
            "count": len(items),
            "data": data,
        }

    async def borrow(self, actor_id: str, item_id: int, quantity: int) -> dict[str, Any]:
        """Borrow units of an item.

        Business rejections (not found, insufficient stock, policy) come back
        with status "error" and a "reason" naming the outcome.
        """
        try:
            result = await self.inventory.borrow(actor_id, item_id, quantity)
        except LoanbookError as e:
            return self._error("borrow", e, item_id=item_id)

        response: dict[str, Any] = {
            "status": "success" if result.ok else "error",
            "operation": "borrow",
            "reason": result.status.value,
            "actor_id": result.actor_id,
            "item_id": result.item_id,
            "quantity": result.requested_qty,
            "message": result.message,
        }
        if result.item is not None:
            response["item"] = item_to_dict(result.item)
        return response

    async def return_items(self, actor_id: str, item_id: int, quantity: int) -> dict[str, Any]:
        """Return units of an item.

        The response always carries requested, accepted and owed quantities
        so a capped over-return is visible to the caller.
        """
        try:
            result = await self.inventory.return_items(actor_id, item_id, quantity)
        except LoanbookError as e:
            return self._error("return", e, item_id=item_id)

        response: dict[str, Any] = {
            "status": "success" if result.ok else "error",
            "operation": "return",
            "reason": result.status.value,
            "actor_id": result.actor_id,
            "item_id": result.item_id,
            "requested": result.requested_qty,
            "accepted": result.accepted_qty,
            "owed": result.owed_qty,
            "capped": result.capped,
            "message": result.message,
        }
        if result.item is not None:
            response["item"] = item_to_dict(result.item)
        return response

    async def list_transactions(
        self,
        mode: str = "all",
        actor_id: str | None = None,
        output_format: str = "json",
    ) -> dict[str, Any]:
        """List ledger records.

        Args:
            mode: 'all', 'open' or 'actor'.
            actor_id: Required when mode is 'actor'.
            output_format: 'json' or 'text'.
        """
        try:
            if mode == "all":
                transaction_filter = TransactionFilter.all()
            elif mode == "open":
                transaction_filter = TransactionFilter.open_only()
            elif mode == "actor":
                transaction_filter = TransactionFilter.by_actor(actor_id or "")
            else:
                return {
                    "status": "error",
                    "operation": "history",
                    "message": f"Unsupported mode: {mode}",
                }
            loans = await self.inventory.list_transactions(transaction_filter)
        except LoanbookError as e:
            return self._error("history", e)

        if output_format == "json":
            data: Any = [loan_to_dict(loan) for loan in loans]
        elif output_format == "text":
            data = (
                "\n".join([TRANSACTION_TABLE_HEADER] + [loan.describe() for loan in loans])
                if loans
                else "No transactions"
            )
        else:
            return {
                "status": "error",
                "operation": "history",
                "message": f"Unsupported format: {output_format}",
            }
        return {
            "status": "success",
            "operation": "history",
            "mode": mode,
            "count": len(loans),
            "data": data,
        }
