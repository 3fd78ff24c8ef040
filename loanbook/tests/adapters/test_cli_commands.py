"""Unit tests for CLICommandHandler.

Tests verify that commands delegate to InventoryPort and translate results
and errors into JSON-serialisable dictionaries.
"""

import json

import pytest

from loanbook.adapters.cli.commands import CLICommandHandler, TRANSACTION_TABLE_HEADER
from loanbook.core.catalog import Catalog
from loanbook.core.ledger import LoanLedger
from loanbook.core.loan_service import LoanService
from loanbook.tests.fakes import FakeClock, FakeInventoryPort


@pytest.fixture
def service() -> LoanService:
    return LoanService(catalog=Catalog(), ledger=LoanLedger(), clock=FakeClock())


@pytest.fixture
def handler(service: LoanService) -> CLICommandHandler:
    return CLICommandHandler(service)


@pytest.mark.asyncio
class TestStockCommands:
    async def test_add_creates_then_merges(self, handler: CLICommandHandler) -> None:
        created = await handler.add_item("Ball", 5)
        merged = await handler.add_item("BALL", 2)

        assert created["status"] == "success"
        assert created["merged"] is False
        assert created["message"].startswith("Created #1001 Ball")
        assert merged["merged"] is True
        assert merged["item"] == {
            "id": 1001,
            "name": "Ball",
            "total": 7,
            "available": 7,
            "borrowed": 0,
        }

    async def test_add_invalid(self, handler: CLICommandHandler) -> None:
        result = await handler.add_item("", 5)
        assert result["status"] == "error"
        assert result["operation"] == "add"
        assert "name" in result["message"]

    async def test_reduce(self, handler: CLICommandHandler) -> None:
        await handler.add_item("Ball", 5)
        result = await handler.reduce_item(1001, 2)
        assert result["status"] == "success"
        assert result["item"]["total"] == 3

    async def test_reduce_errors(self, handler: CLICommandHandler) -> None:
        await handler.add_item("Ball", 5)
        await handler.borrow("s1", 1001, 4)

        not_found = await handler.reduce_item(999, 1)
        invalid_state = await handler.reduce_item(1001, 2)

        assert not_found["status"] == "error"
        assert "999" in not_found["message"]
        assert invalid_state["status"] == "error"
        assert "borrowed" in invalid_state["message"]

    async def test_delete(self, handler: CLICommandHandler) -> None:
        await handler.add_item("Ball", 5)
        assert (await handler.delete_item(1001))["status"] == "success"
        missing = await handler.delete_item(1001)
        assert missing["status"] == "error"
        assert missing["message"] == "Item 1001 not found"

    async def test_delete_while_borrowed(self, handler: CLICommandHandler) -> None:
        await handler.add_item("Ball", 5)
        await handler.borrow("s1", 1001, 1)
        result = await handler.delete_item(1001)
        assert result["status"] == "error"

    async def test_list_and_search_formats(self, handler: CLICommandHandler) -> None:
        await handler.add_item("Football", 2)
        await handler.add_item("Net", 1)

        as_json = await handler.list_items()
        as_text = await handler.search_items("foot", output_format="text")
        empty = await handler.search_items("racket", output_format="text")
        bad = await handler.list_items(output_format="xml")

        assert as_json["count"] == 2
        assert [i["name"] for i in as_json["data"]] == ["Football", "Net"]
        assert as_text["data"] == "#1001 Football — total=2, available=2"
        assert empty["data"] == "No items"
        assert bad["status"] == "error"

    async def test_search_rejects_non_string_keyword(self, handler: CLICommandHandler) -> None:
        result = await handler.search_items(5)
        assert result["status"] == "error"
        assert result["operation"] == "search"
        assert "must be a string" in result["message"]

    async def test_get(self, handler: CLICommandHandler) -> None:
        await handler.add_item("Ball", 3)
        await handler.inventory.borrow("s1", 1001, 1)

        found = await handler.get_item(1001)
        missing = await handler.get_item(404)

        assert found["status"] == "success"
        assert (found["item"]["available"], found["item"]["borrowed"]) == (2, 1)
        assert missing["status"] == "error"
        assert missing["item_id"] == 404
        json.dumps(found)


@pytest.mark.asyncio
class TestLoanCommands:
    async def test_borrow_outcomes(self, handler: CLICommandHandler) -> None:
        await handler.add_item("Ball", 2)

        ok = await handler.borrow("s1", 1001, 2)
        short = await handler.borrow("s2", 1001, 1)
        missing = await handler.borrow("s2", 999, 1)
        invalid = await handler.borrow("s2", 1001, 0)

        assert (ok["status"], ok["reason"]) == ("success", "success")
        assert ok["item"]["available"] == 0
        assert (short["status"], short["reason"]) == ("error", "insufficient_stock")
        assert (missing["status"], missing["reason"]) == ("error", "not_found")
        assert invalid["status"] == "error"
        assert "reason" not in invalid

    async def test_return_reports_cap(self, handler: CLICommandHandler) -> None:
        await handler.add_item("Ball", 10)
        await handler.borrow("s1", 1001, 6)

        result = await handler.return_items("s1", 1001, 10)

        assert result["status"] == "success"
        assert (result["requested"], result["accepted"], result["owed"]) == (10, 6, 6)
        assert result["capped"] is True

    async def test_return_nothing(self, handler: CLICommandHandler) -> None:
        await handler.add_item("Ball", 10)
        result = await handler.return_items("s1", 1001, 1)
        assert (result["status"], result["reason"]) == ("error", "nothing_to_return")

    async def test_history_json_is_serialisable(self, handler: CLICommandHandler) -> None:
        await handler.add_item("Ball", 10)
        await handler.borrow("s1", 1001, 5)
        await handler.return_items("s1", 1001, 2)

        result = await handler.list_transactions()

        json.dumps(result)
        assert result["count"] == 2
        closed, still_open = result["data"]
        assert (closed["quantity"], closed["status"]) == (2, "closed")
        assert closed["returned_at"] is not None
        assert (still_open["quantity"], still_open["status"], still_open["returned_at"]) == (
            3,
            "open",
            None,
        )

    async def test_history_modes(self, handler: CLICommandHandler) -> None:
        await handler.add_item("Ball", 10)
        await handler.borrow("s1", 1001, 1)
        await handler.borrow("s2", 1001, 1)
        await handler.return_items("s2", 1001, 1)

        assert (await handler.list_transactions(mode="open"))["count"] == 1
        assert (await handler.list_transactions(mode="actor", actor_id="S2"))["count"] == 1
        assert (await handler.list_transactions(mode="actor"))["status"] == "error"
        assert (await handler.list_transactions(mode="weekly"))["status"] == "error"

    async def test_history_text(self, handler: CLICommandHandler) -> None:
        assert (await handler.list_transactions(output_format="text"))["data"] == (
            "No transactions"
        )
        await handler.add_item("Ball", 10)
        await handler.borrow("s1", 1001, 1)

        text = (await handler.list_transactions(output_format="text"))["data"]

        lines = text.splitlines()
        assert lines[0] == TRANSACTION_TABLE_HEADER
        assert lines[1].endswith("OPEN")


@pytest.mark.asyncio
async def test_handler_delegates_to_port() -> None:
    port = FakeInventoryPort()
    handler = CLICommandHandler(port)

    await handler.add_item("Ball", 3)
    await handler.borrow("s1", 1001, 1)
    await handler.return_items("s1", 1001, 1)
    await handler.search_items("ba")

    assert port.added == [("Ball", 3)]
    assert port.borrows == [("s1", 1001, 1)]
    assert port.returns == [("s1", 1001, 1)]
    assert port.searches == ["ba"]
