"""Tests for interactive CLI loop functionality.

Covers:
- _run_cli_interactive: REPL-like command loop
- EOF/KeyboardInterrupt handling
- JSON command parsing
- _execute_cli_command dispatch
"""

import json
from unittest.mock import patch

import pytest

from loanbook.adapters.cli.commands import CLICommandHandler
from loanbook.core.catalog import Catalog
from loanbook.core.ledger import LoanLedger
from loanbook.core.loan_service import LoanService
from loanbook.main import _execute_cli_command, _parse_command_line, _run_cli_interactive
from loanbook.tests.fakes import FakeClock, FakeInventoryPort


@pytest.fixture
def handler() -> CLICommandHandler:
    return CLICommandHandler(
        LoanService(catalog=Catalog(), ledger=LoanLedger(), clock=FakeClock())
    )


@pytest.mark.asyncio
class TestInteractiveCLILoop:
    """Test suite for interactive CLI loop."""

    async def test_cli_reads_and_executes_commands(
        self, handler: CLICommandHandler, capsys: pytest.CaptureFixture[str]
    ) -> None:
        commands = [
            'add {"name": "Ball", "quantity": 3}',
            'borrow {"actor_id": "s1", "item_id": 1001, "quantity": 2}',
            "exit",
        ]

        with patch("builtins.input", side_effect=commands):
            await _run_cli_interactive(handler)

        out = capsys.readouterr().out
        assert '"operation": "add"' in out
        assert '"operation": "borrow"' in out
        assert (await handler.inventory.get_item(1001)).available == 1

    async def test_cli_handles_json_parse_errors(
        self, handler: CLICommandHandler, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with patch("builtins.input", side_effect=["list not-valid-json", "search [1]", "exit"]):
            await _run_cli_interactive(handler)

        out = capsys.readouterr().out
        assert "Invalid JSON arguments" in out
        assert "must be a JSON object" in out

    async def test_cli_reports_unknown_command(
        self, handler: CLICommandHandler, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with patch("builtins.input", side_effect=["lend {}", "exit"]):
            await _run_cli_interactive(handler)

        assert '"status": "error"' in capsys.readouterr().out

    async def test_cli_handles_port_failure(self, capsys: pytest.CaptureFixture[str]) -> None:
        port = FakeInventoryPort()
        port.should_fail = True

        with patch("builtins.input", side_effect=["list {}", "exit"]):
            await _run_cli_interactive(CLICommandHandler(port))

        assert "Inventory operation failed" in capsys.readouterr().out

    async def test_cli_handles_eof(self, handler: CLICommandHandler) -> None:
        def input_with_eof(_: str) -> str:
            raise EOFError()

        with patch("builtins.input", side_effect=input_with_eof):
            await _run_cli_interactive(handler)

    async def test_cli_handles_keyboard_interrupt(self, handler: CLICommandHandler) -> None:
        call_count = [0]

        def input_with_interrupt(_: str) -> str:
            call_count[0] += 1
            if call_count[0] == 1:
                raise KeyboardInterrupt()
            return "exit"

        with patch("builtins.input", side_effect=input_with_interrupt):
            await _run_cli_interactive(handler)

        assert call_count[0] == 2

    async def test_cli_help_and_blank_lines(
        self, handler: CLICommandHandler, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with patch("builtins.input", side_effect=["", "help", "exit"]):
            await _run_cli_interactive(handler)

        assert "Available Commands" in capsys.readouterr().out


@pytest.mark.asyncio
class TestExecuteCommand:
    async def test_full_session(self, handler: CLICommandHandler) -> None:
        await _execute_cli_command(handler, "add", {"name": "Ball", "quantity": 10})
        await _execute_cli_command(
            handler, "borrow", {"actor_id": "s1", "item_id": 1001, "quantity": 10}
        )
        await _execute_cli_command(
            handler, "borrow", {"actor_id": "s1", "item_id": 1001, "quantity": 5}
        )
        await _execute_cli_command(handler, "add", {"name": "ball", "quantity": 5})
        await _execute_cli_command(
            handler, "borrow", {"actor_id": "s1", "item_id": 1001, "quantity": 5}
        )
        returned = await _execute_cli_command(
            handler, "return", {"actor_id": "s1", "item_id": 1001, "quantity": 3}
        )
        history = await _execute_cli_command(handler, "history", {"mode": "open"})
        listing = await _execute_cli_command(handler, "list", {})
        found = await _execute_cli_command(handler, "search", {"keyword": "BA"})

        assert returned["accepted"] == 3
        assert [loan["quantity"] for loan in history["data"]] == [10, 2]
        assert listing["data"][0]["available"] == 3
        assert found["count"] == 1
        json.dumps(history)

    async def test_borrow_failure_is_reported_not_raised(
        self, handler: CLICommandHandler
    ) -> None:
        result = await _execute_cli_command(
            handler, "borrow", {"actor_id": "s1", "item_id": 1001, "quantity": 1}
        )
        assert result["reason"] == "not_found"

    async def test_reduce_and_delete(self, handler: CLICommandHandler) -> None:
        await _execute_cli_command(handler, "add", {"name": "Ball", "quantity": 4})
        reduced = await _execute_cli_command(handler, "reduce", {"item_id": 1001, "quantity": 1})
        deleted = await _execute_cli_command(handler, "delete", {"item_id": 1001})
        assert reduced["item"]["total"] == 3
        assert deleted["status"] == "success"

    @pytest.mark.parametrize(
        "command, args",
        [
            ("add", {"name": "Ball"}),
            ("reduce", {"item_id": 1001}),
            ("delete", {}),
            ("get", {}),
            ("borrow", {"actor_id": "s1", "item_id": 1001}),
            ("return", {"item_id": 1001, "quantity": 1}),
        ],
    )
    async def test_missing_parameters(
        self, handler: CLICommandHandler, command: str, args: dict
    ) -> None:
        with pytest.raises(ValueError, match="Missing required parameter"):
            await _execute_cli_command(handler, command, args)

    async def test_get_and_search_keyword_type(self, handler: CLICommandHandler) -> None:
        await _execute_cli_command(handler, "add", {"name": "Ball", "quantity": 2})
        found = await _execute_cli_command(handler, "get", {"item_id": 1001})
        bad_search = await _execute_cli_command(handler, "search", {"keyword": 5})
        assert found["item"]["name"] == "Ball"
        assert bad_search["status"] == "error"

    async def test_unknown_command(self, handler: CLICommandHandler) -> None:
        with pytest.raises(ValueError, match="Unknown command"):
            await _execute_cli_command(handler, "lend", {})


class TestParseCommandLine:
    def test_command_with_arguments(self) -> None:
        assert _parse_command_line('Borrow {"actor_id": "s1", "quantity": 2}') == (
            "borrow",
            {"actor_id": "s1", "quantity": 2},
        )

    def test_command_without_arguments(self) -> None:
        assert _parse_command_line("list") == ("list", {})
        assert _parse_command_line("list   ") == ("list", {})

    def test_invalid_json(self) -> None:
        with pytest.raises(ValueError, match="Invalid JSON arguments"):
            _parse_command_line("list not-valid-json")

    @pytest.mark.parametrize("raw", ["[1]", "5", '"ball"', "null"])
    def test_arguments_must_be_object(self, raw: str) -> None:
        with pytest.raises(ValueError, match="must be a JSON object"):
            _parse_command_line(f"search {raw}")
