"""Composition root for the Loanbook ledger engine.

This module is the ONLY location that imports both core domain logic
and concrete adapter implementations. All wiring of dependencies
happens here, creating a clear entry point for the application.

Module Structure:
- Configuration loading via config module
- Adapter instantiation
- Core service initialization
- Entry point (interactive CLI)
"""

import asyncio
import json
import logging
import sys
from typing import Any

from loanbook.adapters.cli.commands import CLICommandHandler
from loanbook.adapters.clock import SystemClock
from loanbook.config import Settings, load_settings
from loanbook.core.catalog import Catalog
from loanbook.core.ledger import LoanLedger
from loanbook.core.loan_service import LoanService
from loanbook.core.ports import ClockPort


def build_service(settings: Settings, clock: ClockPort | None = None) -> LoanService:
    """Create the single LoanService instance for this process."""
    return LoanService(
        catalog=Catalog(first_item_id=settings.first_item_id),
        ledger=LoanLedger(),
        clock=clock or SystemClock(),
        forbid_concurrent_loans=settings.forbid_concurrent_loans,
        cap_over_returns=settings.cap_over_returns,
    )


def _require(args: dict[str, Any], *names: str) -> None:
    for name in names:
        if name not in args:
            raise ValueError(f"Missing required parameter: {name}")


def _parse_command_line(command_line: str) -> tuple[str, dict[str, Any]]:
    """Split ``command {json}`` into a lower-cased command and its arguments.

    Raises:
        ValueError: If the arguments are not a JSON object.
    """
    command, _, raw_args = command_line.partition(" ")
    raw_args = raw_args.strip()
    try:
        args = json.loads(raw_args) if raw_args else {}
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON arguments: {e.msg}") from e
    if not isinstance(args, dict):
        raise ValueError("Arguments must be a JSON object")
    return command.lower(), args


async def _run_cli_interactive(cli_handler: CLICommandHandler) -> None:
    """Read ``command {json}`` lines until ``exit`` or end of input.

    Each result is printed as indented JSON. Bad input and failed commands
    print an error object and the loop keeps going.
    """
    logger = logging.getLogger(__name__)
    logger.info("Loanbook CLI ready; 'help' lists commands, 'exit' quits")

    loop = asyncio.get_running_loop()

    while True:
        try:
            line = (await loop.run_in_executor(None, input, "loanbook> ")).strip()
        except EOFError:
            logger.info("End of input, leaving CLI")
            return
        except KeyboardInterrupt:
            logger.info("Interrupted; type 'exit' to quit")
            continue

        if not line:
            continue
        if line.lower() == "exit":
            logger.info("Leaving CLI")
            return
        if line.lower() == "help":
            _print_cli_help()
            continue

        try:
            command, args = _parse_command_line(line)
            result = await _execute_cli_command(cli_handler, command, args)
        except Exception as e:
            logger.error(f"Command {line!r} failed: {e}", exc_info=True)
            result = {"status": "error", "message": str(e)}
        print(json.dumps(result, indent=2, default=str))


async def _execute_cli_command(
    cli_handler: CLICommandHandler,
    command: str,
    args: dict[str, Any],
) -> dict[str, Any]:
    """Execute a CLI command.

    Args:
        cli_handler: CLICommandHandler instance.
        command: Command name.
        args: Command arguments.

    Returns:
        Command result dictionary.

    Raises:
        ValueError: If the command is not recognized or a parameter is missing.
    """
    if command == "add":
        _require(args, "name", "quantity")
        return await cli_handler.add_item(args["name"], args["quantity"])

    elif command == "reduce":
        _require(args, "item_id", "quantity")
        return await cli_handler.reduce_item(args["item_id"], args["quantity"])

    elif command == "delete":
        _require(args, "item_id")
        return await cli_handler.delete_item(args["item_id"])

    elif command == "get":
        _require(args, "item_id")
        return await cli_handler.get_item(args["item_id"])

    elif command == "search":
        return await cli_handler.search_items(
            args.get("keyword", ""),
            output_format=args.get("format", "json"),
        )

    elif command == "list":
        return await cli_handler.list_items(output_format=args.get("format", "json"))

    elif command == "borrow":
        _require(args, "actor_id", "item_id", "quantity")
        return await cli_handler.borrow(args["actor_id"], args["item_id"], args["quantity"])

    elif command == "return":
        _require(args, "actor_id", "item_id", "quantity")
        return await cli_handler.return_items(
            args["actor_id"], args["item_id"], args["quantity"]
        )

    elif command == "history":
        return await cli_handler.list_transactions(
            mode=args.get("mode", "all"),
            actor_id=args.get("actor_id"),
            output_format=args.get("format", "json"),
        )

    else:
        raise ValueError(f"Unknown command: {command}. Use 'help' for available commands.")


def _print_cli_help() -> None:
    """Print CLI help message."""
    help_text = """
Available Commands (JSON format):

  add
    Add stock by name. An existing name (any case) is increased instead.
    Required: name, quantity

    Example: add {"name": "Ball", "quantity": 5}

  reduce
    Remove stock from an item. Cannot cut below what is lent out.
    Required: item_id, quantity

    Example: reduce {"item_id": 1001, "quantity": 2}

  delete
    Delete an item with nothing lent out.
    Required: item_id

  get
    Show one item.
    Required: item_id

    Example: get {"item_id": 1001}

  search
    Find items whose name contains a keyword.
    Optional: keyword, format (json|text)

    Example: search {"keyword": "ball", "format": "text"}

  list
    List all items.
    Optional: format (json|text)

  borrow
    Lend units of an item.
    Required: actor_id, item_id, quantity

    Example: borrow {"actor_id": "s6401", "item_id": 1001, "quantity": 2}

  return
    Take back units of an item. Newest loans are closed first.
    Required: actor_id, item_id, quantity

  history
    Show loan transactions.
    Optional: mode (all|open|actor), actor_id, format (json|text)

    Example: history {"mode": "actor", "actor_id": "s6401"}

  help
    Show this help message.

  exit
    Exit the CLI.

Note: All commands accept arguments as a single JSON object.
Provide the JSON after the command name on the same line.
    """
    print(help_text)


LOG_FORMATS = {
    "text": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    "json": '{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}',
}


def configure_logging(log_level: str, log_format: str) -> None:
    """Send log records to stdout at ``log_level`` in the chosen format."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=LOG_FORMATS.get(log_format, LOG_FORMATS["text"]),
        handlers=[logging.StreamHandler(sys.stdout)],
    )


async def bootstrap() -> None:
    """Load configuration, wire adapters, and start the application.

    Steps:
    1. Load configuration from environment
    2. Configure logging
    3. Initialize the loan service
    4. Start the interactive CLI
    """
    settings = load_settings()

    configure_logging("DEBUG" if settings.debug else settings.log_level, settings.log_format)
    logger = logging.getLogger(__name__)
    logger.info("Loading Loanbook...")

    service = build_service(settings)
    logger.info(
        "Loan service ready",
        extra={
            "forbid_concurrent_loans": settings.forbid_concurrent_loans,
            "cap_over_returns": settings.cap_over_returns,
        },
    )

    logger.info(f"Starting in {settings.run_mode} mode...")
    await _run_cli_interactive(CLICommandHandler(service))


def main() -> None:
    """Application entry point.

    Exit codes:
        0: Successful shutdown
        1: Fatal bootstrap or runtime error
        130: Interrupted by user (SIGINT/KeyboardInterrupt)
    """
    logger = logging.getLogger(__name__)
    try:
        asyncio.run(bootstrap())
    except KeyboardInterrupt:
        logger.warning("Shutdown requested by user (SIGINT)")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
