"""CLI adapter for Loanbook stock and loan commands."""

from .commands import CLICommandHandler

__all__ = ["CLICommandHandler"]
