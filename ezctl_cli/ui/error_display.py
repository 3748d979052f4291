"""Rendering of operator-facing errors."""

from __future__ import annotations

import logging
import sys
from typing import NoReturn

from ..console import console
from ..engine import EngineResult
from ..utils.error_format import escape_markup
from ..utils.error_format import format_error_message

logger = logging.getLogger(__name__)


def display_error(exc: BaseException) -> None:
    """Print an error line for ``exc`` and log it."""
    message = format_error_message(exc, include_type=False)
    console.print(f"[red]Error:[/red] {escape_markup(message)}")
    logger.error(message, extra={"error_type": type(exc).__name__})


def exit_with_error(exc: BaseException, code: int = 1) -> NoReturn:
    display_error(exc)
    sys.exit(code)


def display_engine_failure(action: str, result: EngineResult) -> None:
    detail = result.error or "unknown error"
    console.print(f"[red]✗ {escape_markup(action)} failed:[/red] {escape_markup(detail)}")


def warn(message: str) -> None:
    console.print(f"[yellow]Warning:[/yellow] {escape_markup(message)}")


__all__ = ["display_engine_failure", "display_error", "exit_with_error", "warn"]
