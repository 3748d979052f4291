"""Bounded-wait confirmation prompts for destructive commands."""

from __future__ import annotations

import logging
import select
import sys
from typing import TextIO

from ..console import console

logger = logging.getLogger(__name__)

AFFIRMATIVE = frozenset({"y", "yes"})


def read_line_with_timeout(timeout: float, stream: TextIO | None = None) -> str | None:
    """Read one line from ``stream``, or return None if nothing arrives in time.

    Streams without a selectable file descriptor (pipes wrapped in memory, test
    runners) are read directly.
    """
    stream = stream or sys.stdin
    try:
        readable, _, _ = select.select([stream], [], [], timeout)
    except (OSError, ValueError, TypeError):
        line = stream.readline()
        return line.strip() if line else None
    if not readable:
        return None
    line = stream.readline()
    if not line:
        return None
    return line.strip()


def timed_confirm(message: str, timeout: float) -> bool:
    """Ask a yes/no question; no answer within ``timeout`` seconds means no."""
    console.print(f"[bold yellow]{message}[/bold yellow] [dim](yes/no, {timeout:g}s)[/dim] ", end="")
    answer = read_line_with_timeout(timeout)
    if answer is None:
        console.print()
        console.print(f"[yellow]No answer within {timeout:g}s[/yellow]")
        logger.info(f"Confirmation timed out after {timeout}s: {message}")
        return False
    return answer.lower() in AFFIRMATIVE


__all__ = ["read_line_with_timeout", "timed_confirm"]
