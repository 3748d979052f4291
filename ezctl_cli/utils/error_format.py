"""One-line error messages for the console and the log.

Some exceptions stringify to nothing (bare TimeoutError, KeyboardInterrupt)
and OSErrors carry an ``[Errno N]`` prefix and quoted path; both are turned
into something an operator can read.
"""

from __future__ import annotations

import subprocess

from rich.markup import escape as _escape_markup

FRIENDLY_MESSAGES: dict[type, str] = {
    TimeoutError: "Operation timed out.",
    subprocess.TimeoutExpired: "External command timed out.",
    PermissionError: "Permission denied.",
    KeyboardInterrupt: "Operation interrupted by user.",
}


def format_error_message(e: BaseException, *, include_type: bool = True) -> str:
    """Format an exception as a non-empty single line.

    >>> format_error_message(PermissionError(13, "Permission denied", "/usr/bin/kubectl"))
    'PermissionError: Permission denied: /usr/bin/kubectl'
    """
    if isinstance(e, OSError) and e.strerror:
        message = f"{e.strerror}: {e.filename}" if e.filename else e.strerror
    else:
        message = str(e) or next(
            (text for exc_type, text in FRIENDLY_MESSAGES.items() if isinstance(e, exc_type)),
            "(no additional details)",
        )
    if include_type:
        return f"{type(e).__name__}: {message}"
    return message


def escape_markup(value: object) -> str:
    """Escape a value for safe interpolation into Rich markup strings."""
    return _escape_markup(str(value))
