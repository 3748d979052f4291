"""Terminal UI helpers for the ezctl CLI."""

from .error_display import display_error
from .error_display import exit_with_error
from .prompt import timed_confirm

__all__ = ["display_error", "exit_with_error", "timed_confirm"]
