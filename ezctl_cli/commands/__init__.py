"""CLI commands for ezctl."""

__all__ = [
    "cluster",
    "context",
]
