"""Ansible INI inventory edits for node membership changes.

Only the host lines under a group header are touched; everything else in the
file (comments, vars sections, ordering) is preserved byte for byte.
"""

from __future__ import annotations

import ipaddress
import logging
from pathlib import Path

from .errors import InventoryError

logger = logging.getLogger(__name__)

# CLI role -> inventory group
ROLE_GROUPS = {
    "node": "kube_node",
    "master": "kube_master",
    "etcd": "etcd",
}


def validate_address(value: str) -> str:
    """Return the normalized IP address or raise ``InventoryError``."""
    try:
        return str(ipaddress.ip_address(value.strip()))
    except ValueError as exc:
        raise InventoryError(f"Invalid IP address: {value!r}") from exc


def _is_header(line: str) -> bool:
    stripped = line.strip()
    return stripped.startswith("[") and stripped.endswith("]")


def _host_of(line: str) -> str | None:
    stripped = line.strip()
    if not stripped or stripped.startswith(("#", ";")) or _is_header(stripped):
        return None
    return stripped.split()[0]


class Inventory:
    """Read/modify one inventory file."""

    def __init__(self, path: Path):
        self.path = path

    def read(self) -> str:
        if not self.path.is_file():
            raise InventoryError(f"Inventory not found: {self.path}")
        return self.path.read_text(encoding="utf-8")

    def write(self, content: str) -> None:
        self.path.write_text(content, encoding="utf-8")

    def _group_span(self, lines: list[str], group: str) -> tuple[int, int]:
        """Index of the group header and the index where the group ends."""
        header = f"[{group}]"
        for index, line in enumerate(lines):
            if line.strip() == header:
                end = index + 1
                while end < len(lines) and not _is_header(lines[end]):
                    end += 1
                return index, end
        raise InventoryError(f"Group [{group}] not found in {self.path}")

    def hosts(self, group: str) -> list[str]:
        lines = self.read().splitlines(keepends=True)
        start, end = self._group_span(lines, group)
        return [host for host in (_host_of(line) for line in lines[start + 1 : end]) if host]

    def add_host(self, group: str, address: str, host_vars: str = "") -> None:
        """Insert ``address`` as the first host line of ``group``.

        Raises:
            InventoryError: If the group is missing or the host is already in it
        """
        lines = self.read().splitlines(keepends=True)
        start, end = self._group_span(lines, group)
        if any(_host_of(line) == address for line in lines[start + 1 : end]):
            raise InventoryError(f"{address} is already in [{group}]")
        if lines and not lines[start].endswith("\n"):
            lines[start] += "\n"
        entry = f"{address} {host_vars}".rstrip() + "\n"
        lines.insert(start + 1, entry)
        self.write("".join(lines))
        logger.info(f"Added {address} to [{group}] in {self.path}")

    def remove_host(self, group: str, address: str) -> bool:
        """Remove ``address`` from ``group``. Returns False if it was not there."""
        lines = self.read().splitlines(keepends=True)
        start, end = self._group_span(lines, group)
        kept = lines[: start + 1] + [line for line in lines[start + 1 : end] if _host_of(line) != address]
        if len(kept) == end:
            return False
        self.write("".join(kept + lines[end:]))
        logger.info(f"Removed {address} from [{group}] in {self.path}")
        return True


__all__ = ["ROLE_GROUPS", "Inventory", "validate_address"]
