"""Path policy for the live workspace and the context store.

This module centralizes every path decision ezctl makes. The store, the
snapshot code, and the commands receive a ``StorePaths`` instead of building
paths themselves.

Layout, rooted at ``base_dir``::

    hosts                                         live inventory
    <component_root>/<component>/defaults/*       live component defaults
    .cluster/current_cluster                      pointer to the current context
    .cluster/<name>/hosts                         stored inventory
    .cluster/<name>/config                        stored credentials
    .cluster/<name>/<component_root>/<component>/defaults/*

The live credentials file lives outside ``base_dir`` (``~/.kube/config`` by default).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

STORE_DIRNAME = ".cluster"
POINTER_FILENAME = "current_cluster"
LOCK_FILENAME = ".lock"
INVENTORY_FILENAME = "hosts"
CREDENTIALS_FILENAME = "config"
DEFAULTS_DIRNAME = "defaults"


def default_credentials_path() -> Path:
    """Credentials file read by kubectl when no --kubeconfig is given."""
    return Path.home() / ".kube" / "config"


@dataclass(frozen=True)
class StorePaths:
    """All filesystem locations for one ezctl workspace."""

    base_dir: Path
    credentials: Path
    component_root: str = "roles"

    # ----- Live workspace -----

    @property
    def inventory(self) -> Path:
        return self.base_dir / INVENTORY_FILENAME

    @property
    def live_components(self) -> Path:
        return self.base_dir / self.component_root

    def live_component_defaults(self, component: str) -> Path:
        return self.live_components / component / DEFAULTS_DIRNAME

    # ----- Store -----

    @property
    def store_dir(self) -> Path:
        return self.base_dir / STORE_DIRNAME

    @property
    def pointer_file(self) -> Path:
        return self.store_dir / POINTER_FILENAME

    @property
    def lock_file(self) -> Path:
        return self.store_dir / LOCK_FILENAME

    def profile_dir(self, name: str) -> Path:
        return self.store_dir / name

    def profile_inventory(self, name: str) -> Path:
        return self.profile_dir(name) / INVENTORY_FILENAME

    def profile_credentials(self, name: str) -> Path:
        return self.profile_dir(name) / CREDENTIALS_FILENAME

    def profile_components(self, name: str) -> Path:
        return self.profile_dir(name) / self.component_root


def component_names(components_root: Path) -> list[str]:
    """Components under a root that own a ``defaults`` directory, sorted by name.

    Components are discovered, never hard-coded: anything with a
    ``<name>/defaults/`` directory takes part in snapshots.
    """
    if not components_root.is_dir():
        return []
    return sorted(
        entry.name for entry in components_root.iterdir() if entry.is_dir() and (entry / DEFAULTS_DIRNAME).is_dir()
    )


__all__ = [
    "CREDENTIALS_FILENAME",
    "DEFAULTS_DIRNAME",
    "INVENTORY_FILENAME",
    "POINTER_FILENAME",
    "STORE_DIRNAME",
    "StorePaths",
    "component_names",
    "default_credentials_path",
]
