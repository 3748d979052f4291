"""Snapshot I/O between the live workspace and stored contexts.

``save`` captures live -> store and ``install`` projects store -> live. Both
are directional whole-file overwrites of the inventory, the credentials and
every component's ``defaults/`` directory. With ``prune_snapshots`` on (the
default) the set of components and each ``defaults/`` directory on the
destination are mirrored exactly; with it off, files that only exist on the
destination are left in place.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path

from .context_store import ContextStore
from .context_store import validate_profile_name
from .paths import CREDENTIALS_FILENAME
from .paths import DEFAULTS_DIRNAME
from .paths import INVENTORY_FILENAME
from .paths import component_names
from .utils.fileops import copy_file
from .utils.fileops import sync_dir

logger = logging.getLogger(__name__)


def capture(store: ContextStore, dest: Path, *, prune: bool) -> None:
    """Copy the live workspace into a snapshot directory laid out like a context."""
    paths = store.paths
    live = component_names(paths.live_components)
    for component in live:
        sync_dir(
            paths.live_component_defaults(component),
            dest / paths.component_root / component / DEFAULTS_DIRNAME,
            prune=prune,
        )
    if prune:
        for component in set(component_names(dest / paths.component_root)) - set(live):
            logger.debug(f"Dropping component '{component}' from snapshot {dest}")
            shutil.rmtree(dest / paths.component_root / component)
    if paths.inventory.is_file():
        copy_file(paths.inventory, dest / INVENTORY_FILENAME)
    if paths.credentials.is_file():
        copy_file(paths.credentials, dest / CREDENTIALS_FILENAME)


def project(store: ContextStore, src: Path, *, prune: bool) -> None:
    """Copy a snapshot directory over the live workspace.

    When pruning, live components the snapshot does not have lose their
    ``defaults/`` directory; the rest of the role is left alone.
    """
    paths = store.paths
    stored = component_names(src / paths.component_root)
    for component in stored:
        sync_dir(
            src / paths.component_root / component / DEFAULTS_DIRNAME,
            paths.live_component_defaults(component),
            prune=prune,
        )
    if prune:
        for component in set(component_names(paths.live_components)) - set(stored):
            logger.debug(f"Removing live defaults of '{component}', absent from {src}")
            shutil.rmtree(paths.live_component_defaults(component))
    if (src / INVENTORY_FILENAME).is_file():
        copy_file(src / INVENTORY_FILENAME, paths.inventory)
    if (src / CREDENTIALS_FILENAME).is_file():
        copy_file(src / CREDENTIALS_FILENAME, paths.credentials)


def save(store: ContextStore, name: str) -> bool:
    """Persist the live workspace into context ``name``.

    Callers run this after every cluster mutation, so a store without a
    pointer file is a warning rather than an error.

    Returns:
        True if the snapshot was written, False if skipped
    """
    if not store.paths.pointer_file.exists():
        logger.warning(f"Skipping save of '{name}': no current context pointer at {store.paths.pointer_file}")
        return False
    validate_profile_name(name)
    capture(store, store.paths.profile_dir(name), prune=store.prune_snapshots)
    logger.info(f"Saved live workspace into context '{name}'")
    return True


def save_current(store: ContextStore) -> str | None:
    """Save the live workspace into whichever context is current.

    Returns:
        The context saved into, or None if no context is current
    """
    current = store.read_current()
    if current is None:
        logger.warning("No current context; live workspace not saved")
        return None
    with store.lock():
        save(store, current)
    return current


def install(store: ContextStore, name: str) -> None:
    """Project context ``name`` onto the live workspace.

    Raises:
        ProfileNotFoundError: If ``name`` has no stored snapshot
    """
    profile = store.require_profile(name)
    project(store, profile.path, prune=store.prune_snapshots)
    logger.info(f"Installed context '{name}' into live workspace")


def clear_live(store: ContextStore) -> None:
    """Remove the live inventory and credentials.

    Component defaults stay; the next ``install`` overwrites them.
    """
    store.paths.inventory.unlink(missing_ok=True)
    store.paths.credentials.unlink(missing_ok=True)


def stage_live(store: ContextStore) -> Path:
    """Copy the live workspace into a hidden staging directory inside the store."""
    store.root.mkdir(parents=True, exist_ok=True)
    staging = Path(tempfile.mkdtemp(prefix=".staging-", dir=store.root))
    capture(store, staging, prune=True)
    return staging


def restore_live(store: ContextStore, staging: Path) -> None:
    """Put the live workspace back exactly as ``stage_live`` found it."""
    clear_live(store)
    project(store, staging, prune=True)
    logger.info(f"Restored live workspace from {staging}")


def discard_staging(staging: Path) -> None:
    shutil.rmtree(staging, ignore_errors=True)


__all__ = [
    "capture",
    "clear_live",
    "discard_staging",
    "install",
    "project",
    "restore_live",
    "save",
    "save_current",
    "stage_live",
]
