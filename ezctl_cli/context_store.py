"""Profile store: named cluster contexts persisted under ``<base>/.cluster``.

Contract:
- Inputs: a ``StorePaths`` describing the workspace
- Side Effects: creates and removes directories under ``.cluster/``
- Errors: InvalidProfileNameError, ProfileNotFoundError, NoCurrentProfileError,
  StoreLockedError
- Invariant: once initialized, ``current_cluster`` names exactly one existing context
"""

from __future__ import annotations

import contextlib
import errno
import fcntl
import logging
import re
import shutil
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from .errors import InvalidProfileNameError
from .errors import NoCurrentProfileError
from .errors import ProfileNotFoundError
from .errors import StoreLockedError
from .paths import DEFAULTS_DIRNAME
from .paths import POINTER_FILENAME
from .paths import StorePaths
from .paths import component_names
from .utils.fileops import atomic_write_text
from .utils.fileops import sync_dir

logger = logging.getLogger(__name__)

DEFAULT_PROFILE = "default"

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


def validate_profile_name(name: str) -> str:
    """Return ``name`` if it is usable as a context directory name."""
    if not name or not _NAME_PATTERN.match(name) or name == POINTER_FILENAME:
        raise InvalidProfileNameError(name)
    return name


@dataclass(frozen=True)
class ExistingProfile:
    """Lookup result for a context that has a stored snapshot."""

    name: str
    path: Path


@dataclass(frozen=True)
class ProfileNotFound:
    """Lookup result for a context with no stored snapshot."""

    name: str


ProfileLookup = ExistingProfile | ProfileNotFound


class ContextStore:
    """Handle on one workspace's context store.

    All operations take explicit names; the only ambient state is the pointer
    file, which callers read once per operation through ``read_current``.
    """

    def __init__(self, paths: StorePaths, *, prune_snapshots: bool = True):
        self.paths = paths
        self.prune_snapshots = prune_snapshots
        self._lock_depth = 0

    @property
    def root(self) -> Path:
        return self.paths.store_dir

    # ----- Lookup -----

    def is_initialized(self) -> bool:
        return self.paths.pointer_file.is_file()

    def exists(self, name: str) -> bool:
        if not name or not _NAME_PATTERN.match(name) or name == POINTER_FILENAME:
            return False
        return self.paths.profile_dir(name).is_dir()

    def list_names(self) -> list[str]:
        """Stored context names, sorted. The pointer file and hidden entries are skipped."""
        if not self.root.is_dir():
            return []
        return sorted(entry.name for entry in self.root.iterdir() if entry.is_dir() and not entry.name.startswith("."))

    def resolve_profile(self, name: str) -> ProfileLookup:
        """Look a context up without creating it."""
        validate_profile_name(name)
        path = self.paths.profile_dir(name)
        if path.is_dir():
            return ExistingProfile(name=name, path=path)
        return ProfileNotFound(name=name)

    def require_profile(self, name: str) -> ExistingProfile:
        lookup = self.resolve_profile(name)
        if isinstance(lookup, ProfileNotFound):
            raise ProfileNotFoundError(name)
        return lookup

    # ----- Pointer -----

    def read_current(self) -> str | None:
        """Name of the current context, or None if the pointer is missing or empty."""
        pointer = self.paths.pointer_file
        if not pointer.is_file():
            return None
        name = pointer.read_text(encoding="utf-8").strip()
        return name or None

    def require_current(self) -> str:
        current = self.read_current()
        if current is None:
            raise NoCurrentProfileError(self.paths.pointer_file)
        return current

    def set_current(self, name: str) -> None:
        """Point the store at ``name``. The context must already exist."""
        self.require_profile(name)
        atomic_write_text(self.paths.pointer_file, f"{name}\n")
        logger.info(f"Current context set to: {name}")

    # ----- Lifecycle -----

    def ensure_initialized(self) -> bool:
        """Create the store with a 'default' context on first use.

        The default context is seeded with the live component defaults so new
        contexts cloned from it start from the shipped settings. Inventory and
        credentials are never seeded.

        Returns:
            True if anything was created, False if the store was already set up
        """
        created = False
        default_dir = self.paths.profile_dir(DEFAULT_PROFILE)
        if not default_dir.is_dir():
            default_dir.mkdir(parents=True)
            for component in component_names(self.paths.live_components):
                sync_dir(
                    self.paths.live_component_defaults(component),
                    self.paths.profile_components(DEFAULT_PROFILE) / component / DEFAULTS_DIRNAME,
                )
            logger.info(f"Initialized context store at {self.root}")
            created = True

        current = self.read_current()
        if current is None or not self.paths.profile_dir(current).is_dir():
            if current is not None:
                logger.warning(f"Pointer names missing context '{current}', resetting to '{DEFAULT_PROFILE}'")
            self.set_current(DEFAULT_PROFILE)
            created = True

        return created

    def create_profile(self, name: str, template: str = DEFAULT_PROFILE) -> ExistingProfile:
        """Create ``name`` by cloning ``template``'s component defaults only.

        Inventory and credentials are left out on purpose: a new context needs
        its own inventory before it can be set up.
        """
        lookup = self.resolve_profile(name)
        if isinstance(lookup, ExistingProfile):
            return lookup
        source = self.require_profile(template)

        target_dir = self.paths.profile_dir(name)
        target_dir.mkdir(parents=True)
        template_components = self.paths.profile_components(source.name)
        if template_components.is_dir():
            sync_dir(template_components, self.paths.profile_components(name))
        logger.info(f"Created context '{name}' from '{template}'")
        return ExistingProfile(name=name, path=target_dir)

    def remove_profile(self, name: str) -> None:
        lookup = self.resolve_profile(name)
        if isinstance(lookup, ProfileNotFound):
            return
        shutil.rmtree(lookup.path)
        logger.info(f"Removed context '{name}'")

    # ----- Locking -----

    @contextlib.contextmanager
    def lock(self) -> Iterator[None]:
        """Hold an exclusive advisory lock on the store for the block.

        Re-entrant within one ``ContextStore``; a lock held by another process
        fails immediately with ``StoreLockedError``.
        """
        if self._lock_depth:
            self._lock_depth += 1
            try:
                yield
            finally:
                self._lock_depth -= 1
            return

        self.root.mkdir(parents=True, exist_ok=True)
        lock_file = self.paths.lock_file.open("a+", encoding="utf-8")
        try:
            try:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
            except OSError as exc:
                if exc.errno in (errno.EACCES, errno.EAGAIN):
                    raise StoreLockedError(self.paths.lock_file) from exc
                raise
            self._lock_depth = 1
            try:
                yield
            finally:
                self._lock_depth = 0
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
        finally:
            lock_file.close()


__all__ = [
    "DEFAULT_PROFILE",
    "ContextStore",
    "ExistingProfile",
    "ProfileLookup",
    "ProfileNotFound",
    "validate_profile_name",
]
