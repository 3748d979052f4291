"""Cluster teardown (``ezctl destroy``).

Teardown removes the live cluster and the current context's credentials while
keeping its inventory and component defaults, so ``setup`` can rebuild it.
``purge`` also deletes the stored context and falls back to 'default'.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from . import snapshot
from .context_store import DEFAULT_PROFILE
from .context_store import ContextStore
from .engine import CLEAN_PLAYBOOK
from .engine import ClusterEngine
from .engine import EngineResult
from .errors import EzctlError

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]


@dataclass
class DestroyResult:
    profile: str
    confirmed: bool
    teardown: EngineResult | None = None
    purged: bool = False

    @property
    def ok(self) -> bool:
        """Confirmed and, if a teardown ran, it succeeded."""
        if not self.confirmed:
            return False
        return self.teardown is None or self.teardown.ok


def destroy(store: ContextStore, engine: ClusterEngine, confirm: Confirm, *, purge: bool = False) -> DestroyResult:
    """Tear down the current context's cluster.

    Args:
        store: Context store
        engine: Engine used for the teardown playbook
        confirm: Asks the operator; False (including a timeout) aborts
        purge: Also delete the stored context and switch back to 'default'

    Raises:
        NoCurrentProfileError: If no context is current
        EzctlError: If asked to purge the 'default' context
    """
    current = store.require_current()
    store.require_profile(current)
    if purge and current == DEFAULT_PROFILE:
        raise EzctlError(f"Refusing to purge the '{DEFAULT_PROFILE}' context")

    action = "destroy and purge" if purge else "destroy"
    if not confirm(f"Really {action} cluster context '{current}'?"):
        logger.info(f"Destroy of '{current}' aborted by operator")
        return DestroyResult(profile=current, confirmed=False)

    teardown = None
    if store.paths.inventory.is_file():
        teardown = engine.run(CLEAN_PLAYBOOK, store.paths.inventory)
        if not teardown.ok:
            # Local bookkeeping continues; the store must stay usable.
            logger.error(f"Teardown of '{current}' failed: {teardown.error}")
    else:
        logger.warning(f"No inventory at {store.paths.inventory}; skipping teardown of '{current}'")

    store.paths.profile_credentials(current).unlink(missing_ok=True)
    store.paths.credentials.unlink(missing_ok=True)

    if purge:
        with store.lock():
            store.remove_profile(current)
            snapshot.clear_live(store)
            store.set_current(DEFAULT_PROFILE)
            snapshot.install(store, DEFAULT_PROFILE)
        logger.info(f"Purged context '{current}', now on '{DEFAULT_PROFILE}'")

    return DestroyResult(profile=current, confirmed=True, teardown=teardown, purged=purge)


__all__ = ["Confirm", "DestroyResult", "destroy"]
