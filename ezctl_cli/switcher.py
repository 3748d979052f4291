"""Context switching (``ezctl checkout``).

A switch saves the outgoing context, clears the live workspace, installs the
incoming context (cloning 'default' if it is new) and moves the pointer.

The clear/install/pointer steps are transactional: the live workspace is
staged first and restored if anything fails, a context created during the
failed switch is removed again, and the pointer is only rewritten (atomically)
once the new context is fully installed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from . import snapshot
from .context_store import ContextStore
from .context_store import ProfileNotFound
from .context_store import validate_profile_name
from .errors import CheckoutError
from .utils.error_format import format_error_message

logger = logging.getLogger(__name__)


@dataclass
class CheckoutResult:
    """What a checkout did."""

    previous: str | None
    current: str
    changed: bool = True
    created: bool = False
    save_warning: str | None = None


def checkout(store: ContextStore, target: str) -> CheckoutResult:
    """Make ``target`` the current context.

    Raises:
        InvalidProfileNameError: If ``target`` is not a valid context name
        StoreLockedError: If another ezctl process holds the store
        CheckoutError: If the switch failed and the workspace was rolled back
    """
    validate_profile_name(target)

    # Already current: read the pointer and touch nothing else.
    if store.is_initialized() and store.read_current() == target:
        logger.info(f"Context '{target}' is already current")
        return CheckoutResult(previous=target, current=target, changed=False)

    with store.lock():
        store.ensure_initialized()
        current = store.require_current()
        if current == target:
            return CheckoutResult(previous=current, current=target, changed=False)

        save_warning = None
        try:
            snapshot.save(store, current)
        except OSError as exc:
            save_warning = f"Could not save context '{current}', its snapshot may be stale: {format_error_message(exc)}"
            logger.warning(save_warning)

        created = False
        staging = snapshot.stage_live(store)
        try:
            snapshot.clear_live(store)
            if isinstance(store.resolve_profile(target), ProfileNotFound):
                store.create_profile(target)
                created = True
            snapshot.install(store, target)
            store.set_current(target)
        except Exception as exc:
            logger.error(
                f"Checkout of '{target}' failed, restoring '{current}' from {staging}: {format_error_message(exc)}"
            )
            kept = None
            try:
                snapshot.restore_live(store, staging)
            except OSError as restore_exc:
                # The staging copy stays on disk for manual recovery.
                logger.error(f"Could not restore live workspace, kept {staging}: {format_error_message(restore_exc)}")
                kept = staging
            finally:
                if created:
                    store.remove_profile(target)
            if kept is None:
                snapshot.discard_staging(staging)
            raise CheckoutError(target, current, exc, staging=kept) from exc
        snapshot.discard_staging(staging)

    logger.info(f"Switched context '{current}' -> '{target}'")
    return CheckoutResult(previous=current, current=target, created=created, save_warning=save_warning)


__all__ = ["CheckoutResult", "checkout"]
