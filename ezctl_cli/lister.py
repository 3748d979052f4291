"""Enumerate stored contexts and query each cluster's nodes."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .context_store import ContextStore
from .engine import ClusterEngine
from .engine import EngineResult

logger = logging.getLogger(__name__)


@dataclass
class ContextListing:
    name: str
    current: bool
    has_inventory: bool
    has_credentials: bool
    nodes: EngineResult | None = None


def list_contexts(store: ContextStore, engine: ClusterEngine | None = None) -> list[ContextListing]:
    """Describe every stored context.

    When ``engine`` is given, contexts with stored credentials get a node
    listing. A failing listing is recorded on that context only.
    """
    current = store.read_current()
    listings = []
    for name in store.list_names():
        credentials = store.paths.profile_credentials(name)
        listing = ContextListing(
            name=name,
            current=name == current,
            has_inventory=store.paths.profile_inventory(name).is_file(),
            has_credentials=credentials.is_file(),
        )
        if engine is not None and listing.has_credentials:
            listing.nodes = engine.list_nodes(credentials)
            if not listing.nodes.ok:
                logger.warning(f"Node listing failed for context '{name}': {listing.nodes.error}")
        listings.append(listing)
    return listings


__all__ = ["ContextListing", "list_contexts"]
