"""
Token source registry.

Holds registered TokenSources by id and answers inheritance queries.
Cache invalidation is the resolver's concern; the registry has no side
effects beyond its own mapping.
"""

from __future__ import annotations

import logging

from .errors import CircularInheritanceError
from .ir.tokens import TokenSource

logger = logging.getLogger(__name__)

DEFAULT_MAX_INHERITANCE_DEPTH = 100


class SourceRegistry:
    """In-memory mapping of source id to TokenSource."""

    def __init__(self, max_inheritance_depth: int = DEFAULT_MAX_INHERITANCE_DEPTH) -> None:
        self.max_inheritance_depth = max_inheritance_depth
        self._sources: dict[str, TokenSource] = {}

    def __contains__(self, source_id: object) -> bool:
        return source_id in self._sources

    def __len__(self) -> int:
        return len(self._sources)

    def register(self, source: TokenSource) -> None:
        """Insert or replace a source by id."""
        if source.id in self._sources:
            logger.debug(f"Replacing token source {source.id}")
        self._sources[source.id] = source

    def unregister(self, source_id: str) -> TokenSource | None:
        """Remove a source; returns the removed source, if any."""
        return self._sources.pop(source_id, None)

    def get_source(self, source_id: str) -> TokenSource | None:
        return self._sources.get(source_id)

    def get_all_sources(self) -> list[TokenSource]:
        return list(self._sources.values())

    def children_of(self, source_id: str) -> list[str]:
        """Ids of sources that directly extend ``source_id``."""
        return [s.id for s in self._sources.values() if s.extends == source_id]

    def get_inheritance_chain(self, source_id: str) -> list[str]:
        """Walk ``extends`` pointers from ``source_id`` to its root.

        The chain starts with ``source_id`` and ends with the root. A parent
        id that is not registered ends the walk as the last element.

        Raises:
            CircularInheritanceError: If an id repeats, or the chain grows
                past ``max_inheritance_depth`` links even without a loop.
        """
        chain: list[str] = []
        seen: set[str] = set()
        current: str | None = source_id

        while current:
            if current in seen:
                raise CircularInheritanceError(source_id, chain + [current])
            chain.append(current)
            seen.add(current)
            if len(chain) > self.max_inheritance_depth:
                raise CircularInheritanceError(source_id, chain)
            source = self._sources.get(current)
            current = source.extends if source else None

        return chain

    def inherits_from(self, source_id: str, ancestor_id: str) -> bool:
        """True if ``ancestor_id`` appears anywhere in the chain of ``source_id``."""
        return ancestor_id in self.get_inheritance_chain(source_id)
