"""Shortest coauthorship path between two authors.

Breadth-first search over a coauthor graph that is never loaded as a whole:
each dequeued author's coauthor ids are fetched from the document store when
that author is expanded. One fetch is awaited at a time, so the frontier
stays in FIFO order and the result does not depend on store timing.

All traversal state (frontier, visited set, parent map) lives inside a single
``find_shortest_path`` call; a PathFinder can serve concurrent searches.

The coauthor relation is assumed symmetric and is not checked. On asymmetric
data, distance(a, b) and distance(b, a) may differ.
"""

from __future__ import annotations

import logging
import time
from collections import deque

from paper_graph.exceptions import AuthorNotFound, StoreInconsistency
from paper_graph.models import AuthorId, AuthorNode, NotReachable, PathResult
from paper_graph.store.base import DocumentStore

logger = logging.getLogger(__name__)

DEFAULT_HOP_CUTOFF = 50


class PathFinder:
    """Find minimum-hop coauthor paths using the store as a neighbour oracle."""

    def __init__(self, store: DocumentStore, cutoff: int = DEFAULT_HOP_CUTOFF) -> None:
        if cutoff < 1:
            raise ValueError(f"cutoff must be >= 1, got {cutoff}")
        self._store = store
        self._cutoff = cutoff

    @property
    def cutoff(self) -> int:
        return self._cutoff

    async def find_shortest_path(
        self, source_name: str, dest_name: str
    ) -> PathResult | NotReachable:
        """Return the shortest path from ``source_name`` to ``dest_name``.

        Raises AuthorNotFound if either name has no match (the destination is
        resolved first), StoreUnavailable if the store fails mid-search and
        StoreInconsistency if path authors vanish before reconstruction.
        """
        t0 = time.perf_counter()
        logger.info("Finding coauthor path '%s' -> '%s'", source_name, dest_name)

        # Destination first: with both names unknown, the destination is reported
        dest = await self._resolve(dest_name)
        source = await self._resolve(source_name)

        if source.id == dest.id:
            return await self._build_result(0, [source.id])

        parent: dict[AuthorId, AuthorId | None] = {source.id: None}

        if dest.id in source.coauthors:
            parent[dest.id] = source.id
            return await self._build_result(1, _trace(parent, dest.id))

        frontier: deque[tuple[AuthorId, int]] = deque()
        visited: set[AuthorId] = {source.id}
        for coauthor_id in source.coauthors:
            if coauthor_id in visited:
                continue
            visited.add(coauthor_id)
            parent[coauthor_id] = source.id
            frontier.append((coauthor_id, 1))

        fetches = 0
        while frontier:
            author_id, level = frontier.popleft()
            if level + 1 > self._cutoff:
                break

            author = await self._store.find_author_by_id(author_id)
            fetches += 1
            if author is None:
                logger.warning("Coauthor id %s has no author record; skipping", author_id)
                continue

            for neighbour_id in author.coauthors:
                if neighbour_id == dest.id:
                    parent[neighbour_id] = author_id
                    logger.info(
                        "Path found: distance %d, %d fetches, %.3fs",
                        level + 1,
                        fetches,
                        time.perf_counter() - t0,
                    )
                    return await self._build_result(level + 1, _trace(parent, dest.id))
                if neighbour_id not in visited:
                    visited.add(neighbour_id)
                    parent[neighbour_id] = author_id
                    frontier.append((neighbour_id, level + 1))

        logger.info(
            "No path within %d hops from '%s' to '%s' (%d fetches, %.3fs)",
            self._cutoff,
            source_name,
            dest_name,
            fetches,
            time.perf_counter() - t0,
        )
        return NotReachable(distance=self._cutoff)

    async def _resolve(self, name: str) -> AuthorNode:
        matches = await self._store.find_authors_by_name(name)
        if not matches:
            raise AuthorNotFound(name)
        if len(matches) > 1:
            logger.warning(
                "Author name '%s' is ambiguous (%d matches); using the first (id %s)",
                name,
                len(matches),
                matches[0].id,
            )
        return matches[0]

    async def _build_result(self, distance: int, path_ids: list[AuthorId]) -> PathResult:
        nodes = {n.id: n for n in await self._store.get_path_nodes(path_ids)}
        missing = [aid for aid in path_ids if aid not in nodes]
        if missing:
            raise StoreInconsistency(
                f"path authors missing from store: {', '.join(missing)}"
            )
        return PathResult(distance=distance, path=[nodes[aid] for aid in path_ids])


def _trace(parent: dict[AuthorId, AuthorId | None], dest_id: AuthorId) -> list[AuthorId]:
    path = [dest_id]
    current = parent[dest_id]
    while current is not None:
        path.append(current)
        current = parent[current]
    path.reverse()
    return path
