"""Query engine: the public entry point over a document store."""

from __future__ import annotations

import asyncio
import logging
import random
import time
from typing import Awaitable, Callable, TypeVar

from paper_graph.config import AppConfig
from paper_graph.exceptions import (
    PaperNotFound,
    StoreInconsistency,
    StoreUnavailable,
)
from paper_graph.graph.path_finder import PathFinder
from paper_graph.models import (
    AuthorProfile,
    NotReachable,
    PaperDetail,
    PathResult,
    SearchResult,
    SimilarPapers,
)
from paper_graph.query.compiler import compile_query
from paper_graph.query.nodes import And, QueryNode, render
from paper_graph.store.base import DocumentStore, validate_fields

logger = logging.getLogger(__name__)

T = TypeVar("T")

TITLE_FIELD = "title"
AUTHOR_FIELD = "authors.name"


class QueryEngine:
    """Coordinate searches, lookups and coauthor paths over one store.

    Store failures are retried here (never inside the path finder) with
    exponential backoff, except StoreInconsistency, which would only repeat.
    Malformed queries fail before any store call.
    """

    def __init__(
        self,
        store: DocumentStore,
        hop_cutoff: int = 50,
        max_results: int = 200,
        store_retries: int = 2,
        retry_backoff_s: float = 0.5,
    ) -> None:
        self._store = store
        self._path_finder = PathFinder(store, cutoff=hop_cutoff)
        self._max_results = max_results
        self._store_retries = store_retries
        self._retry_backoff_s = retry_backoff_s

    @classmethod
    def from_config(cls, config: AppConfig) -> QueryEngine:
        from paper_graph.store.factory import create_store

        return cls(
            store=create_store(config.store),
            hop_cutoff=config.path_hop_cutoff,
            max_results=config.search_max_results,
            store_retries=config.store_retries,
            retry_backoff_s=config.store_retry_backoff_s,
        )

    @property
    def store(self) -> DocumentStore:
        return self._store

    async def __aenter__(self) -> QueryEngine:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self._store.close()

    async def _with_retries(self, label: str, call: Callable[[], Awaitable[T]]) -> T:
        for attempt in range(self._store_retries + 1):
            try:
                return await call()
            except StoreInconsistency:
                raise
            except StoreUnavailable as exc:
                if attempt >= self._store_retries:
                    raise
                backoff = self._retry_backoff_s * (2**attempt + random.uniform(0, 1))
                logger.warning(
                    "%s failed (attempt %d/%d), retrying in %.2fs: %s",
                    label,
                    attempt + 1,
                    self._store_retries + 1,
                    backoff,
                    exc,
                )
                await asyncio.sleep(backoff)
        raise AssertionError("unreachable")  # pragma: no cover

    # ------------------------------------------------------------------
    # Coauthor paths
    # ------------------------------------------------------------------

    async def shortest_path(
        self, from_name: str, to_name: str
    ) -> PathResult | NotReachable:
        return await self._with_retries(
            "shortest_path",
            lambda: self._path_finder.find_shortest_path(from_name, to_name),
        )

    # ------------------------------------------------------------------
    # Paper search
    # ------------------------------------------------------------------

    def build_query(
        self, title: str | None = None, author: str | None = None
    ) -> QueryNode | None:
        """Compile the per-field queries and join them with an implicit AND."""
        parts: list[QueryNode] = []
        if title and title.strip():
            parts.append(compile_query(title, TITLE_FIELD))
        if author and author.strip():
            parts.append(compile_query(author, AUTHOR_FIELD))
        if not parts:
            return None
        if len(parts) == 1:
            return parts[0]
        return And(children=parts)

    async def filter_papers(
        self,
        title: str | None = None,
        author: str | None = None,
        max_results: int | None = None,
    ) -> SearchResult:
        query = self.build_query(title, author)
        if query is not None:
            validate_fields(query)
        limit = self._max_results
        if max_results is not None:
            limit = max(1, min(max_results, self._max_results))

        t0 = time.perf_counter()
        papers = await self._with_retries(
            "search_papers", lambda: self._store.search_papers(query, limit)
        )
        logger.info(
            "Search %s returned %d papers in %.3fs",
            render(query) if query is not None else "(all)",
            len(papers),
            time.perf_counter() - t0,
        )
        return SearchResult(query=query, total=len(papers), papers=papers)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def get_author(self, author_id: str) -> AuthorProfile | None:
        return await self._with_retries(
            "get_author", lambda: self._store.get_author(author_id)
        )

    async def get_paper(self, paper_id: str) -> PaperDetail | None:
        return await self._with_retries(
            "get_paper", lambda: self._store.get_paper(paper_id)
        )

    async def similar_papers(self, title: str) -> SimilarPapers:
        """Papers that cite at least one of the papers cited by ``title``."""
        matches = await self._with_retries(
            "find_papers_by_title", lambda: self._store.find_papers_by_title(title)
        )
        if not matches:
            raise PaperNotFound(title)

        citations = matches[0].citations
        cited = await self._with_retries(
            "get_papers", lambda: self._store.get_papers(citations)
        )
        candidate_ids: list[str] = []
        for cited_paper in cited:
            for citing_id in cited_paper.cited_by:
                if citing_id not in candidate_ids:
                    candidate_ids.append(citing_id)

        candidates = await self._with_retries(
            "get_papers", lambda: self._store.get_papers(candidate_ids)
        )
        return SimilarPapers(
            citations=[p.id for p in cited],
            papers=[p for p in candidates if p.title != title],
        )
