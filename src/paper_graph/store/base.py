"""Document store abstraction."""

from __future__ import annotations

from abc import ABC, abstractmethod

from paper_graph.exceptions import MalformedQuery
from paper_graph.models import (
    AuthorNode,
    AuthorProfile,
    Paper,
    PaperDetail,
    PathNode,
)
from paper_graph.query.nodes import QueryNode, iter_terms

SEARCHABLE_FIELDS = frozenset({"title", "abstract", "doi", "year", "authors.name"})


def validate_fields(query: QueryNode) -> None:
    """Raise MalformedQuery if any term targets an unsupported field."""
    for term in iter_terms(query):
        if term.field not in SEARCHABLE_FIELDS:
            raise MalformedQuery(
                f"unsupported field '{term.field}' "
                f"(expected one of: {', '.join(sorted(SEARCHABLE_FIELDS))})"
            )


class DocumentStore(ABC):
    """Abstract base class for author/paper document stores.

    Each store translates QueryNode trees into its native query form and
    wraps backend failures in StoreUnavailable.
    """

    @abstractmethod
    async def find_authors_by_name(self, name: str) -> list[AuthorNode]:
        """All authors whose name equals ``name``, in store order."""
        ...

    @abstractmethod
    async def find_author_by_id(self, author_id: str) -> AuthorNode | None:
        """Projected lookup: id, name and coauthor ids only."""
        ...

    @abstractmethod
    async def get_path_nodes(self, author_ids: list[str]) -> list[PathNode]:
        """Batch fetch of names and named coauthor lists, in any order."""
        ...

    @abstractmethod
    async def search_papers(
        self, query: QueryNode | None, max_results: int
    ) -> list[Paper]:
        """Papers matching ``query`` (all papers when None), at most ``max_results``."""
        ...

    @abstractmethod
    async def get_author(self, author_id: str) -> AuthorProfile | None:
        ...

    @abstractmethod
    async def get_paper(self, paper_id: str) -> PaperDetail | None:
        ...

    @abstractmethod
    async def find_papers_by_title(self, title: str) -> list[Paper]:
        ...

    @abstractmethod
    async def get_papers(self, paper_ids: list[str]) -> list[Paper]:
        ...

    @abstractmethod
    async def list_author_names(self) -> list[str]:
        ...

    @abstractmethod
    async def list_citing_paper_titles(self) -> list[str]:
        """Titles of papers that cite at least one other paper."""
        ...

    async def close(self) -> None:
        """Release backend resources. No-op by default."""
