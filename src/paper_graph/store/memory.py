"""Dict-backed document store for fixture graphs and offline use."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

from pydantic import ValidationError

from paper_graph.exceptions import StoreUnavailable
from paper_graph.models import (
    AuthorNode,
    AuthorProfile,
    AuthorRef,
    Paper,
    PaperDetail,
    PaperRef,
    PathNode,
)
from paper_graph.query.nodes import And, QueryNode, Term, operands
from paper_graph.store.base import DocumentStore, validate_fields

logger = logging.getLogger(__name__)


class InMemoryStore(DocumentStore):
    """In-memory store. ``cited_by`` is derived from the stored citations."""

    def __init__(self) -> None:
        self._authors: dict[str, AuthorNode] = {}
        self._papers: dict[str, Paper] = {}
        self._cited_by: dict[str, list[str]] = {}
        self.fetch_count = 0

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def add_author(self, author: AuthorNode) -> None:
        self._authors[author.id] = author.model_copy(deep=True)

    def add_paper(self, paper: Paper) -> None:
        previous = self._papers.get(paper.id)
        if previous is not None:
            for cited in previous.citations:
                citing = self._cited_by.get(cited, [])
                if paper.id in citing:
                    citing.remove(paper.id)
        self._papers[paper.id] = paper.model_copy(deep=True)
        for cited in paper.citations:
            citing = self._cited_by.setdefault(cited, [])
            if paper.id not in citing:
                citing.append(paper.id)

    @classmethod
    def from_records(
        cls,
        authors: Iterable[AuthorNode] = (),
        papers: Iterable[Paper] = (),
    ) -> InMemoryStore:
        store = cls()
        for author in authors:
            store.add_author(author)
        for paper in papers:
            store.add_paper(paper)
        return store

    @classmethod
    def from_coauthor_edges(cls, edges: Iterable[tuple[str, str]]) -> InMemoryStore:
        """Build a symmetric coauthor graph where each author's id is its name."""
        adjacency: dict[str, list[str]] = {}
        for a, b in edges:
            adjacency.setdefault(a, [])
            adjacency.setdefault(b, [])
            if b not in adjacency[a]:
                adjacency[a].append(b)
            if a not in adjacency[b]:
                adjacency[b].append(a)
        return cls.from_records(
            AuthorNode(id=name, name=name, coauthors=coauthors)
            for name, coauthors in adjacency.items()
        )

    @classmethod
    def from_json_file(cls, path: str | Path) -> InMemoryStore:
        """Load a ``{"authors": [...], "papers": [...]}`` dump."""
        try:
            data: dict[str, Any] = json.loads(Path(path).read_text(encoding="utf-8"))
            authors = [AuthorNode.model_validate(a) for a in data.get("authors", [])]
            papers = [Paper.model_validate(p) for p in data.get("papers", [])]
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            raise StoreUnavailable(f"cannot load {path}: {exc}") from exc
        logger.info(
            "Loaded %d authors and %d papers from %s", len(authors), len(papers), path
        )
        return cls.from_records(authors, papers)

    # ------------------------------------------------------------------
    # Authors
    # ------------------------------------------------------------------

    async def find_authors_by_name(self, name: str) -> list[AuthorNode]:
        return [
            a.model_copy(deep=True) for a in self._authors.values() if a.name == name
        ]

    async def find_author_by_id(self, author_id: str) -> AuthorNode | None:
        self.fetch_count += 1
        author = self._authors.get(author_id)
        if author is None:
            return None
        return AuthorNode(id=author.id, name=author.name, coauthors=list(author.coauthors))

    async def get_path_nodes(self, author_ids: list[str]) -> list[PathNode]:
        nodes = []
        for author_id in dict.fromkeys(author_ids):
            author = self._authors.get(author_id)
            if author is None:
                continue
            nodes.append(
                PathNode(
                    id=author.id,
                    name=author.name,
                    coauthors=self._author_refs(author.coauthors),
                )
            )
        return nodes

    async def get_author(self, author_id: str) -> AuthorProfile | None:
        author = self._authors.get(author_id)
        if author is None:
            return None
        return AuthorProfile(
            id=author.id,
            name=author.name,
            coauthors=self._author_refs(author.coauthors),
            papers=self._paper_refs(author.papers),
        )

    async def list_author_names(self) -> list[str]:
        return [a.name for a in self._authors.values()]

    # ------------------------------------------------------------------
    # Papers
    # ------------------------------------------------------------------

    async def search_papers(
        self, query: QueryNode | None, max_results: int
    ) -> list[Paper]:
        if query is not None:
            validate_fields(query)
        results: list[Paper] = []
        for paper in self._papers.values():
            if len(results) >= max_results:
                break
            if query is None or _matches(query, paper):
                results.append(self._materialize(paper))
        return results

    async def get_paper(self, paper_id: str) -> PaperDetail | None:
        paper = self._papers.get(paper_id)
        if paper is None:
            return None
        data = paper.model_dump(exclude={"citations", "cited_by"})
        return PaperDetail(
            **data,
            citations=self._paper_refs(paper.citations),
            cited_by=self._paper_refs(self._cited_by.get(paper.id, [])),
        )

    async def find_papers_by_title(self, title: str) -> list[Paper]:
        return [self._materialize(p) for p in self._papers.values() if p.title == title]

    async def get_papers(self, paper_ids: list[str]) -> list[Paper]:
        return [
            self._materialize(self._papers[pid])
            for pid in dict.fromkeys(paper_ids)
            if pid in self._papers
        ]

    async def list_citing_paper_titles(self) -> list[str]:
        return [p.title for p in self._papers.values() if p.citations]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _materialize(self, paper: Paper) -> Paper:
        return paper.model_copy(
            update={"cited_by": list(self._cited_by.get(paper.id, []))}, deep=True
        )

    def _author_refs(self, author_ids: list[str]) -> list[AuthorRef]:
        return [
            AuthorRef(id=aid, name=self._authors[aid].name)
            for aid in author_ids
            if aid in self._authors
        ]

    def _paper_refs(self, paper_ids: list[str]) -> list[PaperRef]:
        return [
            PaperRef(id=pid, title=self._papers[pid].title)
            for pid in paper_ids
            if pid in self._papers
        ]


def _field_values(paper: Paper, field: str) -> list[str]:
    match field:
        case "title":
            return [paper.title]
        case "abstract":
            return [paper.abstract] if paper.abstract is not None else []
        case "doi":
            return [paper.doi] if paper.doi is not None else []
        case "year":
            return [str(paper.year)] if paper.year is not None else []
        case "authors.name":
            return [a.name for a in paper.authors]
        case _:
            return []


def _matches(node: QueryNode, paper: Paper) -> bool:
    if isinstance(node, Term):
        values = _field_values(paper, node.field)
        if node.fuzzy:
            needle = node.value.casefold()
            return any(needle in v.casefold() for v in values)
        return node.value in values
    if isinstance(node, And):
        return all(_matches(child, paper) for child in operands(node))
    return any(_matches(child, paper) for child in operands(node))
