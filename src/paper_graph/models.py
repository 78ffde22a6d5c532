"""Core data models for the paper graph query layer.

All Pydantic models are defined here as the single source of truth.
Every other module imports from this file.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from paper_graph.query.nodes import QueryNode

AuthorId = str
PaperId = str


# ---------------------------------------------------------------------------
# Authors
# ---------------------------------------------------------------------------

class AuthorRef(BaseModel):
    id: AuthorId
    name: str


class AuthorNode(BaseModel):
    """An author as stored, with coauthor and paper ids in stored order."""

    id: AuthorId
    name: str
    coauthors: list[AuthorId] = []
    papers: list[PaperId] = []


class PaperRef(BaseModel):
    id: PaperId
    title: str


class AuthorProfile(BaseModel):
    id: AuthorId
    name: str
    coauthors: list[AuthorRef] = []
    papers: list[PaperRef] = []


# ---------------------------------------------------------------------------
# Papers
# ---------------------------------------------------------------------------

class PaperAuthor(BaseModel):
    id: AuthorId | None = None
    name: str


class Paper(BaseModel):
    id: PaperId
    title: str
    doi: str | None = None
    url: str | None = None
    download_links: list[str] = []
    abstract: str | None = None
    year: int | None = Field(default=None, ge=0)
    authors: list[PaperAuthor] = []
    citations: list[PaperId] = []
    cited_by: list[PaperId] = []


class PaperDetail(BaseModel):
    id: PaperId
    title: str
    doi: str | None = None
    url: str | None = None
    download_links: list[str] = []
    abstract: str | None = None
    year: int | None = None
    authors: list[PaperAuthor] = []
    citations: list[PaperRef] = []
    cited_by: list[PaperRef] = []


# ---------------------------------------------------------------------------
# Shortest coauthor path
# ---------------------------------------------------------------------------

class PathNode(BaseModel):
    id: AuthorId
    name: str
    coauthors: list[AuthorRef] = []


class PathResult(BaseModel):
    distance: int = Field(ge=0)
    path: list[PathNode]


class NotReachable(BaseModel):
    """No path within the hop cutoff; ``distance`` carries the cutoff."""

    distance: int


# ---------------------------------------------------------------------------
# Search output
# ---------------------------------------------------------------------------

class SearchResult(BaseModel):
    query: QueryNode | None = None
    total: int
    papers: list[Paper]


class SimilarPapers(BaseModel):
    citations: list[PaperId]
    papers: list[Paper]
