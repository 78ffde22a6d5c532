"""paper-graph: coauthor paths and boolean paper search over an academic-paper store."""

from __future__ import annotations

from typing import TYPE_CHECKING

from paper_graph.exceptions import (
    AuthorNotFound,
    MalformedQuery,
    PaperGraphError,
    PaperNotFound,
    StoreInconsistency,
    StoreUnavailable,
)
from paper_graph.export import export_bibtex, export_json, export_markdown, export_path_markdown
from paper_graph.models import (
    NotReachable,
    Paper,
    PathNode,
    PathResult,
    SearchResult,
)
from paper_graph.query import compile_query

if TYPE_CHECKING:
    from paper_graph.config import AppConfig


async def find_shortest_path(
    source_name: str,
    dest_name: str,
    config: AppConfig | None = None,
) -> PathResult | NotReachable:
    """One-line convenience: shortest coauthor path using the configured store.

    Args:
        source_name: Name of the author the path starts from.
        dest_name: Name of the author the path ends at.
        config: Optional AppConfig. If None, loads from environment.
    """
    from paper_graph.config import load_config
    from paper_graph.engine import QueryEngine

    cfg = config or load_config()
    async with QueryEngine.from_config(cfg) as engine:
        return await engine.shortest_path(source_name, dest_name)


__all__ = [
    "AuthorNotFound",
    "MalformedQuery",
    "NotReachable",
    "Paper",
    "PaperGraphError",
    "PaperNotFound",
    "PathNode",
    "PathResult",
    "SearchResult",
    "StoreInconsistency",
    "StoreUnavailable",
    "compile_query",
    "export_bibtex",
    "export_json",
    "export_markdown",
    "export_path_markdown",
    "find_shortest_path",
]
