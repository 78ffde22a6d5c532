"""MCP server for paper-graph.

Exposes coauthor paths, boolean paper search and entity lookups as MCP tools.
Requires the `mcp` optional dependency: pip install paper-graph[mcp]
"""

from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable

from paper_graph.config import load_config
from paper_graph.engine import QueryEngine
from paper_graph.exceptions import PaperGraphError
from paper_graph.export import export_bibtex, export_json, export_markdown
from paper_graph.models import NotReachable

logger = logging.getLogger(__name__)

_engine: QueryEngine | None = None


def _get_engine() -> QueryEngine:
    global _engine
    if _engine is None:
        _engine = QueryEngine.from_config(load_config())
    return _engine


async def _respond(label: str, call: Callable[[], Awaitable[Any]]) -> str:
    """Run a tool body, turning known failures into an error payload."""
    try:
        return await call()
    except PaperGraphError as e:
        return json.dumps({"error": str(e)})
    except Exception:
        logger.exception("Tool %s failed", label)
        return json.dumps({"error": "Unable to retrieve results."})


# ---------------------------------------------------------------------------
# MCP Tools
# ---------------------------------------------------------------------------

from mcp.server.fastmcp import FastMCP  # noqa: E402

mcp = FastMCP(
    "paper-graph",
    instructions=(
        "Academic paper database tools.\n"
        "\n"
        "- shortest_path(author_from, author_to): minimum coauthorship hops between\n"
        "  two authors and the connecting path.\n"
        "- search_papers(title, author): boolean search. Terms are joined with AND / OR\n"
        "  (also && / ||); AND binds tighter than OR. A query without operators is a\n"
        "  case-insensitive substring match. Title and author conditions are combined\n"
        "  with AND.\n"
        "- get_author / get_paper: look up an entity by id.\n"
        "- similar_papers(title): papers sharing citations with the given paper.\n"
    ),
)


@mcp.tool()
async def shortest_path(author_from: str, author_to: str) -> str:
    """Find the shortest coauthorship path between two authors.

    Args:
        author_from: Exact name of the author the path starts from
        author_to: Exact name of the author the path ends at

    Returns JSON {distance, path: [{id, name, coauthors: [{id, name}]}]}.
    When no path exists within the hop cutoff, returns {distance: <cutoff>,
    reachable: false}. Unknown names return {error: "No such author: <name>"}.
    """

    async def body() -> str:
        result = await _get_engine().shortest_path(author_from, author_to)
        payload = result.model_dump(mode="json")
        if isinstance(result, NotReachable):
            payload["reachable"] = False
        return json.dumps(payload, indent=2)

    return await _respond("shortest_path", body)


@mcp.tool()
async def search_papers(
    title: str = "",
    author: str = "",
    format: str = "json",
    max_results: int = 200,
) -> str:
    """Search papers by title and/or author name.

    Args:
        title: Boolean title query, e.g. "graph AND search OR indexing"
        author: Boolean author query matched against author names
        format: Output format - "json", "markdown", or "bibtex"
        max_results: Maximum number of papers (capped by server configuration)
    """
    exporters = {
        "json": export_json,
        "markdown": export_markdown,
        "bibtex": lambda r: export_bibtex(r.papers),
    }
    exporter = exporters.get(format)
    if exporter is None:
        return json.dumps(
            {"error": f"Unknown format '{format}'. Must be one of: {list(exporters)}"}
        )

    async def body() -> str:
        result = await _get_engine().filter_papers(
            title=title or None, author=author or None, max_results=max_results
        )
        return exporter(result)

    return await _respond("search_papers", body)


@mcp.tool()
async def get_author(author_id: str) -> str:
    """Get an author with named coauthors and paper titles.

    Args:
        author_id: Author id
    """

    async def body() -> str:
        author = await _get_engine().get_author(author_id)
        if author is None:
            return json.dumps({"error": f"No author with id: {author_id}"})
        return author.model_dump_json(indent=2)

    return await _respond("get_author", body)


@mcp.tool()
async def get_paper(paper_id: str) -> str:
    """Get a paper with titled citations and citing papers.

    Args:
        paper_id: Paper id
    """

    async def body() -> str:
        paper = await _get_engine().get_paper(paper_id)
        if paper is None:
            return json.dumps({"error": f"No paper with id: {paper_id}"})
        return paper.model_dump_json(indent=2)

    return await _respond("get_paper", body)


@mcp.tool()
async def similar_papers(title: str) -> str:
    """Find papers that cite any of the papers cited by the given paper.

    Args:
        title: Exact title of the reference paper
    """

    async def body() -> str:
        result = await _get_engine().similar_papers(title)
        return result.model_dump_json(indent=2)

    return await _respond("similar_papers", body)


def main() -> None:
    """Entry point for the MCP server."""
    logging.basicConfig(level=load_config().log_level)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
