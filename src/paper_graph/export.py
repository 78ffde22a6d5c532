"""Export utilities for search results, coauthor paths and name lists."""

from __future__ import annotations

import json
import logging
import re
import string
from pathlib import Path

from paper_graph.models import (
    NotReachable,
    Paper,
    PaperAuthor,
    PathResult,
    SearchResult,
)
from paper_graph.query.nodes import render
from paper_graph.store.base import DocumentStore

logger = logging.getLogger(__name__)


def export_json(result: SearchResult, indent: int = 2) -> str:
    """Serialize a search result to a JSON string."""
    return result.model_dump_json(indent=indent)


def export_markdown(result: SearchResult) -> str:
    """Generate a Markdown table of the papers in a search result."""
    query = render(result.query) if result.query is not None else "(all papers)"
    header = "| # | Title | Authors | Year | Citations |"
    sep = "|---|-------|---------|------|-----------|"
    rows = []
    for i, paper in enumerate(result.papers, 1):
        authors = _format_authors_short(paper.authors)
        year = str(paper.year) if paper.year is not None else "-"
        rows.append(
            f"| {i} | {paper.title} | {authors} | {year} | {len(paper.citations)} |"
        )
    summary = f"Query: `{query}` ({result.total} papers)"
    return "\n".join([summary, "", header, sep] + rows)


def export_bibtex(papers: list[Paper]) -> str:
    """Generate BibTeX entries for all papers."""
    if not papers:
        return ""
    seen_keys: set[str] = set()
    entries = []
    for paper in papers:
        key = _make_bibtex_key(paper, seen_keys)
        entries.append(_format_bibtex_entry(paper, key))
    return "\n\n".join(entries)


def export_path_markdown(result: PathResult | NotReachable) -> str:
    """Render a coauthor path as a Markdown chain."""
    if isinstance(result, NotReachable):
        return f"No coauthor path within {result.distance} hops."
    chain = " → ".join(f"**{node.name}**" for node in result.path)
    hops = "hop" if result.distance == 1 else "hops"
    return f"Distance: {result.distance} {hops}\n\n{chain}"


async def write_author_names(store: DocumentStore, path: str | Path) -> bool:
    """Write every author name as a JSON array, unless ``path`` exists."""
    return _write_list_once(path, await store.list_author_names(), "author names")


async def write_paper_titles(store: DocumentStore, path: str | Path) -> bool:
    """Write the titles of papers with citations as a JSON array, unless ``path`` exists."""
    return _write_list_once(path, await store.list_citing_paper_titles(), "paper titles")


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

def _write_list_once(path: str | Path, items: list[str], label: str) -> bool:
    target = Path(path)
    if target.exists():
        logger.info("%s already exists, not overwriting", target)
        return False
    target.write_text(json.dumps(items, ensure_ascii=False), encoding="utf-8")
    logger.info("Wrote %d %s to %s", len(items), label, target)
    return True


_BIBTEX_SPECIAL = str.maketrans({
    "&": r"\&",
    "%": r"\%",
    "_": r"\_",
    "#": r"\#",
})


def _escape_bibtex(text: str) -> str:
    """Escape BibTeX special characters."""
    return text.translate(_BIBTEX_SPECIAL)


def _make_bibtex_key(paper: Paper, seen: set[str]) -> str:
    """``<surname>_<year>_<first title word>``, suffixed a, b, ... z, aa, ab, ...
    on collision."""
    name_parts = paper.authors[0].name.split() if paper.authors else []
    surname = name_parts[-1] if name_parts else "unknown"
    year = "nd" if paper.year is None else str(paper.year)
    title_words = re.findall(r"[a-zA-Z]+", paper.title) or ["untitled"]
    base = re.sub(r"[^a-z0-9_]", "", f"{surname}_{year}_{title_words[0]}".lower())

    key = base
    collisions = 0
    while key in seen:
        key = f"{base}_{_alpha_suffix(collisions)}"
        collisions += 1
    seen.add(key)
    return key


def _alpha_suffix(index: int) -> str:
    """0 -> a, 25 -> z, 26 -> aa, 27 -> ab, ..."""
    letters = ""
    index += 1
    while index:
        index, rem = divmod(index - 1, 26)
        letters = string.ascii_lowercase[rem] + letters
    return letters


def _format_bibtex_entry(paper: Paper, key: str) -> str:
    """Format a single paper as a BibTeX @article entry."""
    authors = " and ".join(a.name for a in paper.authors) or "Unknown"
    # Inner braces preserve title capitalization
    fields = [
        ("author", _escape_bibtex(authors)),
        ("title", "{" + _escape_bibtex(paper.title) + "}"),
    ]
    if paper.year is not None:
        fields.append(("year", str(paper.year)))
    if paper.doi:
        fields.append(("doi", paper.doi))
    if paper.url:
        fields.append(("url", paper.url))

    body = "".join(f"  {name} = {{{value}}},\n" for name, value in fields)
    return f"@article{{{key},\n{body}}}"


def _format_authors_short(authors: list[PaperAuthor]) -> str:
    """Format author list for Markdown display."""
    if not authors:
        return "-"
    names = [a.name for a in authors]
    if len(names) <= 3:
        return ", ".join(names)
    return f"{names[0]} et al."
