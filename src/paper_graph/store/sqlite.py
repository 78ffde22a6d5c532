"""SQLite document store backed by aiosqlite.

Ordered relations (coauthors, papers of an author, authors and citations of
a paper) keep a ``position`` column so lists come back in stored order.
``cited_by`` is derived from ``paper_citations``. Re-inserting an author or
paper updates it in place, so its rowid (store order) is unchanged.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Iterator, Sequence

import aiosqlite

from paper_graph.exceptions import StoreUnavailable
from paper_graph.models import (
    AuthorNode,
    AuthorProfile,
    AuthorRef,
    Paper,
    PaperAuthor,
    PaperDetail,
    PaperRef,
    PathNode,
)
from paper_graph.query.nodes import And, QueryNode, Term, operands
from paper_graph.store.base import DocumentStore, validate_fields

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS authors (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_authors_name ON authors(name);

CREATE TABLE IF NOT EXISTS author_coauthors (
    author_id TEXT NOT NULL,
    coauthor_id TEXT NOT NULL,
    position INTEGER NOT NULL,
    PRIMARY KEY (author_id, position)
);

CREATE TABLE IF NOT EXISTS author_papers (
    author_id TEXT NOT NULL,
    paper_id TEXT NOT NULL,
    position INTEGER NOT NULL,
    PRIMARY KEY (author_id, position)
);

CREATE TABLE IF NOT EXISTS papers (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    doi TEXT,
    url TEXT,
    download_links TEXT NOT NULL DEFAULT '[]',
    abstract TEXT,
    year INTEGER
);
CREATE INDEX IF NOT EXISTS idx_papers_title ON papers(title);

CREATE TABLE IF NOT EXISTS paper_authors (
    paper_id TEXT NOT NULL,
    author_id TEXT,
    name TEXT NOT NULL,
    position INTEGER NOT NULL,
    PRIMARY KEY (paper_id, position)
);

CREATE TABLE IF NOT EXISTS paper_citations (
    paper_id TEXT NOT NULL,
    cited_id TEXT NOT NULL,
    position INTEGER NOT NULL,
    PRIMARY KEY (paper_id, position)
);
CREATE INDEX IF NOT EXISTS idx_paper_citations_cited ON paper_citations(cited_id);
"""

_PAPER_COLUMNS = "p.id, p.title, p.doi, p.url, p.download_links, p.abstract, p.year"

_COLUMN_FOR_FIELD = {
    "title": "p.title",
    "abstract": "p.abstract",
    "doi": "p.doi",
    "year": "CAST(p.year AS TEXT)",
}

# Stay well below SQLITE_MAX_VARIABLE_NUMBER on older builds.
_MAX_IN_VARIABLES = 500


class SQLiteStore(DocumentStore):
    """Persistent store over a single SQLite database file."""

    def __init__(self, path: str | Path) -> None:
        self.path = str(path)
        self._db: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()

    async def _connection(self) -> aiosqlite.Connection:
        if self._db is not None:
            return self._db
        async with self._lock:
            if self._db is None:
                try:
                    db = await aiosqlite.connect(self.path)
                except (aiosqlite.Error, OSError) as exc:
                    raise StoreUnavailable(f"cannot open {self.path}: {exc}") from exc
                db.row_factory = aiosqlite.Row
                # SQLite's lower() only folds ASCII
                await db.create_function("casefold", 1, _casefold, deterministic=True)
                self._db = db
                logger.debug("Opened SQLite store at %s", self.path)
        return self._db

    async def close(self) -> None:
        if self._db is not None:
            await self._db.close()
            self._db = None

    async def _fetchall(
        self, sql: str, params: Sequence[Any] = ()
    ) -> list[aiosqlite.Row]:
        db = await self._connection()
        try:
            async with db.execute(sql, params) as cursor:
                return list(await cursor.fetchall())
        except aiosqlite.Error as exc:
            raise StoreUnavailable(str(exc)) from exc

    async def _fetchall_in(
        self, sql: str, ids: Sequence[str], params: Sequence[Any] = ()
    ) -> list[aiosqlite.Row]:
        """Run ``sql`` (containing one ``{ids}`` placeholder) in chunks."""
        rows: list[aiosqlite.Row] = []
        for chunk in _chunks(list(ids), _MAX_IN_VARIABLES):
            placeholders = ", ".join("?" for _ in chunk)
            rows.extend(
                await self._fetchall(sql.format(ids=placeholders), [*chunk, *params])
            )
        return rows

    async def _write(self, statements: Iterable[tuple[str, list[tuple]]]) -> None:
        db = await self._connection()
        try:
            for sql, rows in statements:
                await db.executemany(sql, rows)
            await db.commit()
        except aiosqlite.Error as exc:
            raise StoreUnavailable(str(exc)) from exc

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def create_schema(self) -> None:
        db = await self._connection()
        try:
            await db.executescript(_SCHEMA)
            await db.commit()
        except aiosqlite.Error as exc:
            raise StoreUnavailable(str(exc)) from exc

    async def insert_author(self, author: AuthorNode) -> None:
        await self._write([
            ("DELETE FROM author_coauthors WHERE author_id = ?", [(author.id,)]),
            ("DELETE FROM author_papers WHERE author_id = ?", [(author.id,)]),
            (
                "INSERT INTO authors (id, name) VALUES (?, ?) "
                "ON CONFLICT(id) DO UPDATE SET name = excluded.name",
                [(author.id, author.name)],
            ),
            (
                "INSERT INTO author_coauthors (author_id, coauthor_id, position) "
                "VALUES (?, ?, ?)",
                [(author.id, cid, i) for i, cid in enumerate(author.coauthors)],
            ),
            (
                "INSERT INTO author_papers (author_id, paper_id, position) "
                "VALUES (?, ?, ?)",
                [(author.id, pid, i) for i, pid in enumerate(author.papers)],
            ),
        ])

    async def insert_paper(self, paper: Paper) -> None:
        await self._write([
            ("DELETE FROM paper_authors WHERE paper_id = ?", [(paper.id,)]),
            ("DELETE FROM paper_citations WHERE paper_id = ?", [(paper.id,)]),
            (
                "INSERT INTO papers "
                "(id, title, doi, url, download_links, abstract, year) "
                "VALUES (?, ?, ?, ?, ?, ?, ?) "
                "ON CONFLICT(id) DO UPDATE SET title = excluded.title, "
                "doi = excluded.doi, url = excluded.url, "
                "download_links = excluded.download_links, "
                "abstract = excluded.abstract, year = excluded.year",
                [(
                    paper.id,
                    paper.title,
                    paper.doi,
                    paper.url,
                    json.dumps(paper.download_links),
                    paper.abstract,
                    paper.year,
                )],
            ),
            (
                "INSERT INTO paper_authors (paper_id, author_id, name, position) "
                "VALUES (?, ?, ?, ?)",
                [(paper.id, a.id, a.name, i) for i, a in enumerate(paper.authors)],
            ),
            (
                "INSERT INTO paper_citations (paper_id, cited_id, position) "
                "VALUES (?, ?, ?)",
                [(paper.id, cid, i) for i, cid in enumerate(paper.citations)],
            ),
        ])

    # ------------------------------------------------------------------
    # Authors
    # ------------------------------------------------------------------

    async def find_authors_by_name(self, name: str) -> list[AuthorNode]:
        rows = await self._fetchall(
            "SELECT id, name FROM authors WHERE name = ? ORDER BY rowid", (name,)
        )
        if not rows:
            return []
        ids = [r["id"] for r in rows]
        coauthors = await self._grouped(
            "SELECT author_id AS owner, coauthor_id AS item FROM author_coauthors "
            "WHERE author_id IN ({ids}) ORDER BY author_id, position",
            ids,
        )
        papers = await self._grouped(
            "SELECT author_id AS owner, paper_id AS item FROM author_papers "
            "WHERE author_id IN ({ids}) ORDER BY author_id, position",
            ids,
        )
        return [
            AuthorNode(
                id=r["id"],
                name=r["name"],
                coauthors=coauthors.get(r["id"], []),
                papers=papers.get(r["id"], []),
            )
            for r in rows
        ]

    async def find_author_by_id(self, author_id: str) -> AuthorNode | None:
        rows = await self._fetchall(
            "SELECT id, name FROM authors WHERE id = ?", (author_id,)
        )
        if not rows:
            return None
        coauthor_rows = await self._fetchall(
            "SELECT coauthor_id FROM author_coauthors WHERE author_id = ? "
            "ORDER BY position",
            (author_id,),
        )
        return AuthorNode(
            id=rows[0]["id"],
            name=rows[0]["name"],
            coauthors=[r["coauthor_id"] for r in coauthor_rows],
        )

    async def get_path_nodes(self, author_ids: list[str]) -> list[PathNode]:
        ids = list(dict.fromkeys(author_ids))
        if not ids:
            return []
        rows = await self._fetchall_in(
            "SELECT id, name FROM authors WHERE id IN ({ids})", ids
        )
        refs = await self._author_refs_by_owner(ids)
        return [
            PathNode(id=r["id"], name=r["name"], coauthors=refs.get(r["id"], []))
            for r in rows
        ]

    async def get_author(self, author_id: str) -> AuthorProfile | None:
        rows = await self._fetchall(
            "SELECT id, name FROM authors WHERE id = ?", (author_id,)
        )
        if not rows:
            return None
        refs = await self._author_refs_by_owner([author_id])
        paper_rows = await self._fetchall(
            "SELECT p.id, p.title FROM author_papers ap "
            "JOIN papers p ON p.id = ap.paper_id "
            "WHERE ap.author_id = ? ORDER BY ap.position",
            (author_id,),
        )
        return AuthorProfile(
            id=rows[0]["id"],
            name=rows[0]["name"],
            coauthors=refs.get(author_id, []),
            papers=[PaperRef(id=r["id"], title=r["title"]) for r in paper_rows],
        )

    async def list_author_names(self) -> list[str]:
        rows = await self._fetchall("SELECT name FROM authors ORDER BY rowid")
        return [r["name"] for r in rows]

    # ------------------------------------------------------------------
    # Papers
    # ------------------------------------------------------------------

    async def search_papers(
        self, query: QueryNode | None, max_results: int
    ) -> list[Paper]:
        if query is None:
            where, params = "1 = 1", []
        else:
            validate_fields(query)
            where, params = _to_sql(query)
        rows = await self._fetchall(
            f"SELECT {_PAPER_COLUMNS} FROM papers p WHERE {where} "
            "ORDER BY p.rowid LIMIT ?",
            [*params, max_results],
        )
        return await self._hydrate(rows)

    async def get_paper(self, paper_id: str) -> PaperDetail | None:
        rows = await self._fetchall(
            f"SELECT {_PAPER_COLUMNS} FROM papers p WHERE p.id = ?", (paper_id,)
        )
        if not rows:
            return None
        (paper,) = await self._hydrate(rows)
        citation_rows = await self._fetchall(
            "SELECT p.id, p.title FROM paper_citations c "
            "JOIN papers p ON p.id = c.cited_id "
            "WHERE c.paper_id = ? ORDER BY c.position",
            (paper_id,),
        )
        cited_by_rows = await self._fetchall(
            "SELECT p.id, p.title FROM paper_citations c "
            "JOIN papers p ON p.id = c.paper_id "
            "WHERE c.cited_id = ? ORDER BY c.rowid",
            (paper_id,),
        )
        data = paper.model_dump(exclude={"citations", "cited_by"})
        return PaperDetail(
            **data,
            citations=[PaperRef(id=r["id"], title=r["title"]) for r in citation_rows],
            cited_by=[PaperRef(id=r["id"], title=r["title"]) for r in cited_by_rows],
        )

    async def find_papers_by_title(self, title: str) -> list[Paper]:
        rows = await self._fetchall(
            f"SELECT {_PAPER_COLUMNS} FROM papers p WHERE p.title = ? "
            "ORDER BY p.rowid",
            (title,),
        )
        return await self._hydrate(rows)

    async def get_papers(self, paper_ids: list[str]) -> list[Paper]:
        ids = list(dict.fromkeys(paper_ids))
        if not ids:
            return []
        rows = await self._fetchall_in(
            f"SELECT {_PAPER_COLUMNS} FROM papers p WHERE p.id IN ({{ids}})", ids
        )
        by_id = {p.id: p for p in await self._hydrate(rows)}
        return [by_id[pid] for pid in ids if pid in by_id]

    async def list_citing_paper_titles(self) -> list[str]:
        rows = await self._fetchall(
            "SELECT p.title FROM papers p WHERE EXISTS "
            "(SELECT 1 FROM paper_citations c WHERE c.paper_id = p.id) "
            "ORDER BY p.rowid"
        )
        return [r["title"] for r in rows]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _grouped(self, sql: str, ids: list[str]) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = {}
        for row in await self._fetchall_in(sql, ids):
            grouped.setdefault(row["owner"], []).append(row["item"])
        return grouped

    async def _author_refs_by_owner(
        self, author_ids: list[str]
    ) -> dict[str, list[AuthorRef]]:
        rows = await self._fetchall_in(
            "SELECT ac.author_id AS owner, a.id, a.name FROM author_coauthors ac "
            "JOIN authors a ON a.id = ac.coauthor_id "
            "WHERE ac.author_id IN ({ids}) ORDER BY ac.author_id, ac.position",
            author_ids,
        )
        refs: dict[str, list[AuthorRef]] = {}
        for row in rows:
            refs.setdefault(row["owner"], []).append(
                AuthorRef(id=row["id"], name=row["name"])
            )
        return refs

    async def _hydrate(self, rows: list[aiosqlite.Row]) -> list[Paper]:
        if not rows:
            return []
        ids = [r["id"] for r in rows]
        author_rows = await self._fetchall_in(
            "SELECT paper_id, author_id, name FROM paper_authors "
            "WHERE paper_id IN ({ids}) ORDER BY paper_id, position",
            ids,
        )
        authors: dict[str, list[PaperAuthor]] = {}
        for row in author_rows:
            authors.setdefault(row["paper_id"], []).append(
                PaperAuthor(id=row["author_id"], name=row["name"])
            )
        citations = await self._grouped(
            "SELECT paper_id AS owner, cited_id AS item FROM paper_citations "
            "WHERE paper_id IN ({ids}) ORDER BY paper_id, position",
            ids,
        )
        cited_by = await self._grouped(
            "SELECT cited_id AS owner, paper_id AS item FROM paper_citations "
            "WHERE cited_id IN ({ids}) ORDER BY rowid",
            ids,
        )
        return [
            Paper(
                id=r["id"],
                title=r["title"],
                doi=r["doi"],
                url=r["url"],
                download_links=json.loads(r["download_links"] or "[]"),
                abstract=r["abstract"],
                year=r["year"],
                authors=authors.get(r["id"], []),
                citations=citations.get(r["id"], []),
                cited_by=cited_by.get(r["id"], []),
            )
            for r in rows
        ]


def _casefold(value: str | None) -> str | None:
    return value.casefold() if value is not None else None


def _chunks(items: list[str], size: int) -> Iterator[list[str]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


def _to_sql(node: QueryNode) -> tuple[str, list[Any]]:
    """Translate a query tree into a WHERE clause over ``papers p``."""
    if isinstance(node, Term):
        if node.field == "authors.name":
            condition, params = _compare("pa.name", node)
            return (
                "EXISTS (SELECT 1 FROM paper_authors pa "
                f"WHERE pa.paper_id = p.id AND {condition})",
                params,
            )
        return _compare(_COLUMN_FOR_FIELD[node.field], node)

    joiner = " AND " if isinstance(node, And) else " OR "
    clauses: list[str] = []
    params: list[Any] = []
    for child in operands(node):
        clause, child_params = _to_sql(child)
        clauses.append(clause)
        params.extend(child_params)
    return "(" + joiner.join(clauses) + ")", params


def _compare(column: str, term: Term) -> tuple[str, list[Any]]:
    if term.fuzzy:
        return f"instr(casefold({column}), casefold(?)) > 0", [term.value]
    return f"{column} = ?", [term.value]
