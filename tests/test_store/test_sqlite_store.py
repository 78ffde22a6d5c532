"""Tests for SQLite-specific store behaviour."""

from __future__ import annotations

import pytest

from paper_graph.exceptions import StoreUnavailable
from paper_graph.models import AuthorNode, Paper, PaperAuthor
from paper_graph.query.nodes import And, Term
from paper_graph.store import sqlite as sqlite_store
from paper_graph.store.sqlite import SQLiteStore


class TestFailures:
    @pytest.mark.asyncio
    async def test_missing_schema_is_store_unavailable(self, tmp_path):
        store = SQLiteStore(tmp_path / "empty.sqlite")
        try:
            with pytest.raises(StoreUnavailable, match="no such table"):
                await store.find_author_by_id("a1")
        finally:
            await store.close()

    @pytest.mark.asyncio
    async def test_unopenable_path_is_store_unavailable(self, tmp_path):
        store = SQLiteStore(tmp_path / "no_such_dir" / "graph.sqlite")
        with pytest.raises(StoreUnavailable):
            await store.search_papers(None, 10)
        await store.close()


class TestWrites:
    @pytest.mark.asyncio
    async def test_reinsert_replaces_relations(self, tmp_path):
        store = SQLiteStore(tmp_path / "graph.sqlite")
        try:
            await store.create_schema()
            await store.insert_author(AuthorNode(id="a1", name="Ada", coauthors=["a2"]))
            await store.insert_author(AuthorNode(id="a1", name="Ada", coauthors=["a3", "a2"]))
            author = await store.find_author_by_id("a1")
            assert author.coauthors == ["a3", "a2"]
        finally:
            await store.close()

    @pytest.mark.asyncio
    async def test_persists_across_connections(self, tmp_path):
        path = tmp_path / "graph.sqlite"
        store = SQLiteStore(path)
        await store.create_schema()
        await store.insert_paper(
            Paper(
                id="p1",
                title="Kept",
                year=2001,
                authors=[PaperAuthor(name="Unlinked Author")],
                download_links=["a.pdf", "b.pdf"],
            )
        )
        await store.close()

        reopened = SQLiteStore(path)
        try:
            (paper,) = await reopened.search_papers(
                Term(field="year", value="2001"), 10
            )
            assert paper.title == "Kept"
            assert paper.authors[0].id is None
            assert paper.download_links == ["a.pdf", "b.pdf"]
        finally:
            await reopened.close()


class TestChunking:
    @pytest.mark.asyncio
    async def test_large_id_lists_are_chunked(self, tmp_path, monkeypatch, sample_papers):
        monkeypatch.setattr(sqlite_store, "_MAX_IN_VARIABLES", 2)
        store = SQLiteStore(tmp_path / "graph.sqlite")
        try:
            await store.create_schema()
            for paper in sample_papers:
                await store.insert_paper(paper)
            papers = await store.get_papers(["p3", "p1", "p4", "p2"])
            assert [p.id for p in papers] == ["p3", "p1", "p4", "p2"]
            assert papers[1].cited_by == ["p2", "p3"]
        finally:
            await store.close()


class TestQueryTranslation:
    def test_fuzzy_compare_uses_casefold(self):
        clause, params = sqlite_store._to_sql(Term(field="title", value="Über", fuzzy=True))
        assert clause == "instr(casefold(p.title), casefold(?)) > 0"
        assert params == ["Über"]

    def test_long_chain_is_one_flat_clause(self):
        node = Term(field="title", value="t0")
        for i in range(1, 3000):
            node = And(children=[node, Term(field="title", value=f"t{i}")])
        clause, params = sqlite_store._to_sql(node)
        assert clause.count(" AND ") == 2999
        assert clause.count("(") == 1
        assert params == [f"t{i}" for i in range(3000)]
