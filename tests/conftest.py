"""Shared fixture data: a small citation graph.

Authors a1 - a2 - a3 form a coauthor chain; a4 has no coauthors.
Citations: p2 -> p1, p3 -> p1, p3 -> p2, p4 -> p2.
"""

from __future__ import annotations

import pytest

from paper_graph.models import AuthorNode, Paper, PaperAuthor


@pytest.fixture
def sample_authors() -> list[AuthorNode]:
    return [
        AuthorNode(id="a1", name="Ada Lovelace", coauthors=["a2"], papers=["p1"]),
        AuthorNode(
            id="a2", name="Charles Babbage", coauthors=["a1", "a3"], papers=["p1", "p2"]
        ),
        AuthorNode(id="a3", name="Alan Turing", coauthors=["a2"], papers=["p2", "p3"]),
        AuthorNode(id="a4", name="Grace Hopper", papers=["p4"]),
    ]


@pytest.fixture
def sample_papers() -> list[Paper]:
    ada = PaperAuthor(id="a1", name="Ada Lovelace")
    charles = PaperAuthor(id="a2", name="Charles Babbage")
    alan = PaperAuthor(id="a3", name="Alan Turing")
    grace = PaperAuthor(id="a4", name="Grace Hopper")
    return [
        Paper(
            id="p1",
            title="Analytical Engine Notes",
            doi="10.1000/ae",
            url="https://example.org/p1",
            download_links=["https://example.org/p1.pdf"],
            abstract="Notes on the engine and its programs.",
            year=1843,
            authors=[ada, charles],
        ),
        Paper(
            id="p2",
            title="Difference Engine Design",
            year=1850,
            authors=[charles, alan],
            citations=["p1"],
        ),
        Paper(
            id="p3",
            title="Computable Numbers",
            abstract="On computable numbers.",
            year=1936,
            authors=[alan],
            citations=["p1", "p2"],
        ),
        Paper(
            id="p4",
            title="Compiler Construction",
            year=1952,
            authors=[grace],
            citations=["p2"],
        ),
    ]
