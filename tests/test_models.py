"""Tests for core data models."""

import pytest
from pydantic import ValidationError

from paper_graph.models import (
    AuthorNode,
    NotReachable,
    Paper,
    PaperAuthor,
    PathNode,
    PathResult,
    SearchResult,
)
from paper_graph.query.nodes import And, Term


def test_author_node_defaults():
    author = AuthorNode(id="a1", name="Ada")
    assert author.coauthors == []
    assert author.papers == []


def test_defaults_are_not_shared():
    a = AuthorNode(id="a1", name="Ada")
    b = AuthorNode(id="a2", name="Bea")
    a.coauthors.append("a2")
    assert b.coauthors == []


def test_paper_author_without_id():
    author = PaperAuthor(name="External Author")
    assert author.id is None


def test_paper_rejects_negative_year():
    with pytest.raises(ValidationError):
        Paper(id="p1", title="T", year=-1)


def test_path_result_rejects_negative_distance():
    with pytest.raises(ValidationError):
        PathResult(distance=-1, path=[])


def test_path_result_roundtrip():
    result = PathResult(distance=0, path=[PathNode(id="a1", name="Ada")])
    restored = PathResult.model_validate_json(result.model_dump_json())
    assert restored == result


def test_not_reachable_carries_cutoff():
    assert NotReachable(distance=50).model_dump() == {"distance": 50}


def test_search_result_parses_query_tree():
    data = {
        "query": {
            "kind": "and",
            "children": [
                {"kind": "term", "field": "title", "value": "A"},
                {"kind": "term", "field": "authors.name", "value": "B", "fuzzy": True},
            ],
        },
        "total": 0,
        "papers": [],
    }
    result = SearchResult.model_validate(data)
    assert isinstance(result.query, And)
    assert result.query.children[1] == Term(field="authors.name", value="B", fuzzy=True)
