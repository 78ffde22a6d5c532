"""Boolean search query compilation."""

from paper_graph.query.compiler import compile_query
from paper_graph.query.nodes import And, Or, QueryNode, Term, render

__all__ = [
    "And",
    "Or",
    "QueryNode",
    "Term",
    "compile_query",
    "render",
]
