"""Boolean search string -> QueryNode compiler.

Operators are folded in two passes: every AND across the whole token list
first, then every OR over what is left. ``A OR B AND C`` therefore becomes
``A OR (B AND C)`` and ``A AND B OR C AND D`` becomes
``(A AND B) OR (C AND D)``. Within a pass folding is left-associative.
"""

from __future__ import annotations

from typing import Callable, Union

from paper_graph.exceptions import MalformedQuery
from paper_graph.query.nodes import And, Or, Term

AND_OPERATORS = frozenset({"AND", "&&"})
OR_OPERATORS = frozenset({"OR", "||"})
OPERATORS = AND_OPERATORS | OR_OPERATORS

# Bounds query tree depth: folding nests one level per operator.
MAX_OPERANDS = 64

Node = Union[Term, And, Or]
Token = Union[str, Node]


def compile_query(query: str, field: str) -> Node:
    """Compile ``query`` into a query tree over ``field``.

    A query without operators becomes a fuzzy (substring) term on the whole
    string. Raises MalformedQuery on empty input, a dangling operator or more
    than MAX_OPERANDS operands.
    """
    tokens: list[Token] = list(query.split())
    if not tokens:
        raise MalformedQuery("empty query")

    if not any(_is_operator(t) for t in tokens):
        return Term(field=field, value=query.strip(), fuzzy=True)

    operand_count = sum(1 for t in tokens if not _is_operator(t))
    if operand_count > MAX_OPERANDS:
        raise MalformedQuery(
            f"too many terms: {operand_count} (at most {MAX_OPERANDS})"
        )

    tokens = _fold(tokens, AND_OPERATORS, And, field)
    tokens = _fold(tokens, OR_OPERATORS, Or, field)

    if len(tokens) != 1:
        leftovers = ", ".join(_describe(t) for t in tokens)
        raise MalformedQuery(f"operands without an operator between them: {leftovers}")
    return _as_node(tokens[0], field)


def _fold(
    tokens: list[Token],
    operators: frozenset[str],
    combine: Callable[..., Node],
    field: str,
) -> list[Token]:
    folded: list[Token] = []
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if not (isinstance(token, str) and token in operators):
            folded.append(token)
            i += 1
            continue

        if not folded or _is_operator(folded[-1]):
            raise MalformedQuery(f"operator '{token}' has no left operand")
        if i + 1 >= len(tokens) or _is_operator(tokens[i + 1]):
            raise MalformedQuery(f"operator '{token}' has no right operand")

        left = folded.pop()
        right = tokens[i + 1]
        folded.append(
            combine(children=[_as_node(left, field), _as_node(right, field)])
        )
        i += 2
    return folded


def _is_operator(token: Token) -> bool:
    return isinstance(token, str) and token in OPERATORS


def _as_node(token: Token, field: str) -> Node:
    if isinstance(token, str):
        return Term(field=field, value=token)
    return token


def _describe(token: Token) -> str:
    return token if isinstance(token, str) else token.kind.upper()
