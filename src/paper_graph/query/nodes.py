"""Store-agnostic boolean query tree.

Stores translate these nodes into their native query form; nothing here
knows about a particular backend.
"""

from __future__ import annotations

from typing import Annotated, Iterator, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class Term(BaseModel):
    """Field condition. Exact equality, or a case-insensitive substring match
    when ``fuzzy`` is set."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["term"] = "term"
    field: str
    value: str
    fuzzy: bool = False


class And(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["and"] = "and"
    children: list[QueryNode] = Field(min_length=2)


class Or(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["or"] = "or"
    children: list[QueryNode] = Field(min_length=2)


QueryNode = Annotated[Union[Term, And, Or], Field(discriminator="kind")]

And.model_rebuild()
Or.model_rebuild()


def iter_terms(node: Term | And | Or) -> Iterator[Term]:
    """Leaf terms, left to right."""
    stack = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, Term):
            yield current
        else:
            stack.extend(reversed(current.children))


def render(node: Term | And | Or) -> str:
    """Readable infix form, e.g. ``(title = a AND title ~ b)``."""
    parts: list[str] = []
    stack: list[Term | And | Or | str] = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, str):
            parts.append(current)
        elif isinstance(current, Term):
            op = "~" if current.fuzzy else "="
            parts.append(f"{current.field} {op} {current.value}")
        else:
            joiner = " AND " if isinstance(current, And) else " OR "
            stack.append(")")
            for i, child in enumerate(reversed(current.children)):
                if i:
                    stack.append(joiner)
                stack.append(child)
            stack.append("(")
    return "".join(parts)


def operands(node: And | Or) -> list[Term | And | Or]:
    """Children of ``node`` with nested nodes of the same kind spliced in.

    ``And(And(a, b), c)`` gives ``[a, b, c]``; folded operator chains come
    back flat instead of one level per operator.
    """
    flat: list[Term | And | Or] = []
    stack = list(reversed(node.children))
    while stack:
        current = stack.pop()
        if type(current) is type(node):
            stack.extend(reversed(current.children))
        else:
            flat.append(current)
    return flat
