"""Document store package."""

from paper_graph.store.base import DocumentStore
from paper_graph.store.factory import create_store
from paper_graph.store.memory import InMemoryStore
from paper_graph.store.sqlite import SQLiteStore

__all__ = [
    "DocumentStore",
    "InMemoryStore",
    "SQLiteStore",
    "create_store",
]
