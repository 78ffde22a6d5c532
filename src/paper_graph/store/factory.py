"""Document store factory."""

from __future__ import annotations

from pathlib import Path

from paper_graph.config import StoreConfig
from paper_graph.store.base import DocumentStore


def create_store(config: StoreConfig) -> DocumentStore:
    """Create a document store from configuration.

    The ``memory`` backend loads ``config.path`` as a JSON dump when the file
    exists and starts empty otherwise.
    """
    match config.backend:
        case "sqlite":
            from paper_graph.store.sqlite import SQLiteStore

            return SQLiteStore(config.path)
        case "memory":
            from paper_graph.store.memory import InMemoryStore

            if config.path and Path(config.path).is_file():
                return InMemoryStore.from_json_file(config.path)
            return InMemoryStore()
        case _:
            raise ValueError(f"Unknown store backend: {config.backend}")
