"""Configuration loading for paper-graph."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class StoreConfig(BaseModel):
    backend: str = "sqlite"
    path: str = "paper_graph.sqlite"


class AppConfig(BaseModel):
    store: StoreConfig = StoreConfig()
    path_hop_cutoff: int = Field(default=50, ge=1)
    search_max_results: int = Field(default=200, ge=1)
    store_retries: int = Field(default=2, ge=0)
    store_retry_backoff_s: float = Field(default=0.5, ge=0.0)
    log_level: str = "INFO"


def load_config(env_path: str | Path | None = None) -> AppConfig:
    """Load configuration from environment variables (.env file)."""
    if env_path:
        load_dotenv(env_path)
    else:
        load_dotenv()

    store = StoreConfig(
        backend=os.getenv("STORE_BACKEND", "sqlite"),
        path=os.getenv("STORE_PATH", "paper_graph.sqlite"),
    )

    return AppConfig(
        store=store,
        path_hop_cutoff=int(os.getenv("PATH_HOP_CUTOFF", "50")),
        search_max_results=int(os.getenv("SEARCH_MAX_RESULTS", "200")),
        store_retries=int(os.getenv("STORE_RETRIES", "2")),
        store_retry_backoff_s=float(os.getenv("STORE_RETRY_BACKOFF_S", "0.5")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
