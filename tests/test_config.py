"""Tests for configuration loading."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from paper_graph.config import AppConfig, load_config

_ENV_VARS = [
    "STORE_BACKEND",
    "STORE_PATH",
    "PATH_HOP_CUTOFF",
    "SEARCH_MAX_RESULTS",
    "STORE_RETRIES",
    "STORE_RETRY_BACKOFF_S",
    "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    # load_dotenv writes straight into os.environ
    with patch.dict(os.environ):
        for name in _ENV_VARS:
            monkeypatch.delenv(name, raising=False)
        # Keep load_dotenv from picking up a developer's .env
        monkeypatch.chdir(tmp_path)
        yield monkeypatch


class TestLoadConfig:
    def test_defaults(self, clean_env, tmp_path):
        config = load_config(tmp_path / "missing.env")
        assert config.store.backend == "sqlite"
        assert config.store.path == "paper_graph.sqlite"
        assert config.path_hop_cutoff == 50
        assert config.search_max_results == 200
        assert config.store_retries == 2
        assert config.store_retry_backoff_s == 0.5
        assert config.log_level == "INFO"

    def test_environment_overrides(self, clean_env, tmp_path):
        clean_env.setenv("STORE_BACKEND", "memory")
        clean_env.setenv("STORE_PATH", "graph.json")
        clean_env.setenv("PATH_HOP_CUTOFF", "6")
        clean_env.setenv("SEARCH_MAX_RESULTS", "25")
        clean_env.setenv("LOG_LEVEL", "debug")
        config = load_config(tmp_path / "missing.env")
        assert config.store.backend == "memory"
        assert config.store.path == "graph.json"
        assert config.path_hop_cutoff == 6
        assert config.search_max_results == 25
        assert config.log_level == "DEBUG"

    def test_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / "custom.env"
        env_file.write_text("STORE_RETRIES=5\nSTORE_RETRY_BACKOFF_S=0\n", encoding="utf-8")
        config = load_config(env_file)
        assert config.store_retries == 5
        assert config.store_retry_backoff_s == 0.0

    def test_invalid_cutoff_rejected(self, clean_env, tmp_path):
        clean_env.setenv("PATH_HOP_CUTOFF", "0")
        with pytest.raises(ValidationError):
            load_config(tmp_path / "missing.env")


class TestAppConfig:
    def test_model_defaults(self):
        assert AppConfig().store.backend == "sqlite"
