"""
Shared fixtures for DiscernScan tests.
"""

from __future__ import annotations

import os

import pytest
import pytest_asyncio
from pydantic import SecretStr

from discernscan.config import Config
from discernscan.crawler.http_client import HttpClient
from discernscan.protocols import DiscernResult

from tests.helpers.factories import make_result

PROVIDER_ENV_KEYS = ("OPENAI_API_KEY", "SERP_API_KEY", "SERPAPI_API_KEY")


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests across modules")


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove provider keys and DISCERN_* overrides from the environment."""
    for key in PROVIDER_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    for key in list(os.environ):
        if key.upper().startswith("DISCERN_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def config(clean_env: pytest.MonkeyPatch) -> Config:
    """Config with credentials and zero delays for fast tests."""
    cfg = Config()
    cfg.evaluator.api_key = SecretStr("sk-test-evaluator")
    cfg.search.api_key = SecretStr("serp-test-key")
    cfg.http.max_retries = 2
    cfg.http.backoff_base_seconds = 0
    cfg.http.timeout = 5.0
    cfg.evaluator.backoff_base_seconds = 0
    cfg.evaluator.poll_interval_seconds = 0
    cfg.pipeline.evaluation_interval_seconds = 0
    return cfg


@pytest_asyncio.fixture
async def http_client(config: Config):
    """Initialized HTTP client, closed after the test."""
    client = HttpClient(config.http)
    await client.initialize()
    try:
        yield client
    finally:
        await client.close()


@pytest.fixture
def sample_result() -> DiscernResult:
    return make_result(scores=[5, 5, 4, 4, 3, 3, 2, 2, 4, 4, 3, 1, 2, 5, 3])
