"""Shared fixtures for hnterm tests."""

import logging
import time

import httpx
import pytest

import hnterm.config as config_mod
import hnterm.storage as storage_mod
from hnterm.api import ApiService
from hnterm.config import NetworkConfig
from hnterm.models import Story


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep config and data files out of the real home directory."""
    monkeypatch.setattr(config_mod, "CONFIG_PATH", tmp_path / "config.toml")
    monkeypatch.setattr(storage_mod, "DATA_DIR", tmp_path / "data")
    yield
    logger = logging.getLogger("hnterm")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture()
def sample_story():
    """A single story with every field filled in."""
    return Story(
        id=12345,
        title="Test Story",
        url="https://example.com/post",
        by="testuser",
        score=100,
        time=int(time.time()) - 7200,
        descendants=10,
        kids=[1, 2, 3],
    )


@pytest.fixture()
def sample_stories():
    """Factory fixture: returns n stories with distinct ids and staggered scores."""

    def _make(n: int = 5) -> list[Story]:
        now = int(time.time())
        return [
            Story(
                id=i,
                title=f"Story {i}",
                url=f"https://example.com/{i}",
                by=f"user{i}",
                score=10 * i,
                time=now - 3600 * i,
                descendants=i,
            )
            for i in range(1, n + 1)
        ]

    return _make


@pytest.fixture()
def make_api():
    """Factory fixture: an ApiService whose HTTP goes to ``handler`` via httpx.MockTransport."""
    services = []

    def _make(handler, **kwargs) -> ApiService:
        kwargs.setdefault(
            "network_config",
            NetworkConfig(initial_retry_delay_ms=1, max_retry_delay_ms=2),
        )
        client = httpx.Client(transport=httpx.MockTransport(handler))
        service = ApiService(base_url="http://hn.test/v0/", client=client, **kwargs)
        services.append(service)
        return service

    yield _make
    for service in services:
        service.close()
