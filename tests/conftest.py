"""
Shared pytest fixtures for the cloudscore test suite.

Requests never leave the process: the Cloud under test is wired to a
FakeTransport that plays back scripted answers and records every
descriptor it was asked to send.
"""

import pytest

from cloudscore.cloud import Cloud
from cloudscore.config import ClientConfig
from cloudscore.dispatcher import Dispatcher
from cloudscore.logging_config import clear_context
from tests.fakes import FakeTransport

_ENV_VARS = (
    "CLOUDSCORE_API_KEY",
    "CLOUDSCORE_API_SECRET",
    "CLOUDSCORE_SERVER",
    "CLOUDSCORE_LB_COUNT",
    "CLOUDSCORE_TIMEOUT_SECONDS",
    "CLOUDSCORE_VERBOSE",
    "CLOUDSCORE_GAMER_ID",
    "CLOUDSCORE_GAMER_SECRET",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove CLOUDSCORE_* variables and log context between tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    clear_context()
    yield
    clear_context()


@pytest.fixture
def client_config():
    """Config pointing at a fixed server, no failure hook."""
    return ClientConfig(api_key="game.test", api_secret="s3cr3t", server="https://api.test")


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def dispatcher(client_config, transport):
    return Dispatcher(client_config, transport)


@pytest.fixture
def cloud(client_config, transport):
    return Cloud(client_config, transport)


@pytest.fixture
def scores(cloud):
    """Private-domain leaderboard accessor of a logged-in gamer."""
    return cloud.gamer("gamer-1", "gamer-secret").scores
