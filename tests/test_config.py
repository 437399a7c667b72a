"""Tests for client configuration."""

import re
from unittest.mock import patch

import pytest

from cloudscore.config import (
    PRODUCTION_SERVER,
    SANDBOX_SERVER,
    ClientConfig,
    TimeoutPolicy,
    get_client_config,
)
from cloudscore.exceptions import ConfigurationError


class TestClientConfig:
    """Tests for ClientConfig dataclass."""

    def test_default_values(self):
        """Config has sensible defaults."""
        config = ClientConfig(api_key="k", api_secret="s")
        assert config.server == SANDBOX_SERVER
        assert config.load_balancer_count == 2
        assert config.timeout_seconds == 60.0
        assert config.timeout_policy == TimeoutPolicy.PER_ATTEMPT
        assert config.failure_hook is None
        assert config.verbose is False

    def test_requires_credentials(self):
        with pytest.raises(ConfigurationError, match="api_key is required"):
            ClientConfig(api_key="", api_secret="s")
        with pytest.raises(ConfigurationError, match="api_secret is required"):
            ClientConfig(api_key="k", api_secret="")

    def test_validation_server(self):
        with pytest.raises(ConfigurationError, match="server must be an http"):
            ClientConfig(api_key="k", api_secret="s", server="ftp://example.test")

    def test_validation_load_balancer_count(self):
        with pytest.raises(ConfigurationError, match="load_balancer_count must be at least 1"):
            ClientConfig(api_key="k", api_secret="s", load_balancer_count=0)

    def test_validation_timeout_seconds(self):
        """Validates timeout_seconds > 0."""
        with pytest.raises(ConfigurationError, match="timeout_seconds must be positive"):
            ClientConfig(api_key="k", api_secret="s", timeout_seconds=0)

    def test_validation_failure_hook(self):
        with pytest.raises(ConfigurationError, match="failure_hook must be callable"):
            ClientConfig(api_key="k", api_secret="s", failure_hook="retry")

    def test_configuration_error_names_component(self):
        with pytest.raises(ConfigurationError) as exc_info:
            ClientConfig(api_key="", api_secret="s")
        assert exc_info.value.component == "ClientConfig"

    def test_with_overrides_ignores_none(self):
        config = ClientConfig(api_key="k", api_secret="s", timeout_seconds=5.0)
        updated = config.with_overrides(timeout_seconds=None, verbose=True)
        assert updated.timeout_seconds == 5.0
        assert updated.verbose is True
        assert config.verbose is False

    def test_with_overrides_can_clear_hook(self):
        config = ClientConfig(api_key="k", api_secret="s", failure_hook=lambda f: f.abort())
        assert config.with_overrides(failure_hook=None).failure_hook is None


class TestResolveServer:
    """Tests for load balancer substitution."""

    def test_plain_server_unchanged(self):
        config = ClientConfig(api_key="k", api_secret="s", server="https://api.test/")
        assert config.resolve_server() == "https://api.test"

    def test_placeholder_replaced(self):
        config = ClientConfig(api_key="k", api_secret="s", server=PRODUCTION_SERVER)
        assert re.fullmatch(
            r"https://prod-api-0[12]\.clanofthecloud\.mobi", config.resolve_server()
        )

    def test_instance_within_count(self):
        config = ClientConfig(api_key="k", api_secret="s", load_balancer_count=12)
        with patch("cloudscore.config.random.randint", return_value=12) as randint:
            assert config.resolve_server() == "https://sandbox-api-12.clanofthecloud.mobi"
        randint.assert_called_once_with(1, 12)


class TestGetClientConfig:
    """Tests for environment resolution."""

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("CLOUDSCORE_API_KEY", "env-key")
        monkeypatch.setenv("CLOUDSCORE_API_SECRET", "env-secret")
        monkeypatch.setenv("CLOUDSCORE_SERVER", "https://staging.test")
        monkeypatch.setenv("CLOUDSCORE_LB_COUNT", "4")
        monkeypatch.setenv("CLOUDSCORE_TIMEOUT_SECONDS", "12.5")
        monkeypatch.setenv("CLOUDSCORE_VERBOSE", "yes")

        config = get_client_config()

        assert config.api_key == "env-key"
        assert config.api_secret == "env-secret"
        assert config.server == "https://staging.test"
        assert config.load_balancer_count == 4
        assert config.timeout_seconds == 12.5
        assert config.verbose is True

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("CLOUDSCORE_API_KEY", "env-key")
        monkeypatch.setenv("CLOUDSCORE_API_SECRET", "env-secret")
        monkeypatch.setenv("CLOUDSCORE_TIMEOUT_SECONDS", "12.5")

        config = get_client_config(api_key="explicit", timeout_seconds=3.0)

        assert config.api_key == "explicit"
        assert config.timeout_seconds == 3.0

    def test_invalid_numbers_ignored(self, monkeypatch):
        monkeypatch.setenv("CLOUDSCORE_LB_COUNT", "many")
        monkeypatch.setenv("CLOUDSCORE_TIMEOUT_SECONDS", "soon")

        config = get_client_config(api_key="k", api_secret="s")

        assert config.load_balancer_count == 2
        assert config.timeout_seconds == 60.0

    def test_missing_credentials(self):
        with pytest.raises(ConfigurationError):
            get_client_config()
