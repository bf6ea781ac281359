"""
Tests for Relay Configuration
=============================
"""

import logging
import pytest

from ..config import (
    CORSConfig,
    Environment,
    RateLimitConfig,
    RelayConfig,
)
from ..errors import ConfigurationError


FULL_ENV = {
    "MCP_API_KEY": "relay-key",
    "GOOGLE_CLIENT_ID": "client-id",
    "GOOGLE_CLIENT_SECRET": "client-secret",
    "GOOGLE_REFRESH_TOKEN": "refresh-token",
    "HUBSPOT_PRIVATE_APP_TOKEN": "pat-token",
}


class TestEnvironment:
    """Tests for environment parsing."""

    def test_unset_means_production(self):
        assert Environment.parse(None) == Environment.PRODUCTION
        assert Environment.parse("  ") == Environment.PRODUCTION

    def test_known_values(self):
        assert Environment.parse("development") == Environment.DEVELOPMENT
        assert Environment.parse("TEST") == Environment.TEST
        assert Environment.parse("staging") == Environment.STAGING

    def test_aliases(self):
        assert Environment.parse("dev") == Environment.DEVELOPMENT
        assert Environment.parse("prod") == Environment.PRODUCTION

    def test_unknown_value_raises(self):
        with pytest.raises(ConfigurationError, match="Unknown environment"):
            Environment.parse("qa-cluster")

    def test_production_like(self):
        assert Environment.PRODUCTION.is_production_like
        assert Environment.STAGING.is_production_like
        assert not Environment.DEVELOPMENT.is_production_like
        assert not Environment.TEST.is_production_like


class TestDefaults:
    """Tests for default configuration values."""

    def test_rate_tiers(self):
        config = RateLimitConfig()

        assert config.general.window_seconds == 900
        assert config.general.max_requests == 100
        assert config.general.message == "Too many requests, please try again later"
        assert config.write.window_seconds == 900
        assert config.write.max_requests == 10
        assert config.write.message == "Too many write requests, please try again later"
        assert config.redis_url is None
        assert config.trust_proxy is False

    def test_cors(self):
        config = CORSConfig()

        assert config.allow_origins == ["*"]
        assert "PATCH" in config.allow_methods
        assert config.allow_headers == ["Content-Type", "Authorization"]

    def test_relay(self):
        config = RelayConfig()

        assert config.port == 5000
        assert config.environment == Environment.PRODUCTION
        assert not config.expose_error_details


class TestFromEnv:
    """Tests for reading configuration from the environment."""

    def test_full_environment(self):
        env = {
            **FULL_ENV,
            "PORT": "8080",
            "APP_ENV": "development",
            "CORS_ORIGIN": "https://a.example.com, https://b.example.com",
            "RATE_LIMIT_REDIS_URL": "redis://cache:6379/1",
            "TRUST_PROXY": "true",
            "LOG_LEVEL": "debug",
            "LOG_FORMAT": "Console",
        }

        config = RelayConfig.from_env(env)

        assert config.port == 8080
        assert config.api_key == "relay-key"
        assert config.environment == Environment.DEVELOPMENT
        assert config.expose_error_details
        assert config.cors.allow_origins == ["https://a.example.com", "https://b.example.com"]
        assert config.rate_limits.redis_url == "redis://cache:6379/1"
        assert config.rate_limits.trust_proxy is True
        assert config.google.is_complete
        assert config.hubspot.is_complete
        assert config.logging.level == "DEBUG"
        assert config.logging.format == "console"

    def test_node_env_fallback(self):
        config = RelayConfig.from_env({"NODE_ENV": "test"})
        assert config.environment == Environment.TEST

    def test_app_env_wins(self):
        config = RelayConfig.from_env({"APP_ENV": "staging", "NODE_ENV": "development"})
        assert config.environment == Environment.STAGING

    def test_empty_environment(self):
        config = RelayConfig.from_env({})

        assert config.environment == Environment.PRODUCTION
        assert config.api_key is None
        assert config.cors.allow_origins == ["*"]
        assert config.rate_limits.trust_proxy is False

    def test_empty_values_are_unset(self):
        config = RelayConfig.from_env({"MCP_API_KEY": "", "RATE_LIMIT_REDIS_URL": ""})

        assert config.api_key is None
        assert config.rate_limits.redis_url is None

    def test_bad_port(self):
        with pytest.raises(ConfigurationError, match="PORT"):
            RelayConfig.from_env({"PORT": "http"})


class TestCredentialValidation:
    """Tests for startup credential checks."""

    def test_complete(self):
        config = RelayConfig.from_env({**FULL_ENV, "APP_ENV": "production"})

        assert config.missing_credentials() == []
        config.validate_credentials()

    def test_missing_in_production_raises(self):
        env = {k: v for k, v in FULL_ENV.items() if k != "HUBSPOT_PRIVATE_APP_TOKEN"}
        config = RelayConfig.from_env({**env, "APP_ENV": "production"})

        with pytest.raises(ConfigurationError, match="HUBSPOT_PRIVATE_APP_TOKEN"):
            config.validate_credentials()

    def test_missing_in_development_warns(self, caplog):
        config = RelayConfig.from_env({"APP_ENV": "development", "MCP_API_KEY": "k"})

        with caplog.at_level(logging.WARNING):
            config.validate_credentials()

        assert config.missing_credentials() == [
            "GOOGLE_CLIENT_ID",
            "GOOGLE_CLIENT_SECRET",
            "GOOGLE_REFRESH_TOKEN",
            "HUBSPOT_PRIVATE_APP_TOKEN",
        ]
        assert caplog.text.count("Missing environment variable") == 4
