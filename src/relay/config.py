"""
Relay Configuration
===================
Configuration classes for the relay server, rate tiers and upstream credentials.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional

from .errors import ConfigurationError


logger = logging.getLogger(__name__)


# =============================================================================
# Environment
# =============================================================================

class Environment(str, Enum):
    """Deployment environment."""
    DEVELOPMENT = "development"
    TEST = "test"
    STAGING = "staging"
    PRODUCTION = "production"

    @property
    def is_production_like(self) -> bool:
        """Production-like environments hide error details from callers."""
        return self in (Environment.STAGING, Environment.PRODUCTION)

    @classmethod
    def parse(cls, value: Optional[str]) -> "Environment":
        """Parse an environment name. Unset means production."""
        if value is None or not value.strip():
            return cls.PRODUCTION

        normalized = value.strip().lower()
        aliases = {
            "dev": cls.DEVELOPMENT,
            "local": cls.DEVELOPMENT,
            "testing": cls.TEST,
            "stage": cls.STAGING,
            "prod": cls.PRODUCTION,
        }
        if normalized in aliases:
            return aliases[normalized]

        try:
            return cls(normalized)
        except ValueError:
            allowed = ", ".join(e.value for e in cls)
            raise ConfigurationError(
                f"Unknown environment '{value}'. Expected one of: {allowed}"
            ) from None


# =============================================================================
# Sub-configs
# =============================================================================

@dataclass
class CORSConfig:
    """CORS configuration."""
    allow_origins: list[str] = field(default_factory=lambda: ["*"])
    allow_methods: list[str] = field(default_factory=lambda: [
        "GET", "POST", "PATCH", "DELETE", "OPTIONS",
    ])
    allow_headers: list[str] = field(default_factory=lambda: [
        "Content-Type", "Authorization",
    ])
    allow_credentials: bool = False
    max_age: int = 600


@dataclass
class RateLimitRule:
    """Fixed-window limit for one tier."""
    name: str
    window_seconds: int = 15 * 60
    max_requests: int = 100
    message: str = "Too many requests, please try again later"


@dataclass
class RateLimitConfig:
    """Rate governor configuration."""
    general: RateLimitRule = field(default_factory=lambda: RateLimitRule(
        name="general",
        window_seconds=15 * 60,
        max_requests=100,
        message="Too many requests, please try again later",
    ))
    write: RateLimitRule = field(default_factory=lambda: RateLimitRule(
        name="write",
        window_seconds=15 * 60,
        max_requests=10,
        message="Too many write requests, please try again later",
    ))
    # Shared counter store for multi-process deployments
    redis_url: Optional[str] = None
    # Key on the first X-Forwarded-For hop instead of the peer address
    trust_proxy: bool = False


@dataclass
class GoogleCredentials:
    """Google OAuth client credentials."""
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    refresh_token: Optional[str] = None
    token_uri: str = "https://oauth2.googleapis.com/token"

    @property
    def is_complete(self) -> bool:
        return bool(self.client_id and self.client_secret and self.refresh_token)


@dataclass
class HubSpotCredentials:
    """HubSpot private app credentials."""
    access_token: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.access_token)


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "json"  # json, console, text
    mask_fields: list[str] = field(default_factory=lambda: [
        "password", "token", "secret", "api_key", "authorization", "refresh_token",
    ])


# =============================================================================
# Relay Config
# =============================================================================

@dataclass
class RelayConfig:
    """Combined relay configuration."""
    # Server settings
    host: str = "0.0.0.0"
    port: int = 5000

    # API settings
    title: str = "Workspace Relay"
    description: str = "Authenticated REST relay over Google Workspace and HubSpot"
    version: str = "1.0.0"
    api_prefix: str = "/api"
    docs_url: str = "/docs"
    openapi_url: str = "/openapi.json"
    public_url: str = "/public"
    public_dir: str = "public"

    # Shared bearer secret
    api_key: Optional[str] = None

    # Sub-configs
    cors: CORSConfig = field(default_factory=CORSConfig)
    rate_limits: RateLimitConfig = field(default_factory=RateLimitConfig)
    google: GoogleCredentials = field(default_factory=GoogleCredentials)
    hubspot: HubSpotCredentials = field(default_factory=HubSpotCredentials)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Environment
    environment: Environment = Environment.PRODUCTION

    @property
    def expose_error_details(self) -> bool:
        """Whether unhandled error messages reach the caller."""
        return not self.environment.is_production_like

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RelayConfig":
        """Create configuration from environment variables."""
        env = os.environ if environ is None else environ

        environment = Environment.parse(env.get("APP_ENV") or env.get("NODE_ENV"))

        origins = [
            origin.strip()
            for origin in env.get("CORS_ORIGIN", "*").split(",")
            if origin.strip()
        ] or ["*"]

        return cls(
            host=env.get("HOST", "0.0.0.0"),
            port=_parse_int(env.get("PORT"), 5000, "PORT"),
            public_dir=env.get("PUBLIC_DIR", "public"),
            api_key=env.get("MCP_API_KEY") or None,
            cors=CORSConfig(allow_origins=origins),
            rate_limits=RateLimitConfig(
                redis_url=env.get("RATE_LIMIT_REDIS_URL") or None,
                trust_proxy=_parse_bool(env.get("TRUST_PROXY")),
            ),
            google=GoogleCredentials(
                client_id=env.get("GOOGLE_CLIENT_ID") or None,
                client_secret=env.get("GOOGLE_CLIENT_SECRET") or None,
                refresh_token=env.get("GOOGLE_REFRESH_TOKEN") or None,
            ),
            hubspot=HubSpotCredentials(
                access_token=env.get("HUBSPOT_PRIVATE_APP_TOKEN") or None,
            ),
            logging=LoggingConfig(
                level=env.get("LOG_LEVEL", "INFO").upper(),
                format=env.get("LOG_FORMAT", "json").lower(),
            ),
            environment=environment,
        )

    def missing_credentials(self) -> list[str]:
        """Names of required variables that are not set."""
        missing = []
        if not self.api_key:
            missing.append("MCP_API_KEY")
        if not self.google.client_id:
            missing.append("GOOGLE_CLIENT_ID")
        if not self.google.client_secret:
            missing.append("GOOGLE_CLIENT_SECRET")
        if not self.google.refresh_token:
            missing.append("GOOGLE_REFRESH_TOKEN")
        if not self.hubspot.access_token:
            missing.append("HUBSPOT_PRIVATE_APP_TOKEN")
        return missing

    def validate_credentials(self) -> None:
        """
        Check that every required credential is present.

        Missing credentials abort startup in production-like environments and
        are only logged elsewhere, so the relay can run with a partial setup.
        """
        missing = self.missing_credentials()
        if not missing:
            return

        if self.environment.is_production_like:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        for name in missing:
            logger.warning(
                "Missing environment variable %s; dependent endpoints will fail", name
            )


def _parse_int(value: Optional[str], default: int, name: str) -> int:
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got '{value}'") from None


def _parse_bool(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")
