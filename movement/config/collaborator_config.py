"""Configuration for external collaborators.

Representative lookup and message delivery are remote services. Their
endpoints and credentials come from the environment (a .env file is
loaded at API startup).

Environment Variables:
- FIVE_CALLS_API_URL: Representative lookup base URL
  (default: https://api.5calls.org/v1)
- FIVE_CALLS_API_KEY: Optional API key sent as a bearer token
- REPRESENTATIVE_CACHE_TTL_SECONDS: Lookup cache TTL (default: 86400)
- EMAIL_PROVIDER: "sendgrid" or "mailgun" (default: unset, delivery disabled)
- EMAIL_FROM_ADDRESS: Sender address for outbound messages
- SENDGRID_API_KEY: SendGrid API key
- MAILGUN_API_KEY: Mailgun API key
- MAILGUN_DOMAIN: Mailgun sending domain
- COLLABORATOR_TIMEOUT_SECONDS: HTTP timeout for collaborator calls (default: 10)
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from movement.config.engine_config import SECONDS_PER_DAY

DEFAULT_FIVE_CALLS_API_URL = "https://api.5calls.org/v1"
DEFAULT_REPRESENTATIVE_CACHE_TTL_SECONDS = SECONDS_PER_DAY
DEFAULT_COLLABORATOR_TIMEOUT_SECONDS = 10

SUPPORTED_EMAIL_PROVIDERS = frozenset({"sendgrid", "mailgun"})


def _get_int_env(key: str, default: int) -> int:
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class CollaboratorConfig:
    """Endpoints and credentials for remote collaborators.

    Attributes:
        five_calls_api_url: Representative lookup base URL.
        five_calls_api_key: Optional lookup API key.
        representative_cache_ttl_seconds: Cache TTL for lookup results.
        email_provider: Selected delivery provider, or None.
        email_from_address: Sender address.
        sendgrid_api_key: SendGrid credential.
        mailgun_api_key: Mailgun credential.
        mailgun_domain: Mailgun sending domain.
        timeout_seconds: HTTP timeout for collaborator calls.
    """

    five_calls_api_url: str = DEFAULT_FIVE_CALLS_API_URL
    five_calls_api_key: str | None = None
    representative_cache_ttl_seconds: int = DEFAULT_REPRESENTATIVE_CACHE_TTL_SECONDS
    email_provider: str | None = None
    email_from_address: str | None = None
    sendgrid_api_key: str | None = None
    mailgun_api_key: str | None = None
    mailgun_domain: str | None = None
    timeout_seconds: int = DEFAULT_COLLABORATOR_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if (
            self.email_provider is not None
            and self.email_provider not in SUPPORTED_EMAIL_PROVIDERS
        ):
            raise ValueError(
                f"email_provider must be one of {sorted(SUPPORTED_EMAIL_PROVIDERS)}, "
                f"got {self.email_provider!r}"
            )
        if self.representative_cache_ttl_seconds < 0:
            raise ValueError("representative_cache_ttl_seconds must be non-negative")
        if self.timeout_seconds < 1:
            raise ValueError("timeout_seconds must be at least 1")

    @classmethod
    def from_environment(cls) -> CollaboratorConfig:
        """Create config from environment variables with defaults."""
        provider = os.environ.get("EMAIL_PROVIDER", "").strip().lower() or None
        if provider not in SUPPORTED_EMAIL_PROVIDERS:
            provider = None
        return cls(
            five_calls_api_url=os.environ.get(
                "FIVE_CALLS_API_URL", DEFAULT_FIVE_CALLS_API_URL
            ).rstrip("/"),
            five_calls_api_key=os.environ.get("FIVE_CALLS_API_KEY") or None,
            representative_cache_ttl_seconds=max(
                0,
                _get_int_env(
                    "REPRESENTATIVE_CACHE_TTL_SECONDS",
                    DEFAULT_REPRESENTATIVE_CACHE_TTL_SECONDS,
                ),
            ),
            email_provider=provider,
            email_from_address=os.environ.get("EMAIL_FROM_ADDRESS") or None,
            sendgrid_api_key=os.environ.get("SENDGRID_API_KEY") or None,
            mailgun_api_key=os.environ.get("MAILGUN_API_KEY") or None,
            mailgun_domain=os.environ.get("MAILGUN_DOMAIN") or None,
            timeout_seconds=max(
                1,
                _get_int_env(
                    "COLLABORATOR_TIMEOUT_SECONDS", DEFAULT_COLLABORATOR_TIMEOUT_SECONDS
                ),
            ),
        )
