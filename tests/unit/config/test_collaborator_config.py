"""Unit tests for CollaboratorConfig."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from movement.config.collaborator_config import (
    DEFAULT_COLLABORATOR_TIMEOUT_SECONDS,
    DEFAULT_FIVE_CALLS_API_URL,
    CollaboratorConfig,
)


class TestCollaboratorConfig:
    def test_defaults(self) -> None:
        config = CollaboratorConfig()
        assert config.five_calls_api_url == DEFAULT_FIVE_CALLS_API_URL
        assert config.email_provider is None
        assert config.timeout_seconds == DEFAULT_COLLABORATOR_TIMEOUT_SECONDS

    def test_rejects_unknown_provider(self) -> None:
        with pytest.raises(ValueError, match="email_provider"):
            CollaboratorConfig(email_provider="postmark")

    @pytest.mark.parametrize(
        "kwargs",
        [{"representative_cache_ttl_seconds": -1}, {"timeout_seconds": 0}],
    )
    def test_rejects_out_of_range(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            CollaboratorConfig(**kwargs)


class TestCollaboratorConfigFromEnvironment:
    def test_empty_environment(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            assert CollaboratorConfig.from_environment() == CollaboratorConfig()

    def test_reads_mailgun_settings(self) -> None:
        env = {
            "EMAIL_PROVIDER": " Mailgun ",
            "MAILGUN_API_KEY": "key-1",
            "MAILGUN_DOMAIN": "mg.example.org",
            "EMAIL_FROM_ADDRESS": "team@example.org",
        }
        with patch.dict(os.environ, env, clear=True):
            config = CollaboratorConfig.from_environment()
        assert config.email_provider == "mailgun"
        assert config.mailgun_api_key == "key-1"
        assert config.mailgun_domain == "mg.example.org"
        assert config.email_from_address == "team@example.org"

    def test_unknown_provider_disables_delivery(self) -> None:
        with patch.dict(os.environ, {"EMAIL_PROVIDER": "postmark"}, clear=True):
            assert CollaboratorConfig.from_environment().email_provider is None

    def test_strips_trailing_slash_from_lookup_url(self) -> None:
        env = {"FIVE_CALLS_API_URL": "https://lookup.example.org/v1/"}
        with patch.dict(os.environ, env, clear=True):
            config = CollaboratorConfig.from_environment()
        assert config.five_calls_api_url == "https://lookup.example.org/v1"

    def test_clamps_numeric_settings(self) -> None:
        env = {
            "REPRESENTATIVE_CACHE_TTL_SECONDS": "-5",
            "COLLABORATOR_TIMEOUT_SECONDS": "0",
        }
        with patch.dict(os.environ, env, clear=True):
            config = CollaboratorConfig.from_environment()
        assert config.representative_cache_ttl_seconds == 0
        assert config.timeout_seconds == 1

    def test_empty_credentials_become_none(self) -> None:
        with patch.dict(os.environ, {"SENDGRID_API_KEY": ""}, clear=True):
            assert CollaboratorConfig.from_environment().sendgrid_api_key is None
