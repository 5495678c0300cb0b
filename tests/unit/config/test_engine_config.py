"""Unit tests for EngineConfig and StakeConfig.

Tests for engine configuration including:
- Default value validation
- Environment variable loading and clamping
- Input validation
"""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from movement.config.engine_config import (
    DEFAULT_ENGINE_CONFIG,
    MAX_WINDOW_SECONDS,
    MIN_WINDOW_SECONDS,
    SECONDS_PER_DAY,
    TEST_ENGINE_CONFIG,
    EngineConfig,
    StakeConfig,
)


class TestEngineConfig:
    """Tests for EngineConfig dataclass."""

    class TestDefaults:
        def test_windows(self) -> None:
            config = EngineConfig()
            assert config.hot_window_seconds == SECONDS_PER_DAY
            assert config.trending_window_seconds == 7 * SECONDS_PER_DAY
            assert config.trending_half_life_seconds == SECONDS_PER_DAY

        def test_rate_limits(self) -> None:
            config = EngineConfig()
            assert config.action_window_seconds == SECONDS_PER_DAY
            assert config.actions_per_campaign == 1
            assert config.campaigns_per_window == 5

        def test_nonce_length_is_sixteen_bytes_hex(self) -> None:
            assert EngineConfig().min_nonce_length == 32

        def test_replay_retention_covers_trending_window(self) -> None:
            """Replay keys outlive the trending window by the grace period."""
            config = EngineConfig()
            assert config.replay_retention_seconds == 14 * SECONDS_PER_DAY
            assert config.replay_retention_seconds > config.trending_window_seconds

        def test_predefined_configs(self) -> None:
            assert DEFAULT_ENGINE_CONFIG == EngineConfig()
            assert TEST_ENGINE_CONFIG.min_nonce_length == 2

    class TestValidation:
        @pytest.mark.parametrize(
            "field_name",
            [
                "hot_window_seconds",
                "trending_window_seconds",
                "trending_half_life_seconds",
                "action_window_seconds",
            ],
        )
        def test_window_bounds(self, field_name: str) -> None:
            with pytest.raises(ValueError, match=field_name):
                EngineConfig(**{field_name: MIN_WINDOW_SECONDS - 1})
            with pytest.raises(ValueError, match=field_name):
                EngineConfig(**{field_name: MAX_WINDOW_SECONDS + 1})

        @pytest.mark.parametrize(
            "kwargs",
            [
                {"actions_per_campaign": 0},
                {"campaigns_per_window": 0},
                {"min_nonce_length": 0},
                {"eviction_grace_seconds": -1},
                {"replay_anomaly_threshold": 0},
                {"ingest_queue_size": 0},
                {"ingest_workers": 0},
                {"sweep_interval_seconds": 0},
            ],
        )
        def test_rejects_out_of_range(self, kwargs: dict) -> None:
            with pytest.raises(ValueError):
                EngineConfig(**kwargs)

    class TestFromEnvironment:
        def test_defaults_without_variables(self) -> None:
            with patch.dict(os.environ, {}, clear=True):
                assert EngineConfig.from_environment() == EngineConfig()

        def test_reads_overrides(self) -> None:
            env = {
                "MOVEMENT_HOT_WINDOW_SECONDS": "3600",
                "MOVEMENT_ACTIONS_PER_CAMPAIGN": "3",
                "MOVEMENT_INGEST_WORKERS": "8",
            }
            with patch.dict(os.environ, env, clear=True):
                config = EngineConfig.from_environment()
            assert config.hot_window_seconds == 3600
            assert config.actions_per_campaign == 3
            assert config.ingest_workers == 8

        def test_clamps_out_of_range_values(self) -> None:
            env = {
                "MOVEMENT_HOT_WINDOW_SECONDS": "1",
                "MOVEMENT_CAMPAIGNS_PER_WINDOW": "0",
                "MOVEMENT_INGEST_QUEUE_SIZE": "999999999",
            }
            with patch.dict(os.environ, env, clear=True):
                config = EngineConfig.from_environment()
            assert config.hot_window_seconds == MIN_WINDOW_SECONDS
            assert config.campaigns_per_window == 1
            assert config.ingest_queue_size == 1_000_000

        def test_ignores_non_integer_values(self) -> None:
            with patch.dict(os.environ, {"MOVEMENT_MIN_NONCE_LENGTH": "lots"}, clear=True):
                assert EngineConfig.from_environment().min_nonce_length == 32


class TestStakeConfig:
    """Tests for StakeConfig dataclass."""

    def test_defaults(self) -> None:
        config = StakeConfig()
        assert config.amount == 1000
        assert config.min_amount == 100
        assert config.max_amount == 10000
        assert config.refund_delay_seconds == SECONDS_PER_DAY

    def test_accepts_range_inclusive(self) -> None:
        config = StakeConfig()
        assert config.accepts(100)
        assert config.accepts(10000)
        assert not config.accepts(99)
        assert not config.accepts(10001)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"min_amount": 0},
            {"min_amount": 500, "max_amount": 400, "amount": 450},
            {"amount": 50},
            {"refund_delay_seconds": -1},
        ],
    )
    def test_rejects_invalid(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            StakeConfig(**kwargs)

    def test_environment_amount_clamped_into_range(self) -> None:
        env = {
            "MOVEMENT_STAKE_MIN_AMOUNT": "200",
            "MOVEMENT_STAKE_MAX_AMOUNT": "300",
            "MOVEMENT_STAKE_AMOUNT": "1000",
        }
        with patch.dict(os.environ, env, clear=True):
            config = StakeConfig.from_environment()
        assert config.min_amount == 200
        assert config.max_amount == 300
        assert config.amount == 300

    def test_engine_config_nests_stake_config(self) -> None:
        env = {"MOVEMENT_STAKE_REFUND_DELAY_SECONDS": "120"}
        with patch.dict(os.environ, env, clear=True):
            config = EngineConfig.from_environment()
        assert config.stake.refund_delay_seconds == 120
