"""
Pytest configuration and shared fixtures for Movement engine tests.

Testing Standards:
- All async tests use pytest.mark.asyncio (auto mode enabled in pyproject.toml)
- Use AsyncMock for async collaborator mocking
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/
"""

from collections.abc import Iterator

import pytest

from movement.infrastructure.monitoring.metrics import reset_metrics_collector
from tests.helpers.engine import EngineHarness, build_engine
from tests.helpers.fake_time_authority import FakeTimeAuthority


@pytest.fixture(autouse=True)
def fresh_metrics() -> Iterator[None]:
    """Give every test its own metrics registry."""
    reset_metrics_collector()
    yield
    reset_metrics_collector()


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from movement import __version__

    return __version__


@pytest.fixture
def fake_time_authority() -> FakeTimeAuthority:
    """Clock frozen at t=1000."""
    return FakeTimeAuthority(frozen_at=1000)


@pytest.fixture
def engine() -> EngineHarness:
    """Engine over in-memory adapters with the test configuration."""
    return build_engine()
