"""Test helpers for Movement engine tests.

Helpers:
    FakeTimeAuthority: Controllable clock for deterministic tests
    EngineHarness / build_engine: Services wired over in-memory adapters
    events: Builders for raw relay events

Usage:
    from tests.helpers import FakeTimeAuthority, build_engine
"""

from tests.helpers.engine import EngineHarness, build_engine
from tests.helpers.fake_time_authority import FakeTimeAuthority

__all__ = ["EngineHarness", "FakeTimeAuthority", "build_engine"]
