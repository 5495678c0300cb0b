"""Unit tests for correlation id management."""

import asyncio
import re

import pytest

from movement.infrastructure.observability.correlation import (
    correlation_id_processor,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)

UUID4 = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$"
)


class TestCorrelationId:
    """Tests for correlation id context handling."""

    def test_generate_is_uuid4(self) -> None:
        assert UUID4.match(generate_correlation_id())

    def test_generated_ids_unique(self) -> None:
        assert len({generate_correlation_id() for _ in range(50)}) == 50

    @pytest.mark.asyncio
    async def test_context_isolated_between_tasks(self) -> None:
        """Each task sees only the id it set."""

        async def worker(value: str) -> str:
            set_correlation_id(value)
            await asyncio.sleep(0)
            return get_correlation_id()

        results = await asyncio.gather(worker("a"), worker("b"))
        assert results == ["a", "b"]


class TestProcessor:
    def test_adds_id_when_set(self) -> None:
        async def run() -> dict:
            set_correlation_id("corr-1")
            return correlation_id_processor(None, "info", {"event": "x"})

        event = asyncio.run(run())
        assert event["correlation_id"] == "corr-1"

    def test_omits_id_when_unset(self) -> None:
        async def run() -> dict:
            set_correlation_id("")
            return correlation_id_processor(None, "info", {"event": "x"})

        assert "correlation_id" not in asyncio.run(run())
