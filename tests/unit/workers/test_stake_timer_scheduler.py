"""Unit tests for StakeTimerScheduler."""

import asyncio

import pytest

from movement.domain.models.stake import StakeRecord, StakeState
from movement.workers.stake_timer_scheduler import StakeTimerScheduler
from tests.helpers.engine import EngineHarness
from tests.helpers.fake_time_authority import FakeTimeAuthority


class AdvancingSleeper:
    """Records requested delays and moves the fake clock forward instead of sleeping."""

    def __init__(self, time: FakeTimeAuthority) -> None:
        self.time = time
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        self.time.advance(int(delay))


async def _forever(delay: float) -> None:
    await asyncio.Event().wait()


async def _settle() -> None:
    for _ in range(10):
        await asyncio.sleep(0)


class TestSchedule:
    """Tests for arming timers."""

    @pytest.mark.asyncio
    async def test_timer_refunds_when_due(self, engine: EngineHarness) -> None:
        sleeper = AdvancingSleeper(engine.time)
        scheduler = StakeTimerScheduler(engine.escrow, engine.time, sleep=sleeper)
        stake = await engine.escrow.open_stake("save-park", "k1", 1000, now=engine.time.now())

        scheduler.schedule(stake)
        await _settle()

        assert sleeper.delays == [engine.config.stake.refund_delay_seconds]
        assert (await engine.read_model.get_stake(stake.id)).state is StakeState.REFUNDED
        assert engine.custody.was_refunded(stake.id)
        assert scheduler.pending == frozenset()

    @pytest.mark.asyncio
    async def test_overdue_stake_fires_immediately(self, engine: EngineHarness) -> None:
        sleeper = AdvancingSleeper(engine.time)
        scheduler = StakeTimerScheduler(engine.escrow, engine.time, sleep=sleeper)
        stake = await engine.escrow.open_stake("save-park", "k1", 1000, now=0)
        engine.time.set_time(stake.refundable_at + 100)

        scheduler.schedule(stake)
        await _settle()

        assert sleeper.delays == [0]
        assert (await engine.read_model.get_stake(stake.id)).state is StakeState.REFUNDED

    @pytest.mark.asyncio
    async def test_only_staked_records_scheduled(self, engine: EngineHarness) -> None:
        scheduler = StakeTimerScheduler(engine.escrow, engine.time, sleep=_forever)
        stake = await engine.escrow.open_stake("save-park", "k1", 1000, now=0)
        scheduler.schedule(stake.with_state(StakeState.REFUNDABLE))
        assert scheduler.pending == frozenset()

    @pytest.mark.asyncio
    async def test_orphaned_timer_is_harmless(self, engine: EngineHarness) -> None:
        scheduler = StakeTimerScheduler(
            engine.escrow, engine.time, sleep=AdvancingSleeper(engine.time)
        )
        ghost = StakeRecord.open(
            stake_id="ghost",
            campaign_id="nowhere",
            depositor_key="k1",
            amount=1000,
            staked_at=0,
            refund_delay_seconds=10,
        )
        scheduler.schedule(ghost)
        await _settle()
        assert scheduler.pending == frozenset()


class TestCancel:
    """Tests for cancelling timers."""

    @pytest.mark.asyncio
    async def test_forfeit_cancels_timer(self, engine: EngineHarness) -> None:
        scheduler = StakeTimerScheduler(engine.escrow, engine.time, sleep=_forever)
        stake = await engine.escrow.open_stake("save-park", "k1", 1000, now=0)

        scheduler.schedule(stake)
        assert scheduler.pending == frozenset({stake.id})

        await engine.escrow.forfeit("save-park", "spam", now=10)
        assert scheduler.pending == frozenset()
        await _settle()

    @pytest.mark.asyncio
    async def test_cancel_unknown(self, engine: EngineHarness) -> None:
        scheduler = StakeTimerScheduler(engine.escrow, engine.time)
        assert scheduler.cancel("missing") is False

    @pytest.mark.asyncio
    async def test_shutdown_cancels_everything(self, engine: EngineHarness) -> None:
        scheduler = StakeTimerScheduler(engine.escrow, engine.time, sleep=_forever)
        for campaign in ("a", "b"):
            scheduler.schedule(await engine.escrow.open_stake(campaign, "k1", 1000, now=0))
        assert len(scheduler.pending) == 2

        await scheduler.shutdown()
        assert scheduler.pending == frozenset()
