"""Tests for the effect runner."""
import threading
import time

import pytest

from itemstore.core.effects import (
    EffectPhase,
    EffectRunner,
    FetchError,
    canonical_items,
    failing_fetcher,
)
from itemstore.core.state.actions import ActionType
from itemstore.core.state.commands import Command, FetchItems
from itemstore.types import CANONICAL_NAMES, Failure, Success


class Recorder:
    """Collects dispatched actions."""

    def __init__(self):
        self.actions = []
        self.arrived = threading.Event()

    def __call__(self, action):
        self.actions.append(action)
        self.arrived.set()


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def runner(recorder):
    r = EffectRunner(recorder, delay_seconds=0.02)
    yield r
    r.shutdown()


class TestCanonicalItems:
    def test_names_in_order(self):
        assert [i.name for i in canonical_items()] == list(CANONICAL_NAMES)

    def test_fresh_ids_every_call(self):
        first = canonical_items()
        second = canonical_items()
        assert len({i.id for i in first}) == 5
        assert not {i.id for i in first} & {i.id for i in second}

    def test_failing_fetcher_raises(self):
        with pytest.raises(FetchError, match="offline"):
            failing_fetcher("offline")()


class TestFetchEffect:
    """FetchItems settles after the delay and dispatches one completion."""

    def test_success_dispatches_completion(self, runner, recorder):
        effect_id = runner.run(FetchItems(generation=3))
        assert effect_id is not None
        assert runner.wait_idle(timeout=2.0)

        assert len(recorder.actions) == 1
        action = recorder.actions[0]
        assert action.action_type is ActionType.REPOSITORY_LOADING_COMPLETE
        assert action.payload["generation"] == 3
        result = action.payload["result"]
        assert isinstance(result, Success)
        assert [i.name for i in result.value] == list(CANONICAL_NAMES)

    def test_failure_dispatches_failure(self, recorder):
        runner = EffectRunner(recorder, delay_seconds=0.01, fetcher=failing_fetcher("offline"))
        runner.run(FetchItems(generation=1))
        assert runner.wait_idle(timeout=2.0)

        result = recorder.actions[0].payload["result"]
        assert isinstance(result, Failure)
        assert result.error.description == "offline"
        assert isinstance(result.error.cause, FetchError)
        assert runner.stats()["failed"] == 1

    def test_does_not_block_caller(self, recorder):
        runner = EffectRunner(recorder, delay_seconds=0.5)
        runner.run(FetchItems(generation=1))
        assert recorder.actions == []
        assert runner.pending_count() == 1
        runner.shutdown()

    def test_delivered_in_settlement_order(self, runner, recorder):
        runner.delay_seconds = 0.3
        runner.run(FetchItems(generation=1))
        runner.delay_seconds = 0.01
        runner.run(FetchItems(generation=2))
        assert runner.wait_idle(timeout=2.0)

        assert [a.payload["generation"] for a in recorder.actions] == [2, 1]

    def test_deliveries_never_overlap(self, recorder):
        overlaps = []

        def slow_dispatch(action):
            settled = [e for e in list(runner._effects.values()) if e.phase is EffectPhase.SETTLED]
            if len(settled) != 1:
                overlaps.append(len(settled))
            time.sleep(0.01)
            recorder(action)

        runner = EffectRunner(slow_dispatch, delay_seconds=0.02)
        for generation in range(1, 7):
            runner.run(FetchItems(generation=generation))
        assert runner.wait_idle(timeout=3.0)

        assert overlaps == []
        assert sorted(a.payload["generation"] for a in recorder.actions) == [1, 2, 3, 4, 5, 6]

    def test_unknown_command_not_started(self, runner):
        class Unknown(Command):
            command_type = "unknown"

        assert runner.run(Unknown()) is None
        assert runner.pending_count() == 0


class TestCancellation:
    """Unsettled effects can be cancelled and never deliver."""

    def test_cancel_before_settle(self, recorder):
        runner = EffectRunner(recorder, delay_seconds=0.2)
        effect_id = runner.run(FetchItems(generation=1))
        assert runner.cancel(effect_id)
        assert runner.wait_idle(timeout=1.0)
        assert not recorder.arrived.wait(0.4)
        assert runner.stats()["cancelled"] == 1

    def test_cancel_unknown_effect(self, runner):
        assert not runner.cancel(999)

    def test_shutdown_cancels_and_rejects(self, recorder):
        runner = EffectRunner(recorder, delay_seconds=0.2)
        runner.run(FetchItems(generation=1))
        runner.run(FetchItems(generation=2))
        assert runner.shutdown() == 2
        assert runner.run(FetchItems(generation=3)) is None
        assert not recorder.arrived.wait(0.4)
