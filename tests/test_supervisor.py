"""Tests for the initialization supervisor and its cooperative scheduler."""

import pytest

from sledtuner.constants import MAX_AUTO_RETRIES, ROOT_KEY
from sledtuner.errors import ErrorKind
from sledtuner.store import ParameterStore, StoreState
from sledtuner.supervisor import InitializationSupervisor, SupervisorState, TickScheduler

from conftest import build_sled


@pytest.fixture
def scheduler():
    return TickScheduler()


def make_supervisor(scene, scheduler, **kwargs):
    return InitializationSupervisor(ParameterStore(scene), scheduler=scheduler, **kwargs)


class TestTickScheduler:
    """Deferred callbacks driven by advance()."""

    def test_runs_when_due(self, scheduler):
        calls = []
        scheduler.schedule(2.0, lambda: calls.append("a"))
        assert scheduler.advance(1.0) == 0
        assert scheduler.advance(1.0) == 1
        assert calls == ["a"]

    def test_runs_in_due_order(self, scheduler):
        calls = []
        scheduler.schedule(2.0, lambda: calls.append("late"))
        scheduler.schedule(1.0, lambda: calls.append("early"))
        scheduler.advance(5.0)
        assert calls == ["early", "late"]

    def test_cancel(self, scheduler):
        calls = []
        handle = scheduler.schedule(1.0, lambda: calls.append("x"))
        handle.cancel()
        scheduler.advance(2.0)
        assert calls == []
        assert scheduler.pending == 0


class TestRetryPolicy:
    """Capped retries with growing delays."""

    def test_exhausts_after_max_attempts(self, empty_scene, scheduler):
        supervisor = make_supervisor(empty_scene, scheduler)
        supervisor.start()
        assert supervisor.attempts == 1
        assert supervisor.state is SupervisorState.WAITING

        scheduler.advance(1.0)
        assert supervisor.attempts == 2
        scheduler.advance(1.0)
        assert supervisor.attempts == 2
        scheduler.advance(1.0)
        assert supervisor.attempts == MAX_AUTO_RETRIES

        assert supervisor.state is SupervisorState.EXHAUSTED
        assert supervisor.requires_manual_retry
        assert scheduler.pending == 0
        scheduler.advance(100.0)
        assert supervisor.attempts == MAX_AUTO_RETRIES

    def test_last_outcome_reports_root(self, empty_scene, scheduler):
        supervisor = make_supervisor(empty_scene, scheduler, max_auto_retries=1)
        supervisor.start()
        assert supervisor.last_outcome.kinds[ROOT_KEY] is ErrorKind.ROOT_NOT_FOUND
        assert supervisor.store.state is StoreState.FAILED

    def test_recovers_when_vehicle_appears(self, empty_scene, scheduler):
        supervisor = make_supervisor(empty_scene, scheduler)
        supervisor.start()
        empty_scene.add(build_sled().root)
        scheduler.advance(1.0)
        assert supervisor.state is SupervisorState.READY
        assert supervisor.attempts == 2
        assert scheduler.pending == 0

    def test_manual_retry_after_exhaustion(self, empty_scene, scheduler):
        supervisor = make_supervisor(empty_scene, scheduler, max_auto_retries=2, base_delay=0.5)
        supervisor.start()
        scheduler.advance(0.5)
        assert supervisor.requires_manual_retry

        empty_scene.add(build_sled().root)
        outcome = supervisor.retry()
        assert outcome.success
        assert outcome.attempt == 1
        assert supervisor.state is SupervisorState.READY

    def test_unexpected_errors_become_outcomes(self, sled, scheduler, monkeypatch):
        supervisor = make_supervisor(sled.scene, scheduler, max_auto_retries=1)

        def explode(attempt=1):
            raise RuntimeError("boom")

        monkeypatch.setattr(supervisor.store, "initialize", explode)
        outcome = supervisor.attempt()
        assert not outcome.success
        assert outcome.kinds[ROOT_KEY] is ErrorKind.INTERNAL
        assert "boom" in outcome.errors[ROOT_KEY]
        assert supervisor.store.state is StoreState.FAILED
        assert supervisor.store.last_outcome is outcome

    def test_invalid_policy(self, sled):
        with pytest.raises(ValueError, match="max_auto_retries"):
            InitializationSupervisor(ParameterStore(sled.scene), max_auto_retries=0)


class TestReadyNotification:
    """Completion signal fires once per cycle."""

    def test_fires_once(self, sled, scheduler):
        supervisor = make_supervisor(sled.scene, scheduler)
        seen = []
        supervisor.add_ready_listener(seen.append)
        supervisor.start()
        supervisor.retry()
        assert len(seen) == 1
        assert seen[0].success

    def test_reset_rearms(self, sled, scheduler):
        supervisor = make_supervisor(sled.scene, scheduler)
        seen = []
        supervisor.add_ready_listener(seen.append)
        supervisor.start()
        supervisor.reset()
        assert supervisor.state is SupervisorState.IDLE
        assert supervisor.store.state is StoreState.UNINITIALIZED
        supervisor.start()
        assert len(seen) == 2

    def test_start_when_ready_is_a_no_op(self, sled, scheduler):
        supervisor = make_supervisor(sled.scene, scheduler)
        supervisor.start()
        supervisor.start()
        assert supervisor.attempts == 1


class TestSceneChanges:
    """Scene gating."""

    def test_valid_scene_starts_after_delay(self, sled, scheduler):
        supervisor = make_supervisor(sled.scene, scheduler)
        assert supervisor.on_scene_loaded("Woodland")
        assert supervisor.state is SupervisorState.WAITING
        scheduler.advance(1.0)
        assert supervisor.state is SupervisorState.READY

    @pytest.mark.parametrize("scene_name", ["Garage", "SomewhereElse"])
    def test_other_scenes_reset(self, sled, scheduler, scene_name):
        supervisor = make_supervisor(sled.scene, scheduler)
        supervisor.start()
        assert not supervisor.on_scene_loaded(scene_name)
        assert supervisor.state is SupervisorState.IDLE
        assert supervisor.store.state is StoreState.UNINITIALIZED

    def test_scene_change_cancels_pending_retry(self, empty_scene, scheduler):
        supervisor = make_supervisor(empty_scene, scheduler)
        supervisor.start()
        supervisor.on_scene_loaded("TitleScreen")
        assert scheduler.pending == 0
        scheduler.advance(10.0)
        assert supervisor.attempts == 0
