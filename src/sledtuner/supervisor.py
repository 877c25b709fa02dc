"""Initialization supervisor: when and how often the store (re)initializes.

The host has no blocking waits. Retries are expressed as callbacks
scheduled on a Scheduler, which the host drives from its update loop
(TickScheduler.advance). Each attempt is synchronous and short.

Retry policy: after failed attempt n the next attempt is scheduled
base_delay * n seconds later, up to max_auto_retries attempts. Past the
cap the supervisor stops in EXHAUSTED and waits for retry().
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional

from .constants import (
    BASE_RETRY_DELAY,
    DEFAULT_INVALID_SCENES,
    DEFAULT_VALID_SCENES,
    MAX_AUTO_RETRIES,
)
from .store import InitializationOutcome, ParameterStore

logger = logging.getLogger(__name__)


@dataclass
class ScheduledCall:
    """A pending callback; cancel() prevents it from running."""
    due: float
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler(ABC):
    """Deferred execution provided by the host loop."""

    @abstractmethod
    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        """Run callback after delay seconds; returns a cancellable handle."""


class TickScheduler(Scheduler):
    """Cooperative scheduler advanced explicitly by the host's update pass."""

    def __init__(self, now: float = 0.0):
        self.now = now
        self._pending: List[ScheduledCall] = []

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        call = ScheduledCall(self.now + max(0.0, delay), callback)
        self._pending.append(call)
        return call

    def advance(self, seconds: float) -> int:
        """Move the clock forward and run every call that became due.

        Calls scheduled by a callback run in the same advance if they are
        already due.

        Returns:
            Number of callbacks run
        """
        self.now += seconds
        ran = 0
        while True:
            self._pending = [c for c in self._pending if not c.cancelled]
            due = sorted((c for c in self._pending if c.due <= self.now), key=lambda c: c.due)
            if not due:
                return ran
            call = due[0]
            self._pending.remove(call)
            call.callback()
            ran += 1

    @property
    def pending(self) -> int:
        return sum(1 for c in self._pending if not c.cancelled)


class SupervisorState(str, Enum):
    IDLE = "idle"
    WAITING = "waiting"
    READY = "ready"
    EXHAUSTED = "exhausted"


class InitializationSupervisor:
    """Runs store initialization attempts with capped, delayed retries."""

    def __init__(
        self,
        store: ParameterStore,
        scheduler: Optional[Scheduler] = None,
        max_auto_retries: int = MAX_AUTO_RETRIES,
        base_delay: float = BASE_RETRY_DELAY,
        valid_scenes: Iterable[str] = DEFAULT_VALID_SCENES,
        invalid_scenes: Iterable[str] = DEFAULT_INVALID_SCENES,
    ):
        if max_auto_retries < 1:
            raise ValueError(f"max_auto_retries must be at least 1, got {max_auto_retries}")
        if base_delay < 0:
            raise ValueError(f"base_delay must be non-negative, got {base_delay}")

        self.store = store
        self.scheduler = scheduler if scheduler is not None else TickScheduler()
        self.max_auto_retries = max_auto_retries
        self.base_delay = base_delay
        self.valid_scenes = frozenset(valid_scenes)
        self.invalid_scenes = frozenset(invalid_scenes)

        self.state = SupervisorState.IDLE
        self.last_outcome: Optional[InitializationOutcome] = None
        self._attempts = 0
        self._pending: Optional[ScheduledCall] = None
        self._listeners: List[Callable[[InitializationOutcome], None]] = []
        self._notified = False

    @property
    def attempts(self) -> int:
        return self._attempts

    @property
    def requires_manual_retry(self) -> bool:
        return self.state is SupervisorState.EXHAUSTED

    def add_ready_listener(self, callback: Callable[[InitializationOutcome], None]) -> None:
        """Register callback for the first transition into READY."""
        self._listeners.append(callback)

    def start(self, delay: float = 0.0) -> None:
        """Begin a fresh attempt cycle, immediately or after delay seconds."""
        if self.state is SupervisorState.READY:
            logger.info("Already initialized, skipping re-init")
            return
        self._cancel_pending()
        self._attempts = 0
        if delay > 0:
            self.state = SupervisorState.WAITING
            self._pending = self.scheduler.schedule(delay, self._scheduled_attempt)
        else:
            self.attempt()

    def attempt(self) -> InitializationOutcome:
        """Run one initialization attempt and schedule the next on failure."""
        self._cancel_pending()
        self._attempts += 1
        number = self._attempts
        logger.info(f"Initialization attempt {number}/{self.max_auto_retries}")

        try:
            outcome = self.store.initialize(attempt=number)
        except Exception as e:
            logger.exception(f"Unexpected error during initialization attempt {number}")
            outcome = self.store.record_failure(number, e)
        self.last_outcome = outcome

        if outcome.success:
            self.state = SupervisorState.READY
            self._notify(outcome)
            return outcome

        if number >= self.max_auto_retries:
            self.state = SupervisorState.EXHAUSTED
            logger.error(
                f"Initialization failed after {number} attempts; manual retry required. "
                f"Last: {outcome.summary()}"
            )
            return outcome

        delay = self.base_delay * number
        self.state = SupervisorState.WAITING
        self._pending = self.scheduler.schedule(delay, self._scheduled_attempt)
        logger.warning(f"{outcome.summary()}; retrying in {delay:.1f}s")
        return outcome

    def retry(self) -> InitializationOutcome:
        """Explicit re-trigger: restart the attempt counter and try now."""
        self._cancel_pending()
        self._attempts = 0
        if self.state is not SupervisorState.READY:
            self.state = SupervisorState.IDLE
        return self.attempt()

    def reset(self) -> None:
        """Cancel pending attempts and drop all store state."""
        self._cancel_pending()
        self.store.reset()
        self._attempts = 0
        self.last_outcome = None
        self._notified = False
        self.state = SupervisorState.IDLE

    def is_valid_scene(self, scene_name: str) -> bool:
        return scene_name in self.valid_scenes and scene_name not in self.invalid_scenes

    def on_scene_loaded(self, scene_name: str, delay: Optional[float] = None) -> bool:
        """React to a host scene change.

        Any previous cycle is discarded. Valid scenes start a new cycle
        after delay (base_delay by default).

        Returns:
            Whether a cycle was started
        """
        self.reset()
        if scene_name in self.invalid_scenes:
            logger.info(f"Scene '{scene_name}' is invalid, marking uninitialized")
            return False
        if scene_name not in self.valid_scenes:
            logger.info(f"Scene '{scene_name}' not explicitly marked, marking uninitialized")
            return False
        logger.info(f"Scene '{scene_name}' is valid, auto-initializing")
        self.start(self.base_delay if delay is None else delay)
        return True

    def _scheduled_attempt(self) -> None:
        self._pending = None
        self.attempt()

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _notify(self, outcome: InitializationOutcome) -> None:
        if self._notified:
            return
        self._notified = True
        for callback in list(self._listeners):
            try:
                callback(outcome)
            except Exception:
                logger.exception("Ready listener raised")
