"""
Talking-State Synchronizer - Debounces the speech engine's "is speaking" flag.

Speech engines drop their speaking flag for a few tens of milliseconds
between audio chunks. Gating the mouth on that raw flag makes it flicker,
so the avatar follows a stabilized flag instead:

    SILENT  --rise-->  ACTIVE  --fall-->  HOLDING  --hold expired-->  SILENT
                         ^                   |
                         +-------rise--------+

A rising edge arms the extend deadline; a falling edge drops it and arms the
stop deadline at ``fall + hold_window``. Every edge bumps a generation
counter so a deadline armed before it can never fire after it.
"""

import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from .motion import BASE_FREQUENCY, mouth_amplitude

logger = logging.getLogger(__name__)

EXTEND_WINDOW = 5.0  # seconds of coalescing after speech starts
HOLD_WINDOW = 3.0    # seconds the mouth keeps moving after speech stops


class TalkingPhase(str, Enum):
    SILENT = "silent"
    ACTIVE = "active"
    HOLDING = "holding"


@dataclass(frozen=True)
class TalkingSnapshot:
    """Read-only view of the synchronizer state."""
    phase: TalkingPhase
    raw_speaking: bool
    stabilized_speaking: bool
    last_activity_time: Optional[float]
    pending_extend_deadline: Optional[float]
    pending_stop_deadline: Optional[float]
    generation: int


class TalkingStateSynchronizer:
    """Stabilizes a noisy speaking flag for continuous mouth animation."""

    def __init__(self,
                 extend_window: float = EXTEND_WINDOW,
                 hold_window: float = HOLD_WINDOW,
                 base_frequency: float = BASE_FREQUENCY,
                 clock: Callable[[], float] = time.monotonic,
                 on_change: Optional[Callable[[bool], None]] = None):
        self.extend_window = extend_window
        self.hold_window = hold_window
        self.base_frequency = base_frequency
        self.clock = clock
        self.on_change = on_change

        self._phase = TalkingPhase.SILENT
        self._raw = False
        self._last_activity: Optional[float] = None
        self._extend_deadline: Optional[float] = None
        self._stop_deadline: Optional[float] = None
        self._generation = 0

        self._lock = threading.RLock()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._timers: List[asyncio.Handle] = []

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def phase(self) -> TalkingPhase:
        return self._phase

    @property
    def stabilized_speaking(self) -> bool:
        return self._phase is not TalkingPhase.SILENT

    @property
    def raw_speaking(self) -> bool:
        return self._raw

    def snapshot(self) -> TalkingSnapshot:
        with self._lock:
            return TalkingSnapshot(
                phase=self._phase,
                raw_speaking=self._raw,
                stabilized_speaking=self.stabilized_speaking,
                last_activity_time=self._last_activity,
                pending_extend_deadline=self._extend_deadline,
                pending_stop_deadline=self._stop_deadline,
                generation=self._generation,
            )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def on_raw_speaking_change(self, speaking: bool, now: Optional[float] = None) -> bool:
        """
        Feed the raw flag from the speech engine.

        Accepts repeated values, so it can be driven by events or by polling
        ``is_speaking`` every frame. Returns the stabilized flag.
        """
        with self._lock:
            now = self._now(now)
            before = self.stabilized_speaking
            self._expire(now)

            if speaking:
                self._activate(now)
            elif self._phase is TalkingPhase.ACTIVE:
                self._hold(now)
            self._raw = bool(speaking)

            after = self.stabilized_speaking
        self._notify(before, after)
        return after

    def poll(self, now: Optional[float] = None) -> bool:
        """Advance expired deadlines and return the stabilized flag."""
        with self._lock:
            before = self.stabilized_speaking
            self._expire(self._now(now))
            after = self.stabilized_speaking
        self._notify(before, after)
        return after

    def reset(self):
        """Drop back to silence and cancel pending deadlines."""
        with self._lock:
            before = self.stabilized_speaking
            self._enter_silent()
            self._raw = False
            self._last_activity = None
            self._extend_deadline = None
        self._notify(before, False)

    def _now(self, now: Optional[float]) -> float:
        return self.clock() if now is None else now

    def _activate(self, now: float):
        self._generation += 1
        self._cancel_timers()
        self._phase = TalkingPhase.ACTIVE
        self._last_activity = now
        self._stop_deadline = None
        self._extend_deadline = now + self.extend_window
        self._schedule(self._extend_deadline, now)

    def _hold(self, now: float):
        self._generation += 1
        self._cancel_timers()
        stop_at = now + self.hold_window
        self._phase = TalkingPhase.HOLDING
        self._extend_deadline = None
        self._stop_deadline = stop_at
        self._schedule(stop_at, now)

    def _enter_silent(self):
        self._generation += 1
        self._cancel_timers()
        self._phase = TalkingPhase.SILENT
        self._stop_deadline = None

    def _expire(self, now: float):
        if self._extend_deadline is not None and now >= self._extend_deadline:
            self._extend_deadline = None

        if self._phase is TalkingPhase.HOLDING:
            if self._stop_deadline is None:
                logger.warning("Holding without a stop deadline; resetting talking state to silent")
                self._enter_silent()
                return

            if now >= self._stop_deadline:
                self._enter_silent()
        elif self._phase is TalkingPhase.SILENT and self._stop_deadline is not None:
            logger.warning("Silent with a pending stop deadline; clearing it")
            self._stop_deadline = None

    def _notify(self, before: bool, after: bool):
        if before == after:
            return
        logger.debug(f"Stabilized speaking -> {after}")
        if self.on_change:
            try:
                self.on_change(after)
            except Exception as e:
                logger.error(f"Error in talking state listener: {e}")

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def attach_loop(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        """Let deadlines fire on ``loop`` instead of waiting for ``poll``."""
        self._loop = loop or asyncio.get_running_loop()
        with self._lock:
            deadline = self._stop_deadline or self._extend_deadline
            if deadline is not None:
                self._schedule(deadline, self.clock())

    def detach_loop(self):
        with self._lock:
            self._cancel_timers()
        self._loop = None

    def _schedule(self, deadline: float, now: float):
        if self._loop is None or self._loop.is_closed():
            return
        delay = max(0.0, deadline - now)
        # Edges may arrive from a speech engine thread
        self._timers.append(self._loop.call_soon_threadsafe(
            self._arm_timer, delay, deadline, self._generation))

    def _arm_timer(self, delay: float, deadline: float, generation: int):
        with self._lock:
            if generation != self._generation or self._loop is None:
                return
            self._timers.append(self._loop.call_later(delay, self._on_timer, deadline, generation))

    def _cancel_timers(self):
        for handle in self._timers:
            handle.cancel()
        self._timers.clear()

    def _on_timer(self, deadline: float, generation: int):
        if generation != self._generation:
            logger.debug(f"Ignoring stale talking timer (generation {generation})")
            return
        # The loop may run a timer a clock tick early
        self.poll(max(self.clock(), deadline))

    # ------------------------------------------------------------------
    # Motion
    # ------------------------------------------------------------------

    def current_amplitude(self, t: float) -> float:
        """Mouth amplitude for the frame at elapsed time ``t``."""
        return mouth_amplitude(t, self.stabilized_speaking, self.base_frequency)
