"""Cooperative single-threaded scheduler for the session's periodic activities.

The clock keeps one virtual time source and a set of named periodic timers.
Advancing the clock fires every due callback in chronological order (ties in
registration order), one at a time, so callbacks never overlap and all state
mutation is single-writer. ``run`` drives the same logic from asyncio,
either paced against the wall clock or fast-forwarded.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

TimerCallback = Callable[[float], None]


@dataclass
class PeriodicTimer:
    """One named periodic activity. Due times are ``anchor + k * interval``."""

    name: str
    interval: float
    callback: TimerCallback
    anchor: float
    order: int
    fired: int = 0
    active: bool = True

    @property
    def next_due(self) -> float:
        return self.anchor + (self.fired + 1) * self.interval


class SimulationClock:
    """Discrete-event scheduler over a virtual time source."""

    def __init__(self, start: float = 0.0) -> None:
        self._start = start
        self._now = start
        self._timers: dict[str, PeriodicTimer] = {}

    @property
    def now(self) -> float:
        return self._now

    @property
    def elapsed(self) -> float:
        return self._now - self._start

    @property
    def running(self) -> bool:
        """True while at least one timer is still scheduled."""
        return any(t.active for t in self._timers.values())

    def timer(self, name: str) -> PeriodicTimer:
        return self._timers[name]

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def schedule(self, name: str, interval: float, callback: TimerCallback) -> PeriodicTimer:
        """Fire *callback(now)* every *interval* time units, starting one
        interval from now."""
        if interval <= 0:
            raise ValueError(f"Timer '{name}' needs a positive interval, got {interval}.")
        if name in self._timers and self._timers[name].active:
            raise ValueError(f"Timer '{name}' is already scheduled.")
        timer = PeriodicTimer(
            name=name,
            interval=interval,
            callback=callback,
            anchor=self._now,
            order=len(self._timers),
        )
        self._timers[name] = timer
        return timer

    def cancel(self, name: str) -> None:
        self._timers[name].active = False

    def cancel_all(self) -> None:
        """Cancel every timer as one step; nothing fires after this returns."""
        for timer in self._timers.values():
            timer.active = False
        logger.debug("All timers cancelled at t=%.2f", self._now)

    def next_due(self) -> float | None:
        due = [t.next_due for t in self._timers.values() if t.active]
        return min(due) if due else None

    # ------------------------------------------------------------------
    # Advancing time
    # ------------------------------------------------------------------

    def advance_to(self, target: float) -> int:
        """Fire every callback due at or before *target*. Returns how many fired."""
        fired = 0
        while True:
            due = [t for t in self._timers.values() if t.active and t.next_due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.next_due, t.order))
            self._now = timer.next_due
            timer.fired += 1
            timer.callback(self._now)
            fired += 1
        self._now = max(self._now, target)
        return fired

    def advance(self, delta: float) -> int:
        return self.advance_to(self._now + delta)

    async def run(self, realtime: bool = True, until: float | None = None) -> None:
        """Drive the timers until all are cancelled (or *until* is reached).

        With *realtime* the loop sleeps so that one time unit equals one
        wall-clock second; otherwise it jumps straight to each due time and
        only yields to the event loop between callbacks.
        """
        loop = asyncio.get_running_loop()
        wall_start = loop.time()
        virtual_start = self._now

        while self.running:
            due = self.next_due()
            if due is None:
                break
            if until is not None and due > until:
                self.advance_to(until)
                break
            if realtime:
                delay = wall_start + (due - virtual_start) - loop.time()
                await asyncio.sleep(max(0.0, delay))
            else:
                await asyncio.sleep(0)
            self.advance_to(due)
