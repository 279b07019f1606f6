from __future__ import annotations

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(slots=True)
class TimerHandle:
    due_ms: float
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler(ABC):
    """One-shot timers plus "after the next layout pass" callbacks."""

    @abstractmethod
    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        raise NotImplementedError

    @abstractmethod
    def next_frame(self, callback: Callable[[], None]) -> TimerHandle:
        raise NotImplementedError


class ManualScheduler(Scheduler):
    """Deterministic virtual clock.

    Timers fire only when ``advance`` moves the clock past their due time;
    frame callbacks fire on ``flush_frame`` (or on any ``advance``, since a
    layout pass always happens before time moves on).
    """

    def __init__(self, now_ms: float = 0.0) -> None:
        self.now_ms = now_ms
        self._timers: list[tuple[float, int, TimerHandle]] = []
        self._frames: list[TimerHandle] = []
        self._seq = itertools.count()

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        if delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")
        handle = TimerHandle(due_ms=self.now_ms + delay_ms, callback=callback)
        heapq.heappush(self._timers, (handle.due_ms, next(self._seq), handle))
        return handle

    def next_frame(self, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(due_ms=self.now_ms, callback=callback)
        self._frames.append(handle)
        return handle

    @property
    def pending(self) -> int:
        timers = sum(1 for _, _, h in self._timers if not h.cancelled)
        return timers + sum(1 for h in self._frames if not h.cancelled)

    def flush_frame(self) -> int:
        frames, self._frames = self._frames, []
        ran = 0
        for handle in frames:
            if not handle.cancelled:
                handle.callback()
                ran += 1
        return ran

    def advance(self, delta_ms: float) -> int:
        if delta_ms < 0:
            raise ValueError("delta_ms must be >= 0")
        ran = self.flush_frame()
        target = self.now_ms + delta_ms
        while self._timers and self._timers[0][0] <= target:
            due, _, handle = heapq.heappop(self._timers)
            self.now_ms = due
            if not handle.cancelled:
                handle.callback()
                ran += 1
            ran += self.flush_frame()
        self.now_ms = target
        return ran


class AsyncioScheduler(Scheduler):
    """Scheduler backed by an asyncio event loop."""

    # One 60Hz frame.
    FRAME_MS = 1000.0 / 60.0

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop if loop is not None else asyncio.get_running_loop()

    def _schedule(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(due_ms=self._loop.time() * 1000.0 + delay_ms, callback=callback)

        def _fire() -> None:
            if not handle.cancelled:
                handle.callback()

        self._loop.call_later(delay_ms / 1000.0, _fire)
        return handle

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        if delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")
        return self._schedule(delay_ms, callback)

    def next_frame(self, callback: Callable[[], None]) -> TimerHandle:
        return self._schedule(self.FRAME_MS, callback)
