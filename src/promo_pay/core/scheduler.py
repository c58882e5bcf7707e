"""
Scheduled-callback abstraction used by the controllers.

Controllers never talk to wall-clock timers directly. They ask a scheduler
to run a callback soon, later, or repeatedly, and the scheduler decides
*when* and *on which thread* that happens:

- ManualScheduler keeps a virtual clock that only moves when a test (or a
  demo script) calls `advance()`. Nothing happens behind your back.
- ThreadedScheduler uses daemon threads for the waiting part, but only ever
  posts callbacks to a queue. The owner thread executes them by calling
  `run_pending()`, so controller state is mutated from one thread only.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import queue
import threading
from typing import Callable, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class TimerHandle:
    """Returned by `call_later` / `call_repeating`. Cancelling is idempotent."""

    def __init__(self, callback: Callback, interval: Optional[float] = None) -> None:
        self.callback = callback
        self.interval = interval
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._backlog = 0
        self._posted = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def repeating(self) -> bool:
        return self.interval is not None

    def cancel(self) -> None:
        self._cancelled.set()

    def fire(self) -> None:
        # a callback already queued when cancel() ran must not execute
        if not self.cancelled:
            self.callback()

    def mark_due(self) -> bool:
        """Count one more elapsed interval; True if the handle needs posting."""
        with self._lock:
            self._backlog += 1
            if self._posted:
                return False
            self._posted = True
            return True

    def fire_due(self) -> None:
        """Fire once per interval counted by `mark_due` since the last drain."""
        with self._lock:
            count, self._backlog, self._posted = self._backlog, 0, False
        for _ in range(count):
            if self.cancelled:
                break
            self.callback()


class Scheduler:
    def call_soon(self, callback: Callback) -> None:
        raise NotImplementedError

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        raise NotImplementedError

    def call_repeating(self, interval: float, callback: Callback) -> TimerHandle:
        raise NotImplementedError

    def run_pending(self) -> int:
        """Run queued callbacks on the calling thread; return how many ran."""
        raise NotImplementedError

    def shutdown(self) -> None:
        """Cancel every live timer and drop queued work."""
        raise NotImplementedError


class ManualScheduler(Scheduler):
    def __init__(self) -> None:
        self.now: float = 0.0
        self._seq = itertools.count()
        self._timers: List[Tuple[float, int, TimerHandle]] = []
        self._ready: List[Callback] = []

    def call_soon(self, callback: Callback) -> None:
        self._ready.append(callback)

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        handle = TimerHandle(callback)
        self._push(self.now + max(0.0, delay), handle)
        return handle

    def call_repeating(self, interval: float, callback: Callback) -> TimerHandle:
        if interval <= 0:
            raise ValueError("interval must be positive")
        handle = TimerHandle(callback, interval=interval)
        self._push(self.now + interval, handle)
        return handle

    def run_pending(self) -> int:
        ran = 0
        while self._ready:
            callback = self._ready.pop(0)
            callback()
            ran += 1
        return ran

    def advance(self, seconds: float) -> int:
        """Move the virtual clock forward, firing everything that falls due."""
        target = self.now + seconds
        fired = self.run_pending()
        while self._timers and self._timers[0][0] <= target:
            due, _, handle = heapq.heappop(self._timers)
            if handle.cancelled:
                continue
            self.now = due
            handle.fire()
            fired += 1
            if handle.repeating and not handle.cancelled:
                self._push(due + handle.interval, handle)
            fired += self.run_pending()
        self.now = target
        return fired

    def pending_timers(self) -> int:
        return sum(1 for _, _, handle in self._timers if not handle.cancelled)

    def shutdown(self) -> None:
        for _, _, handle in self._timers:
            handle.cancel()
        self._timers.clear()
        self._ready.clear()

    def _push(self, due: float, handle: TimerHandle) -> None:
        heapq.heappush(self._timers, (due, next(self._seq), handle))


class ThreadedScheduler(Scheduler):
    """
    A repeating timer keeps at most one entry in the queue: intervals that
    pass while nobody drains are counted on the handle and fired together
    by the next `run_pending()`.
    """

    def __init__(self) -> None:
        self._queue: "queue.Queue[Callback]" = queue.Queue()
        self._handles: Set[TimerHandle] = set()
        self._handles_lock = threading.Lock()

    def call_soon(self, callback: Callback) -> None:
        self._queue.put(callback)

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        handle = self._track(TimerHandle(callback))

        def _wait() -> None:
            if not handle._cancelled.wait(max(0.0, delay)):
                self._queue.put(handle.fire)
            self._untrack(handle)

        self._spawn(_wait)
        return handle

    def call_repeating(self, interval: float, callback: Callback) -> TimerHandle:
        if interval <= 0:
            raise ValueError("interval must be positive")
        handle = self._track(TimerHandle(callback, interval=interval))

        def _loop() -> None:
            while not handle._cancelled.wait(interval):
                if handle.mark_due():
                    self._queue.put(handle.fire_due)
            self._untrack(handle)

        self._spawn(_loop)
        return handle

    def run_pending(self) -> int:
        ran = 0
        while True:
            try:
                callback = self._queue.get_nowait()
            except queue.Empty:
                return ran
            callback()
            ran += 1

    def pending_callbacks(self) -> int:
        return self._queue.qsize()

    def live_timers(self) -> int:
        with self._handles_lock:
            return len(self._handles)

    def shutdown(self) -> None:
        with self._handles_lock:
            handles = list(self._handles)
            self._handles.clear()
        for handle in handles:
            handle.cancel()
        self._discard_pending()
        logger.debug("Scheduler shut down, cancelled %d timers", len(handles))

    def _discard_pending(self) -> None:
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                return

    def _track(self, handle: TimerHandle) -> TimerHandle:
        with self._handles_lock:
            self._handles.add(handle)
        return handle

    def _untrack(self, handle: TimerHandle) -> None:
        with self._handles_lock:
            self._handles.discard(handle)

    @staticmethod
    def _spawn(target: Callback) -> None:
        thread = threading.Thread(target=target, daemon=True)
        thread.start()
        logger.debug("Started scheduler thread %s", thread.name)
