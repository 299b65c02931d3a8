"""Restart-safe stopwatch with a recurring asyncio tick.

States: Stopped and Running. The persisted snapshot keeps the elapsed time
accumulated before the current run plus the wall-clock start of that run, so
a restarted process recomputes the live value from ``startTs`` and time spent
unloaded is counted.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

from worktrack.models import TimerSnapshot
from worktrack.store.persistent import PersistentStore

logger = logging.getLogger(__name__)

TIMER_KEY = "timer"

Clock = Callable[[], int]
TickListener = Callable[[int], None]


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


def format_elapsed(elapsed_ms: int | float) -> str:
    """``HH:MM:SS``; hours keep counting past 24."""
    total_sec = int(elapsed_ms // 1000)
    h, rem = divmod(total_sec, 3600)
    m, s = divmod(rem, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


class TimerService:
    """Elapsed-time counter that survives process restarts."""

    def __init__(
        self,
        store: PersistentStore,
        *,
        tick_interval: float = 1.0,
        persist_on_tick: bool = True,
        clock: Clock = wall_clock_ms,
    ) -> None:
        if tick_interval <= 0:
            raise ValueError(f"tick_interval must be positive, got {tick_interval}")
        self._store = store
        self._tick_interval = tick_interval
        self._persist_on_tick = persist_on_tick
        self._clock = clock
        self._listeners: list[TickListener] = []
        self._task: asyncio.Task | None = None
        self._stop: asyncio.Event | None = None

        snapshot = TimerSnapshot.from_dict(store.load(TIMER_KEY, None))
        self._base_ms = snapshot.elapsed_ms  # accumulated before the current run
        self._start_ts = snapshot.start_ts
        self._high_water = self._base_ms
        self.displayed_ms = self.elapsed_ms

        if self.is_running:
            logger.info(
                "Timer was running at shutdown; resuming from startTs=%d (%s)",
                self._start_ts,
                self.formatted(),
            )
            self._schedule()

    # ── State ────────────────────────────────────────────────

    @property
    def is_running(self) -> bool:
        return self._start_ts is not None

    @property
    def start_ts(self) -> int | None:
        return self._start_ts

    @property
    def elapsed_ms(self) -> int:
        """Live elapsed time. Never decreases while running."""
        if self._start_ts is None:
            return self._base_ms
        live = self._base_ms + max(0, self._clock() - self._start_ts)
        self._high_water = max(self._high_water, live)
        return self._high_water

    def formatted(self) -> str:
        return format_elapsed(self.elapsed_ms)

    def snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(
            is_running=self.is_running,
            start_ts=self._start_ts,
            elapsed_ms=self._base_ms,
        )

    def add_listener(self, listener: TickListener) -> None:
        """Call ``listener(elapsed_ms)`` on every tick."""
        self._listeners.append(listener)

    # ── Transitions ──────────────────────────────────────────

    def start(self) -> None:
        if self.is_running:
            logger.debug("Timer already running")
            return
        self._start_ts = self._clock()
        self._high_water = self._base_ms
        self._persist()
        self._schedule()
        logger.info("Timer started at %s", format_elapsed(self._base_ms))

    def pause(self) -> None:
        if not self.is_running:
            logger.debug("Timer already paused")
            return
        self._base_ms = self.elapsed_ms
        self._start_ts = None
        self._cancel()
        self.displayed_ms = self._base_ms
        self._persist()
        logger.info("Timer paused at %s", format_elapsed(self._base_ms))

    def tick(self) -> int | None:
        """Refresh the displayed value and persist the running snapshot.

        The persisted ``elapsedMs`` is the pre-run base, not the live value.
        """
        if not self.is_running:
            return None
        value = self.elapsed_ms
        if self._persist_on_tick:
            self._persist()
        self.displayed_ms = value
        for listener in self._listeners:
            try:
                listener(value)
            except Exception as e:
                logger.error("Timer tick listener failed: %s", e)
        return value

    def reload(self) -> None:
        """Adopt the stored snapshot written by another session sharing the storage."""
        snapshot = TimerSnapshot.from_dict(self._store.load(TIMER_KEY, None))
        if snapshot == self.snapshot():
            return
        was_running = self.is_running
        self._base_ms = snapshot.elapsed_ms
        self._start_ts = snapshot.start_ts
        self._high_water = self._base_ms
        self.displayed_ms = self.elapsed_ms
        if not self.is_running:
            self._cancel()
        elif not was_running:
            self._schedule()
        logger.info(
            "Timer reloaded from storage: %s %s",
            self.formatted(),
            "running" if self.is_running else "paused",
        )

    def _persist(self) -> bool:
        return self._store.save(TIMER_KEY, self.snapshot().to_dict())

    # ── Recurring tick ───────────────────────────────────────

    @property
    def ticking(self) -> bool:
        return self._task is not None and not self._task.done()

    def ensure_ticking(self) -> None:
        """Schedule the tick if running without one (e.g. restored outside a loop)."""
        if self.is_running and not self.ticking:
            self._schedule()

    def _schedule(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; timer tick not scheduled")
            return
        self._cancel()
        self._stop = asyncio.Event()
        self._task = loop.create_task(self._run(self._stop))

    async def _run(self, stop: asyncio.Event) -> None:
        while not stop.is_set():
            try:
                await asyncio.wait_for(stop.wait(), timeout=self._tick_interval)
                break
            except asyncio.TimeoutError:
                pass
            self.tick()

    def _cancel(self) -> None:
        if self._stop is not None:
            self._stop.set()
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._stop = None

    def close(self) -> None:
        """Teardown: cancel the tick, leave the timer state as it is."""
        self._cancel()
