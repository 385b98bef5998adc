"""Time driver: frame callbacks -> monotonically increasing simulation time.

The driver does not own a timer. A FrameScheduler delivers frame
callbacks carrying a wall-clock timestamp in milliseconds; the driver
turns successive timestamps into simulation-time deltas scaled by the
simulation speed, independent of how often frames arrive.

Two schedulers are provided:
  QtFrameScheduler: QTimer on the Qt event loop (the live path)
  ManualScheduler: frames fired explicitly (tests, offline replay)
"""

from __future__ import annotations

import logging
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

FrameCallback = Callable[[float], None]


class FrameScheduler(Protocol):
    """Protocol for pluggable frame sources."""

    def request(self, callback: FrameCallback) -> None:
        """Start delivering frames to *callback* until cancel() is called."""
        ...

    def cancel(self) -> None:
        """Stop delivering frames. Safe to call when nothing is pending."""
        ...


class ManualScheduler:
    """Deterministic scheduler driven by explicit fire()/advance() calls."""

    def __init__(self, start_ms: float = 0.0):
        self.now_ms = start_ms
        self._callback: FrameCallback | None = None

    @property
    def pending(self) -> bool:
        return self._callback is not None

    def request(self, callback: FrameCallback) -> None:
        self._callback = callback

    def cancel(self) -> None:
        self._callback = None

    def fire(self, timestamp_ms: float | None = None) -> bool:
        """Deliver one frame. Returns False if no callback is registered."""
        if timestamp_ms is not None:
            self.now_ms = timestamp_ms
        if self._callback is None:
            return False
        self._callback(self.now_ms)
        return True

    def advance(self, ms: float, frames: int = 1) -> None:
        """Fire *frames* frames spaced *ms* milliseconds apart."""
        for _ in range(frames):
            self.fire(self.now_ms + ms)


class QtFrameScheduler:
    """Frame source backed by a repeating QTimer.

    Requires a running Qt event loop (QCoreApplication is enough).
    Timestamps come from a QElapsedTimer started at construction.
    """

    FPS = 60

    def __init__(self, fps: int | None = None):
        from PyQt6.QtCore import QElapsedTimer, QTimer

        self.fps = fps or self.FPS
        self._callback: FrameCallback | None = None
        self._elapsed = QElapsedTimer()
        self._elapsed.start()
        self._timer = QTimer()
        self._timer.setInterval(int(1000 / self.fps))
        self._timer.timeout.connect(self._on_timeout)

    @property
    def pending(self) -> bool:
        return self._timer.isActive()

    def request(self, callback: FrameCallback) -> None:
        self._callback = callback
        self._timer.start()

    def cancel(self) -> None:
        self._timer.stop()
        self._callback = None

    def _on_timeout(self):
        if self._callback is None:
            return
        self._callback(self._elapsed.nsecsElapsed() / 1e6)


class TimeDriver:
    """Accumulates simulation time from frame timestamps.

    on_step(delta) is called once per frame with the simulation-time
    delta in seconds; the first frame after start() only records the
    baseline and reports a zero delta.
    """

    def __init__(
        self,
        scheduler: FrameScheduler,
        on_step: Callable[[float], None],
        speed: float = 1.0,
    ):
        self._scheduler = scheduler
        self._on_step = on_step
        self.speed = speed
        self.simulation_time = 0.0
        self.last_timestamp: float | None = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return
        self.last_timestamp = None
        self._running = True
        self._scheduler.request(self._on_frame)
        logger.debug("Time driver started at t=%.3f s", self.simulation_time)

    def stop(self) -> None:
        if not self._running:
            return
        self._scheduler.cancel()
        self._running = False
        logger.debug("Time driver stopped at t=%.3f s", self.simulation_time)

    def reset(self) -> None:
        """Zero the simulation clock and forget the frame baseline."""
        self.simulation_time = 0.0
        self.last_timestamp = None

    def _on_frame(self, timestamp: float) -> None:
        if not self._running:
            return

        if self.last_timestamp is None:
            delta = 0.0
        else:
            delta = (timestamp - self.last_timestamp) * 0.001 * self.speed
            if delta < 0:
                logger.debug(
                    "Frame clock went backwards by %.3f ms; ignoring",
                    self.last_timestamp - timestamp,
                )
                delta = 0.0

        self.simulation_time += delta
        self.last_timestamp = timestamp
        self._on_step(delta)
