"""Simulation session: owns the parameters, clock and sample buffer.

One session per running simulation; nothing here is module-level state.
The time driver's step handler solves the oscillator at the accumulated
simulation time and appends the result to the session's buffer.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Callable

from simulation import Sample, derived_quantities, sample_at
from oscillator.buffer import BUFFER_CAPACITY, SampleBuffer
from oscillator.clock import FrameScheduler, TimeDriver
from oscillator.presets import Preset, apply_preset
from oscillator.trajectory import (
    CHART_PERIODS, DEFAULT_N_STEPS, TRAJECTORY_PERIODS, Series, generate_series,
)

logger = logging.getLogger(__name__)


class SimulationSession:
    """A live oscillator simulation driven by frame callbacks.

    Args:
        params: SpringParams or PendulumParams. Validated immediately.
        scheduler: Frame source for the time driver.
        capacity: Sample buffer capacity.
        sample_interval: If set, record a sample only when the simulation
            time crosses a new multiple of this many seconds; otherwise
            record one sample per frame.
        on_sample: Optional callable invoked with each recorded Sample.

    Raises:
        InvalidParameterError: If *params* is invalid.
    """

    def __init__(
        self,
        params,
        scheduler: FrameScheduler,
        capacity: int = BUFFER_CAPACITY,
        sample_interval: float | None = None,
        on_sample: Callable[[Sample], None] | None = None,
    ):
        if sample_interval is not None and not sample_interval > 0:
            raise ValueError(f"sample_interval must be > 0, got {sample_interval!r}")

        self._derived = derived_quantities(params)
        self._params = params
        self.buffer = SampleBuffer(capacity)
        self.sample_interval = sample_interval
        self.on_sample = on_sample
        self._driver = TimeDriver(scheduler, self._on_step, params.simulation_speed)
        self._closed = False

    # -- Parameters --

    @property
    def params(self):
        return self._params

    @property
    def variant(self):
        return self._params.variant

    @property
    def derived(self):
        return self._derived

    def set_params(self, params) -> None:
        """Replace the parameter set; switching variant clears the buffer.

        Raises:
            InvalidParameterError: The session is left unchanged.
        """
        derived = derived_quantities(params)
        switched = params.variant is not self._params.variant
        self._params = params
        self._derived = derived
        self._driver.speed = params.simulation_speed
        if switched:
            self.buffer.reset()
            logger.info("Switched simulation to %s", params.variant.value)

    def update_params(self, **changes) -> None:
        """Change individual fields, e.g. update_params(damping=0.1)."""
        self.set_params(replace(self._params, **changes))

    def apply_preset(self, preset: Preset) -> None:
        self.set_params(apply_preset(preset, self._params))

    # -- Playback --

    @property
    def time(self) -> float:
        return self._driver.simulation_time

    @property
    def is_playing(self) -> bool:
        return self._driver.running

    @property
    def closed(self) -> bool:
        return self._closed

    def play(self) -> None:
        if self._closed:
            raise RuntimeError("Cannot play a closed simulation session")
        self._driver.start()

    def pause(self) -> None:
        self._driver.stop()

    def toggle(self) -> None:
        if self.is_playing:
            self.pause()
        else:
            self.play()

    def reset(self) -> None:
        """Clear the buffer and return the clock to t = 0."""
        self._driver.reset()
        self.buffer.reset()
        logger.info("Simulation reset")

    def close(self) -> None:
        """Tear down: stop the driver so no frame outlives the session."""
        self._driver.stop()
        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    # -- Outputs --

    def current_sample(self) -> Sample:
        return sample_at(self._params, self._derived.angular_frequency, self.time)

    def trajectory(self, n_steps: int = DEFAULT_N_STEPS,
                   periods: float = TRAJECTORY_PERIODS) -> Series:
        return generate_series(self._params, n_steps, periods)

    def chart_series(self, n_steps: int = DEFAULT_N_STEPS) -> Series:
        return generate_series(self._params, n_steps, CHART_PERIODS)

    def _on_step(self, delta: float) -> None:
        now = self._driver.simulation_time
        latest = self.buffer.latest
        if latest is not None and latest.time >= now:
            # zero-delta frame after play(): keep buffer times strictly increasing
            return
        if self.sample_interval is not None:
            previous = now - delta
            crossed = (
                math.floor(now / self.sample_interval)
                > math.floor(previous / self.sample_interval)
            )
            # the first frame after a reset records t = 0
            if not crossed and len(self.buffer) > 0:
                return

        sample = self.current_sample()
        self.buffer.append(sample)
        if self.on_sample is not None:
            self.on_sample(sample)
