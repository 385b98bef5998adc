"""Batch trajectory generator: precomputed series over whole periods.

Evaluates the analytic solver on a uniform time grid in one vectorized
pass. Independent of the time driver and the sample buffer; identical
inputs always yield identical series.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import Iterator

import numpy as np

from simulation import (
    Sample, derived_quantities, energies, kinematics, phase_angle,
)

DEFAULT_N_STEPS = 200

# Duration multiples of the period used by the two kinds of consumer
TRAJECTORY_PERIODS = 2
CHART_PERIODS = 3


def _readonly(arr: np.ndarray) -> np.ndarray:
    arr = np.ascontiguousarray(arr, dtype=np.float64)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class Series:
    """Immutable columnar sample series.

    Each field is a read-only (N+1,) float64 array. Indexing returns a
    Sample; iteration yields Samples in time order.
    """

    time: np.ndarray
    displacement: np.ndarray
    velocity: np.ndarray
    acceleration: np.ndarray
    potential_energy: np.ndarray
    kinetic_energy: np.ndarray
    total_energy: np.ndarray
    phase: np.ndarray

    def __len__(self) -> int:
        return len(self.time)

    def __getitem__(self, index: int) -> Sample:
        return Sample(*(float(getattr(self, name)[index]) for name in Sample._fields))

    def __iter__(self) -> Iterator[Sample]:
        for i in range(len(self)):
            yield self[i]

    def samples(self) -> tuple[Sample, ...]:
        return tuple(self)

    def as_dict(self) -> dict[str, np.ndarray]:
        return {name: getattr(self, name) for name in Sample._fields}


def time_grid(duration: float, n_steps: int) -> np.ndarray:
    """n_steps + 1 evenly spaced times t_i = (i / n_steps) * duration."""
    return (np.arange(n_steps + 1, dtype=np.float64) / n_steps) * duration


def generate_series(
    params,
    n_steps: int = DEFAULT_N_STEPS,
    periods: float = TRAJECTORY_PERIODS,
) -> Series:
    """Solve the oscillator on a grid spanning *periods* natural periods.

    Args:
        params: SpringParams or PendulumParams.
        n_steps: Number of grid intervals; the series has n_steps + 1 samples.
        periods: Duration as a multiple of the period T.

    Returns:
        Series with read-only arrays.

    Raises:
        InvalidParameterError: If the parameters are invalid.
        ValueError: If n_steps or periods is out of range.
    """
    if isinstance(n_steps, bool) or not isinstance(n_steps, numbers.Integral) or n_steps < 1:
        raise ValueError(f"n_steps must be a positive integer, got {n_steps!r}")
    if (isinstance(periods, bool) or not isinstance(periods, numbers.Real)
            or not math.isfinite(periods) or periods <= 0):
        raise ValueError(f"periods must be a positive finite number, got {periods!r}")
    n_steps = int(n_steps)
    periods = float(periods)

    derived = derived_quantities(params)
    omega = derived.angular_frequency
    t = time_grid(periods * derived.period, n_steps)

    x, v, a = kinematics(params, omega, t)
    potential, kinetic = energies(params, x, v)

    return Series(
        time=_readonly(t),
        displacement=_readonly(x),
        velocity=_readonly(v),
        acceleration=_readonly(a),
        potential_energy=_readonly(potential),
        kinetic_energy=_readonly(kinetic),
        total_energy=_readonly(potential + kinetic),
        phase=_readonly(phase_angle(x, v, omega)),
    )


def chart_series(params, n_steps: int = DEFAULT_N_STEPS) -> Series:
    """Series over three periods, as used by the time-series charts."""
    return generate_series(params, n_steps, CHART_PERIODS)


def phase_space(params, n_steps: int = DEFAULT_N_STEPS):
    """(displacement, velocity) arrays over two periods for phase plots."""
    series = generate_series(params, n_steps, TRAJECTORY_PERIODS)
    return series.displacement, series.velocity
