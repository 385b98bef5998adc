"""Tests for damping: envelope formulas, energy dissipation, decay to rest."""

import math

import numpy as np
import pytest

from simulation import (
    PendulumParams, SpringParams, angular_frequency, sample_at,
)
from oscillator.trajectory import chart_series, generate_series


class TestZeroDampingUnchanged:
    """With damping=0 the pure SHM formulas apply."""

    def test_spring_matches_shm(self):
        params = SpringParams(mass=2.0, spring_constant=50, amplitude=1.5, damping=0.0)
        omega = angular_frequency(params)
        t = 0.37
        s = sample_at(params, omega, t)
        assert s.displacement == pytest.approx(1.5 * math.cos(omega * t))
        assert s.velocity == pytest.approx(-1.5 * omega * math.sin(omega * t))
        assert s.acceleration == pytest.approx(-1.5 * omega ** 2 * math.cos(omega * t))


class TestEnvelopeFormulas:
    """Damped motion uses the undamped omega inside the envelope."""

    def test_damped_values(self):
        params = PendulumParams(length=2.0, gravity=9.81, angle=0.5, damping=0.05)
        omega = angular_frequency(params)
        gamma = 0.05
        t = 1.7
        decay = 0.5 * math.exp(-gamma * t)
        c, s = math.cos(omega * t), math.sin(omega * t)

        sample = sample_at(params, omega, t)
        assert sample.displacement == pytest.approx(decay * c)
        assert sample.velocity == pytest.approx(decay * (-omega * s - gamma * c))
        assert sample.acceleration == pytest.approx(
            decay * ((gamma ** 2 - omega ** 2) * c + 2 * gamma * omega * s)
        )

    def test_zero_crossings_at_undamped_period(self):
        """Displacement zeros fall at odd multiples of T/4 of the undamped omega."""
        params = SpringParams(mass=2.0, spring_constant=50, amplitude=1.5, damping=1.0)
        omega = angular_frequency(params)
        quarter = (math.pi / 2) / omega
        for k in (1, 3, 5):
            assert abs(sample_at(params, omega, k * quarter).displacement) < 1e-12

    def test_initial_velocity_nonzero(self):
        """v(0) = -gamma * A under the envelope approximation."""
        params = SpringParams(amplitude=1.5, damping=0.1)
        s = sample_at(params, angular_frequency(params), 0.0)
        assert s.displacement == pytest.approx(1.5)
        assert s.velocity == pytest.approx(-0.1 * 1.5)


class TestEnergyDecreases:
    """With damping > 0, total energy decreases along a time grid."""

    def test_spring_energy_non_increasing(self):
        """Holds on the default chart grid (200 steps over 3 periods).

        The envelope formula keeps the undamped omega, so energy is not
        strictly monotonic in continuous time: on much finer grids
        (2000 or 20000 steps) consecutive samples rise by up to ~5e-7.
        This check is tied to the grid spacing.
        """
        params = SpringParams(mass=2.0, spring_constant=50, amplitude=1.5, damping=0.1)
        series = chart_series(params)
        energies = series.total_energy

        assert energies[-1] < energies[0]
        for i in range(1, len(energies)):
            assert energies[i] <= energies[i - 1] + 1e-12, (
                f"Energy increased at step {i}: "
                f"{energies[i - 1]:.10f} -> {energies[i]:.10f}"
            )

    def test_pendulum_energy_decays_overall(self):
        params = PendulumParams(angle=0.5, damping=0.05)
        series = generate_series(params, 400, periods=10)
        energies = series.total_energy
        assert energies[-1] < 0.5 * energies[0]


class TestConvergesToRest:
    """Strong damping drives the oscillator to rest."""

    def test_high_damping_settles(self):
        params = SpringParams(amplitude=1.5, damping=3.0)
        s = sample_at(params, angular_frequency(params), 10.0)
        assert abs(s.displacement) < 1e-10
        assert abs(s.velocity) < 1e-10
        assert s.total_energy < 1e-15

    def test_envelope_bounds_displacement(self):
        params = PendulumParams(angle=0.5, damping=0.2)
        omega = angular_frequency(params)
        for t in np.linspace(0, 20, 101):
            s = sample_at(params, omega, t)
            assert abs(s.displacement) <= 0.5 * math.exp(-0.2 * t) + 1e-15
