"""Simple harmonic oscillator physics engine.

Closed-form solutions for a damped spring-mass system and a damped simple
pendulum (small-angle approximation). No numerical integration: every
quantity is an explicit function of the parameters and the time.

The kinematics kernel accepts scalars or NumPy arrays, so the live
per-frame path and the batch trajectory path share one set of formulas.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, fields
from enum import Enum
from typing import ClassVar, NamedTuple

import numpy as np


class SimulationVariant(str, Enum):
    """Which oscillator a parameter set describes."""

    SPRING = "spring"
    PENDULUM = "pendulum"


class InvalidParameterError(ValueError):
    """A physical parameter is missing, non-numeric, non-finite or out of range."""

    def __init__(self, name, value, reason):
        super().__init__(f"Invalid parameter {name}={value!r}: {reason}")
        self.name = name
        self.value = value


def _check_real(name, value):
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidParameterError(name, value, "must be a real number")
    value = float(value)
    if not math.isfinite(value):
        raise InvalidParameterError(name, value, "must be finite")
    return value


def _check_positive(name, value):
    value = _check_real(name, value)
    if value <= 0:
        raise InvalidParameterError(name, value, "must be > 0")
    return value


def _check_non_negative(name, value):
    value = _check_real(name, value)
    if value < 0:
        raise InvalidParameterError(name, value, "must be >= 0")
    return value


@dataclass(frozen=True)
class SpringParams:
    """Physical parameters of the spring-mass oscillator."""

    variant: ClassVar[SimulationVariant] = SimulationVariant.SPRING

    mass: float = 2.0
    spring_constant: float = 50.0
    amplitude: float = 1.5
    damping: float = 0.0
    simulation_speed: float = 1.0

    def __post_init__(self):
        _set(self, "mass", _check_positive("mass", self.mass))
        _set(self, "spring_constant",
             _check_positive("spring_constant", self.spring_constant))
        _set(self, "amplitude", _check_non_negative("amplitude", self.amplitude))
        _set(self, "damping", _check_non_negative("damping", self.damping))
        _set(self, "simulation_speed",
             _check_positive("simulation_speed", self.simulation_speed))

    @property
    def initial_displacement(self) -> float:
        return self.amplitude


@dataclass(frozen=True)
class PendulumParams:
    """Physical parameters of the simple pendulum.

    ``angle`` is the initial angular displacement in radians.
    """

    variant: ClassVar[SimulationVariant] = SimulationVariant.PENDULUM

    mass: float = 2.0
    length: float = 2.0
    gravity: float = 9.81
    angle: float = 0.5
    damping: float = 0.0
    simulation_speed: float = 1.0

    def __post_init__(self):
        _set(self, "mass", _check_positive("mass", self.mass))
        _set(self, "length", _check_positive("length", self.length))
        _set(self, "gravity", _check_positive("gravity", self.gravity))
        _set(self, "angle", _check_real("angle", self.angle))
        _set(self, "damping", _check_non_negative("damping", self.damping))
        _set(self, "simulation_speed",
             _check_positive("simulation_speed", self.simulation_speed))

    @property
    def initial_displacement(self) -> float:
        return self.angle


def _set(obj, name, value):
    # frozen dataclass: normalise validated values to float
    object.__setattr__(obj, name, value)


PARAMS_BY_VARIANT = {
    SimulationVariant.SPRING: SpringParams,
    SimulationVariant.PENDULUM: PendulumParams,
}

# External (camelCase) option names -> dataclass field names
_EXTERNAL_NAMES = {
    "mass": "mass",
    "springConstant": "spring_constant",
    "amplitude": "amplitude",
    "length": "length",
    "gravity": "gravity",
    "angle": "angle",
    "damping": "damping",
    "simulationSpeed": "simulation_speed",
}
_INTERNAL_NAMES = {v: k for k, v in _EXTERNAL_NAMES.items()}


def params_from_dict(variant, mapping):
    """Build a validated parameter set from an option mapping.

    Accepts the external camelCase option names as well as the field
    names. Keys that do not belong to the variant are ignored; missing
    keys take the dataclass defaults.

    Raises:
        InvalidParameterError: If any recognised value is invalid.
    """
    cls = PARAMS_BY_VARIANT[SimulationVariant(variant)]
    allowed = {f.name for f in fields(cls)}
    kwargs = {}
    for key, value in mapping.items():
        name = _EXTERNAL_NAMES.get(key, key)
        if name in allowed:
            kwargs[name] = value
    return cls(**kwargs)


def params_to_dict(params) -> dict:
    """Return the external camelCase option mapping for *params*."""
    return {
        _INTERNAL_NAMES[f.name]: getattr(params, f.name) for f in fields(params)
    }


# ---------------------------------------------------------------------------
# Derived quantities
# ---------------------------------------------------------------------------

class DerivedQuantities(NamedTuple):
    """Quantities that depend on the parameters alone."""

    angular_frequency: float  # rad/s
    period: float             # s
    frequency: float          # Hz


class MaxValues(NamedTuple):
    """Peak magnitudes of the undamped motion."""

    max_velocity: float
    max_acceleration: float
    max_energy: float


def angular_frequency(params) -> float:
    """Natural angular frequency: sqrt(k/m) or sqrt(g/L).

    Raises:
        InvalidParameterError: If the result is zero or non-finite.
    """
    if params.variant is SimulationVariant.SPRING:
        num, den = params.spring_constant, params.mass
        num_name, den_name = "spring_constant", "mass"
    else:
        num, den = params.gravity, params.length
        num_name, den_name = "gravity", "length"

    # Guards parameter objects that skipped __post_init__
    _check_positive(num_name, num)
    _check_positive(den_name, den)

    omega = math.sqrt(num / den)
    if omega == 0 or not math.isfinite(omega):
        raise InvalidParameterError(den_name, den, f"angular frequency is {omega}")
    return omega


def derived_quantities(params) -> DerivedQuantities:
    """Compute angular frequency, period T = 2*pi/omega and frequency f = 1/T."""
    omega = angular_frequency(params)
    period = 2 * math.pi / omega
    return DerivedQuantities(omega, period, 1 / period)


def max_values(params, omega=None) -> MaxValues:
    """Peak velocity, acceleration and energy of the undamped oscillation."""
    if omega is None:
        omega = angular_frequency(params)
    a = params.initial_displacement
    if params.variant is SimulationVariant.SPRING:
        max_energy = 0.5 * params.spring_constant * a * a
    else:
        max_energy = (
            params.mass * params.gravity * params.length * (1 - math.cos(a))
        )
    return MaxValues(abs(a) * omega, abs(a) * omega * omega, max_energy)


# ---------------------------------------------------------------------------
# Analytic solver
# ---------------------------------------------------------------------------

class Sample(NamedTuple):
    """Instantaneous state of an oscillator.

    Displacement is metres (spring) or radians (pendulum); velocity and
    acceleration follow. Energies in joules, phase in radians.
    """

    time: float
    displacement: float
    velocity: float
    acceleration: float
    potential_energy: float
    kinetic_energy: float
    total_energy: float
    phase: float


def kinematics(params, omega, t):
    """Displacement, velocity and acceleration at time(s) *t*.

    With damping gamma > 0 the undamped omega is kept inside the
    oscillatory term (exponential-envelope approximation), rather than the
    reduced frequency sqrt(omega**2 - gamma**2).

    Returns:
        (x, v, a), each a float or an array shaped like *t*.
    """
    amp = params.initial_displacement
    gamma = params.damping
    cos_wt = np.cos(omega * t)
    sin_wt = np.sin(omega * t)

    if gamma == 0:
        x = amp * cos_wt
        v = -amp * omega * sin_wt
        a = -amp * omega * omega * cos_wt
        return x, v, a

    decay = amp * np.exp(-gamma * t)
    x = decay * cos_wt
    v = decay * (-omega * sin_wt - gamma * cos_wt)
    a = decay * ((gamma * gamma - omega * omega) * cos_wt
                 + 2 * gamma * omega * sin_wt)
    return x, v, a


def energies(params, x, v):
    """Potential and kinetic energy for displacement *x* and velocity *v*.

    For the pendulum *x* is the angle and *v* the angular velocity; the
    potential uses the exact m*g*L*(1 - cos(theta)) form.
    """
    if params.variant is SimulationVariant.SPRING:
        potential = 0.5 * params.spring_constant * x * x
        kinetic = 0.5 * params.mass * v * v
    else:
        potential = params.mass * params.gravity * params.length * (1 - np.cos(x))
        kinetic = 0.5 * params.mass * (params.length * v) ** 2
    return potential, kinetic


def phase_angle(x, v, omega):
    """Phase atan2(-v, omega*x); 0 where omega is 0."""
    if np.ndim(omega) == 0 and omega == 0:
        return np.zeros_like(np.asarray(x, dtype=np.float64))[()]
    return np.arctan2(-v, omega * x)


def sample_at(params, omega, t) -> Sample:
    """Solve the oscillator at a single time *t* (seconds, any sign)."""
    x, v, a = kinematics(params, omega, t)
    potential, kinetic = energies(params, x, v)
    return Sample(
        time=float(t),
        displacement=float(x),
        velocity=float(v),
        acceleration=float(a),
        potential_energy=float(potential),
        kinetic_energy=float(kinetic),
        total_energy=float(potential + kinetic),
        phase=float(phase_angle(x, v, omega)),
    )


def solve(params, t) -> Sample:
    """Convenience wrapper: validate, derive omega and solve at *t*."""
    return sample_at(params, angular_frequency(params), t)
