"""Named parameter presets for both oscillators.

Full presets set every physical parameter of their variant; quick presets
only override a few values and are merged onto the current parameters.
"""

from __future__ import annotations

from typing import NamedTuple

from simulation import SimulationVariant, params_from_dict, params_to_dict

EARTH_GRAVITY = 9.81
MOON_GRAVITY = 1.62
MARS_GRAVITY = 3.71
JUPITER_GRAVITY = 24.79
STANDARD_GRAVITY = 9.80665


class Preset(NamedTuple):
    """A named set of option values (external camelCase keys)."""

    name: str
    variant: SimulationVariant
    values: dict


_SPRING = SimulationVariant.SPRING
_PENDULUM = SimulationVariant.PENDULUM

SPRING_PRESETS = (
    Preset("Soft Spring", _SPRING,
           {"mass": 2.0, "springConstant": 20, "amplitude": 1.5, "damping": 0}),
    Preset("Medium Spring", _SPRING,
           {"mass": 2.0, "springConstant": 50, "amplitude": 1.5, "damping": 0}),
    Preset("Stiff Spring", _SPRING,
           {"mass": 2.0, "springConstant": 100, "amplitude": 1.0, "damping": 0}),
    Preset("Heavy Mass", _SPRING,
           {"mass": 5.0, "springConstant": 50, "amplitude": 1.0, "damping": 0}),
    Preset("Light Mass", _SPRING,
           {"mass": 0.5, "springConstant": 50, "amplitude": 2.0, "damping": 0}),
    Preset("Damped Oscillator", _SPRING,
           {"mass": 2.0, "springConstant": 50, "amplitude": 1.5, "damping": 0.1}),
)

PENDULUM_PRESETS = (
    Preset("Short Pendulum", _PENDULUM,
           {"mass": 2.0, "length": 1.0, "gravity": EARTH_GRAVITY, "angle": 0.5, "damping": 0}),
    Preset("Medium Pendulum", _PENDULUM,
           {"mass": 2.0, "length": 2.0, "gravity": EARTH_GRAVITY, "angle": 0.5, "damping": 0}),
    Preset("Long Pendulum", _PENDULUM,
           {"mass": 2.0, "length": 4.0, "gravity": EARTH_GRAVITY, "angle": 0.3, "damping": 0}),
    Preset("Moon Gravity", _PENDULUM,
           {"mass": 2.0, "length": 2.0, "gravity": MOON_GRAVITY, "angle": 0.5, "damping": 0}),
    Preset("Mars Gravity", _PENDULUM,
           {"mass": 2.0, "length": 2.0, "gravity": MARS_GRAVITY, "angle": 0.5, "damping": 0}),
    Preset("Damped Pendulum", _PENDULUM,
           {"mass": 2.0, "length": 2.0, "gravity": EARTH_GRAVITY, "angle": 0.5, "damping": 0.05}),
)

QUICK_PRESETS = (
    Preset("Light Spring", _SPRING,
           {"mass": 1.0, "springConstant": 30, "amplitude": 1.0}),
    Preset("Heavy Spring", _SPRING,
           {"mass": 5.0, "springConstant": 80, "amplitude": 0.5}),
    Preset("Slow Pendulum", _PENDULUM,
           {"length": 3.0, "mass": 2.0, "angle": 0.3}),
    Preset("Fast Pendulum", _PENDULUM,
           {"length": 1.0, "mass": 1.0, "angle": 0.7}),
)

PRESETS = {p.name: p for p in SPRING_PRESETS + PENDULUM_PRESETS + QUICK_PRESETS}


def get_preset(name: str) -> Preset:
    """Look up a preset by display name (case-insensitive)."""
    try:
        return PRESETS[name]
    except KeyError:
        for preset in PRESETS.values():
            if preset.name.lower() == name.lower():
                return preset
    raise KeyError(f"Unknown preset: {name!r}")


def presets_for(variant) -> list[Preset]:
    variant = SimulationVariant(variant)
    return [p for p in PRESETS.values() if p.variant is variant]


def apply_preset(preset: Preset, params=None):
    """Merge *preset* onto *params* (or onto defaults) and validate.

    If *params* belongs to the other variant, only the preset and the
    shared simulation speed carry over.
    """
    if params is None or params.variant is not preset.variant:
        base = {}
        if params is not None:
            base["simulationSpeed"] = params.simulation_speed
        return params_from_dict(preset.variant, {**base, **preset.values})
    return params_from_dict(preset.variant, {**params_to_dict(params), **preset.values})
