"""Series export: write a precomputed trajectory to disk for charting tools.

Storage format: compressed .npz with one float64 array per Sample field,
plus a "{stem}_meta.json" sidecar holding the variant, the parameters and
the grid settings.

Usage:
    python -m oscillator.export --preset "Soft Spring" --output data/soft.npz
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

import numpy as np

from simulation import (
    Sample, SimulationVariant, derived_quantities, params_from_dict,
    params_to_dict,
)
from oscillator.presets import PRESETS, apply_preset, get_preset
from oscillator.trajectory import (
    CHART_PERIODS, DEFAULT_N_STEPS, Series, generate_series,
)

logger = logging.getLogger(__name__)


def _meta_path(npz_path: Path) -> Path:
    return npz_path.with_name(npz_path.stem + "_meta.json")


def save_series(npz_path: str | Path, params, n_steps: int = DEFAULT_N_STEPS,
                periods: float = CHART_PERIODS) -> Series:
    """Generate a series for *params* and save it with its metadata.

    Returns:
        The Series that was written.
    """
    npz_path = Path(npz_path)
    npz_path.parent.mkdir(parents=True, exist_ok=True)

    series = generate_series(params, n_steps, periods)
    np.savez_compressed(str(npz_path), **series.as_dict())

    derived = derived_quantities(params)
    meta = {
        "version": "1",
        "type": params.variant.value,
        "parameters": params_to_dict(params),
        "n_steps": n_steps,
        "periods": periods,
        "period": derived.period,
        "angular_frequency": derived.angular_frequency,
    }
    with open(_meta_path(npz_path), "w") as f:
        json.dump(meta, f, indent=2)

    logger.info(
        "Saved %d samples (%s, %.3f s) to %s",
        len(series), params.variant.value, periods * derived.period, npz_path,
    )
    return series


def load_series(npz_path: str | Path):
    """Load a series written by save_series().

    Returns:
        (series, params) tuple.

    Raises:
        FileNotFoundError: If the file or its metadata is missing.
        ValueError: If a Sample field is missing from the archive.
    """
    npz_path = Path(npz_path)
    meta_path = _meta_path(npz_path)

    if not npz_path.exists():
        raise FileNotFoundError(f"Series data not found: {npz_path}")
    if not meta_path.exists():
        raise FileNotFoundError(f"Series metadata not found: {meta_path}")

    with open(meta_path) as f:
        meta = json.load(f)
    params = params_from_dict(meta["type"], meta["parameters"])

    arrays = {}
    with np.load(str(npz_path)) as data:
        for name in Sample._fields:
            if name not in data.files:
                raise ValueError(f"Series file {npz_path} has no {name!r} array")
            arr = np.array(data[name], dtype=np.float64)
            arr.setflags(write=False)
            arrays[name] = arr

    return Series(**arrays), params


def main(argv=None) -> None:
    """CLI entry point for series export."""
    parser = argparse.ArgumentParser(
        description="Export a precomputed oscillator series to .npz.",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        help="Preset to export",
    )
    source.add_argument(
        "--variant",
        choices=[v.value for v in SimulationVariant],
        default=SimulationVariant.SPRING.value,
        help="Export default parameters of this oscillator (default: spring)",
    )
    parser.add_argument(
        "--steps",
        type=int,
        default=DEFAULT_N_STEPS,
        help=f"Number of grid intervals (default: {DEFAULT_N_STEPS})",
    )
    parser.add_argument(
        "--periods",
        type=float,
        default=CHART_PERIODS,
        help=f"Duration in periods (default: {CHART_PERIODS})",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="data/series.npz",
        help="Output path for the .npz file (default: data/series.npz)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.preset:
        params = apply_preset(get_preset(args.preset))
    else:
        params = params_from_dict(args.variant, {})

    save_series(args.output, params, args.steps, args.periods)


if __name__ == "__main__":
    main()
