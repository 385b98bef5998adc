"""Entry point for the SHM Explorer live simulation.

Runs a simulation session on a Qt event loop without a window, logging
telemetry once per second of wall-clock time. The session can be saved
to a JSON record store when the run ends.
"""

import argparse
import logging
import sys
from dataclasses import replace

from PyQt6.QtCore import QCoreApplication, QTimer

from simulation import SimulationVariant, params_from_dict
from oscillator.clock import QtFrameScheduler
from oscillator.presets import PRESETS, apply_preset, get_preset
from oscillator.session import SimulationSession
from oscillator.store import SimulationStore

logger = logging.getLogger(__name__)


def build_params(args):
    if args.preset:
        params = apply_preset(get_preset(args.preset))
    else:
        params = params_from_dict(args.variant, {})
    if args.speed is not None:
        params = replace(params, simulation_speed=args.speed)
    return params


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Run a live spring or pendulum simulation.",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--preset", choices=sorted(PRESETS))
    source.add_argument(
        "--variant",
        choices=[v.value for v in SimulationVariant],
        default=SimulationVariant.SPRING.value,
    )
    parser.add_argument("--duration", type=float, default=10.0,
                        help="Wall-clock run time in seconds (default: 10)")
    parser.add_argument("--speed", type=float, default=None,
                        help="Simulation speed multiplier")
    parser.add_argument("--fps", type=int, default=QtFrameScheduler.FPS)
    parser.add_argument("--save", metavar="TITLE",
                        help="Save the session under this title when done")
    parser.add_argument("--store", default="data/saved_simulations.json",
                        help="Record store path (default: data/saved_simulations.json)")
    return parser.parse_args(argv)


def main(argv=None):
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )
    args = parse_args(argv)

    app = QCoreApplication(sys.argv)
    params = build_params(args)
    session = SimulationSession(params, QtFrameScheduler(args.fps))
    logger.info(
        "Running %s: omega=%.4f rad/s, T=%.4f s",
        params.variant.value,
        session.derived.angular_frequency,
        session.derived.period,
    )

    def _report():
        s = session.buffer.latest
        if s is None:
            return
        logger.info(
            "t=%.3f s  x=%+.4f  v=%+.4f  E=%.4f J  (%d samples)",
            s.time, s.displacement, s.velocity, s.total_energy, len(session.buffer),
        )

    telemetry = QTimer()
    telemetry.setInterval(1000)
    telemetry.timeout.connect(_report)
    telemetry.start()

    QTimer.singleShot(int(args.duration * 1000), app.quit)

    with session:
        session.play()
        app.exec()
        telemetry.stop()
        _report()

    if args.save:
        store = SimulationStore(args.store)
        store.save_session(args.save, session)


if __name__ == "__main__":
    main()
