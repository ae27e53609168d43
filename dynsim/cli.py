"""
dynsim - CLI

Example driver: integrates the kinematic bicycle model and prints each
sample as `elapsed: { x, y, yaw, v }`.
"""

import argparse
import logging
import sys

from . import constants as C
from .config import IntegrationConfig
from .main import run_trajectory
from .models import KinematicBicycle, create_default_input, create_initial_state
from .stepper import STEPPERS

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Kinematic bicycle trajectory",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "--span", "-s",
        type=float,
        default=C.MAX_TIME.total_seconds(),
        help="Trajectory span in seconds"
    )
    parser.add_argument(
        "--step", "-d",
        type=float,
        default=C.DT.total_seconds() * 1000,
        help="Integration step in milliseconds"
    )
    parser.add_argument(
        "--method", "-m",
        choices=sorted(STEPPERS),
        default=C.DEFAULT_METHOD,
        help="Integration method"
    )
    parser.add_argument(
        "--form",
        choices=["contract", "direct", "external"],
        default="contract",
        help="Transition function form handed to the system"
    )
    parser.add_argument(
        "--acceleration", "-a",
        type=float,
        default=C.INITIAL_ACCELERATION,
        help="Longitudinal acceleration input (m/s^2)"
    )
    parser.add_argument(
        "--steering",
        type=float,
        default=C.INITIAL_STEERING,
        help="Front steering angle input (rad)"
    )
    parser.add_argument(
        "--no-clip",
        action="store_true",
        help="Keep the nominal step on the last sample (may overshoot the span)"
    )
    parser.add_argument(
        "--show-config",
        action="store_true",
        help="Print the default configuration before running"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress log output"
    )
    return parser.parse_args(argv)


def run(argv=None):
    """Main execution flow. Returns (final_state, log)."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.show_config:
        C.print_config()

    try:
        config = IntegrationConfig(
            step=args.step / 1000.0,
            span=args.span,
            method=args.method,
            clip_final_step=not args.no_clip,
            verbose=False,
        )
        system = KinematicBicycle().make_system(args.form)
        x0 = create_initial_state()
        u = create_default_input(args.acceleration, args.steering)

        logger.info(f"Integrating {system} from {x0}")
        final_state, log = run_trajectory(system, x0, u, config=config)

        for t, state in zip(log.time, log.states):
            print(f"{t:g} s: {state}")

    except Exception as e:
        logger.error(f"Integration failed: {e}", exc_info=True)
        print(f"\n[ERROR] Integration failed: {e}")
        sys.exit(1)

    return final_state, log


def main(argv=None):
    """Console entry point."""
    run(argv)


if __name__ == "__main__":
    main()
