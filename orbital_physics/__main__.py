"""
Command-line interface for orbital_physics.

Usage:
    # List the bundled catalog
    python -m orbital_physics bodies

    # Position of a catalog body 100 days past epoch
    python -m orbital_physics position --body Mars --time 100

    # Position from explicit elements: a e i omega w l0 period
    python -m orbital_physics position --elements 1 0 0 0 0 0 360 --time 90

    # Sample one orbit into a JSON file
    python -m orbital_physics sample --body Earth --steps 360 --output earth.json
"""

import argparse
import logging
import sys

import numpy as np

from orbital_physics.astrodynamics import position
from orbital_physics.bodies import bodies_data, heliocentric_position
from orbital_physics.config import (
    make_propagator_config, SamplerConfig, DEFAULT_STEPS, SOLVER_MODES, REDUCTION_MODES
)
from orbital_physics.host import to_y_up
from orbital_physics.orbital_elements import OrbitalElements, check_elements
from orbital_physics.sampling import OrbitPath

logger = logging.getLogger('orbital_physics')


def _add_common_arguments(parser):
    """
    Arguments shared by the propagating subcommands.

    Parameters
    ----------
    parser : argparse.ArgumentParser
        The subcommand parser to extend
    """
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        '--body',
        type=str,
        help='Name of a body in the catalog'
    )
    source.add_argument(
        '--elements',
        type=float,
        nargs=7,
        metavar=('A', 'E', 'I', 'OMEGA', 'W', 'L0', 'PERIOD'),
        help='Explicit orbital elements (angles in degrees, period in days)'
    )
    parser.add_argument(
        '--solver',
        choices=SOLVER_MODES,
        default='fixed',
        help='Kepler solver: fixed 5-step Newton-Raphson or iterate to convergence (default: fixed)'
    )
    parser.add_argument(
        '--reduction',
        choices=REDUCTION_MODES,
        default='truncate',
        help='Mean anomaly reduction modulo 360 (default: truncate)'
    )
    parser.add_argument(
        '--y-up',
        action='store_true',
        help='Report coordinates in [y, z, x] order for y-up scene graphs'
    )


def _setup_position_parser(subparsers):
    position_parser = subparsers.add_parser(
        'position',
        help='Position of a body at a given time',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m orbital_physics position --body Earth --time 91.3
  python -m orbital_physics position --body Moon --time 10 --heliocentric
  python -m orbital_physics position --elements 1 0.5 10 20 30 0 365.25 --time 0
"""
    )
    _add_common_arguments(position_parser)
    position_parser.add_argument(
        '--time',
        type=float,
        default=0.0,
        help='Days past epoch (default: 0)'
    )
    position_parser.add_argument(
        '--heliocentric',
        action='store_true',
        help='For catalog moons, add the positions of the parent chain'
    )
    position_parser.add_argument(
        '--precision',
        type=int,
        default=12,
        help='Significant digits in the output (default: 12)'
    )
    return position_parser


def _setup_sample_parser(subparsers):
    sample_parser = subparsers.add_parser(
        'sample',
        help='Sample a full orbit as JSON',
    )
    _add_common_arguments(sample_parser)
    sample_parser.add_argument(
        '--steps',
        type=int,
        default=DEFAULT_STEPS,
        help=f'Number of samples over one period (default: {DEFAULT_STEPS})'
    )
    sample_parser.add_argument(
        '--closed',
        action='store_true',
        help='Repeat the starting point at t = period'
    )
    sample_parser.add_argument(
        '--output', '-o',
        type=str,
        default=None,
        help='Output file (default: stdout)'
    )
    return sample_parser


def _setup_bodies_parser(subparsers):
    return subparsers.add_parser('bodies', help='List the bundled catalog')


def _resolve_elements(args, parser) -> tuple:
    if args.body is not None:
        if args.body not in bodies_data:
            parser.error(f"Unknown body '{args.body}'. Known bodies: {', '.join(bodies_data)}")
        return args.body, bodies_data[args.body].elements
    try:
        return None, check_elements(OrbitalElements(*args.elements))
    except ValueError as exc:
        parser.error(str(exc))


def run_position(args, parser):
    config = make_propagator_config(args.solver, args.reduction)
    name, elements = _resolve_elements(args, parser)

    if args.heliocentric:
        if name is None:
            parser.error('--heliocentric requires --body')
        xyz = heliocentric_position(name, args.time, config=config)
    else:
        xyz = position(elements, args.time, config)

    values = [float(c) for c in np.asarray(xyz)]
    if args.y_up:
        values = to_y_up(values)
    logger.info("Position of %s at t=%s days", name or 'elements', args.time)
    print(' '.join(f'{c:.{args.precision}e}' for c in values))


def run_sample(args, parser):
    try:
        sampler = SamplerConfig(steps=args.steps, closed=args.closed)
    except ValueError as exc:
        parser.error(str(exc))
    config = make_propagator_config(args.solver, args.reduction)
    name, elements = _resolve_elements(args, parser)

    path = OrbitPath.from_elements(elements, sampler.steps, closed=sampler.closed, name=name,
                                   config=config)
    if args.y_up:
        path = path.model_copy(update={
            'points': [tuple(to_y_up(p)) for p in path.points]
        })

    if args.output is None:
        path.write(stream=sys.stdout)
    else:
        path.write_to_file(args.output)
        logger.info("Wrote %d points to %s", len(path.points), args.output)


def run_bodies(args, parser):
    print(f"{'Name':<10} {'Parent':<10} {'a':>10} {'e':>8} {'i':>8} {'Period':>10}")
    for body in bodies_data.values():
        el = body.elements
        print(f"{body.name:<10} {body.parent or '-':<10} {el.a:>10.4g} {el.e:>8.4f} "
              f"{el.i:>8.3f} {el.period:>10.3f}")


def main(argv=None):
    """Main entry point for the orbital_physics CLI."""
    parser = argparse.ArgumentParser(
        prog='orbital_physics',
        description="Two-body Kepler propagation of bodies from their orbital elements",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')
    subparsers.required = True

    parsers = {
        'position': _setup_position_parser(subparsers),
        'sample': _setup_sample_parser(subparsers),
        'bodies': _setup_bodies_parser(subparsers),
    }

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(name)s %(levelname)s: %(message)s'
    )

    if args.command == 'position':
        run_position(args, parsers['position'])
    elif args.command == 'sample':
        run_sample(args, parsers['sample'])
    elif args.command == 'bodies':
        run_bodies(args, parsers['bodies'])
    return 0


if __name__ == '__main__':
    sys.exit(main())
