#!/usr/bin/env python3
"""
═══════════════════════════════════════════════════════════════════════════════
  NAVAL SHELL BALLISTICS — Main Runner
═══════════════════════════════════════════════════════════════════════════════

  Executes the ballistics pipeline:
    1. Atmosphere model check
    2. Reference trajectory (203 mm shell at 15 km)
    3. Solver validation (bisection vs brentq, monotonicity)
    4. Fleet ballistics: modified range, half/full range speed factors
    5. Optional plots and JSON summary

  Usage:
    python main.py                              # built-in demo fleet
    python main.py --input ships.json --output configs/_summary.json
    python main.py --plots outputs --workers 4 --strict -v
═══════════════════════════════════════════════════════════════════════════════
"""

import argparse
import logging
import os
import sys
import time

from shell_ballistics.atmosphere import air_temperature, air_pressure, air_density
from shell_ballistics.factors import RANGE_BUFFER_KM, converted_range
from shell_ballistics.integrator import trace_trajectory
from shell_ballistics.pipeline import (
    VehicleRecord, compute_all, load_vehicles, write_summary,
)
from shell_ballistics.solver import solve_angle_for_range
from shell_ballistics.validation import REFERENCE_SHELLS, run_all_validations


DEMO_FLEET = [
    {
        'name': 'Des Moines', 'class': 'CA', 'nation': 'U.S.A.',
        'baseMaxRange': 15.7, 'hasSpotter': False,
        'shells': {
            'ap': {'muzzleVelocity': 838.0, 'caliber': 203.0,
                   'mass': 152.0, 'dragCoefficient': 0.337},
            'he': {'muzzleVelocity': 823.0, 'caliber': 203.0,
                   'mass': 118.0, 'dragCoefficient': 0.3},
        },
    },
    {
        'name': 'Montana', 'class': 'BB', 'nation': 'U.S.A.',
        'baseMaxRange': 21.5, 'hasSpotter': True,
        'shells': {
            'ap': {'muzzleVelocity': 762.0, 'caliber': 406.0,
                   'mass': 1225.0, 'dragCoefficient': 0.35},
            'he': {'muzzleVelocity': 803.0, 'caliber': 406.0,
                   'mass': 862.0, 'dragCoefficient': 0.37},
        },
    },
    {
        'name': 'Henri IV', 'class': 'CL', 'nation': 'France',
        'baseMaxRange': 16.8, 'hasSpotter': True,
        'shells': {
            'ap': {'muzzleVelocity': 870.0, 'caliber': 240.0,
                   'mass': 220.0, 'dragCoefficient': 0.36},
            'he': {'muzzleVelocity': 870.0, 'caliber': 240.0,
                   'mass': 235.0, 'dragCoefficient': 0.38},
        },
    },
    {
        'name': 'Shimakaze', 'class': 'DD', 'nation': 'Japan',
        'baseMaxRange': 10.0, 'hasSpotter': False,
        'shells': {
            'he': {'muzzleVelocity': 915.0, 'caliber': 127.0,
                   'mass': 23.0, 'dragCoefficient': 0.3},
        },
    },
    {
        'name': 'Hakuryu', 'class': 'CV', 'nation': 'Japan',
        'baseMaxRange': 0.0, 'hasSpotter': False, 'shells': {},
    },
]


def section(title):
    print(f"\n{'─'*60}")
    print(f"  {title}")
    print(f"{'─'*60}")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Shell ballistics and speed factors for a fleet')
    parser.add_argument('-i', '--input',
        action='store',
        help='JSON file with vehicle records (default: built-in demo fleet)')
    parser.add_argument('-o', '--output',
        action='store',
        help='Write the JSON summary to this path')
    parser.add_argument('--plots',
        action='store',
        metavar='DIR',
        help='Save figures into DIR')
    parser.add_argument('-w', '--workers',
        action='store',
        type=int,
        default=1,
        help='Worker processes for the fleet computation (default 1)')
    parser.add_argument('--strict',
        action='store_true',
        help="Skip shells whose target range lies beyond the shell's range envelope")
    parser.add_argument('--skip-validation',
        action='store_true',
        help='Do not run the solver validation tables')
    parser.add_argument('-v', '--verbose',
        action='store_true',
        help='Debug logging')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        level=logging.DEBUG if args.verbose else logging.INFO,
    )
    start_time = time.time()

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 1: Atmosphere
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 1: Lapse-Rate Atmosphere")
    print(f"  {'Alt (m)':>8} {'T (K)':>8} {'P (Pa)':>10} {'ρ (kg/m³)':>11}")
    for h in [0, 100, 500, 1000, 2000, 5000]:
        print(f"  {h:>8} {air_temperature(h):>8.2f} {air_pressure(h):>10.0f} "
              f"{air_density(h):>11.5f}")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 2: Reference trajectory
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 2: Reference Trajectory (203 mm at 15 km)")
    shell = REFERENCE_SHELLS['203mm CA']
    angle = solve_angle_for_range(15000.0, shell)
    path = trace_trajectory(angle, shell)
    print(path.result.summary())
    print(f"  Max altitude : {path.max_altitude:>10.1f} m")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 3: Solver validation
    # ══════════════════════════════════════════════════════════════════════
    if not args.skip_validation:
        section("PHASE 3: Solver Validation")
        run_all_validations(verbose=True)

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 4: Fleet ballistics
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 4: Fleet Ballistics")
    if args.input:
        records = load_vehicles(args.input)
    else:
        records = [VehicleRecord.from_dict(d) for d in DEMO_FLEET]

    report = compute_all(records, strict=args.strict, workers=args.workers)

    print(f"\n  {'Ship':<16} {'Shell':>5} {'Half km':>8} {'Factor':>7} "
          f"{'Max km':>7} {'Factor':>7} {'Units':>11}")
    for name, vehicle in report.results.items():
        for shell_type, sr in vehicle.shells.items():
            units = (f"{converted_range(sr.half_range)}/"
                     f"{converted_range(sr.max_range + RANGE_BUFFER_KM)}")
            print(f"  {name:<16} {shell_type.upper():>5} {sr.half_range:>8.2f} "
                  f"{sr.half_factor:>7.3f} {sr.max_range:>7.2f} "
                  f"{sr.max_factor:>7.3f} {units:>11}")
    print(f"\n  {report.success_count} ships, {report.error_count} errors, "
          f"{len(report.skipped)} skipped")

    if args.output:
        out_dir = os.path.dirname(args.output)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        write_summary(report, args.output)
        print(f"  ✓ Saved: {args.output}")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 5: Plots
    # ══════════════════════════════════════════════════════════════════════
    if args.plots:
        import matplotlib.pyplot as plt
        from shell_ballistics.visualization import (
            ensure_output_dir, plot_atmosphere, plot_factor_curve,
            plot_range_curve, plot_trajectory,
        )

        section("PHASE 5: Plots")
        out = ensure_output_dir(args.plots)
        figures = [
            ('01_atmosphere.png', lambda p: plot_atmosphere(save_path=p)),
            ('02_reference_trajectory.png',
             lambda p: plot_trajectory(path, save_path=p)),
            ('03_range_vs_elevation.png',
             lambda p: plot_range_curve(REFERENCE_SHELLS, save_path=p)),
            ('04_factor_vs_range.png',
             lambda p: plot_factor_curve(shell, [4, 8, 12, 16, 20],
                                         save_path=p)),
        ]
        for filename, plot in figures:
            target = os.path.join(out, filename)
            plt.close(plot(target))
            print(f"  ✓ Saved: {target}")

    print(f"\n  Done in {time.time() - start_time:.1f} s")
    return 0 if report.error_count == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
