#!/usr/bin/env python3
"""
Command-line runner for H-infinity controller synthesis.

Loads a generalized plant (JSON file or built-in benchmark), synthesizes an
SB10FD controller at a fixed gamma or searches for the smallest feasible
gamma, prints a summary and saves the result.

Plant file format:
    {
        "name": "my_plant",
        "A": [[...]], "B": [[...]], "C": [[...]], "D": [[...]],
        "ncon": 1, "nmeas": 1,
        "synthesis": {"gamma": 10.0, "tol": 0.0},
        "gamma_search": {"gamma_min": 0.1, "gamma_max": 100.0}
    }

Usage:
    python -m hinf_synthesis.runner --benchmark sb10fd_example --gamma 15
    python -m hinf_synthesis.runner --plant plant.json --search
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence, Tuple

from hinf_synthesis.control_design import (
    BENCHMARK_GAMMAS,
    ControllerDesigner,
    GammaSearchConfig,
    PlantModel,
    PlantModeler,
    SynthesisConfig,
    bisect_gamma
)
from hinf_synthesis.core.slicot import SlicotBindingError
from hinf_synthesis.core.synthesis_logger import LoggerConfig, SynthesisLogger


def load_plant_file(plant_path: Path) -> Tuple[PlantModel, dict]:
    """Load a plant and its optional run settings from JSON."""
    with open(plant_path, 'r') as f:
        raw = json.load(f)

    missing = [key for key in ('A', 'B', 'C', 'D', 'ncon', 'nmeas') if key not in raw]
    if missing:
        raise ValueError(f"Plant file {plant_path} is missing keys: {missing}")

    plant = PlantModel(raw['A'], raw['B'], raw['C'], raw['D'],
                       raw['ncon'], raw['nmeas'],
                       name=raw.get('name', plant_path.stem))
    return plant, raw


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="H-infinity (sub)optimal controller synthesis with SLICOT SB10FD",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--plant",
        type=Path,
        help="JSON file with A, B, C, D, ncon, nmeas"
    )
    source.add_argument(
        "--benchmark",
        type=str,
        choices=sorted(BENCHMARK_GAMMAS),
        help="Built-in benchmark plant"
    )
    parser.add_argument(
        "--gamma",
        type=float,
        default=None,
        help="Closed-loop H-infinity bound (default: from plant file or benchmark)"
    )
    parser.add_argument(
        "--search",
        action="store_true",
        help="Bisect for the smallest feasible gamma instead of a fixed-gamma design"
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("synthesis_results"),
        help="Directory for JSON/CSV results"
    )
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Print the summary only"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.benchmark:
        plant = PlantModeler().get_benchmark(args.benchmark)
        raw = {'synthesis': {'gamma': BENCHMARK_GAMMAS[args.benchmark]}}
    else:
        try:
            plant, raw = load_plant_file(args.plant)
        except (OSError, ValueError) as e:
            print(f"Configuration Error: {e}")
            return 1

    synthesis_settings = dict(raw.get('synthesis', {}))
    if args.gamma is not None:
        synthesis_settings['gamma'] = args.gamma

    print("=" * 60)
    print(f"H-infinity synthesis: {plant.name} "
          f"(n={plant.n}, m={plant.m}, np={plant.p}, ncon={plant.ncon}, nmeas={plant.nmeas})")
    print("=" * 60)

    try:
        config = SynthesisConfig.from_dict(synthesis_settings)
        if args.search:
            search = GammaSearchConfig.from_dict(raw.get('gamma_search', {}))
            found = bisect_gamma(plant, search, config)
            result = found.result
            print(f"Bisection converged in {found.iterations} kernel calls")
        else:
            result = ControllerDesigner().hinfsyn(plant, config=config)
    except (SlicotBindingError, ValueError) as e:
        print(f"\nSYNTHESIS FAILURE: {e}")
        return 1

    print("\n" + "=" * 30)
    print(" SYNTHESIS SUMMARY")
    print("=" * 30)
    print(f"gamma:              {result.gamma:.6g}")
    print(f"Closed-loop norm:   {result.closed_loop_norm:.6g}")
    print(f"Closed-loop stable: {result.stable}")
    for label, value in result.rcond_report().items():
        print(f"rcond {label:<27} {value:.3e}")
    print("=" * 30 + "\n")

    if not args.no_save:
        logger = SynthesisLogger(LoggerConfig(output_dir=args.output_dir))
        logger.set_config(config)
        logger.add_metadata('search', args.search)
        logger.add_result(plant.name, plant, result)
        logger.save()

    return 0


if __name__ == "__main__":
    sys.exit(main())
