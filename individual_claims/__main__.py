"""Command-line entry point: ``python -m individual_claims``."""

import argparse
from pathlib import Path
import sys
from typing import List, Optional

from .analysis import run_analysis
from .config import Config, ConfigurationError
from .exceptions import ClaimsDataError


def _parse_override(item: str):
    key, sep, value = item.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"Override must be key=value, got '{item}'")
    return key, value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="individual_claims",
        description="Fit individual claim development models, simulate the next period "
        "and write an HTML report",
    )
    parser.add_argument("--config", "-c", type=Path, default=None, help="YAML configuration file")
    parser.add_argument("--data", "-d", type=str, default=None, help="Claims CSV or parquet file")
    parser.add_argument(
        "--synthetic", action="store_true", help="Use generated claims instead of a data file"
    )
    parser.add_argument("--n-sims", "-n", type=int, default=None, help="Number of simulations")
    parser.add_argument("--seed", type=int, default=None, help="Simulation seed")
    parser.add_argument("--output", "-o", type=Path, default=None, help="Report output path")
    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        type=_parse_override,
        default=[],
        metavar="KEY=VALUE",
        help="Override a configuration value, e.g. simulation.chunk_size=500",
    )
    parser.add_argument("--no-report", action="store_true", help="Skip the HTML report")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the analysis from command-line arguments.

    Returns:
        Process exit code.
    """
    args = build_parser().parse_args(argv)

    config = Config.from_yaml(args.config) if args.config else Config()
    overrides = dict(args.overrides)
    if args.synthetic:
        overrides["data.data_path"] = None
    elif args.data:
        overrides["data.data_path"] = args.data
    if args.n_sims is not None:
        overrides["simulation.n_sims"] = args.n_sims
    if args.seed is not None:
        overrides["simulation.seed"] = args.seed

    try:
        if overrides:
            config = config.override(overrides)
        config.setup_logging()
        results = run_analysis(config)
    except (ConfigurationError, ClaimsDataError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(results.summary())
    if not args.no_report:
        path = results.render_report(args.output)
        print(f"\nReport written to {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
