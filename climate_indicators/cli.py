"""
Command-line entry point.

Usage:
    climate-indicators
    climate-indicators --output-dir data/ --no-plots
    climate-indicators --config overrides.yaml --verbose
    climate-indicators --list-sources
"""

import argparse
import logging
from typing import List, Optional

from .config import ClimateConfig, get_config, set_config
from .exceptions import ClimateDataError
from .pipeline import build_sources, run_pipeline

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the command line."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="climate-indicators",
        description="Compile global temperature anomalies and ENSO episodes",
    )
    parser.add_argument("--config", help="YAML file with configuration overrides")
    parser.add_argument("--output-dir", help="Directory for CSV and PNG outputs")
    parser.add_argument("--no-plots", action="store_true", help="Skip plot rendering")
    parser.add_argument("--list-sources", action="store_true",
                        help="List configured sources and exit")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable verbose logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = ClimateConfig.from_yaml(args.config) if args.config else get_config()
    except ClimateDataError as e:
        logger.error(str(e))
        return 1

    if args.output_dir:
        config.set("output.output_dir", args.output_dir)
    set_config(config)

    if args.list_sources:
        try:
            sources = build_sources(config)
        except ClimateDataError as e:
            logger.error(str(e))
            return 1
        print("\nAvailable Sources:")
        print("-" * 40)
        for source in sources.values():
            meta = source.get_metadata()
            print(f"  * {meta['column_prefix']:<10} [{meta['source']}] {meta['description']}")
            print(f"      url:      {meta['url']}")
            if meta["baseline"]:
                print(f"      baseline: {meta['baseline']}")
        return 0

    try:
        result = run_pipeline(config, make_plots=False if args.no_plots else None)
    except ClimateDataError as e:
        logger.error(f"Pipeline failed: {e}")
        return 1

    print()
    print("=" * 60)
    print(f"Compiled {len(result.compiled)} months, {len(result.episodes)} ENSO episodes")
    for name, path in result.files.items():
        print(f"  {name:<18} {path}")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
