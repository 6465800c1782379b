"""Command-line entry point for the classification pipeline."""

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from loguru import logger

from .exceptions import PipelineError
from .pipeline import ClassificationPipeline
from .utils import Config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Train a neural network and a random forest on WDBC and compare them"
    )

    parser.add_argument(
        'config',
        type=str,
        nargs='?',
        default=None,
        help='Path to configuration file (YAML); built-in defaults if omitted'
    )

    parser.add_argument(
        '--data',
        type=str,
        default=None,
        help='Path or URL of the header-less WDBC data file'
    )

    parser.add_argument(
        '--train-fraction',
        type=float,
        default=None,
        help='Fraction of records used for training, in (0, 1)'
    )

    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed for the split and the models'
    )

    parser.add_argument(
        '--json',
        type=str,
        default=None,
        help='Also write the report as JSON to this path'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    return parser


def configure_logging(debug: bool, log_dir: Optional[Path] = None, run_name: str = 'wdbc') -> Optional[Path]:
    """Log to stderr, and to a timestamped file when ``log_dir`` is given."""
    level = 'DEBUG' if debug else 'INFO'
    logger.remove()
    logger.add(sys.stderr, level=level)

    if log_dir is None:
        return None
    log_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    log_file = log_dir / f"{run_name}_{timestamp}.log"
    logger.add(log_file, level=level)
    return log_file


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    if args.config and not Path(args.config).exists():
        configure_logging(args.debug)
        logger.error(f"Configuration file not found: {args.config}")
        return 1

    config = Config(args.config)
    config.override('data', source=args.data, train_fraction=args.train_fraction, random_state=args.seed)

    output_dir = config.get_output_config().get('output_dir')
    run_name = Path(args.config).stem if args.config else 'wdbc'
    log_file = configure_logging(args.debug, Path(output_dir) / 'logs' if output_dir else None, run_name)
    if log_file:
        logger.info(f"Log file: {log_file}")

    try:
        report = ClassificationPipeline(config).run()
    except PipelineError as e:
        logger.error(f"Training failed: {e}")
        return 1

    print(report.render())

    if args.json:
        json_path = Path(args.json)
        json_path.parent.mkdir(parents=True, exist_ok=True)
        with open(json_path, 'w') as f:
            json.dump(report.to_dict(), f, indent=2)
        logger.info(f"Saved report to {json_path}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
