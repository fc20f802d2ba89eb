#!/usr/bin/env python3
"""
Main entry point for the exclusive rho' -> 4 pion analysis.

Supports:
  - Full run over the input files listed in the config (default)
  - Input override via --input
  - Shared run directory via --run-dir
  - Configuration validation via --dry-run
"""

import sys
import os
import logging
import argparse
import yaml

from domain.config import AnalysisConfig
from pipeline.executor import PipelineExecutor
from utils.paths import create_timestamped_run_dir, expand_input_paths


def setup_logging(level: str = "INFO"):
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def load_config(config_path: str) -> dict:
    """Load configuration from YAML file."""
    with open(config_path, 'r') as f:
        return yaml.safe_load(f) or {}


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Exclusive rho' -> 4 pion analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run with config.yaml
  python main.py

  # Run on specific files
  python main.py --input data/AO2D_1.root data/AO2D_2.root

  # Write into an existing directory
  python main.py --run-dir ./output/rho4pi_shared

  # Dry-run to validate config
  python main.py --dry-run
        """
    )

    parser.add_argument(
        "--config", type=str, default="config.yaml",
        help="Path to configuration file (default: config.yaml)"
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Validate configuration without running the analysis"
    )
    parser.add_argument(
        "--run-dir", type=str, default=None,
        help="Pre-created run directory (skips timestamped dir creation)"
    )
    parser.add_argument(
        "--input", type=str, nargs="+", default=None,
        help="Input ROOT files or glob patterns, overriding input.files"
    )

    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    logger.info("=" * 60)
    logger.info("Exclusive rho' -> 4 pion analysis")
    logger.info("=" * 60)

    try:
        logger.info(f"Loading configuration from: {args.config}")
        config_dict = load_config(args.config)
        config = AnalysisConfig.from_dict(config_dict)

        if args.input:
            config = config.with_input_files(expand_input_paths(args.input))
        logger.info("Configuration loaded and validated successfully")

        enabled = [
            name for name in ("do_data", "do_fast", "do_mc_gen", "do_mc_reco", "do_tof_qa")
            if getattr(config, name)
        ]

        if args.dry_run:
            logger.info("Dry run mode - configuration is valid, exiting")
            logger.info(f"Enabled processes: {enabled}")
            logger.info(f"Input files: {len(config.input.files)}")
            return 0

        # Determine run directory
        if args.run_dir:
            run_dir = args.run_dir
            os.makedirs(run_dir, exist_ok=True)
            logger.info(f"Using run directory: {run_dir}")
        else:
            base_output = config_dict.get('run_metadata', {}).get('base_output_dir', './output')
            run_dir = create_timestamped_run_dir(base_output, config.run_name)
            logger.info(f"Created timestamped run directory: {run_dir}")

        logger.info(f"Enabled processes: {enabled}")
        executor = PipelineExecutor(config)
        executor.run(run_dir)

        if executor.failed_files and len(executor.failed_files) == len(config.input.files):
            logger.error("✗ No input file could be read")
            return 1

        logger.info("✓ Analysis completed successfully")
        return 0

    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
