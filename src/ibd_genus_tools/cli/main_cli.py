#!/usr/bin/env python3
"""
IBD Genus Tools - Main CLI Interface

Differential abundance of bacterial genera between IBD (UC, CD) and nonIBD samples.

Available Commands:
  run       - Run the full pipeline (reshape, normalize, test, report, plot)
  columns   - Reduce taxonomy column headers of a wide count table to genus names
  stats     - Run statistical tests on previously normalized tables

Example Usage:
  ibd-genus-tools run
  ibd-genus-tools run --counts-file genera.counts.tsv --metadata-file metadata.tsv --genus-table taxa.tsv
  ibd-genus-tools columns --genus-table taxa.tsv --output-dir results
  ibd-genus-tools stats --normalized-file long_format_data_clean_normalized.tsv --metadata-file optimized_metadata_clean.tsv

For more information on any command, use:
  ibd-genus-tools [command] --help
"""

import sys
import argparse
import logging
import warnings

from ibd_genus_tools.cli import run_cli
from ibd_genus_tools.cli import columns_cli
from ibd_genus_tools.cli import stats_cli

logger = logging.getLogger('ibd_genus_tools')

COMMANDS = {
    'run': run_cli.main,
    'columns': columns_cli.main,
    'stats': stats_cli.main,
}

def _print_help():
    parser = argparse.ArgumentParser(
        prog="ibd-genus-tools",
        description="IBD Genus Tools - genus-level differential abundance analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.print_help()

def main(argv=None):
    """
    Main entry point for IBD Genus Tools CLI.

    Dispatches the first argument to the matching command module.
    """
    warnings.filterwarnings("ignore", category=FutureWarning)

    if argv is None:
        argv = sys.argv[1:]

    if not argv or argv[0] in ('--help', '-h'):
        _print_help()
        return 0

    command, rest = argv[0], argv[1:]
    if command not in COMMANDS:
        print(f"Unknown command: {command}", file=sys.stderr)
        print("\nAvailable commands:")
        print("  run      - Run the full pipeline")
        print("  columns  - Reduce taxonomy column headers to genus names")
        print("  stats    - Run statistical tests on normalized tables")
        print("\nFor more information on any command, use:")
        print("  ibd-genus-tools [command] --help")
        return 1

    return COMMANDS[command](rest)

if __name__ == "__main__":
    sys.exit(main())
