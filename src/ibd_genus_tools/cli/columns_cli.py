#!/usr/bin/env python3
"""
IBD Genus Tools Column Module

Reduces taxonomy-annotated column headers (e.g. 'k__Bacteria;...;g__Dorea;s__sp.')
of a wide count table to bare genus names and writes genera_only_counts.tsv.
"""

import sys
import argparse
import logging

from ibd_genus_tools.logger import setup_logger
from ibd_genus_tools.core.pipeline import normalize_genus_table

logger = logging.getLogger('ibd_genus_tools')

def parse_args(argv=None):
    """Parse command line arguments for the column module."""
    parser = argparse.ArgumentParser(
        prog="ibd-genus-tools columns",
        description="Reduce taxonomy column headers of a wide count table to genus names"
    )
    parser.add_argument("--genus-table", required=True,
                      help="Wide count table with a Sample column and taxonomy-annotated columns")
    parser.add_argument("--output-dir", default=".",
                      help="Directory for genera_only_counts.tsv (default: current directory)")
    parser.add_argument("--log-file",
                      help="Path to log file")
    parser.add_argument("--log-level", default="INFO",
                      choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                      help="Logging level")
    return parser.parse_args(argv)

def main(argv=None):
    """Main function to normalize genus column names."""
    args = parse_args(argv)
    setup_logger(args.log_file, getattr(logging, args.log_level.upper()))

    try:
        genera_only = normalize_genus_table(args.genus_table, args.output_dir)
    except (FileNotFoundError, RuntimeError, ValueError) as e:
        logger.error(f"Column normalization failed: {str(e)}")
        return 1

    logger.info(f"Wrote {genera_only.shape[1] - 1} genus columns for {genera_only.shape[0]} samples")
    return 0

if __name__ == "__main__":
    sys.exit(main())
