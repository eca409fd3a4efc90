#!/usr/bin/env python3
"""
IBD Genus Tools Statistics Module

Runs the Welch t-test and Kruskal-Wallis stage on tables written by a
previous pipeline run, without re-reading the wide counts table.
"""

import sys
import time
import argparse
import logging

from ibd_genus_tools.logger import setup_logger
from ibd_genus_tools.core.pipeline import analyze_existing_tables
from ibd_genus_tools.analysis.statistical import ALPHA, FOLD_CHANGE_THRESHOLD, SIGNIFICANT
from ibd_genus_tools.analysis.reporting import TOP_N

logger = logging.getLogger('ibd_genus_tools')

def parse_args(argv=None):
    """Parse command line arguments for the statistics module."""
    parser = argparse.ArgumentParser(
        prog="ibd-genus-tools stats",
        description="Differential abundance tests on normalized long-format genus data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Common Usage:
  ibd-genus-tools stats --normalized-file long_format_data_clean_normalized.tsv \\
                        --metadata-file optimized_metadata_clean.tsv --output-dir stats
"""
    )
    parser.add_argument("--normalized-file", default="long_format_data_clean_normalized.tsv",
                      help="Normalized long-format table (default: long_format_data_clean_normalized.tsv)")
    parser.add_argument("--metadata-file", default="optimized_metadata_clean.tsv",
                      help="Metadata with Sample and Study.Group (default: optimized_metadata_clean.tsv)")
    parser.add_argument("--output-dir", default=".",
                      help="Directory for output files (default: current directory)")
    parser.add_argument("--alpha", type=float, default=ALPHA,
                      help=f"Adjusted p-value threshold (default: {ALPHA})")
    parser.add_argument("--fc-threshold", type=float, default=FOLD_CHANGE_THRESHOLD,
                      help=f"Absolute log2 fold-change threshold (default: {FOLD_CHANGE_THRESHOLD})")
    parser.add_argument("--top-n", type=int, default=TOP_N,
                      help=f"Number of genera in ranked tables (default: {TOP_N})")
    parser.add_argument("--log-file",
                      help="Path to log file")
    parser.add_argument("--log-level", default="INFO",
                      choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                      help="Logging level")
    return parser.parse_args(argv)

def main(argv=None):
    """Main function to run statistical tests."""
    args = parse_args(argv)
    setup_logger(args.log_file, getattr(logging, args.log_level.upper()))

    logger.info("Starting IBD Genus Tools Statistical Testing Module")
    start_time = time.time()

    try:
        stats = analyze_existing_tables(
            args.normalized_file,
            args.metadata_file,
            output_dir=args.output_dir,
            alpha=args.alpha,
            fc_threshold=args.fc_threshold,
            top_n=args.top_n
        )
    except (FileNotFoundError, RuntimeError, ValueError) as e:
        logger.error(f"Statistical testing failed: {str(e)}")
        return 1

    for name in ("t_test", "kruskal"):
        n_sig = int((stats[name]["significance"] == SIGNIFICANT).sum())
        logger.info(f"{name}: {n_sig} significant genera")

    elapsed_time = time.time() - start_time
    minutes, seconds = divmod(elapsed_time, 60)
    logger.info(f"Total processing time: {int(minutes)}m {int(seconds)}s")
    return 0

if __name__ == "__main__":
    sys.exit(main())
