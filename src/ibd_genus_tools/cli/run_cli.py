#!/usr/bin/env python3
"""
IBD Genus Tools Pipeline Module

This module runs the complete genus differential abundance pipeline:
reshaping, cleaning, normalization, metadata join, statistical testing,
ranked tables and plots.
"""

import sys
import time
import argparse
import logging

from ibd_genus_tools.logger import setup_logger
from ibd_genus_tools.core.pipeline import run_full_pipeline
from ibd_genus_tools.analysis.statistical import ALPHA, FOLD_CHANGE_THRESHOLD
from ibd_genus_tools.analysis.reporting import TOP_N

logger = logging.getLogger('ibd_genus_tools')

def parse_args(argv=None):
    """Parse command line arguments for the pipeline module."""
    parser = argparse.ArgumentParser(
        prog="ibd-genus-tools run",
        description="Run the genus differential abundance pipeline (UC+CD vs nonIBD)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Output Files:
  • genera_counts_long_format.tsv, long_format_data_clean.tsv,
    long_format_data_clean_normalized.tsv: counts at each preparation stage
  • metadata_optimized.tsv, optimized_metadata_clean.tsv: reduced metadata
  • genera_only_counts.tsv: genus table with bare genus column names (with --genus-table)
  • t_test_results.tsv, kruskal_results.tsv: results for every genus
  • top_10_t_test_results.tsv, top_10_kruskal_results.tsv: ranked by adjusted p-value
  • dunn_posthoc_tests/: Dunn's post-hoc tests for Kruskal-Wallis hits
  • plots/: histograms, volcano plots, boxplot and fold-change bar chart
  • analysis_summary.txt

Common Usage:
  # Use genera.counts.tsv and metadata.tsv in the current directory:
  ibd-genus-tools run

  # Explicit inputs and output directory:
  ibd-genus-tools run --counts-file data/genera.counts.tsv --metadata-file data/metadata.tsv \\
                      --genus-table data/taxonomy_counts.tsv --output-dir results
"""
    )

    parser.add_argument("--counts-file", default="genera.counts.tsv",
                      help="Wide sample-by-genus count table (default: genera.counts.tsv)")
    parser.add_argument("--metadata-file", default="metadata.tsv",
                      help="Metadata table with Sample and Study.Group columns (default: metadata.tsv)")
    parser.add_argument("--genus-table",
                      help="Second wide count table whose taxonomy headers are reduced to genus names")
    parser.add_argument("--output-dir", default=".",
                      help="Directory for output files (default: current directory)")
    parser.add_argument("--extract-genus-names", action="store_true",
                      help="Also reduce the counts table's headers to bare genus names")

    parser.add_argument("--alpha", type=float, default=ALPHA,
                      help=f"Adjusted p-value threshold (default: {ALPHA})")
    parser.add_argument("--fc-threshold", type=float, default=FOLD_CHANGE_THRESHOLD,
                      help=f"Absolute log2 fold-change threshold (default: {FOLD_CHANGE_THRESHOLD})")
    parser.add_argument("--top-n", type=int, default=TOP_N,
                      help=f"Number of genera in ranked tables (default: {TOP_N})")

    parser.add_argument("--plot-format", choices=["svg", "png", "pdf"], default="svg",
                      help="Output format for plots (default: svg)")
    parser.add_argument("--dpi", type=int, default=300,
                      help="DPI for raster plot formats (default: 300)")
    parser.add_argument("--skip-plots", action="store_true",
                      help="Do not render plots")

    parser.add_argument("--log-file",
                      help="Path to log file")
    parser.add_argument("--log-level", default="INFO",
                      choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                      help="Logging level")

    return parser.parse_args(argv)

def main(argv=None):
    """Main function to run the full pipeline."""
    args = parse_args(argv)

    log_level = getattr(logging, args.log_level.upper())
    setup_logger(args.log_file, log_level)

    logger.info("Starting IBD Genus Tools Pipeline")
    start_time = time.time()

    try:
        run_full_pipeline(
            counts_file=args.counts_file,
            metadata_file=args.metadata_file,
            output_dir=args.output_dir,
            genus_table=args.genus_table,
            extract_genus_names=args.extract_genus_names,
            alpha=args.alpha,
            fc_threshold=args.fc_threshold,
            top_n=args.top_n,
            plot_format=args.plot_format,
            dpi=args.dpi,
            skip_plots=args.skip_plots
        )
    except (FileNotFoundError, RuntimeError, ValueError) as e:
        logger.error(f"Pipeline failed: {str(e)}")
        return 1

    elapsed_time = time.time() - start_time
    minutes, seconds = divmod(elapsed_time, 60)
    logger.info(f"Total processing time: {int(minutes)}m {int(seconds)}s")

    return 0

if __name__ == "__main__":
    sys.exit(main())
