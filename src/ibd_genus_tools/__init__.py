# ibd_genus_tools/__init__.py
"""
IBD Genus Tools - differential abundance of bacterial genera across IBD study groups.

This package provides a linear workflow over a wide genus count table and sample metadata:
1. Genus name extraction from taxonomy-annotated column headers
2. Wide-to-long reshaping and cleaning
3. Per-sample relative abundance normalization
4. Joining with metadata (UC, CD, nonIBD)
5. Welch t-test and Kruskal-Wallis testing with Benjamini-Hochberg correction
6. Ranked result tables and visualization
"""

__version__ = "0.1.0"

from ibd_genus_tools.logger import setup_logger, log_print

from ibd_genus_tools.core.pipeline import (
    run_full_pipeline,
    normalize_genus_table,
    prepare_data,
    run_statistics,
    make_plots,
    analyze_existing_tables
)
