# ibd_genus_tools/core/__init__.py
"""
Core functionality for IBD Genus Tools.

- pipeline.py: full pipeline and individual stages
"""

from ibd_genus_tools.core.pipeline import (
    run_full_pipeline,
    normalize_genus_table,
    prepare_data,
    run_statistics,
    make_plots,
    analyze_existing_tables
)
