# ibd_genus_tools/processing/__init__.py
"""Loading and data preparation for genus count tables."""

from ibd_genus_tools.processing.counts import (
    read_counts_table,
    read_metadata,
    read_long_table,
    wide_to_long,
    long_to_wide,
    select_metadata,
    drop_missing,
    relative_abundance,
    merge_with_metadata,
    STUDY_GROUPS
)
