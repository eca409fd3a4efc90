# ibd_genus_tools/utils/__init__.py
"""Utility functions for file handling and column-name normalization."""

from ibd_genus_tools.utils.file_utils import (
    check_file_exists_with_logger,
    sanitize_filename,
    extract_genus,
    normalize_genus_columns,
    write_tsv
)
