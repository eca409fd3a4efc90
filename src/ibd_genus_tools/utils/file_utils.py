# ibd_genus_tools/utils/file_utils.py
import os
import re
import logging
from collections import Counter

GENUS_PATTERN = re.compile(r'g__([A-Za-z0-9_-]+)')

def check_file_exists_with_logger(filepath, description, logger=None):
    """
    Check if file exists & is readable (logger-based).
    """
    if logger is None:
        logger = logging.getLogger('ibd_genus_tools')
    if not os.path.isfile(filepath):
        logger.error(f"{description} file does not exist: {filepath}")
        return False
    if not os.access(filepath, os.R_OK):
        logger.error(f"{description} file is not readable: {filepath}")
        return False
    return True

def sanitize_filename(filename):
    """
    Replace invalid filename characters and whitespace with underscores.

    Extracted genus names never contain whitespace; pass-through headers can.
    """
    return re.sub(r'[<>:"/\\|?*\s]', '_', str(filename))

def extract_genus(col):
    """
    Return the bare genus name from a taxonomy-annotated column header.

    'k__Bacteria;...;g__Dorea;s__sp.' -> 'Dorea'. Headers without a genus
    marker (including 'Sample') are returned unchanged.
    """
    match = GENUS_PATTERN.search(col)
    if match:
        return match.group(1)
    return col

def normalize_genus_columns(df, logger=None):
    """
    Rename every column of a wide count table to its bare genus name.

    Columns that collapse onto the same genus keep separate positions;
    they are reported but never merged.

    Args:
        df: Wide DataFrame (one 'Sample' column plus count columns)
        logger: Optional logger for messages

    Returns:
        New DataFrame with renamed columns
    """
    if logger is None:
        logger = logging.getLogger('ibd_genus_tools')

    new_cols = [extract_genus(str(c)) for c in df.columns]
    renamed = sum(1 for old, new in zip(df.columns, new_cols) if old != new)
    logger.info(f"Extracted genus names for {renamed} of {len(new_cols)} columns")

    duplicates = sorted(name for name, n in Counter(new_cols).items() if n > 1)
    if duplicates:
        logger.warning(
            f"{len(duplicates)} genus names map to more than one column and are kept as "
            f"separate columns: {', '.join(duplicates)}"
        )

    out = df.copy()
    out.columns = new_cols
    return out

def write_tsv(df, output_dir, filename, logger=None, index=False):
    """
    Write a DataFrame as a tab-separated file, overwriting any existing file.

    Returns:
        Path to the written file
    """
    if logger is None:
        logger = logging.getLogger('ibd_genus_tools')
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, filename)
    df.to_csv(path, sep='\t', index=index)
    logger.info(f"Saved {filename}: {len(df)} rows -> {path}")
    return path
