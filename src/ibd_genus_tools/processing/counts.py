# ibd_genus_tools/processing/counts.py
"""
Loading, reshaping, cleaning and normalizing genus count tables.
"""

import logging
import traceback
import pandas as pd

from ibd_genus_tools.utils.file_utils import check_file_exists_with_logger

SAMPLE_COL = "Sample"
FEATURE_COL = "Bacterial_Group"
COUNT_COL = "Count"
ABUNDANCE_COL = "Relative_Abundance"
GROUP_COL = "Study.Group"
STUDY_GROUPS = ("UC", "CD", "nonIBD")

logger = logging.getLogger('ibd_genus_tools')


def _as_ids(values):
    """Cast identifiers to str, leaving missing entries missing."""
    return values.where(values.isna(), values.astype(str))


def _read_tsv(path, description):
    if not check_file_exists_with_logger(path, description, logger):
        raise FileNotFoundError(f"{description} file not found or not readable: {path}")
    try:
        df = pd.read_csv(path, sep="\t")
    except Exception as e:
        logger.error(f"Error reading {description.lower()} file {path}: {str(e)}")
        logger.error(traceback.format_exc())
        raise RuntimeError(e)
    logger.info(f"Loaded {description.lower()}: {df.shape[0]} rows, {df.shape[1]} columns")
    return df


def read_counts_table(counts_file, sample_col=SAMPLE_COL):
    """
    Read a wide sample-by-genus count table.

    Args:
        counts_file: Path to tab-separated counts table
        sample_col: Name of the sample identifier column

    Returns:
        Wide DataFrame with the sample column first
    """
    df = _read_tsv(counts_file, "Counts table")
    if sample_col not in df.columns:
        raise ValueError(f"Counts table {counts_file} has no '{sample_col}' column")
    df[sample_col] = _as_ids(df[sample_col])
    return df


def read_metadata(metadata_file, sample_col=SAMPLE_COL, group_col=GROUP_COL):
    """
    Read the sample metadata table.

    Args:
        metadata_file: Path to tab-separated metadata file
        sample_col: Column holding sample IDs
        group_col: Column holding the study group label

    Returns:
        Metadata DataFrame (all columns)
    """
    df = _read_tsv(metadata_file, "Metadata")
    missing = [c for c in (sample_col, group_col) if c not in df.columns]
    if missing:
        raise ValueError(f"Metadata file {metadata_file} is missing columns: {missing}")
    df[sample_col] = _as_ids(df[sample_col])
    return df


def read_long_table(long_file):
    """Read a normalized long-format table written by the pipeline."""
    df = _read_tsv(long_file, "Normalized abundance")
    missing = [c for c in (SAMPLE_COL, FEATURE_COL, ABUNDANCE_COL) if c not in df.columns]
    if missing:
        raise ValueError(f"Normalized abundance file {long_file} is missing columns: {missing}")
    df[SAMPLE_COL] = _as_ids(df[SAMPLE_COL])
    df[FEATURE_COL] = _as_ids(df[FEATURE_COL])
    return df


def wide_to_long(counts_df, sample_col=SAMPLE_COL):
    """
    Melt a wide count table into (Sample, Bacterial_Group, Count) rows.

    Columns are walked by position so that two columns sharing a name stay
    two separate series. Zeros and missing values are kept.
    """
    if sample_col not in counts_df.columns:
        raise ValueError(f"Counts table has no '{sample_col}' column")

    samples = counts_df[sample_col].to_numpy()
    frames = []
    for pos, name in enumerate(counts_df.columns):
        if name == sample_col:
            continue
        frames.append(pd.DataFrame({
            SAMPLE_COL: samples,
            FEATURE_COL: name,
            COUNT_COL: pd.to_numeric(counts_df.iloc[:, pos], errors="coerce").to_numpy(),
        }))

    if not frames:
        logger.warning("Counts table has no genus columns")
        return pd.DataFrame(columns=[SAMPLE_COL, FEATURE_COL, COUNT_COL])

    long_df = pd.concat(frames, ignore_index=True)
    logger.info(
        f"Reshaped {counts_df.shape[0]} samples x {len(frames)} genus columns "
        f"into {len(long_df)} long-format rows"
    )
    return long_df


def long_to_wide(long_df):
    """
    Pivot long-format counts back to a Sample x Bacterial_Group table.

    Same-named series are summed; a cell with only missing counts stays NaN.
    """
    return (
        long_df.groupby([SAMPLE_COL, FEATURE_COL], sort=True)[COUNT_COL]
        .sum(min_count=1)
        .unstack(FEATURE_COL)
    )


def select_metadata(metadata_df, sample_col=SAMPLE_COL, group_col=GROUP_COL):
    """Reduce metadata to the sample ID and study group columns."""
    missing = [c for c in (sample_col, group_col) if c not in metadata_df.columns]
    if missing:
        raise ValueError(f"Metadata is missing columns: {missing}")
    return metadata_df[[sample_col, group_col]].rename(
        columns={sample_col: SAMPLE_COL, group_col: GROUP_COL}
    )


def drop_missing(df, description="table"):
    """Drop rows with any missing value."""
    cleaned = df.dropna(how="any").reset_index(drop=True)
    dropped = len(df) - len(cleaned)
    if dropped:
        logger.info(f"Dropped {dropped} rows with missing values from {description}")
    return cleaned


def relative_abundance(long_df):
    """
    Convert counts to within-sample relative abundance.

    A sample whose counts total 0 gets NaN for every genus.
    """
    out = long_df.copy()
    totals = out.groupby(SAMPLE_COL)[COUNT_COL].transform("sum")

    zero_samples = out.loc[totals == 0, SAMPLE_COL].unique()
    if len(zero_samples):
        logger.warning(
            f"{len(zero_samples)} samples have a total count of 0; their relative "
            f"abundance is undefined (NaN): {', '.join(map(str, zero_samples))}"
        )

    out[ABUNDANCE_COL] = out[COUNT_COL] / totals.where(totals != 0)
    return out


def merge_with_metadata(abundance_df, metadata_df, groups=STUDY_GROUPS):
    """
    Inner-join relative abundances with metadata and keep the study groups.

    Samples missing on either side are excluded without raising. Rows without
    a sample ID never match.
    """
    abundance_df = abundance_df.dropna(subset=[SAMPLE_COL])
    metadata_df = metadata_df.dropna(subset=[SAMPLE_COL])
    merged = pd.merge(abundance_df, metadata_df, on=SAMPLE_COL, how="inner")

    counts_samples = set(abundance_df[SAMPLE_COL])
    meta_samples = set(metadata_df[SAMPLE_COL])
    logger.info(
        f"Merged abundance with metadata: {len(counts_samples & meta_samples)} shared samples, "
        f"{len(counts_samples - meta_samples)} without metadata, "
        f"{len(meta_samples - counts_samples)} without counts"
    )

    filtered = merged[merged[GROUP_COL].isin(groups)].reset_index(drop=True)
    excluded = len(merged) - len(filtered)
    if excluded:
        logger.info(f"Excluded {excluded} rows outside study groups {list(groups)}")
    if filtered.empty:
        logger.warning("No rows remain after merging with metadata and filtering study groups")
    return filtered
