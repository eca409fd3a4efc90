# ibd_genus_tools/core/pipeline.py
"""
Main module for ibd_genus_tools package.

This module provides functions to run the full genus differential
abundance pipeline or individual stages of it.
"""
import os
import time
import logging

from ibd_genus_tools.logger import log_print
from ibd_genus_tools.utils.file_utils import normalize_genus_columns, write_tsv
from ibd_genus_tools.processing.counts import (
    read_counts_table,
    read_metadata,
    read_long_table,
    wide_to_long,
    select_metadata,
    drop_missing,
    relative_abundance,
    merge_with_metadata,
    SAMPLE_COL,
    FEATURE_COL,
)
from ibd_genus_tools.analysis.statistical import (
    run_ttest_analysis,
    run_kruskal_analysis,
    dunn_posthoc,
    ALPHA,
    FOLD_CHANGE_THRESHOLD,
)
from ibd_genus_tools.analysis.reporting import (
    top_n_results,
    order_by_fold_change,
    save_top_results,
    save_dunn_results,
    write_summary,
    TOP_N,
)
from ibd_genus_tools.analysis.visualizations import (
    plot_count_histograms,
    plot_volcano,
    plot_top_genera_boxplot,
    plot_fold_change_bar,
)

logger = logging.getLogger('ibd_genus_tools')


def normalize_genus_table(genus_table, output_dir="."):
    """
    Rename the columns of a wide count table to bare genus names and save it.

    Args:
        genus_table: Path to a wide, taxonomy-annotated count table
        output_dir: Directory for genera_only_counts.tsv

    Returns:
        The renamed DataFrame
    """
    wide = read_counts_table(genus_table)
    genera_only = normalize_genus_columns(wide, logger)
    write_tsv(genera_only, output_dir, "genera_only_counts.tsv", logger)
    return genera_only


def prepare_data(counts_file, metadata_file, output_dir=".", extract_genus_names=False):
    """
    Load, reshape, clean, normalize and merge the count and metadata tables.

    Writes the intermediate tables at each stage.

    Returns:
        Dict with 'long', 'long_clean', 'normalized', 'metadata_clean' and
        'merged' DataFrames
    """
    counts_wide = read_counts_table(counts_file)
    if extract_genus_names:
        counts_wide = normalize_genus_columns(counts_wide, logger)
    metadata = read_metadata(metadata_file)

    long_df = wide_to_long(counts_wide)
    write_tsv(long_df, output_dir, "genera_counts_long_format.tsv", logger)

    metadata_opt = select_metadata(metadata)
    write_tsv(metadata_opt, output_dir, "metadata_optimized.tsv", logger)

    long_clean = drop_missing(long_df, "long-format counts")
    write_tsv(long_clean, output_dir, "long_format_data_clean.tsv", logger)

    metadata_clean = drop_missing(metadata_opt, "metadata")
    write_tsv(metadata_clean, output_dir, "optimized_metadata_clean.tsv", logger)

    normalized = relative_abundance(long_clean)
    write_tsv(normalized, output_dir, "long_format_data_clean_normalized.tsv", logger)

    merged = merge_with_metadata(normalized, metadata_clean)

    return {
        "long": long_df,
        "long_clean": long_clean,
        "normalized": normalized,
        "metadata_clean": metadata_clean,
        "merged": merged,
    }


def run_statistics(merged_df, output_dir=".", alpha=ALPHA,
                   fc_threshold=FOLD_CHANGE_THRESHOLD, top_n=TOP_N):
    """
    Run both differential abundance tests and write the result tables.

    Returns:
        Dict with full results, top-n tables and Dunn's post-hoc matrices
    """
    ttest_results = run_ttest_analysis(merged_df, alpha=alpha, fc_threshold=fc_threshold)
    kruskal_results = run_kruskal_analysis(merged_df, alpha=alpha, fc_threshold=fc_threshold)

    write_tsv(ttest_results, output_dir, "t_test_results.tsv", logger)
    write_tsv(kruskal_results, output_dir, "kruskal_results.tsv", logger)

    top_ttest = top_n_results(ttest_results, top_n)
    top_kruskal = top_n_results(kruskal_results, top_n)
    save_top_results(top_ttest, output_dir, "top_10_t_test_results.tsv")
    save_top_results(top_kruskal, output_dir, "top_10_kruskal_results.tsv")

    dunn_results = dunn_posthoc(merged_df, kruskal_results, alpha=alpha)
    save_dunn_results(dunn_results, output_dir)

    return {
        "t_test": ttest_results,
        "kruskal": kruskal_results,
        "top_t_test": top_ttest,
        "top_kruskal": top_kruskal,
        "dunn": dunn_results,
    }


def make_plots(long_df, merged_df, stats, output_dir=".", alpha=ALPHA,
               fc_threshold=FOLD_CHANGE_THRESHOLD, output_format="svg", dpi=300):
    """
    Render every diagnostic and summary plot into <output_dir>/plots.

    Returns:
        List of written plot paths
    """
    plot_dir = os.path.join(output_dir, "plots")
    written = list(plot_count_histograms(long_df, plot_dir, output_format, dpi))
    written.append(plot_volcano(
        stats["t_test"], plot_dir, "volcano_t_test",
        "Volcano Plot: Welch t-test (UC+CD vs nonIBD)",
        label_significant=True, alpha=alpha, fc_threshold=fc_threshold,
        output_format=output_format, dpi=dpi
    ))
    written.append(plot_volcano(
        stats["kruskal"], plot_dir, "volcano_kruskal",
        "Volcano Plot: Kruskal-Wallis (UC, CD, nonIBD)",
        alpha=alpha, fc_threshold=fc_threshold,
        output_format=output_format, dpi=dpi
    ))
    written.append(plot_top_genera_boxplot(
        merged_df, stats["top_kruskal"], plot_dir, output_format, dpi
    ))
    written.append(plot_fold_change_bar(
        order_by_fold_change(stats["top_kruskal"]), plot_dir, output_format, dpi
    ))
    return [p for p in written if p]


def run_full_pipeline(
    counts_file="genera.counts.tsv",
    metadata_file="metadata.tsv",
    output_dir=".",
    genus_table=None,
    extract_genus_names=False,
    alpha=ALPHA,
    fc_threshold=FOLD_CHANGE_THRESHOLD,
    top_n=TOP_N,
    plot_format="svg",
    dpi=300,
    skip_plots=False,
):
    """
    Run the full genus differential abundance pipeline.

    Args:
        counts_file: Wide sample-by-genus count table (TSV)
        metadata_file: Sample metadata with Sample and Study.Group (TSV)
        output_dir: Directory for all outputs
        genus_table: Optional second wide table whose headers are reduced
            to genus names
        extract_genus_names: Also reduce the main table's headers to genus names
        alpha: Adjusted p-value threshold
        fc_threshold: Absolute log2 fold-change threshold
        top_n: Number of genera in the ranked tables
        plot_format: Output format for plots (svg, png, pdf)
        dpi: DPI for raster formats
        skip_plots: Do not render plots

    Returns:
        Dict with the prepared tables, statistics and plot paths
    """
    log_print("Starting Genus Differential Abundance Pipeline", level="info")
    start_time = time.time()
    os.makedirs(output_dir, exist_ok=True)

    if genus_table:
        normalize_genus_table(genus_table, output_dir)
    else:
        logger.info("No genus table supplied; skipping column-name normalization output")

    data = prepare_data(counts_file, metadata_file, output_dir, extract_genus_names)
    stats = run_statistics(data["merged"], output_dir, alpha, fc_threshold, top_n)

    plots = []
    if skip_plots:
        logger.info("Skipping plots")
    else:
        plots = make_plots(
            data["long"], data["merged"], stats, output_dir,
            alpha, fc_threshold, plot_format, dpi
        )

    stage_counts = {
        "Long-format rows": len(data["long"]),
        "Rows after cleaning": len(data["long_clean"]),
        "Metadata samples after cleaning": len(data["metadata_clean"]),
        "Merged rows (UC, CD, nonIBD)": len(data["merged"]),
        "Merged samples": data["merged"][SAMPLE_COL].nunique(),
        "Genera tested": data["merged"][FEATURE_COL].nunique(),
    }
    write_summary(
        output_dir, stage_counts, stats["t_test"], stats["kruskal"],
        inputs={"Counts File": counts_file, "Metadata File": metadata_file,
                "Genus Table": genus_table},
        dunn_results=stats["dunn"], alpha=alpha, fc_threshold=fc_threshold
    )

    elapsed = time.time() - start_time
    mm, ss = divmod(elapsed, 60)
    log_print(f"Pipeline finished in {int(mm)}m {int(ss)}s", level="info")

    return {**data, **stats, "plots": plots}


def analyze_existing_tables(normalized_file, metadata_clean_file, output_dir=".",
                            alpha=ALPHA, fc_threshold=FOLD_CHANGE_THRESHOLD, top_n=TOP_N):
    """
    Run the statistics stage on previously written normalized and metadata tables.

    Returns:
        Dict as returned by run_statistics
    """
    normalized = read_long_table(normalized_file)
    metadata_clean = select_metadata(read_metadata(metadata_clean_file))
    merged = merge_with_metadata(normalized, metadata_clean)
    return run_statistics(merged, output_dir, alpha, fc_threshold, top_n)
