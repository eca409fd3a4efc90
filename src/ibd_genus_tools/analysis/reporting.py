# ibd_genus_tools/analysis/reporting.py
"""
Ranking and persistence of differential abundance results.
"""

import os
import logging

from ibd_genus_tools.processing.counts import FEATURE_COL
from ibd_genus_tools.analysis.statistical import SIGNIFICANT
from ibd_genus_tools.utils.file_utils import write_tsv, sanitize_filename

TOP_N = 10
TOP_COLUMNS = [FEATURE_COL, "log2_fold_change", "p_value", "adjusted_p_value"]

logger = logging.getLogger('ibd_genus_tools')


def rank_results(results):
    """Stable ascending sort on adjusted p-value, NaN last."""
    return results.sort_values(
        "adjusted_p_value", ascending=True, kind="mergesort", na_position="last"
    ).reset_index(drop=True)


def top_n_results(results, n=TOP_N):
    """The n genera with the smallest adjusted p-values."""
    return rank_results(results).head(n).reset_index(drop=True)


def order_by_fold_change(top_results):
    """Top-ranked genera re-sorted by log2 fold change, largest first."""
    return top_results.sort_values(
        "log2_fold_change", ascending=False, kind="mergesort", na_position="last"
    ).reset_index(drop=True)


def save_top_results(top_results, output_dir, filename):
    """Write the genus, fold-change, raw and adjusted p-value columns of a top table."""
    return write_tsv(top_results[TOP_COLUMNS], output_dir, filename, logger)


def save_dunn_results(dunn_results, output_dir):
    """
    Write one TSV per genus into <output_dir>/dunn_posthoc_tests.

    Returns:
        Directory path, or None when there is nothing to write
    """
    if not dunn_results:
        return None
    dunn_dir = os.path.join(output_dir, "dunn_posthoc_tests")
    os.makedirs(dunn_dir, exist_ok=True)
    for feat, pdf in dunn_results.items():
        path = os.path.join(dunn_dir, f"dunn_{sanitize_filename(feat)}.tsv")
        pdf.to_csv(path, sep="\t")
    logger.info(f"Saved Dunn's post-hoc results for {len(dunn_results)} genera in {dunn_dir}")
    return dunn_dir


def write_summary(output_dir, stage_counts, ttest_results, kruskal_results,
                  inputs=None, dunn_results=None, alpha=0.05, fc_threshold=1.0):
    """
    Write analysis_summary.txt describing inputs, stage sizes and hit counts.

    Args:
        output_dir: Directory for the summary
        stage_counts: Ordered mapping of stage description -> row count
        ttest_results: Full t-test results
        kruskal_results: Full Kruskal-Wallis results
        inputs: Optional mapping of input description -> path
        dunn_results: Optional dict of Dunn's post-hoc matrices

    Returns:
        Path to the summary file
    """
    os.makedirs(output_dir, exist_ok=True)
    summary_path = os.path.join(output_dir, "analysis_summary.txt")
    with open(summary_path, 'w') as f:
        f.write("Genus Differential Abundance Summary\n")
        f.write("====================================\n\n")

        if inputs:
            for desc, path in inputs.items():
                f.write(f"{desc}: {os.path.basename(path) if path else 'not supplied'}\n")
            f.write("\n")

        f.write("Rows per stage\n")
        f.write("--------------\n")
        for desc, n in stage_counts.items():
            f.write(f"{desc}: {n}\n")
        f.write("\n")

        for name, res in (("Welch t-test (UC+CD vs nonIBD)", ttest_results),
                          ("Kruskal-Wallis (UC, CD, nonIBD)", kruskal_results)):
            f.write(f"{name}\n")
            f.write("-" * len(name) + "\n")
            f.write(f"Genera: {len(res)}\n")
            f.write(f"Genera with a p-value: {int(res['p_value'].notna().sum())}\n")
            f.write(
                f"Significant (adj. p < {alpha}, |log2FC| > {fc_threshold}): "
                f"{int((res['significance'] == SIGNIFICANT).sum())}\n\n"
            )

        if dunn_results:
            f.write("Dunn's Post-hoc Tests\n")
            f.write("---------------------\n")
            f.write(f"Genera with post-hoc tests: {len(dunn_results)}\n")

    logger.info(f"Saved analysis summary to {summary_path}")
    return summary_path
