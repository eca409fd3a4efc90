# ibd_genus_tools/analysis/visualizations.py
import os
import logging
import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import seaborn as sns
from adjustText import adjust_text

from ibd_genus_tools.processing.counts import (
    FEATURE_COL, COUNT_COL, ABUNDANCE_COL, GROUP_COL, STUDY_GROUPS
)
from ibd_genus_tools.analysis.statistical import (
    ALPHA, FOLD_CHANGE_THRESHOLD, SIGNIFICANT, NOT_SIGNIFICANT
)

SIGNIFICANCE_PALETTE = {SIGNIFICANT: "red", NOT_SIGNIFICANT: "grey"}

logger = logging.getLogger('ibd_genus_tools')


def _save(fig, output_dir, name, output_format, dpi):
    os.makedirs(output_dir, exist_ok=True)
    output_file = os.path.join(output_dir, f"{name}.{output_format}")
    fig.savefig(output_file, format=output_format, dpi=dpi, bbox_inches='tight')
    plt.close(fig)
    logger.info(f"Saved plot: {output_file}")
    return output_file


def plot_count_histograms(long_df, output_dir, output_format="svg", dpi=300, bins=50):
    """
    Histograms of raw counts and of log10(count + 1).

    Returns:
        Tuple of (raw_path, log_path), or (None, None) if there are no counts
    """
    counts = long_df[COUNT_COL].dropna()
    if counts.empty:
        logger.warning("No counts to plot; skipping histograms")
        return None, None

    fig, ax = plt.subplots(figsize=(8, 5))
    sns.histplot(counts, bins=bins, ax=ax, color="steelblue")
    ax.set_xlabel("Count")
    ax.set_ylabel("Frequency")
    ax.set_title("Distribution of Raw Genus Counts")
    raw_path = _save(fig, output_dir, "count_histogram_raw", output_format, dpi)

    fig, ax = plt.subplots(figsize=(8, 5))
    sns.histplot(np.log10(counts + 1), bins=bins, ax=ax, color="darkorange")
    ax.set_xlabel("log10(Count + 1)")
    ax.set_ylabel("Frequency")
    ax.set_title("Distribution of log10-Transformed Genus Counts")
    log_path = _save(fig, output_dir, "count_histogram_log10", output_format, dpi)

    return raw_path, log_path


def volcano_coordinates(results):
    """
    Results with a 'neg_log10_padj' column, limited to plottable rows.

    Adjusted p-values of 0 (underflow) are clipped to the smallest positive
    float so they plot at the top instead of being dropped.
    """
    plot_df = results.copy()
    padj = np.clip(plot_df["adjusted_p_value"].astype(float), np.finfo(float).tiny, 1.0)
    plot_df["neg_log10_padj"] = -np.log10(padj)
    return plot_df[
        np.isfinite(plot_df["neg_log10_padj"]) & np.isfinite(plot_df["log2_fold_change"])
    ]


def plot_volcano(results, output_dir, name, title, label_significant=False,
                 alpha=ALPHA, fc_threshold=FOLD_CHANGE_THRESHOLD,
                 output_format="svg", dpi=300):
    """
    Volcano plot of log2 fold change versus -log10(adjusted p-value).

    Points are colored by significance. With label_significant, significant
    genera are annotated and the labels are moved apart with adjustText.
    """
    plot_df = volcano_coordinates(results)
    if plot_df.empty:
        logger.warning(f"No finite results to plot for {name}; skipping volcano plot")
        return None

    fig, ax = plt.subplots(figsize=(10, 8))
    sns.scatterplot(
        data=plot_df, x="log2_fold_change", y="neg_log10_padj",
        hue="significance", palette=SIGNIFICANCE_PALETTE,
        hue_order=[SIGNIFICANT, NOT_SIGNIFICANT], alpha=0.7, ax=ax
    )
    ax.axhline(y=-np.log10(alpha), color="black", linestyle="--", linewidth=0.8, alpha=0.5)
    ax.axvline(x=fc_threshold, color="black", linestyle="--", linewidth=0.8, alpha=0.5)
    ax.axvline(x=-fc_threshold, color="black", linestyle="--", linewidth=0.8, alpha=0.5)

    if label_significant:
        sig = plot_df[plot_df["significance"] == SIGNIFICANT]
        texts = [
            ax.text(row["log2_fold_change"], row["neg_log10_padj"], row[FEATURE_COL], fontsize=8)
            for _, row in sig.iterrows()
        ]
        if texts:
            adjust_text(texts, ax=ax, arrowprops=dict(arrowstyle='-', color='grey', lw=0.5))

    ax.set_xlabel("log2 Fold Change (UC+CD / nonIBD)")
    ax.set_ylabel("-log10(Adjusted p-value)")
    ax.set_title(title)
    ax.legend(title="Significance", loc="best")
    ax.grid(alpha=0.3)
    return _save(fig, output_dir, name, output_format, dpi)


def plot_top_genera_boxplot(merged_df, top_results, output_dir,
                            output_format="svg", dpi=300, col_wrap=5):
    """
    Faceted boxplot of relative abundance by study group, one panel per top genus.

    Panels have independent y-axes.
    """
    genera = top_results[FEATURE_COL].tolist()
    plot_df = merged_df[merged_df[FEATURE_COL].isin(genera)].dropna(subset=[ABUNDANCE_COL])
    if plot_df.empty:
        logger.warning("No abundance data for top genera; skipping boxplot")
        return None

    genera = [g for g in genera if g in set(plot_df[FEATURE_COL])]
    order = [g for g in STUDY_GROUPS if g in set(plot_df[GROUP_COL])]
    grid = sns.catplot(
        data=plot_df, x=GROUP_COL, y=ABUNDANCE_COL, col=FEATURE_COL,
        col_order=genera, order=order, kind="box",
        col_wrap=min(col_wrap, len(genera)), sharey=False,
        height=3, aspect=1
    )
    grid.set_titles("{col_name}")
    grid.set_axis_labels("Study Group", "Relative Abundance")
    grid.figure.suptitle("Relative Abundance of Top Genera by Study Group", y=1.02)
    return _save(grid.figure, output_dir, "top_genera_boxplot", output_format, dpi)


def plot_fold_change_bar(ordered_results, output_dir, output_format="svg", dpi=300):
    """
    Horizontal bar chart of log2 fold change, colored by sign, values annotated.

    Bars appear top-to-bottom in the order of ordered_results.
    """
    plot_df = ordered_results.dropna(subset=["log2_fold_change"])
    if plot_df.empty:
        logger.warning("No fold changes to plot; skipping bar chart")
        return None

    values = plot_df["log2_fold_change"].to_numpy()
    labels = plot_df[FEATURE_COL].astype(str).to_numpy()
    colors = np.where(values >= 0, "firebrick", "steelblue")
    y = np.arange(len(values))

    fig, ax = plt.subplots(figsize=(8, max(3, 0.5 * len(values) + 1)))
    ax.barh(y, values, color=colors)
    ax.set_yticks(y)
    ax.set_yticklabels(labels)
    ax.invert_yaxis()
    ax.axvline(0, color="black", linewidth=0.8)
    for yi, v in zip(y, values):
        ax.text(v, yi, f" {v:.2f} ", va="center", ha="left" if v >= 0 else "right", fontsize=8)

    span = np.abs(values).max() or 1.0
    ax.set_xlim(min(values.min(), 0) - 0.25 * span, max(values.max(), 0) + 0.25 * span)
    ax.set_xlabel("log2 Fold Change (UC+CD / nonIBD)")
    ax.set_title("log2 Fold Change of Top Genera")
    plt.tight_layout()
    return _save(fig, output_dir, "top_genera_log2fc_bar", output_format, dpi)
