# ibd_genus_tools/analysis/statistical.py
import logging
import numpy as np
import pandas as pd

from scipy.stats import ttest_ind, kruskal
from statsmodels.stats.multitest import multipletests
import scikit_posthocs as sp

from ibd_genus_tools.processing.counts import (
    FEATURE_COL, ABUNDANCE_COL, GROUP_COL
)

CASE_GROUPS = ("UC", "CD")
CONTROL_GROUP = "nonIBD"
KRUSKAL_GROUPS = ("UC", "CD", "nonIBD")

ALPHA = 0.05
FOLD_CHANGE_THRESHOLD = 1.0
PSEUDOCOUNT = 1e-6

SIGNIFICANT = "Significant"
NOT_SIGNIFICANT = "Not Significant"

logger = logging.getLogger('ibd_genus_tools')


def _finite(values):
    values = np.asarray(values, dtype=float)
    return values[np.isfinite(values)]


def log2_fold_change(case_values, control_values, pseudocount=PSEUDOCOUNT):
    """
    log2((mean(case) + eps) / (mean(control) + eps)), means skipping NaN.

    Returns a tuple (log2_fc, case_mean, control_mean).
    """
    case_mean = pd.Series(case_values, dtype=float).mean()
    control_mean = pd.Series(control_values, dtype=float).mean()
    fc = np.log2((case_mean + pseudocount) / (control_mean + pseudocount))
    return fc, case_mean, control_mean


def welch_ttest(case_values, control_values):
    """
    Welch two-sample t-test p-value.

    NaN when either group has fewer than 2 finite values or both groups
    are constant.
    """
    a = _finite(case_values)
    b = _finite(control_values)
    if len(a) < 2 or len(b) < 2:
        return np.nan
    if np.ptp(a) == 0 and np.ptp(b) == 0:
        return np.nan
    try:
        _, pval = ttest_ind(a, b, equal_var=False)
    except ValueError as e:
        logger.debug(f"t-test failed: {str(e)}")
        return np.nan
    return float(pval)


def kruskal_test(*group_values):
    """
    Kruskal-Wallis p-value across any number of groups.

    Empty groups are ignored; NaN when fewer than two groups remain or
    every value is identical.
    """
    samples = [g for g in (_finite(v) for v in group_values) if len(g) > 0]
    if len(samples) < 2:
        return np.nan
    if np.ptp(np.concatenate(samples)) == 0:
        return np.nan
    try:
        _, pval = kruskal(*samples)
    except ValueError as e:
        logger.debug(f"Kruskal-Wallis failed: {str(e)}")
        return np.nan
    return float(pval)


def bh_adjust(pvalues):
    """
    Benjamini-Hochberg adjusted p-values.

    NaN entries stay NaN and are not counted as tests.
    """
    pvals = np.asarray(pvalues, dtype=float)
    adjusted = np.full(pvals.shape, np.nan)
    mask = ~np.isnan(pvals)
    if mask.any():
        _, corrected, _, _ = multipletests(pvals[mask], method="fdr_bh")
        adjusted[mask] = corrected
    return adjusted


def classify_significance(adjusted_pvalues, log2_fold_changes,
                          alpha=ALPHA, fc_threshold=FOLD_CHANGE_THRESHOLD):
    """
    'Significant' where adjusted p < alpha and |log2 FC| > fc_threshold.

    NaN in either input compares False and is 'Not Significant'.
    """
    padj = np.asarray(adjusted_pvalues, dtype=float)
    lfc = np.asarray(log2_fold_changes, dtype=float)
    with np.errstate(invalid="ignore"):
        hit = (padj < alpha) & (np.abs(lfc) > fc_threshold)
    return np.where(hit, SIGNIFICANT, NOT_SIGNIFICANT)


def _per_genus(merged_df, test_func, feature_col, abundance_col, group_col, pseudocount):
    rows = []
    for feat, sub in merged_df.groupby(feature_col, sort=True):
        case = sub.loc[sub[group_col].isin(CASE_GROUPS), abundance_col]
        control = sub.loc[sub[group_col] == CONTROL_GROUP, abundance_col]
        fc, case_mean, control_mean = log2_fold_change(case, control, pseudocount)
        pval = test_func(sub, case, control)
        if np.isnan(pval):
            logger.debug(f"No p-value for {feat}: insufficient or constant data")
        rows.append({
            feature_col: feat,
            "mean_IBD": case_mean,
            "mean_nonIBD": control_mean,
            "log2_fold_change": fc,
            "p_value": pval,
        })
    return pd.DataFrame(
        rows,
        columns=[feature_col, "mean_IBD", "mean_nonIBD", "log2_fold_change", "p_value"]
    )


def _finish(results, alpha, fc_threshold, label):
    results["adjusted_p_value"] = bh_adjust(results["p_value"])
    results["significance"] = classify_significance(
        results["adjusted_p_value"], results["log2_fold_change"], alpha, fc_threshold
    )
    tested = results["p_value"].notna().sum()
    sig_count = (results["significance"] == SIGNIFICANT).sum()
    logger.info(
        f"{label}: {len(results)} genera, {tested} tested, "
        f"{sig_count} significant (adj. p < {alpha}, |log2FC| > {fc_threshold})"
    )
    return results


def run_ttest_analysis(merged_df, alpha=ALPHA, fc_threshold=FOLD_CHANGE_THRESHOLD,
                       pseudocount=PSEUDOCOUNT, feature_col=FEATURE_COL,
                       abundance_col=ABUNDANCE_COL, group_col=GROUP_COL):
    """
    Welch t-test of UC+CD versus nonIBD for every genus.

    Args:
        merged_df: Merged long-format DataFrame (abundance + Study.Group)
        alpha: Adjusted p-value threshold
        fc_threshold: Absolute log2 fold-change threshold
        pseudocount: Added to both means before the ratio

    Returns:
        DataFrame with one row per genus, including a 'label' column
        holding the genus name for significant rows
    """
    logger.info("Running Welch t-tests (UC+CD vs nonIBD)")
    results = _per_genus(
        merged_df,
        lambda sub, case, control: welch_ttest(case, control),
        feature_col, abundance_col, group_col, pseudocount
    )
    results = _finish(results, alpha, fc_threshold, "t-test")
    results["label"] = results[feature_col].where(results["significance"] == SIGNIFICANT, None)
    return results


def run_kruskal_analysis(merged_df, alpha=ALPHA, fc_threshold=FOLD_CHANGE_THRESHOLD,
                         pseudocount=PSEUDOCOUNT, feature_col=FEATURE_COL,
                         abundance_col=ABUNDANCE_COL, group_col=GROUP_COL):
    """
    Kruskal-Wallis test across UC, CD and nonIBD for every genus.

    The fold change still contrasts UC+CD against nonIBD.
    """
    logger.info(f"Running Kruskal-Wallis tests across {list(KRUSKAL_GROUPS)}")

    def _test(sub, case, control):
        return kruskal_test(*[
            sub.loc[sub[group_col] == g, abundance_col] for g in KRUSKAL_GROUPS
        ])

    results = _per_genus(merged_df, _test, feature_col, abundance_col, group_col, pseudocount)
    return _finish(results, alpha, fc_threshold, "Kruskal-Wallis")


def dunn_posthoc(merged_df, kruskal_results, alpha=ALPHA, feature_col=FEATURE_COL,
                 abundance_col=ABUNDANCE_COL, group_col=GROUP_COL):
    """
    Dunn's post-hoc tests (Holm-adjusted) for genera with Kruskal-Wallis adjusted p < alpha.

    Returns:
        Dict mapping genus -> pairwise p-value matrix
    """
    with np.errstate(invalid="ignore"):
        sig_features = kruskal_results.loc[
            kruskal_results["adjusted_p_value"] < alpha, feature_col
        ].tolist()
    if not sig_features:
        logger.info("No genera pass the Kruskal-Wallis threshold; skipping Dunn's tests")
        return {}

    logger.info(f"Running Dunn's post-hoc tests for {len(sig_features)} genera")
    posthoc_results = {}
    for feat in sig_features:
        sub = merged_df[merged_df[feature_col] == feat].dropna(subset=[abundance_col])
        try:
            posthoc_results[feat] = sp.posthoc_dunn(
                sub, val_col=abundance_col, group_col=group_col, p_adjust="holm"
            )
        except (ValueError, ZeroDivisionError) as e:
            logger.warning(f"Error in Dunn's post-hoc test for {feat}: {str(e)}")
    return posthoc_results
