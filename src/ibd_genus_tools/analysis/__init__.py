# ibd_genus_tools/analysis/__init__.py
"""Statistical testing, reporting and visualization of genus abundances."""

from ibd_genus_tools.analysis.statistical import (
    log2_fold_change,
    welch_ttest,
    kruskal_test,
    bh_adjust,
    classify_significance,
    run_ttest_analysis,
    run_kruskal_analysis,
    dunn_posthoc
)

from ibd_genus_tools.analysis.reporting import (
    rank_results,
    top_n_results,
    order_by_fold_change,
    save_top_results,
    save_dunn_results,
    write_summary
)

from ibd_genus_tools.analysis.visualizations import (
    plot_count_histograms,
    plot_volcano,
    plot_top_genera_boxplot,
    plot_fold_change_bar
)
