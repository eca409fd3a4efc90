import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest


UC = ["UC1", "UC2", "UC3"]
CD = ["CD1", "CD2", "CD3"]
NON = ["N1", "N2", "N3", "N4"]

GROUP_VALUES = {
    # genus: (UC values, CD values, nonIBD values)
    "Up": ([0.40, 0.42, 0.44], [0.38, 0.41, 0.43], [0.010, 0.012, 0.011, 0.013]),
    "Flat": ([0.10, 0.12, 0.09], [0.11, 0.10, 0.13], [0.10, 0.11, 0.12, 0.09]),
    "Down": ([0.001, 0.002, 0.0015], [0.002, 0.001, 0.0012], [0.20, 0.22, 0.21, 0.19]),
}


@pytest.fixture
def merged_df():
    """Merged long-format table with three genera across UC, CD and nonIBD."""
    rows = []
    for genus, (uc, cd, non) in GROUP_VALUES.items():
        for samples, values, group in ((UC, uc, "UC"), (CD, cd, "CD"), (NON, non, "nonIBD")):
            for sample, value in zip(samples, values):
                rows.append({
                    "Sample": sample,
                    "Bacterial_Group": genus,
                    "Count": value * 1000,
                    "Relative_Abundance": value,
                    "Study.Group": group,
                })
    return pd.DataFrame(rows)


@pytest.fixture
def wide_counts():
    return pd.DataFrame({
        "Sample": ["S1", "S2", "S3"],
        "Bacteroides": [10, 0, 5],
        "Dorea": [5, 20, 5],
        "Roseburia": [85, 30, 0],
    })


def make_counts_and_metadata(seed=42):
    """Synthetic wide counts (with one orphan sample) and metadata (with orphans)."""
    rng = np.random.default_rng(seed)
    samples = [f"UC{i}" for i in range(1, 5)] + [f"CD{i}" for i in range(1, 5)] \
        + [f"N{i}" for i in range(1, 5)] + ["X1"]
    genera = ["Bacteroides", "Dorea", "Roseburia", "Faecalibacterium", "Prevotella",
              "Blautia", "Alistipes", "Ruminococcus", "Escherichia", "Klebsiella",
              "Akkermansia", "Bifidobacterium"]
    counts = pd.DataFrame(
        rng.poisson(50, size=(len(samples), len(genera))).astype(float),
        columns=genera
    )
    # Escherichia enriched in IBD samples
    counts.loc[:7, "Escherichia"] = rng.poisson(2000, size=8)
    counts.loc[8:11, "Escherichia"] = rng.poisson(5, size=4)
    counts.loc[2, "Dorea"] = np.nan
    counts.insert(0, "Sample", samples)

    metadata = pd.DataFrame({
        "Sample": samples[:12] + ["M1", "Z1"],
        "Study.Group": ["UC"] * 4 + ["CD"] * 4 + ["nonIBD"] * 4 + ["UC", "Other"],
        "Age": list(range(20, 34)),
    })
    return counts, metadata


@pytest.fixture
def input_files(tmp_path):
    """Write counts, metadata and a taxonomy-annotated genus table to tmp_path."""
    counts, metadata = make_counts_and_metadata()
    counts_file = tmp_path / "genera.counts.tsv"
    metadata_file = tmp_path / "metadata.tsv"
    counts.to_csv(counts_file, sep="\t", index=False)
    metadata.to_csv(metadata_file, sep="\t", index=False)

    taxa = counts.rename(columns={
        g: f"k__Bacteria;p__Firmicutes;c__Clostridia;o__Order;f__Family;g__{g};s__sp."
        for g in counts.columns if g != "Sample"
    })
    genus_table = tmp_path / "taxonomy_counts.tsv"
    taxa.to_csv(genus_table, sep="\t", index=False)

    return {
        "counts": str(counts_file),
        "metadata": str(metadata_file),
        "genus_table": str(genus_table),
        "counts_df": counts,
        "metadata_df": metadata,
    }
