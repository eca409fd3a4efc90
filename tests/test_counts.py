import numpy as np
import pandas as pd
import pytest

from ibd_genus_tools.processing.counts import (
    read_counts_table,
    read_metadata,
    wide_to_long,
    long_to_wide,
    select_metadata,
    drop_missing,
    relative_abundance,
    merge_with_metadata,
)


def test_wide_to_long_one_row_per_cell(wide_counts):
    long_df = wide_to_long(wide_counts)
    assert list(long_df.columns) == ["Sample", "Bacterial_Group", "Count"]
    assert len(long_df) == 9
    row = long_df[(long_df["Sample"] == "S2") & (long_df["Bacterial_Group"] == "Bacteroides")]
    assert row["Count"].iloc[0] == 0


def test_reshape_round_trip(wide_counts):
    back = long_to_wide(wide_to_long(wide_counts))
    expected = wide_counts.set_index("Sample")
    pd.testing.assert_frame_equal(
        back.sort_index().sort_index(axis=1),
        expected.sort_index().sort_index(axis=1),
        check_names=False,
        check_dtype=False,
    )


def test_reshape_round_trip_keeps_missing_counts(wide_counts):
    wide = wide_counts.astype({"Dorea": float})
    wide.loc[1, "Dorea"] = np.nan
    back = long_to_wide(wide_to_long(wide))
    assert np.isnan(back.loc["S2", "Dorea"])
    pd.testing.assert_frame_equal(
        back.sort_index().sort_index(axis=1),
        wide.set_index("Sample").sort_index().sort_index(axis=1),
        check_names=False,
        check_dtype=False,
    )


def test_blank_sample_ids_stay_missing_and_never_join(tmp_path):
    counts_path = tmp_path / "counts.tsv"
    counts_path.write_text("Sample\tA\tB\nS1\t1\t2\n\t3\t4\n")
    meta_path = tmp_path / "metadata.tsv"
    meta_path.write_text("Sample\tStudy.Group\nS1\tUC\n\tnonIBD\n")

    counts = read_counts_table(str(counts_path))
    metadata = read_metadata(str(meta_path))
    assert counts["Sample"].isna().sum() == 1
    assert metadata["Sample"].isna().sum() == 1

    long_clean = drop_missing(wide_to_long(counts))
    meta_clean = drop_missing(select_metadata(metadata))
    assert set(long_clean["Sample"]) == {"S1"}
    assert set(meta_clean["Sample"]) == {"S1"}

    # without cleaning, blank IDs still do not pair up in the join
    merged = merge_with_metadata(relative_abundance(wide_to_long(counts)), select_metadata(metadata))
    assert set(merged["Sample"]) == {"S1"}
    assert "nan" not in set(merged["Sample"])


def test_wide_to_long_keeps_missing_and_duplicate_columns():
    wide = pd.DataFrame(
        [["S1", 1.0, np.nan], ["S2", 3.0, 4.0]],
        columns=["Sample", "Dorea", "Dorea"],
    )
    long_df = wide_to_long(wide)
    assert len(long_df) == 4
    assert (long_df["Bacterial_Group"] == "Dorea").all()
    assert long_df["Count"].isna().sum() == 1


def test_wide_to_long_requires_sample_column():
    with pytest.raises(ValueError):
        wide_to_long(pd.DataFrame({"Dorea": [1]}))


def test_drop_missing_and_select_metadata():
    meta = pd.DataFrame({
        "Sample": ["S1", "S2", "S3"],
        "Study.Group": ["UC", None, "CD"],
        "Age": [30, 40, None],
    })
    reduced = select_metadata(meta)
    assert list(reduced.columns) == ["Sample", "Study.Group"]
    cleaned = drop_missing(reduced)
    assert cleaned["Sample"].tolist() == ["S1", "S3"]


def test_select_metadata_missing_column():
    with pytest.raises(ValueError):
        select_metadata(pd.DataFrame({"Sample": ["S1"]}))


def test_relative_abundance_sums_to_one(wide_counts):
    normalized = relative_abundance(wide_to_long(wide_counts))
    sums = normalized.groupby("Sample")["Relative_Abundance"].sum()
    assert np.allclose(sums.values, 1.0, atol=1e-9)
    s1_dorea = normalized[(normalized["Sample"] == "S1") & (normalized["Bacterial_Group"] == "Dorea")]
    assert s1_dorea["Relative_Abundance"].iloc[0] == pytest.approx(0.05)


def test_relative_abundance_zero_total_is_nan():
    long_df = pd.DataFrame({
        "Sample": ["S1", "S1", "S2", "S2"],
        "Bacterial_Group": ["A", "B", "A", "B"],
        "Count": [0.0, 0.0, 1.0, 3.0],
    })
    normalized = relative_abundance(long_df)
    assert normalized.loc[normalized["Sample"] == "S1", "Relative_Abundance"].isna().all()
    assert normalized.loc[normalized["Sample"] == "S2", "Relative_Abundance"].tolist() == [0.25, 0.75]
    assert "Relative_Abundance" not in long_df.columns


def test_merge_excludes_orphans_and_other_groups():
    counts = pd.DataFrame({
        "Sample": ["S1", "S2", "S3", "S4", "X1"],
        "A": [1, 2, 3, 4, 5],
        "B": [1, 1, 1, 1, 1],
        "C": [2, 2, 2, 2, 2],
    })
    normalized = relative_abundance(wide_to_long(counts))
    metadata = pd.DataFrame({
        "Sample": ["S1", "S2", "S3", "S4", "M1"],
        "Study.Group": ["UC", "CD", "nonIBD", "nonIBD", "UC"],
    })
    merged = merge_with_metadata(normalized, metadata)
    # X1 contributes its 3 genus rows; M1 contributes none
    assert len(normalized) == 15
    assert len(merged) == 15 - 3
    assert set(merged["Sample"]) == {"S1", "S2", "S3", "S4"}

    metadata.loc[3, "Study.Group"] = "Other"
    merged = merge_with_metadata(normalized, metadata)
    assert len(merged) == 9
    assert set(merged["Study.Group"]) == {"UC", "CD", "nonIBD"}


def test_read_counts_table_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_counts_table(str(tmp_path / "missing.tsv"))


def test_read_metadata_requires_columns(tmp_path):
    path = tmp_path / "metadata.tsv"
    pd.DataFrame({"Sample": ["S1"], "Group": ["UC"]}).to_csv(path, sep="\t", index=False)
    with pytest.raises(ValueError):
        read_metadata(str(path))


def test_read_counts_table_sample_ids_are_strings(tmp_path):
    path = tmp_path / "counts.tsv"
    pd.DataFrame({"Sample": [1, 2], "Dorea": [3, 4]}).to_csv(path, sep="\t", index=False)
    df = read_counts_table(str(path))
    assert df["Sample"].tolist() == ["1", "2"]
