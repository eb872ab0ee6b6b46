import math

import pandas as pd

from core.aggregate import GROUP_COLUMNS, aggregate_suspensions, flatten_groups, summarize_subcategories
from core.classify import DRUG_VIOLATIONS, INDEFINITE_GAMES, SUSPENSION_COLUMNS


def _key_set(groups: pd.DataFrame) -> set:
    cols = ["category", "sub_category", "games", "count", "percentage"]
    return {
        (r["category"], r["sub_category"], int(r["games"]), int(r["count"]), round(float(r["percentage"]), 12))
        for r in groups[cols].to_dict(orient="records")
    }


def test_end_to_end_example(example_groups):
    assert len(example_groups) == 2
    assert _key_set(example_groups) == {
        (DRUG_VIOLATIONS, "PEDs", 4, 2, 1.0),
        (DRUG_VIOLATIONS, "PEDs, more than once", INDEFINITE_GAMES, 1, 1.0),
    }


def test_output_columns(groups_df):
    assert list(groups_df.columns) == GROUP_COLUMNS


def test_percentages_sum_to_one_per_subcategory(groups_df):
    totals = groups_df.groupby(["category", "sub_category"])["percentage"].sum()
    for total in totals:
        assert math.isclose(total, 1.0, abs_tol=1e-9)


def test_percentage_is_share_within_subcategory(groups_df):
    repeat_sa = groups_df[groups_df["sub_category"] == "Substance abuse, more than once"]
    assert sorted(repeat_sa["games"].tolist()) == [16, INDEFINITE_GAMES]
    assert repeat_sa["percentage"].tolist() == [0.5, 0.5]


def test_counts_match_input_and_no_empty_groups(groups_df, suspensions_df):
    assert int(groups_df["count"].sum()) == len(suspensions_df)
    assert (groups_df["count"] > 0).all()
    assert all(len(p) == c for p, c in zip(groups_df["players"], groups_df["count"]))
    assert not groups_df.duplicated(subset=["category", "sub_category", "games"]).any()


def test_players_keep_input_order(groups_df):
    peds = groups_df[(groups_df["sub_category"] == "PEDs") & (groups_df["games"] == 4)].iloc[0]
    assert [p["name"] for p in peds["players"]] == ["L. Tonga", "S. Hamm"]
    assert peds["players"][0]["year"] == 2013
    assert set(peds["players"][0]) == set(SUSPENSION_COLUMNS)


def test_order_independent(suspensions_df):
    shuffled = suspensions_df.sample(frac=1.0, random_state=7).reset_index(drop=True)
    assert _key_set(aggregate_suspensions(shuffled)) == _key_set(aggregate_suspensions(suspensions_df))


def test_repeat_run_is_stable(suspensions_df):
    first = aggregate_suspensions(suspensions_df)
    second = aggregate_suspensions(suspensions_df)
    assert _key_set(first) == _key_set(second)


def test_empty_input():
    out = aggregate_suspensions(pd.DataFrame(columns=SUSPENSION_COLUMNS))
    assert out.empty
    assert list(out.columns) == GROUP_COLUMNS


def test_flatten_groups_inverts_grouping(groups_df, suspensions_df):
    flat = flatten_groups(groups_df)
    assert list(flat.columns) == SUSPENSION_COLUMNS
    assert len(flat) == len(suspensions_df)
    assert sorted(flat["name"]) == sorted(suspensions_df["name"])


def test_flatten_groups_empty():
    assert flatten_groups(pd.DataFrame(columns=GROUP_COLUMNS)).empty


def test_summarize_subcategories(groups_df):
    summary = summarize_subcategories(groups_df)
    assert summary["sub_category"].tolist()[:2] == ["PEDs", "PEDs, more than once"]

    row = summary[summary["sub_category"] == "Substance abuse, more than once"].iloc[0]
    assert row["suspensions"] == 2
    assert row["distinct_lengths"] == 2
    assert row["indefinite"] == 1
    assert row["max_games"] == 16
    assert row["median_games"] == 16.0

    peds = summary[summary["sub_category"] == "PEDs"].iloc[0]
    assert peds["suspensions"] == 2
    assert peds["indefinite"] == 0
    assert peds["median_games"] == 4.0


def test_summarize_subcategories_empty():
    assert summarize_subcategories(pd.DataFrame(columns=GROUP_COLUMNS)).empty
