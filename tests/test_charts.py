import pandas as pd
import pytest

from core.aggregate import GROUP_COLUMNS
from core.charts import (
    CHART_TITLE,
    NFL_COLORS,
    build_group_bubbles,
    build_suspension_scatter,
    format_games,
    to_vega_spec,
)


@pytest.mark.parametrize(
    "games,label",
    [(40, "Indefinite"), (1, "1 game"), (4, "4 games"), (0, "0 games"), (None, "N/A")],
)
def test_format_games(games, label):
    assert format_games(games) == label


def _dataset(spec: dict) -> list:
    return next(iter(spec["datasets"].values()))


def test_scatter_spec(groups_df):
    spec = to_vega_spec(build_suspension_scatter(groups_df))

    assert spec["title"]["text"] == CHART_TITLE
    assert spec["title"]["subtitle"] == "Analysis of 9 player suspensions across violation categories"
    assert spec["encoding"]["x"]["field"] == "sub_category"
    assert spec["encoding"]["y"]["field"] == "games"
    assert spec["encoding"]["x"]["sort"][:2] == ["PEDs", "PEDs, more than once"]
    assert spec["encoding"]["color"]["scale"]["range"] == [NFL_COLORS["secondary"], NFL_COLORS["primary"]]
    assert "'Indef.'" in spec["encoding"]["y"]["axis"]["labelExpr"]
    assert "xOffset" in spec["encoding"]

    rows = _dataset(spec)
    assert len(rows) == 9
    rice = next(r for r in rows if r["name"] == "R. Rice")
    assert rice["suspension"] == "Indefinite"
    assert rice["year"] == "2014"


def test_scatter_spec_empty():
    spec = to_vega_spec(build_suspension_scatter(pd.DataFrame(columns=GROUP_COLUMNS)))
    assert spec["title"]["subtitle"].startswith("Analysis of 0 player")


def test_group_bubbles_spec(groups_df):
    spec = to_vega_spec(build_group_bubbles(groups_df))

    assert len(spec["layer"]) == 2
    assert spec["layer"][0]["encoding"]["size"]["field"] == "count"
    assert spec["layer"][1]["encoding"]["text"]["field"] == "count"
    rows = _dataset(spec)
    assert len(rows) == len(groups_df)
    assert all("players" not in r for r in rows)


def test_group_bubbles_spec_empty():
    spec = to_vega_spec(build_group_bubbles(pd.DataFrame(columns=GROUP_COLUMNS)))
    assert len(spec["layer"]) == 2
