from __future__ import annotations

from typing import Any, Dict

import altair as alt
import pandas as pd

from core.aggregate import flatten_groups
from core.classify import (
    CONDUCT_VIOLATIONS,
    DRUG_VIOLATIONS,
    INDEFINITE_GAMES,
    SUBCATEGORY_ORDER,
)

alt.data_transformers.disable_max_rows()

NFL_COLORS = {
    "primary": "#013369",
    "secondary": "#D50A0A",
    "accent": "#FFB612",
    "light_accent": "#4F5155",
    "background": "#F5F5F5",
    "text": "#111111",
}

CATEGORY_COLORS = alt.Scale(
    domain=[DRUG_VIOLATIONS, CONDUCT_VIOLATIONS],
    range=[NFL_COLORS["secondary"], NFL_COLORS["primary"]],
)

CHART_TITLE = "NFL SUSPENSION SEVERITY BY OFFENSE TYPE"


def to_vega_spec(chart: alt.TopLevelMixin) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def format_games(games: object) -> str:
    if games is None or pd.isna(games):
        return "N/A"
    games = int(games)
    if games >= INDEFINITE_GAMES:
        return "Indefinite"
    return "1 game" if games == 1 else f"{games} games"


def _games_axis() -> alt.Axis:
    return alt.Axis(
        labelExpr=f"datum.value == {INDEFINITE_GAMES} ? 'Indef.' : datum.label",
        labelFontWeight="bold",
        labelColor=NFL_COLORS["light_accent"],
        titleColor=NFL_COLORS["primary"],
        gridDash=[3, 3],
    )


def _offense_axis() -> alt.Axis:
    return alt.Axis(
        labelAngle=-40,
        labelFontWeight="bold",
        labelColor=NFL_COLORS["light_accent"],
        titleColor=NFL_COLORS["primary"],
    )


def _offense_domain(sub_categories: pd.Series) -> list[str]:
    present = set(sub_categories.dropna().astype(str))
    ordered = [s for s in SUBCATEGORY_ORDER if s in present]
    return ordered + sorted(present - set(ordered))


def build_suspension_scatter(groups: pd.DataFrame) -> alt.Chart:
    """One point per suspended player, jittered within its offense column."""
    players = flatten_groups(groups)
    players["suspension"] = players["games"].apply(format_games)
    players["description"] = players["description"].fillna("No additional details available")
    players["year"] = players["year"].astype("string")

    return (
        alt.Chart(
            players,
            title=alt.TitleParams(
                CHART_TITLE,
                subtitle=f"Analysis of {len(players)} player suspensions across violation categories",
                color=NFL_COLORS["primary"],
                subtitleColor=NFL_COLORS["light_accent"],
            ),
        )
        .transform_calculate(jitter="(random() - 0.5) * 0.8")
        .mark_point(filled=True, shape="diamond", size=70, opacity=0.8, stroke="#333", strokeWidth=0.5)
        .encode(
            x=alt.X("sub_category:N", title="TYPE OF OFFENSE", sort=_offense_domain(players["sub_category"]), axis=_offense_axis()),
            xOffset=alt.XOffset("jitter:Q", scale=alt.Scale(domain=[-0.5, 0.5])),
            y=alt.Y("games:Q", title="LENGTH OF SUSPENSION (GAMES)", scale=alt.Scale(domainMin=0), axis=_games_axis()),
            color=alt.Color("category:N", title="VIOLATION TYPE", scale=CATEGORY_COLORS),
            tooltip=[
                alt.Tooltip("name:N", title="Player"),
                alt.Tooltip("team:N", title="Team"),
                alt.Tooltip("year:N", title="Year"),
                alt.Tooltip("sub_category:N", title="Violation"),
                alt.Tooltip("suspension:N", title="Suspension"),
                alt.Tooltip("description:N", title="Details"),
            ],
        )
        .properties(width=720, height=450, background=NFL_COLORS["background"])
    )


def build_group_bubbles(groups: pd.DataFrame) -> alt.LayerChart:
    """One mark per (subcategory, games) group, sized and labelled by count."""
    if groups is None or groups.empty:
        df = pd.DataFrame(columns=["category", "sub_category", "games", "count", "percentage", "suspension"])
    else:
        df = groups.drop(columns=["players"]).copy()
        df["suspension"] = df["games"].apply(format_games)

    base = alt.Chart(df).encode(
        x=alt.X("sub_category:N", title="TYPE OF OFFENSE", sort=_offense_domain(df["sub_category"]), axis=_offense_axis()),
        y=alt.Y("games:Q", title="LENGTH OF SUSPENSION (GAMES)", scale=alt.Scale(domainMin=0), axis=_games_axis()),
    )
    bubbles = base.mark_circle(opacity=0.75, stroke="#333", strokeWidth=0.5).encode(
        size=alt.Size("count:Q", title="Suspensions", scale=alt.Scale(range=[40, 1200])),
        color=alt.Color("category:N", title="VIOLATION TYPE", scale=CATEGORY_COLORS),
        tooltip=[
            alt.Tooltip("sub_category:N", title="Violation"),
            alt.Tooltip("suspension:N", title="Suspension"),
            alt.Tooltip("count:Q", title="Players"),
            alt.Tooltip("percentage:Q", title="Share of violation", format=".1%"),
        ],
    )
    labels = base.mark_text(fontSize=10, fontWeight="bold", color="white").encode(text="count:Q")
    return (bubbles + labels).properties(width=720, height=450, title="Suspensions per offense and length")
