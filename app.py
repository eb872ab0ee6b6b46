import altair as alt
import pandas as pd
import streamlit as st
from typing import Optional

from core import data as dc
from core.aggregate import summarize_subcategories
from core.classify import INDEFINITE_GAMES
from core.charts import NFL_COLORS, build_group_bubbles, build_suspension_scatter, format_games
from core.filters import ALL, LENGTH_BUCKET_LABELS, YEAR_RANGE_OPTIONS, SuspensionFilters
from core.metrics_debug import compute_debug
from core.metrics_overview import compute_group_detail

alt.data_transformers.disable_max_rows()


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        f"""
        <style>
        .app-top-bar {{padding: 6px 0 4px;border-bottom: 2px solid {NFL_COLORS["primary"]};margin-bottom: 10px;}}
        .app-top-bar .breadcrumb {{color: {NFL_COLORS["light_accent"]};font-size: 0.9rem;margin-bottom: 2px;}}
        .app-top-bar .page-title {{font-size: 1.4rem;font-weight: 700;color: {NFL_COLORS["primary"]};}}
        .chip-row {{display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}}
        .chip {{background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}}
        .team-badge {{background: {NFL_COLORS["light_accent"]};color: white;padding: 2px 6px;border-radius: 4px;font-size: 0.8rem;}}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


def format_filter_summary(filters: SuspensionFilters) -> str:
    year_chip = "Years: All" if filters.year_range == ALL else f"Years: {filters.year_range}"
    length_chip = f"Length: {LENGTH_BUCKET_LABELS.get(filters.length_bucket, filters.length_bucket)}"
    team_chip = "Team: All" if filters.team == ALL else f"Team: {filters.team}"
    return "".join([f"<span class='chip'>{txt}</span>" for txt in [year_chip, length_chip, team_chip]])


def render_page_header(title: str, breadcrumb: str, filter_summary_html: str, export_df: Optional[pd.DataFrame] = None, export_name: str = "export.csv"):
    inject_base_styles()
    c1, c2 = st.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        if export_df is not None and not export_df.empty:
            st.download_button(
                "Export CSV",
                data=export_df.to_csv(index=False).encode("utf-8"),
                file_name=export_name,
                mime="text/csv",
            )
    st.markdown(f"<div class='chip-row'>{filter_summary_html}</div>", unsafe_allow_html=True)


def render_player_card(player: dict):
    st.markdown(
        f"**{player.get('name') or 'Unknown'}** <span class='team-badge'>{player.get('team') or 'N/A'}</span>",
        unsafe_allow_html=True,
    )
    st.markdown(
        f"Year: {player.get('year') or 'N/A'} · Violation: {player.get('sub_category')} · "
        f"Suspension: **{player.get('games_label') or format_games(player.get('games'))}**"
    )
    st.caption(player.get("description") or "No additional details available")
    if player.get("source"):
        st.caption(f"Source: {player['source']}")


# ---------- UI setup ----------
st.set_page_config(page_title="NFL Suspensions", layout="wide")
inject_base_styles()

try:
    data_ctx = dc.load_suspension_data()
except (FileNotFoundError, ValueError) as exc:
    st.error(f"Could not load suspensions data: {exc}. Place '{dc.SOURCE_FILENAME}' next to app.py or set {dc.SOURCE_ENV_VAR}.")
    st.stop()

teams = data_ctx.get("teams") or []

# ----- Sidebar: filters -----
with st.sidebar:
    st.markdown("### Filters")
    year_range = st.selectbox(
        "Year Range",
        options=YEAR_RANGE_OPTIONS,
        index=0,
        format_func=lambda v: "All Years" if v == ALL else v,
    )
    length_bucket = st.selectbox(
        "Suspension Length",
        options=list(LENGTH_BUCKET_LABELS),
        index=0,
        format_func=lambda v: LENGTH_BUCKET_LABELS[v],
    )
    team = st.selectbox(
        "Team",
        options=[ALL] + teams,
        index=0,
        format_func=lambda v: "All Teams" if v == ALL else v,
    )

filters = {"year_range": year_range, "length_bucket": length_bucket, "team": team}
ctx = dc.prepare_context(filters, data_ctx)
filt: SuspensionFilters = ctx["filters"]
filtered_groups: pd.DataFrame = ctx["filtered_groups"]
filtered_suspensions: pd.DataFrame = ctx["filtered_suspensions"]

render_page_header(
    "NFL Suspension Severity by Offense Type",
    f"Suspensions / {data_ctx.get('file')}",
    format_filter_summary(filt),
    export_df=filtered_suspensions,
    export_name="suspensions.csv",
)

if filtered_groups.empty:
    st.info("No suspensions match the current filters.")
    st.stop()

# ----- KPIs -----
cols = st.columns(4)
cols[0].metric("Suspensions", f"{int(filtered_groups['count'].sum()):,}")
cols[1].metric("Violation groups", f"{len(filtered_groups):,}")
cols[2].metric("Indefinite", f"{int(filtered_groups.loc[filtered_groups['games'] >= INDEFINITE_GAMES, 'count'].sum()):,}")
cols[3].metric("Teams", f"{filtered_suspensions['team'].replace('', pd.NA).dropna().nunique():,}")

# ----- Charts -----
tab_scatter, tab_groups = st.tabs(["Players", "Groups"])
with tab_scatter:
    st.altair_chart(build_suspension_scatter(filtered_groups), use_container_width=True)
with tab_groups:
    st.altair_chart(build_group_bubbles(filtered_groups), use_container_width=True)

st.subheader("By violation")
summary = summarize_subcategories(filtered_groups)
st.dataframe(summary, use_container_width=True, hide_index=True)

# ----- Detail panel -----
st.subheader("Group details")
d1, d2 = st.columns(2)
sub_options = summary["sub_category"].tolist()
selected_sub = d1.selectbox("Violation", options=sub_options)
games_options = sorted(filtered_groups.loc[filtered_groups["sub_category"] == selected_sub, "games"].astype(int).unique().tolist())
selected_games = d2.selectbox("Suspension length", options=games_options, format_func=format_games)

detail = compute_group_detail(ctx, selected_sub, selected_games)
if detail["players"]:
    st.caption(
        f"{detail['count']} player(s) · {detail['percentage']:.1%} of {selected_sub} suspensions in this view"
    )
    for player in detail["players"]:
        render_player_card(player)
        st.divider()

with st.expander("Data quality", expanded=False):
    st.json(compute_debug(filt, ctx))
