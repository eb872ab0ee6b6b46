from __future__ import annotations

import logging
import math

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import GroupsResponse, MetaListResponse, MetaTeamsResponse, SuspensionFiltersModel
from core.data import load_suspension_data, prepare_context
from core.filters import ALL, LENGTH_BUCKETS, YEAR_RANGE_OPTIONS, SuspensionFilters, normalize_filters
from core.metrics_debug import compute_debug
from core.metrics_overview import compute_group_detail, compute_overview, groups_to_records


app = FastAPI(title="NFL Suspensions API", version="0.1.0")
logger = logging.getLogger(__name__)

CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:8501"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _filters_from_model(model: SuspensionFiltersModel, *, available_teams: list[str]) -> SuspensionFilters:
    raw = model.model_dump()
    return normalize_filters(raw, available_teams=available_teams)


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        )
    )


def _error(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/meta/teams")
def meta_teams():
    try:
        data_ctx = load_suspension_data()
        return _json(MetaTeamsResponse(teams=list(data_ctx.get("teams", []) or [])).model_dump())
    except Exception as exc:
        logger.exception("meta_teams failed")
        return _error(exc)


@app.get("/meta/year-ranges")
def meta_year_ranges():
    return _json(MetaListResponse(values=YEAR_RANGE_OPTIONS).model_dump())


@app.get("/meta/length-buckets")
def meta_length_buckets():
    return _json(MetaListResponse(values=[ALL, *LENGTH_BUCKETS]).model_dump())


@app.post("/overview")
def overview(filters: SuspensionFiltersModel):
    try:
        data_ctx = load_suspension_data()
        f = _filters_from_model(filters, available_teams=data_ctx.get("teams", []))
        ctx = prepare_context(f, data_ctx)
        return _json(compute_overview(f, ctx))
    except Exception as exc:
        logger.exception("overview failed")
        return _error(exc)


@app.post("/groups")
def groups(filters: SuspensionFiltersModel):
    try:
        data_ctx = load_suspension_data()
        f = _filters_from_model(filters, available_teams=data_ctx.get("teams", []))
        ctx = prepare_context(f, data_ctx)
        resp = GroupsResponse(groups=groups_to_records(ctx["filtered_groups"]))
        return _json(resp.model_dump())
    except Exception as exc:
        logger.exception("groups failed")
        return _error(exc)


@app.get("/groups/detail")
def group_detail(
    sub_category: str = Query(...),
    games: int = Query(...),
    year_range: str = Query(default=ALL),
    length_bucket: str = Query(default=ALL),
    team: str = Query(default=ALL),
):
    try:
        data_ctx = load_suspension_data()
        model = SuspensionFiltersModel(year_range=year_range, length_bucket=length_bucket, team=team)
        f = _filters_from_model(model, available_teams=data_ctx.get("teams", []))
        ctx = prepare_context(f, data_ctx)
        return _json(compute_group_detail(ctx, sub_category, games))
    except Exception as exc:
        logger.exception("group_detail failed")
        return _error(exc)


@app.post("/debug")
def debug(filters: SuspensionFiltersModel):
    try:
        data_ctx = load_suspension_data()
        f = _filters_from_model(filters, available_teams=data_ctx.get("teams", []))
        ctx = prepare_context(f, data_ctx)
        return _json(compute_debug(f, ctx))
    except Exception as exc:
        logger.exception("debug failed")
        return _error(exc)


@app.post("/export/{page}")
def export_page(page: str, filters: SuspensionFiltersModel):
    data_ctx = load_suspension_data()
    f = _filters_from_model(filters, available_teams=data_ctx.get("teams", []))
    ctx = prepare_context(f, data_ctx)

    filename = f"{page}.csv"
    if page == "groups":
        export_df = ctx["filtered_groups"].drop(columns=["players"], errors="ignore")
    elif page == "suspensions":
        export_df = ctx["filtered_suspensions"]
    else:
        export_df = pd.DataFrame()

    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
