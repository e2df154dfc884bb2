from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import date
import logging
import math
from typing import Optional

import numpy as np
import pandas as pd
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.responses import Response
from fastapi.encoders import jsonable_encoder

from api.schemas import DashboardFiltersModel
from core.catalog import DEFAULT_CATALOG, find_current_sheet, find_sheet, with_published_id
from core.config import configure_logging, load_settings
from core.controller import DashboardController
from core.data import export_frame, fetch_csv_text
from core.filters import DashboardFilters, normalize_filters
from core.metrics_overview import compute_overview
from core.metrics_table import compute_table
from core.state import is_stale


settings = load_settings()
catalog = with_published_id(DEFAULT_CATALOG, settings.published_id)
logger = logging.getLogger(__name__)


def _fetch(url: str) -> str:
    return fetch_csv_text(url, timeout=settings.request_timeout)


controller = DashboardController(catalog, settings, fetch=_fetch)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    configure_logging(settings)
    controller.start()
    try:
        yield
    finally:
        controller.stop()


app = FastAPI(title="Mess Ledger Dashboard API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


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
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def _error(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


def _sheet_dict(source) -> Optional[dict]:
    return asdict(source) if source is not None else None


def _prepare(model: DashboardFiltersModel) -> tuple[DashboardFilters, dict]:
    """Select the requested sheet (or the current month's) and load it if needed."""
    filters = normalize_filters(model.model_dump())
    state = controller.state
    wanted = find_sheet(catalog, filters.sheet_id)
    if wanted is None and state.current_sheet is None:
        wanted = find_current_sheet(catalog, date.today())

    if wanted is not None and wanted != state.current_sheet:
        controller.select(wanted)
    elif is_stale(state):
        controller.refresh()

    state = controller.state
    if filters.sheet_id is None and state.current_sheet is not None:
        filters = DashboardFilters(sheet_id=state.current_sheet.remote_id, search_query=filters.search_query)
    return filters, controller.context()


@app.get("/meta/sheets")
def meta_sheets():
    try:
        current = controller.state.current_sheet or find_current_sheet(catalog, date.today())
        return _json({"sheets": [asdict(s) for s in catalog.sources], "current": _sheet_dict(current)})
    except Exception as exc:
        logger.exception("meta_sheets failed")
        return _error(exc)


@app.get("/meta/current")
def meta_current():
    try:
        return _json({"current": _sheet_dict(find_current_sheet(catalog, date.today()))})
    except Exception as exc:
        logger.exception("meta_current failed")
        return _error(exc)


@app.post("/overview")
def overview(filters: DashboardFiltersModel):
    try:
        f, ctx = _prepare(filters)
        return _json(compute_overview(f, ctx))
    except Exception as exc:
        logger.exception("overview failed")
        return _error(exc)


@app.post("/table")
def table(filters: DashboardFiltersModel):
    try:
        f, ctx = _prepare(filters)
        return _json(compute_table(f, ctx))
    except Exception as exc:
        logger.exception("table failed")
        return _error(exc)


@app.post("/refresh")
def refresh_now(filters: DashboardFiltersModel):
    try:
        f = normalize_filters(filters.model_dump())
        wanted = find_sheet(catalog, f.sheet_id)
        if wanted is None and controller.state.current_sheet is None:
            wanted = find_current_sheet(catalog, date.today())
        if wanted is not None and wanted != controller.state.current_sheet:
            started = controller.select(wanted)
        else:
            started = controller.refresh()
        state = controller.state
        return _json(
            {
                "started": started,
                "sheet": _sheet_dict(state.current_sheet),
                "last_updated": state.last_updated.isoformat() if state.last_updated else None,
                "error": state.error,
            }
        )
    except Exception as exc:
        logger.exception("refresh failed")
        return _error(exc)


@app.post("/export/{page}")
def export_page(page: str, filters: DashboardFiltersModel):
    f, ctx = _prepare(filters)
    export_df = export_frame(page, ctx, query=f.search_query)
    filename = f"{page}.csv"
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
