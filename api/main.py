from __future__ import annotations

from dataclasses import asdict
import logging
import math

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.responses import Response
from fastapi.encoders import jsonable_encoder

from api.schemas import DashboardFiltersModel, QuartilesRequest
from core import settings
from core.data import generate_observations, generate_roster, load_dashboard_data, prepare_context
from core.errors import InvalidInputError
from core.filters import AGE_BOUNDS, GENDER_OPTIONS, HEIGHT_BOUNDS, WEIGHT_BOUNDS, DashboardFilters, normalize_filters
from core.metrics_debug import compute_debug
from core.metrics_individual import compute_employee_detail, compute_individual
from core.metrics_overview import compute_overview
from core.stats import (
    average_by_date,
    distribution_for_date,
    observations_for_employee,
    quartiles,
    stats_for_employee_by_period,
)

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="Sleep Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _filters_from_model(model: DashboardFiltersModel) -> DashboardFilters:
    raw = model.model_dump()
    return normalize_filters(raw)


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
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
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def _error(exc: Exception, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/meta/filters")
def meta_filters():
    try:
        data_ctx = load_dashboard_data()
        dates = data_ctx.get("dates", []) or []
        return _json(
            {
                "genders": list(GENDER_OPTIONS),
                "age_bounds": list(AGE_BOUNDS),
                "height_bounds": list(HEIGHT_BOUNDS),
                "weight_bounds": list(WEIGHT_BOUNDS),
                "dates": {"first": dates[0] if dates else None, "last": dates[-1] if dates else None},
            }
        )
    except Exception as exc:
        logger.exception("meta_filters failed")
        return _error(exc, 500)


@app.get("/employees")
def employees():
    try:
        return _json([asdict(e) for e in generate_roster()])
    except Exception as exc:
        logger.exception("employees failed")
        return _error(exc, 500)


@app.get("/sleep")
def sleep():
    try:
        return _json([asdict(r) for r in generate_observations()])
    except Exception as exc:
        logger.exception("sleep failed")
        return _error(exc, 500)


@app.get("/sleep/average-by-date")
def sleep_average_by_date():
    try:
        data_ctx = load_dashboard_data()
        return _json(average_by_date(data_ctx["sleep"]))
    except Exception as exc:
        logger.exception("sleep_average_by_date failed")
        return _error(exc, 500)


@app.get("/sleep/distribution/{day}")
def sleep_distribution(day: str):
    try:
        data_ctx = load_dashboard_data()
        return _json({"date": day, "durations": distribution_for_date(day, data_ctx["sleep"])})
    except Exception as exc:
        logger.exception("sleep_distribution failed")
        return _error(exc, 500)


@app.get("/employees/{employee_id}/sleep")
def employee_sleep(employee_id: int):
    try:
        data_ctx = load_dashboard_data()
        return _json(observations_for_employee(employee_id, data_ctx["sleep"]))
    except Exception as exc:
        logger.exception("employee_sleep failed")
        return _error(exc, 500)


@app.get("/employees/{employee_id}/stats")
def employee_stats(employee_id: int, period: str = Query(default="all")):
    try:
        data_ctx = load_dashboard_data()
        return _json(stats_for_employee_by_period(employee_id, period, data_ctx["sleep"]))
    except InvalidInputError as exc:
        return _error(exc, 400)
    except Exception as exc:
        logger.exception("employee_stats failed")
        return _error(exc, 500)


@app.post("/stats/quartiles")
def stats_quartiles(body: QuartilesRequest):
    try:
        return _json(quartiles(body.values))
    except InvalidInputError as exc:
        return _error(exc, 400)
    except Exception as exc:
        logger.exception("stats_quartiles failed")
        return _error(exc, 500)


@app.post("/overview")
def overview(filters: DashboardFiltersModel):
    try:
        data_ctx = load_dashboard_data()
        f = _filters_from_model(filters)
        ctx = prepare_context(f, data_ctx)
        return _json(compute_overview(f, ctx))
    except InvalidInputError as exc:
        return _error(exc, 400)
    except Exception as exc:
        logger.exception("overview failed")
        return _error(exc, 500)


@app.post("/individual")
def individual(filters: DashboardFiltersModel):
    try:
        data_ctx = load_dashboard_data()
        f = _filters_from_model(filters)
        ctx = prepare_context(f, data_ctx)
        return _json(compute_individual(f, ctx))
    except InvalidInputError as exc:
        return _error(exc, 400)
    except Exception as exc:
        logger.exception("individual failed")
        return _error(exc, 500)


@app.get("/individual/{employee_id}")
def individual_detail(employee_id: int, period: str = Query(default="all")):
    try:
        data_ctx = load_dashboard_data()
        ctx = prepare_context(DashboardFilters(), data_ctx)
        return _json(compute_employee_detail(employee_id, period, ctx))
    except InvalidInputError as exc:
        return _error(exc, 400)
    except Exception as exc:
        logger.exception("individual_detail failed")
        return _error(exc, 500)


@app.post("/debug")
def debug(filters: DashboardFiltersModel):
    try:
        data_ctx = load_dashboard_data()
        f = _filters_from_model(filters)
        ctx = prepare_context(f, data_ctx)
        return _json(compute_debug(f, ctx))
    except InvalidInputError as exc:
        return _error(exc, 400)
    except Exception as exc:
        logger.exception("debug failed")
        return _error(exc, 500)


# page -> (context frame, download filename)
EXPORTS = {
    "overview": ("filtered_sleep", "sleep.csv"),
    "sleep": ("filtered_sleep", "sleep.csv"),
    "individual": ("filtered_employees", "employees.csv"),
    "employees": ("filtered_employees", "employees.csv"),
}


@app.post("/export/{page}")
def export_page(page: str, filters: DashboardFiltersModel):
    try:
        if page not in EXPORTS:
            raise InvalidInputError(f"Unknown export page {page!r}; expected one of {', '.join(EXPORTS)}")
        frame_key, filename = EXPORTS[page]
        data_ctx = load_dashboard_data()
        f = _filters_from_model(filters)
        ctx = prepare_context(f, data_ctx)
        export_df = ctx.get(frame_key)
        if export_df is None or not hasattr(export_df, "to_csv"):
            export_df = pd.DataFrame()
        csv_bytes = export_df.to_csv(index=False).encode("utf-8")
        return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
    except InvalidInputError as exc:
        return _error(exc, 400)
    except Exception as exc:
        logger.exception("export_page failed")
        return _error(exc, 500)
