from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np
import pandas as pd
from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import CountsResponse, DashboardOptionsModel
from core.aggregator import DashboardData
from core.data import load_dashboard_data
from core.metrics_overview import compute_overview, overview_frames
from core.options import DashboardOptions, normalize_options


app = FastAPI(title="Course Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_dashboard_data() -> DashboardData:
    return load_dashboard_data()


def _options_from_model(model: Optional[DashboardOptionsModel]) -> DashboardOptions:
    raw = model.model_dump() if model is not None else {}
    return normalize_options(raw)


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
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def _error(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/overview")
def overview_default():
    try:
        return _json(compute_overview(DashboardOptions(), get_dashboard_data()))
    except Exception as exc:
        logger.exception("overview failed")
        return _error(exc)


@app.post("/overview")
def overview(options: DashboardOptionsModel):
    try:
        return _json(compute_overview(_options_from_model(options), get_dashboard_data()))
    except Exception as exc:
        logger.exception("overview failed")
        return _error(exc)


@app.get("/meta/counts")
def meta_counts():
    try:
        data = get_dashboard_data()
        counts = CountsResponse(
            instructors=len(data.instructors),
            rooms=len(data.rooms),
            participants=len(data.participants),
            courses=len(data.courses),
            enrollments=len(data.enrollments),
        )
        return _json(counts.model_dump())
    except Exception as exc:
        logger.exception("meta_counts failed")
        return _error(exc)


@app.post("/export/{section}")
def export_section(section: str, options: DashboardOptionsModel):
    frames = overview_frames(get_dashboard_data(), _options_from_model(options))
    export_df = frames.get(section)
    if export_df is None or not hasattr(export_df, "to_csv"):
        export_df = pd.DataFrame()
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(
        content=csv_bytes,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={section}.csv"},
    )
