from __future__ import annotations

from dataclasses import asdict
from datetime import date
from typing import Any, Dict, Optional

import pandas as pd

from core.aggregator import DashboardData, DashboardSummary, summarize
from core.charts import instructor_bar_chart, payment_donut_chart, to_vega_spec
from core.options import PLACEHOLDER, DashboardOptions
from core.records import extract_record_id


def format_eur(value: object) -> str:
    """German-style amount: ``1234.5`` -> ``"1.234,5 €"``. Missing -> ``""``."""
    if value is None or pd.isna(value):
        return ""
    s = f"{float(value):,.3f}".rstrip("0").rstrip(".")
    s = s.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{s} €"


def format_day(value: Optional[date]) -> str:
    if value is None:
        return PLACEHOLDER
    return value.strftime("%d.%m.%y")


def format_period(start: Optional[date], end: Optional[date]) -> str:
    if start is None or end is None:
        return PLACEHOLDER
    return f"{format_day(start)} - {format_day(end)}"


def _instructor_frame(summary: DashboardSummary) -> pd.DataFrame:
    return pd.DataFrame([asdict(r) for r in summary.courses_per_instructor], columns=["label", "count"])


def _payment_frame(summary: DashboardSummary) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"status": "Paid", "value": summary.payment.paid_count},
            {"status": "Open", "value": summary.payment.open_count},
        ]
    )


def _recent_frame(summary: DashboardSummary) -> pd.DataFrame:
    rows = [
        {
            "record_id": r.record_id,
            "course": r.title,
            "instructor": r.instructor,
            "period": format_period(r.start_date, r.end_date),
            "price": r.price,
            "price_display": format_eur(r.price),
        }
        for r in summary.recent_courses
    ]
    return pd.DataFrame(rows, columns=["record_id", "course", "instructor", "period", "price", "price_display"])


def compute_overview(options: DashboardOptions, data: DashboardData) -> Dict[str, Any]:
    today = options.reference_day()
    summary = summarize(data, today, options)
    instructor_df = _instructor_frame(summary)
    payment_df = _payment_frame(summary)
    recent_df = _recent_frame(summary)

    charts: Dict[str, Any] = {}
    if not instructor_df.empty:
        charts["courses_per_instructor"] = to_vega_spec(instructor_bar_chart(instructor_df))
    if summary.enrollment_count:
        charts["payment_status"] = to_vega_spec(payment_donut_chart(payment_df))

    return {
        "options": asdict(options),
        "today": today.isoformat(),
        "kpis": {
            "instructors": summary.instructor_count,
            "participants": summary.participant_count,
            "courses": summary.course_count,
            "active_courses": summary.active_course_count,
            "upcoming_courses": summary.upcoming_course_count,
            "rooms": summary.room_count,
            "total_capacity": summary.total_capacity,
            "enrollments": summary.enrollment_count,
            "paid_enrollments": summary.payment.paid_count,
            "open_enrollments": summary.payment.open_count,
            "total_revenue": summary.total_revenue,
            "total_revenue_display": format_eur(summary.total_revenue),
        },
        "payment_status": payment_df.to_dict(orient="records"),
        "courses_per_instructor": instructor_df.to_dict(orient="records"),
        "recent_courses": recent_df.to_dict(orient="records"),
        "charts": charts,
        "empty_states": {
            "courses_per_instructor": instructor_df.empty,
            "payment_status": summary.enrollment_count == 0,
            "recent_courses": summary.course_count == 0,
        },
    }


def overview_frames(data: DashboardData, options: DashboardOptions) -> Dict[str, pd.DataFrame]:
    """Tables backing each dashboard section, for CSV export."""
    summary = summarize(data, options.reference_day(), options)
    courses = pd.DataFrame(
        [
            {
                "record_id": c.record_id,
                "title": c.title,
                "start_date": c.start_date,
                "end_date": c.end_date,
                "price": c.price,
                "instructor_id": extract_record_id(c.instructor_ref),
            }
            for c in data.courses
        ],
        columns=["record_id", "title", "start_date", "end_date", "price", "instructor_id"],
    )
    enrollments = pd.DataFrame(
        [
            {
                "record_id": e.record_id,
                "paid": e.paid,
                "course_id": extract_record_id(e.course_ref),
                "participant_id": extract_record_id(e.participant_ref),
            }
            for e in data.enrollments
        ],
        columns=["record_id", "paid", "course_id", "participant_id"],
    )
    return {
        "courses": courses,
        "recent-courses": _recent_frame(summary),
        "instructors": _instructor_frame(summary),
        "payments": _payment_frame(summary),
        "enrollments": enrollments,
    }
