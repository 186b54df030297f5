import logging
from contextlib import contextmanager
from typing import Optional

import altair as alt
import pandas as pd
import streamlit as st

from core.aggregator import DashboardData
from core.charts import PAYMENT_RANGE, instructor_bar_chart, payment_donut_chart
from core.data import load_dashboard_data
from core.metrics_overview import compute_overview
from core.options import normalize_options

logging.basicConfig(level=logging.INFO)
alt.data_transformers.disable_max_rows()


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .hero {border-radius: 16px;padding: 24px;background: #0f766e;color: #ffffff;margin-bottom: 16px;}
        .hero .title {font-size: 1.8rem;font-weight: 700;}
        .hero .subtitle {opacity: 0.8;}
        .hero .revenue {font-size: 1.6rem;font-weight: 700;text-align: right;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .card-actions {font-size: 0.9rem;color: #6b7280;}
        .legend-dot {display: inline-block;width: 10px;height: 10px;border-radius: 50%;margin-right: 6px;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str, actions: Optional[str] = None):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header">
            <div class="card-title">{title}</div>
            <div class="card-actions">{actions or ""}</div>
          </div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def render_hero(kpis: dict):
    st.markdown(
        f"""
        <div class="hero">
          <div class="title">Welcome back</div>
          <div class="subtitle">Manage courses, instructors, participants and rooms in one place.</div>
          <div class="revenue">Total revenue: {kpis["total_revenue_display"]}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )


def render_kpi_tiles(kpis: dict):
    cols = st.columns(5)
    cols[0].metric("Instructors", kpis["instructors"])
    cols[0].caption("Active teaching staff")
    cols[1].metric("Participants", kpis["participants"])
    cols[1].caption("Registered learners")
    cols[2].metric("Courses", kpis["courses"])
    cols[2].caption(f"{kpis['active_courses']} active, {kpis['upcoming_courses']} upcoming")
    cols[3].metric("Rooms", kpis["rooms"])
    cols[3].caption(f"{kpis['total_capacity']:,.0f} seats total")
    cols[4].metric("Enrollments", kpis["enrollments"])
    cols[4].caption(f"{kpis['paid_enrollments']} paid, {kpis['open_enrollments']} open")


def render_payment_legend(payment_status: list):
    for item, color in zip(payment_status, PAYMENT_RANGE):
        st.markdown(
            f"<span class='legend-dot' style='background:{color}'></span>**{item['status']}**: {item['value']}",
            unsafe_allow_html=True,
        )


def render_overview_page(payload: dict):
    inject_base_styles()
    kpis = payload["kpis"]
    render_hero(kpis)
    top = st.columns([8, 2])
    if top[1].button("Refresh"):
        st.rerun()
    render_kpi_tiles(kpis)

    empty = payload["empty_states"]
    chart_cols = st.columns(2)
    with chart_cols[0]:
        with card("Courses per instructor", "Course distribution"):
            if empty["courses_per_instructor"]:
                st.info("No data available")
            else:
                st.altair_chart(
                    instructor_bar_chart(pd.DataFrame(payload["courses_per_instructor"])),
                    use_container_width=True,
                )
    with chart_cols[1]:
        with card("Payment status", "Enrollments by payment status"):
            if empty["payment_status"]:
                st.info("No enrollments yet")
            else:
                donut_col, legend_col = st.columns([3, 2])
                with donut_col:
                    st.altair_chart(payment_donut_chart(pd.DataFrame(payload["payment_status"])), use_container_width=True)
                with legend_col:
                    render_payment_legend(payload["payment_status"])

    with card("Recent courses", "Latest course offerings"):
        if empty["recent_courses"]:
            st.info("No courses created yet")
        else:
            table = pd.DataFrame(payload["recent_courses"])[["course", "instructor", "period", "price_display"]]
            st.dataframe(
                table.rename(columns={"course": "Course", "instructor": "Instructor", "period": "Period", "price_display": "Price"}),
                hide_index=True,
                use_container_width=True,
            )


# ---------- UI setup ----------
st.set_page_config(page_title="Course Dashboard", layout="wide")

with st.spinner("Loading..."):
    data: DashboardData = load_dashboard_data()

options = normalize_options({})
render_overview_page(compute_overview(options, data))
