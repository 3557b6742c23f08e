"""
Conflict Viz Streamlit Dashboard

Interactive version of the HTML report: the sidebar chooses the dataset,
the snapshot year, the focus entities, top-N and log scaling, and each
chart is drawn into its own section.

Usage:
    streamlit run dashboard.py --server.port 8501
    python run.py --dashboard --port 8501
"""

import dataclasses
import logging
import os
from typing import List

import streamlit as st

from conflict_viz.core.config import (
    DATA_PATH, GEO_PATH, SNAPSHOT_YEAR, FOCUS_COUNTRIES, TOP_N, PAGE_TITLE,
    MSG_LOAD_FAILED, MSG_GEO_FAILED, MSG_MISSING_COLUMNS,
)
from conflict_viz.core.exceptions import LoadError, MissingColumnsError
from conflict_viz.models.data_models import CanonicalRecord, ChartRequest
from conflict_viz.pipeline.classifier import partition_entities
from conflict_viz.pipeline.loader import is_url
from conflict_viz.pipeline.normalizer import records_to_frame
from conflict_viz.pipeline.orchestrator import ConflictChartPipeline, build_requests, prepare_page
from conflict_viz.visualization.containers import ChartPage, ERROR
from conflict_viz.visualization.dispatcher import dispatch_all, render_failure
from conflict_viz.visualization.registry import chart_kinds, get_spec
from conflict_viz.visualization.theme import RenderContext

logger = logging.getLogger(__name__)


def file_mtime(path: str) -> float:
    """Modification time used to invalidate the cache when the file changes."""
    if not path or is_url(path) or not os.path.exists(path):
        return 0
    return os.path.getmtime(path)


@st.cache_data(show_spinner="Loading conflict data...")
def load_dataset(data_path: str, geo_path: str, mtime: float = 0, geo_mtime: float = 0):
    """Load and normalize the CSV and optional geo file (cached per file version)."""
    pipeline = ConflictChartPipeline(data_path, geo_path)
    pipeline.load_data()
    pipeline.load_geo()
    return pipeline.records, pipeline.geo, pipeline.geo_key


def render_sidebar(records: List[CanonicalRecord]) -> dict:
    """Chart parameters chosen in the sidebar."""
    years = sorted({r.year for r in records if r.year is not None})
    min_year, max_year = (years[0], years[-1]) if years else (SNAPSHOT_YEAR, SNAPSHOT_YEAR)
    default_year = SNAPSHOT_YEAR if min_year <= SNAPSHOT_YEAR <= max_year else max_year

    partition = partition_entities(records)
    entities = sorted({r.entity for r in partition.countries} | {r.entity for r in partition.world})

    st.sidebar.header("Charts")
    year = st.sidebar.number_input("Snapshot year", min_value=min_year, max_value=max_year,
                                   value=default_year, step=1)
    if min_year < max_year:
        year_range = st.sidebar.slider("Year range (time charts)", min_value=min_year,
                                       max_value=max_year, value=(min_year, max_year))
    else:
        year_range = (min_year, max_year)
    focus = st.sidebar.multiselect("Focus entities", options=entities,
                                   default=[e for e in FOCUS_COUNTRIES if e in entities])
    top_n = st.sidebar.slider("Top N countries", min_value=3, max_value=30, value=TOP_N)
    log_scale = st.sidebar.checkbox("Log scale", value=False)
    focus_over_time = st.sidebar.checkbox("Time series: focus entities instead of World by type", value=False)
    kinds = st.sidebar.multiselect("Charts", options=chart_kinds(), default=chart_kinds(),
                                   format_func=lambda k: get_spec(k).title)
    return dict(kinds=kinds, year=int(year), year_range=tuple(year_range), focus=focus,
                top_n=top_n, log_scale=log_scale, focus_over_time=focus_over_time)


def dashboard_requests(params: dict) -> List[ChartRequest]:
    """Requests for the selected charts.

    The time series keeps its World-by-type view unless the user asks for
    the focus entities over time; the grouped bar always uses the focus.
    """
    requests = build_requests(params['kinds'], year=params['year'], year_range=params['year_range'],
                              focus=params['focus'], top_n=params['top_n'], log_scale=params['log_scale'])
    if params.get('focus_over_time'):
        return requests
    return [dataclasses.replace(r, focus=()) if r.kind == 'timeseries' else r for r in requests]


def show_page(page: ChartPage):
    """Draw every container: figure, or its message."""
    for container in page:
        st.subheader(container.title)
        if container.figure is not None:
            st.plotly_chart(container.figure, use_container_width=True)
        elif container.level == ERROR:
            st.error(container.message)
        elif container.message:
            st.info(container.message)


def failure_message(error: Exception, data_path: str, geo_path: str) -> str:
    if isinstance(error, MissingColumnsError):
        return MSG_MISSING_COLUMNS
    if geo_path and getattr(error, 'source', '') == geo_path:
        return MSG_GEO_FAILED.format(path=geo_path)
    return MSG_LOAD_FAILED.format(path=data_path)


def main():
    st.set_page_config(page_title=PAGE_TITLE, page_icon="📊", layout="wide")
    st.title(PAGE_TITLE)

    st.sidebar.header("Data")
    data_path = st.sidebar.text_input("CSV path or URL", value=DATA_PATH)
    geo_path = st.sidebar.text_input("GeoJSON boundaries (optional)", value=GEO_PATH)

    try:
        records, geo, geo_key = load_dataset(data_path, geo_path, file_mtime(data_path), file_mtime(geo_path))
    except (LoadError, MissingColumnsError) as e:
        logger.error(f"[Dashboard] {e}")
        page = prepare_page(chart_kinds(), title=PAGE_TITLE)
        render_failure(page, failure_message(e, data_path, geo_path))
        show_page(page)
        return

    params = render_sidebar(records)
    if not params['kinds']:
        st.info("Select at least one chart in the sidebar.")
        return

    requests = dashboard_requests(params)
    page = prepare_page(params['kinds'], title=PAGE_TITLE)
    dispatch_all(records, requests, page, RenderContext(geo=geo, geo_key=geo_key))
    show_page(page)

    with st.expander(f"Data for {params['year']}"):
        snapshot = [r for r in records if r.year == params['year']]
        st.dataframe(records_to_frame(snapshot), use_container_width=True)


if __name__ == "__main__":
    main()
