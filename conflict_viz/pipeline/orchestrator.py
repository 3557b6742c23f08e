"""
Pipeline orchestrator for Conflict Viz.

Coordinates the stages that turn a CSV into a page of charts:

    load (CSV, optional GeoJSON)
      -> resolve columns
      -> normalize rows
      -> dispatch every requested chart into its container

``ConflictChartPipeline.run`` is the single top-level handler for
structural failures: a ``LoadError`` or ``MissingColumnsError`` stops the
run and the same user-facing message is written into every container of the
page.  Per-chart problems (empty subsets, renderer errors) are handled by the
dispatcher and never stop the other charts.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from ..core.config import (
    DATA_PATH, GEO_PATH, HTTP_TIMEOUT, TOP_N, PAGE_TITLE,
    MSG_LOAD_FAILED, MSG_GEO_FAILED, MSG_MISSING_COLUMNS,
)
from ..core.exceptions import LoadError, MissingColumnsError
from ..models.data_models import CanonicalRecord, ChartRequest, ColumnMapping
from ..visualization.containers import ChartPage
from ..visualization.dispatcher import dispatch_all, render_failure
from ..visualization.registry import chart_kinds, get_spec
from ..visualization.theme import ChartTheme, RenderContext
from .columns import resolve_columns
from .loader import load_raw_records, load_geojson, geo_code_property, normalize_feature_codes
from .normalizer import normalize_rows

logger = logging.getLogger(__name__)


def build_requests(kinds: Optional[Iterable[str]] = None, year: Optional[int] = None,
                   year_range: Optional[Tuple[int, int]] = None, focus: Sequence[str] = (),
                   top_n: int = TOP_N, log_scale: bool = False) -> List[ChartRequest]:
    """One ChartRequest per kind, sharing the same parameters.

    Raises:
        UnknownChartError: If any kind is not registered.
    """
    kinds = list(kinds) if kinds else chart_kinds()
    for kind in kinds:
        get_spec(kind)
    return [
        ChartRequest(kind=kind, year=year, year_range=year_range, focus=tuple(focus),
                     top_n=top_n, log_scale=log_scale)
        for kind in kinds
    ]


def prepare_page(kinds: Iterable[str], title: str = PAGE_TITLE) -> ChartPage:
    """Page with one empty container per chart kind, in request order."""
    page = ChartPage(title)
    for kind in kinds:
        page.add(kind, get_spec(kind).title)
    return page


class ConflictChartPipeline:
    """
    Loads one dataset and renders charts from it.

    Typical usage
    -------------
    ::

        pipe = ConflictChartPipeline("data/conflict_deaths_by_type.csv")
        page = prepare_page(["bar", "waffle"])
        pipe.run(build_requests(["bar", "waffle"]), page)
        page.write_html("charts.html")
    """

    def __init__(self, data_path=DATA_PATH, geo_path=GEO_PATH,
                 timeout: Optional[float] = HTTP_TIMEOUT, theme: Optional[ChartTheme] = None):
        self.data_path = str(data_path)
        self.geo_path = str(geo_path) if geo_path else ""
        self.timeout = timeout
        self.theme = theme or ChartTheme()
        self.headers: List[str] = []
        self.columns: Optional[ColumnMapping] = None
        self.records: List[CanonicalRecord] = []
        self.geo = None
        self.geo_key: Optional[str] = None

    def load_data(self) -> List[CanonicalRecord]:
        """Load, resolve and normalize the CSV.

        Raises:
            LoadError: The CSV could not be read or parsed.
            MissingColumnsError: Required columns are missing.
        """
        self.headers, raw_records = load_raw_records(self.data_path, timeout=self.timeout)
        self.columns = resolve_columns(self.headers)
        self.records = normalize_rows(raw_records, self.columns)
        return self.records

    def load_geo(self):
        """Load the optional GeoJSON boundaries.

        A collection without any recognisable ISO3 property is ignored (the
        choropleth falls back to built-in country shapes).

        Raises:
            LoadError: The geo file could not be read or is not a FeatureCollection.
        """
        if not self.geo_path:
            return None
        geo = load_geojson(self.geo_path, timeout=self.timeout)
        key = geo_code_property(geo)
        if key is None:
            logger.warning(f"[Pipeline] No ISO3 code property found in {self.geo_path}; using built-in shapes")
            return None
        coded = normalize_feature_codes(geo, key)
        logger.info(f"[Pipeline] Geo join on '{key}': {coded} of {len(geo.get('features') or [])} features carry a code")
        self.geo, self.geo_key = geo, key
        return geo

    def render_context(self) -> RenderContext:
        return RenderContext(theme=self.theme, geo=self.geo, geo_key=self.geo_key)

    def render(self, requests: Iterable[ChartRequest], page: ChartPage):
        """Dispatch every request into the page; assumes data is loaded."""
        return dispatch_all(self.records, requests, page, self.render_context())

    def run(self, requests: Iterable[ChartRequest], page: ChartPage) -> bool:
        """Load everything and render; returns False after a structural failure."""
        requests = list(requests)
        for request in requests:
            page.add(request.kind, get_spec(request.kind).title)

        try:
            self.load_data()
        except LoadError as e:
            logger.error(f"[Pipeline] Load failed: {e}")
            render_failure(page, MSG_LOAD_FAILED.format(path=self.data_path))
            return False
        except MissingColumnsError as e:
            logger.error(f"[Pipeline] {e}")
            render_failure(page, MSG_MISSING_COLUMNS)
            return False

        try:
            self.load_geo()
        except LoadError as e:
            logger.error(f"[Pipeline] Geo load failed: {e}")
            render_failure(page, MSG_GEO_FAILED.format(path=self.geo_path))
            return False

        self.render(requests, page)
        logger.info(f"[Pipeline] Rendered {len(requests)} charts from {len(self.records)} records")
        return True


def run_pipeline(data_path=DATA_PATH, geo_path=GEO_PATH, kinds: Optional[Iterable[str]] = None,
                 year: Optional[int] = None, year_range: Optional[Tuple[int, int]] = None,
                 focus: Sequence[str] = (), top_n: int = TOP_N, log_scale: bool = False,
                 timeout: Optional[float] = HTTP_TIMEOUT, title: str = PAGE_TITLE) -> ChartPage:
    """Build a fully rendered page in one call."""
    requests = build_requests(kinds, year=year, year_range=year_range, focus=focus,
                              top_n=top_n, log_scale=log_scale)
    page = prepare_page([r.kind for r in requests], title=title)
    ConflictChartPipeline(data_path, geo_path, timeout=timeout).run(requests, page)
    return page
