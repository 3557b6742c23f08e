"""
Chart registry.

Explicit mapping from chart kind to ``ChartSpec``.  A spec tells the
dispatcher which records a chart needs (subset and year scope), whether
focus entities or geo boundaries apply, what to say when nothing is left,
and which renderer draws it.

Subsets:
    countries   ISO3-coded rows other than World
    aggregates  everything else
    world       the World rows only
    both        every row

Year scopes:
    snapshot    rows whose year equals the request year (default SNAPSHOT_YEAR)
    range       rows inside the inclusive request range, or every dated row
    all         every dated row
"""

from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, List, Tuple

from ..core.config import FOCUS_COUNTRIES
from ..core.exceptions import UnknownChartError
from . import renderers

SUBSETS = ('countries', 'aggregates', 'world', 'both')
YEAR_SCOPES = ('snapshot', 'range', 'all')

MSG_NO_COUNTRY_DATA = "No country data for year {year}."
MSG_NO_FOCUS_DATA = "No data for selected countries in {year}."
MSG_NO_WORLD_ROWS = "No World aggregate rows found."
MSG_NO_WORLD_YEAR = "No World aggregate for {year}."


@dataclass(frozen=True)
class ChartSpec:
    kind: str
    title: str
    subset: str
    year_scope: str
    renderer: Callable
    empty_message: str
    uses_focus: bool = False
    default_focus: Tuple[str, ...] = ()
    uses_geo: bool = False

    def __post_init__(self):
        if self.subset not in SUBSETS:
            raise ValueError(f"Unknown subset {self.subset!r} for chart {self.kind!r}")
        if self.year_scope not in YEAR_SCOPES:
            raise ValueError(f"Unknown year scope {self.year_scope!r} for chart {self.kind!r}")


_SPECS = [
    ChartSpec('bar', 'Top countries by conflict deaths', 'countries', 'snapshot',
              renderers.render_top_bar, MSG_NO_COUNTRY_DATA),
    ChartSpec('grouped_bar', 'Selected countries by conflict type', 'countries', 'snapshot',
              renderers.render_grouped_bar, MSG_NO_FOCUS_DATA,
              uses_focus=True, default_focus=tuple(FOCUS_COUNTRIES)),
    ChartSpec('heatmap', 'Global deaths by type and year', 'world', 'range',
              renderers.render_heatmap, MSG_NO_WORLD_ROWS),
    ChartSpec('stacked', 'Share of global deaths by type', 'world', 'range',
              renderers.render_stacked, MSG_NO_WORLD_ROWS),
    ChartSpec('waffle', 'Composition of global deaths', 'world', 'snapshot',
              renderers.render_waffle, MSG_NO_WORLD_YEAR),
    ChartSpec('histogram', 'Distribution of deaths per country', 'countries', 'snapshot',
              renderers.render_histogram, MSG_NO_COUNTRY_DATA),
    ChartSpec('violin', 'Per-country deaths by type (density)', 'countries', 'snapshot',
              renderers.render_violin, MSG_NO_COUNTRY_DATA),
    ChartSpec('boxplot', 'Per-country deaths by type (quartiles)', 'countries', 'snapshot',
              renderers.render_boxplot, MSG_NO_COUNTRY_DATA),
    ChartSpec('timeseries', 'Deaths over time', 'both', 'range',
              renderers.render_timeseries, MSG_NO_WORLD_ROWS, uses_focus=True),
    ChartSpec('choropleth', 'Deaths by country (map)', 'countries', 'snapshot',
              renderers.render_choropleth, MSG_NO_COUNTRY_DATA, uses_geo=True),
    ChartSpec('sankey', 'Conflict types to countries', 'countries', 'snapshot',
              renderers.render_sankey, MSG_NO_COUNTRY_DATA),
    ChartSpec('network', 'Country and conflict-type network', 'countries', 'snapshot',
              renderers.render_network, MSG_NO_COUNTRY_DATA),
]

CHART_REGISTRY: "OrderedDict[str, ChartSpec]" = OrderedDict((spec.kind, spec) for spec in _SPECS)


def get_spec(kind: str) -> ChartSpec:
    try:
        return CHART_REGISTRY[kind]
    except KeyError:
        raise UnknownChartError(kind) from None


def chart_kinds() -> List[str]:
    return list(CHART_REGISTRY.keys())
