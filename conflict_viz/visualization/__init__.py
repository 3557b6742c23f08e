"""
Visualization module for Conflict Viz.

Contains the chart theme, the output containers, the chart registry and
dispatcher, and the plotly renderers.
"""

from .theme import ChartTheme, RenderContext, get_plotly_theme, AXIS_STYLE
from .containers import ChartContainer, ChartPage
from .registry import ChartSpec, CHART_REGISTRY, get_spec, chart_kinds
from .dispatcher import dispatch, dispatch_all, render_failure, select_records

__all__ = [
    'ChartTheme',
    'RenderContext',
    'get_plotly_theme',
    'AXIS_STYLE',
    'ChartContainer',
    'ChartPage',
    'ChartSpec',
    'CHART_REGISTRY',
    'get_spec',
    'chart_kinds',
    'dispatch',
    'dispatch_all',
    'render_failure',
    'select_records',
]
