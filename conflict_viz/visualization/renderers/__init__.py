"""
Chart renderers.

Each renderer is a pure function ``(records, request, context)`` returning a
plotly ``go.Figure``, or an ``EmptySubset`` when there is nothing to draw.
Record selection (subset, year, focus) has already been done by the
dispatcher; renderers only shape and draw.
"""

from .bars import render_top_bar, render_grouped_bar
from .world import render_heatmap, render_stacked, render_waffle, waffle_allocation
from .distribution import render_histogram, render_violin, render_boxplot
from .timeseries import render_timeseries
from .maps import render_choropleth
from .flows import render_sankey, render_network

__all__ = [
    'render_top_bar',
    'render_grouped_bar',
    'render_heatmap',
    'render_stacked',
    'render_waffle',
    'waffle_allocation',
    'render_histogram',
    'render_violin',
    'render_boxplot',
    'render_timeseries',
    'render_choropleth',
    'render_sankey',
    'render_network',
]
