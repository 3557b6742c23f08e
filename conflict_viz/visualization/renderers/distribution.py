"""
Distribution charts across countries for the snapshot year.

Country death counts are heavily right-skewed (a handful of wars dominate),
so each chart honours ``request.log_scale``.  Zero counts are dropped
before plotting: a country with no deaths of a given type tells nothing
about the shape of that type's distribution.
"""

from typing import List, Union

import numpy as np
import plotly.graph_objects as go

from ...models.data_models import CanonicalRecord, ChartRequest, ConflictType, EmptySubset
from ..theme import RenderContext


def _no_data(request: ChartRequest) -> EmptySubset:
    return EmptySubset(f"No country data for year {request.year}.")


def render_histogram(records: List[CanonicalRecord], request: ChartRequest,
                     context: RenderContext) -> Union[go.Figure, EmptySubset]:
    """Histogram of per-country totals; log bins when ``log_scale`` is set."""
    totals = np.array([r.total for r in records if r.total > 0], dtype=float)
    if totals.size == 0:
        return _no_data(request)

    if request.log_scale:
        x, axis_title = np.log10(totals), 'log10(total deaths)'
    else:
        x, axis_title = totals, 'Total deaths'

    fig = go.Figure(go.Histogram(
        x=x,
        nbinsx=20,
        marker=dict(color=context.theme.bar_color, line=dict(color='#0f172a', width=1)),
        hovertemplate='%{x}<br>%{y} countries<extra></extra>',
    ))
    context.theme.apply(fig)
    fig.update_layout(
        title=dict(text=request.title or f'Distribution of conflict deaths per country, {request.year}',
                   font=dict(size=18)),
        xaxis_title=axis_title,
        yaxis_title='Countries',
        bargap=0.05,
        height=400,
    )
    return fig


def _type_values(records: List[CanonicalRecord]):
    """(type, positive counts, entities) for each type with at least one positive count."""
    out = []
    for t in ConflictType:
        pairs = [(r.count(t), r.entity) for r in records if r.count(t) > 0]
        if pairs:
            values, entities = zip(*pairs)
            out.append((t, list(values), list(entities)))
    return out


def _per_type_figure(records, request, context, trace_factory, default_title):
    series = _type_values(records)
    if not series:
        return _no_data(request)

    fig = go.Figure()
    for t, values, entities in series:
        fig.add_trace(trace_factory(t, values, entities, context.theme.color_for(t)))
    context.theme.apply(fig)
    fig.update_layout(
        title=dict(text=request.title or default_title, font=dict(size=18)),
        yaxis_title='Deaths per country',
        showlegend=False,
        height=450,
    )
    if request.log_scale:
        fig.update_yaxes(type='log')
    return fig


def render_violin(records: List[CanonicalRecord], request: ChartRequest,
                  context: RenderContext) -> Union[go.Figure, EmptySubset]:
    """Kernel-density violins of per-country deaths, one per conflict type."""
    def violin(t, values, entities, color):
        return go.Violin(
            y=values,
            name=t.value,
            text=entities,
            line_color=color,
            fillcolor=color,
            opacity=0.7,
            box_visible=True,
            meanline_visible=True,
            points='all',
            hovertemplate='<b>%{text}</b><br>%{y:,.0f} deaths<extra></extra>',
        )
    return _per_type_figure(records, request, context, violin,
                            f'Per-country deaths by conflict type, {request.year}')


def render_boxplot(records: List[CanonicalRecord], request: ChartRequest,
                   context: RenderContext) -> Union[go.Figure, EmptySubset]:
    """Quartiles of per-country deaths, one box per conflict type."""
    def box(t, values, entities, color):
        return go.Box(
            y=values,
            name=t.value,
            text=entities,
            marker_color=color,
            boxpoints='outliers',
            hovertemplate='<b>%{text}</b><br>%{y:,.0f} deaths<extra></extra>',
        )
    return _per_type_figure(records, request, context, box,
                            f'Spread of per-country deaths by conflict type, {request.year}')
