"""
Bar charts of country deaths for the snapshot year.

* ``render_top_bar``     - horizontal top-N ranking by total deaths.
* ``render_grouped_bar`` - focus countries side by side, one bar per type.
"""

from typing import List, Union

import plotly.graph_objects as go

from ...models.data_models import CanonicalRecord, ChartRequest, ConflictType, EmptySubset
from ..theme import RenderContext
from .common import fmt_deaths, ranked_by_total, in_focus_order


def render_top_bar(records: List[CanonicalRecord], request: ChartRequest,
                   context: RenderContext) -> Union[go.Figure, EmptySubset]:
    """Top-N countries by total deaths in ``request.year``.

    Countries with a zero total are left out, so a quiet year can show fewer
    than ``top_n`` bars.
    """
    rows = ranked_by_total(records, request.top_n)
    if not rows:
        return EmptySubset(f"No country data for year {request.year}.")

    fig = go.Figure(go.Bar(
        x=[r.total for r in rows],
        y=[r.entity for r in rows],
        orientation='h',
        marker=dict(color=context.theme.bar_color),
        text=[fmt_deaths(r.total) for r in rows],
        textposition='outside',
        customdata=[r.code for r in rows],
        hovertemplate='<b>%{y}</b> (%{customdata})<br>%{x:,.0f} deaths<extra></extra>',
    ))
    context.theme.apply(fig)
    fig.update_layout(
        title=dict(text=request.title or f'Top {request.top_n} countries by conflict deaths, {request.year}',
                   font=dict(size=18)),
        xaxis_title='Deaths',
        yaxis=dict(autorange='reversed'),
        height=max(300, 40 * len(rows) + 120),
        bargap=0.25,
    )
    if request.log_scale:
        fig.update_xaxes(type='log')
    return fig


def render_grouped_bar(records: List[CanonicalRecord], request: ChartRequest,
                       context: RenderContext) -> Union[go.Figure, EmptySubset]:
    """Focus countries x five conflict types, in the order the focus lists them."""
    rows = in_focus_order(records, request.focus)
    if not rows:
        return EmptySubset(f"No data for selected countries in {request.year}.")

    entities = [r.entity for r in rows]
    fig = go.Figure()
    for t in ConflictType:
        fig.add_trace(go.Bar(
            name=t.value,
            x=entities,
            y=[r.count(t) for r in rows],
            marker_color=context.theme.color_for(t),
            hovertemplate=f'<b>%{{x}}</b><br>{t.value}: %{{y:,.0f}}<extra></extra>',
        ))
    context.theme.apply(fig)
    fig.update_layout(
        title=dict(text=request.title or f'Deaths by conflict type, selected countries, {request.year}',
                   font=dict(size=18)),
        barmode='group',
        yaxis_title='Deaths',
        legend=dict(orientation='h', y=-0.15),
        height=450,
    )
    if request.log_scale:
        fig.update_yaxes(type='log')
    return fig
