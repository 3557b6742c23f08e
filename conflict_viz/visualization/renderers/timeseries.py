"""
Time series of conflict deaths.

Without focus entities the chart shows one line per conflict type for the
World aggregate.  With focus entities it shows one total-deaths line per
entity instead.
"""

from typing import List, Union

import plotly.graph_objects as go

from ...models.data_models import CanonicalRecord, ChartRequest, ConflictType, EmptySubset
from ..theme import RenderContext
from .common import one_per_year, in_focus_order


def render_timeseries(records: List[CanonicalRecord], request: ChartRequest,
                      context: RenderContext) -> Union[go.Figure, EmptySubset]:
    fig = go.Figure()

    if request.focus:
        rows = [r for r in in_focus_order(records, request.focus) if r.year is not None]
        if not rows:
            return EmptySubset("No data for selected countries.")
        for entity in request.focus:
            series = one_per_year(r for r in rows if r.entity == entity)
            if not series:
                continue
            fig.add_trace(go.Scatter(
                name=entity,
                x=[r.year for r in series],
                y=[r.total for r in series],
                mode='lines+markers',
                hovertemplate=f'<b>{entity}</b> %{{x}}<br>%{{y:,.0f}} deaths<extra></extra>',
            ))
        title = 'Conflict deaths over time, selected countries'
    else:
        rows = one_per_year(r for r in records if r.is_world)
        if not rows:
            return EmptySubset("No World aggregate rows found.")
        years = [r.year for r in rows]
        for t in ConflictType:
            fig.add_trace(go.Scatter(
                name=t.value,
                x=years,
                y=[r.count(t) for r in rows],
                mode='lines',
                line=dict(color=context.theme.color_for(t), width=2),
                hovertemplate=f'<b>{t.value}</b> %{{x}}<br>%{{y:,.0f}} deaths<extra></extra>',
            ))
        title = 'Global conflict deaths over time by type'

    context.theme.apply(fig)
    fig.update_layout(
        title=dict(text=request.title or title, font=dict(size=18)),
        xaxis_title='Year',
        yaxis_title='Deaths',
        hovermode='x unified',
        legend=dict(orientation='h', y=-0.2),
        height=450,
    )
    if request.log_scale:
        fig.update_yaxes(type='log')
    return fig
