"""
Choropleth of total conflict deaths per country.

When the render context carries a GeoJSON FeatureCollection the countries
are joined on the feature's ISO alpha-3 property; otherwise plotly's
built-in ``ISO-3`` country shapes are used.
"""

from typing import List, Union

import plotly.graph_objects as go

from ...models.data_models import CanonicalRecord, ChartRequest, EmptySubset
from ..theme import RenderContext
from .common import log10p


def render_choropleth(records: List[CanonicalRecord], request: ChartRequest,
                      context: RenderContext) -> Union[go.Figure, EmptySubset]:
    rows = [r for r in records if r.code]
    if not rows:
        return EmptySubset(f"No country data for year {request.year}.")

    codes = [r.code for r in rows]
    totals = [r.total for r in rows]
    z = log10p(totals) if request.log_scale else totals

    trace = dict(
        locations=codes,
        z=z,
        text=[r.entity for r in rows],
        customdata=totals,
        colorscale=context.theme.sequential_scale,
        zmin=0,
        marker_line_color='#1e293b',
        marker_line_width=0.5,
        colorbar=dict(title='log10(1 + deaths)' if request.log_scale else 'Deaths'),
        hovertemplate='<b>%{text}</b> (%{location})<br>%{customdata:,.0f} deaths<extra></extra>',
    )
    if context.has_geo:
        trace.update(geojson=context.geo, featureidkey=context.featureidkey)
    else:
        trace.update(locationmode='ISO-3')

    fig = go.Figure(go.Choropleth(**trace))
    context.theme.apply(fig, axes=False)
    fig.update_geos(
        showframe=False,
        showcoastlines=False,
        bgcolor='rgba(0,0,0,0)',
        projection_type='natural earth',
        fitbounds='locations' if context.has_geo else False,
        visible=not context.has_geo,
    )
    fig.update_layout(
        title=dict(text=request.title or f'Conflict deaths by country, {request.year}', font=dict(size=18)),
        height=520,
    )
    return fig
