"""
World-aggregate charts: heatmap, 100% stacked bars and the waffle.

All three read only the ``World`` rows.  The heatmap and the stacked chart
span every available year (or the requested range); the waffle shows the
composition of a single year as 100 cells.
"""

import math
from typing import Dict, List, Union

import numpy as np
import plotly.graph_objects as go

from ...models.data_models import CanonicalRecord, ChartRequest, ConflictType, EmptySubset
from ..theme import RenderContext
from .common import one_per_year, log10p, type_matrix

NO_WORLD_ROWS = "No World aggregate rows found."

WAFFLE_SIDE = 10
WAFFLE_CELLS = WAFFLE_SIDE * WAFFLE_SIDE


def render_heatmap(records: List[CanonicalRecord], request: ChartRequest,
                   context: RenderContext) -> Union[go.Figure, EmptySubset]:
    """Conflict types (rows) x years (columns), coloured by deaths."""
    rows = one_per_year(records)
    if not rows:
        return EmptySubset(NO_WORLD_ROWS)

    years = [r.year for r in rows]
    labels = ConflictType.labels()
    z = type_matrix(rows)
    z_plot = log10p(z) if request.log_scale else z

    fig = go.Figure(go.Heatmap(
        z=z_plot,
        x=years,
        y=labels,
        customdata=z,
        colorscale=context.theme.sequential_scale,
        zmin=0,
        colorbar=dict(title='log10(1 + deaths)' if request.log_scale else 'Deaths'),
        hovertemplate='<b>%{y}</b> %{x}<br>%{customdata:,.0f} deaths<extra></extra>',
        xgap=0,
        ygap=2,
    ))
    context.theme.apply(fig)
    fig.update_layout(
        title=dict(text=request.title or 'Global conflict deaths by type and year', font=dict(size=18)),
        yaxis=dict(autorange='reversed'),
        height=320,
    )
    return fig


def year_shares(record: CanonicalRecord) -> Dict[ConflictType, float]:
    """Percentage share of each type; a zero total is treated as 1."""
    total = record.total or 1.0
    return {t: record.count(t) / total * 100 for t in ConflictType}


def render_stacked(records: List[CanonicalRecord], request: ChartRequest,
                   context: RenderContext) -> Union[go.Figure, EmptySubset]:
    """Share of each type in the world total, one 100% bar per year."""
    rows = one_per_year(records)
    if not rows:
        return EmptySubset(NO_WORLD_ROWS)

    years = [r.year for r in rows]
    shares = [year_shares(r) for r in rows]
    fig = go.Figure()
    for t in ConflictType:
        fig.add_trace(go.Bar(
            name=t.value,
            x=years,
            y=[s[t] for s in shares],
            customdata=[r.count(t) for r in rows],
            marker_color=context.theme.color_for(t),
            hovertemplate=f'<b>{t.value}</b> %{{x}}<br>%{{y:.1f}}% (%{{customdata:,.0f}} deaths)<extra></extra>',
        ))
    context.theme.apply(fig)
    fig.update_layout(
        title=dict(text=request.title or 'Share of global conflict deaths by type', font=dict(size=18)),
        barmode='stack',
        bargap=0.05,
        yaxis=dict(range=[0, 100], ticksuffix='%'),
        legend=dict(orientation='h', y=-0.15),
        height=420,
    )
    return fig


# ============================================================================
# WAFFLE
# ============================================================================

def waffle_allocation(counts: Dict[ConflictType, float], cells: int = WAFFLE_CELLS) -> Dict[ConflictType, int]:
    """Largest-remainder allocation of *cells* squares across conflict types.

    Each type first gets ``floor(share * cells)``; the cells still missing go
    one at a time to the types with the largest fractional parts.  The result
    always sums to *cells* when the total is positive.

    Raises:
        ValueError: If the counts sum to zero.
    """
    given = {ConflictType(k): max(float(v), 0.0) for k, v in counts.items()}
    ordered = [t for t in ConflictType if t in given]
    values = {t: given[t] for t in ordered}
    total = sum(values.values())
    if total <= 0:
        raise ValueError("Cannot allocate cells for a zero total")

    exact = {t: values[t] / total * cells for t in ordered}
    alloc = {t: int(math.floor(exact[t])) for t in ordered}

    missing = cells - sum(alloc.values())
    # Stable sort keeps display order among equal remainders
    by_fraction = sorted(ordered, key=lambda t: exact[t] - math.floor(exact[t]), reverse=True)
    for i in range(abs(missing)):
        t = by_fraction[i % len(by_fraction)]
        if missing > 0:
            alloc[t] += 1
        elif alloc[t] > 0:
            alloc[t] -= 1

    # Pad with the largest category, then truncate, so the grid is always full
    largest = max(ordered, key=lambda t: values[t])
    shortfall = cells - sum(alloc.values())
    if shortfall > 0:
        alloc[largest] += shortfall
    while sum(alloc.values()) > cells:
        t = max(ordered, key=lambda k: alloc[k])
        alloc[t] -= 1
    return alloc


def render_waffle(records: List[CanonicalRecord], request: ChartRequest,
                  context: RenderContext) -> Union[go.Figure, EmptySubset]:
    """10x10 grid where each square is about 1% of world deaths in ``request.year``."""
    world = next((r for r in records if r.year == request.year), None)
    if world is None:
        return EmptySubset(f"No World aggregate for {request.year}.")
    if world.total <= 0:
        return EmptySubset(f"World total is zero in {request.year}.")

    alloc = waffle_allocation(world.type_counts)

    fig = go.Figure()
    index = 0
    for t in ConflictType:
        n = alloc.get(t, 0)
        cell_ids = np.arange(index, index + n)
        index += n
        share = world.count(t) / world.total * 100
        fig.add_trace(go.Scatter(
            name=f'{t.value} ({n})',
            x=cell_ids % WAFFLE_SIDE,
            y=WAFFLE_SIDE - 1 - cell_ids // WAFFLE_SIDE,
            mode='markers',
            marker=dict(symbol='square', size=26, color=context.theme.color_for(t)),
            hovertemplate=(f'<b>{t.value}</b><br>{world.count(t):,.0f} deaths'
                           f'<br>{share:.1f}% of world total<extra></extra>'),
            showlegend=n > 0,
        ))
    context.theme.apply(fig, axes=False)
    hidden = dict(visible=False, range=[-0.6, WAFFLE_SIDE - 0.4], fixedrange=True)
    fig.update_layout(
        title=dict(text=request.title or f'Composition of global conflict deaths, {request.year}',
                   font=dict(size=18)),
        xaxis=hidden,
        yaxis=dict(hidden, scaleanchor='x'),
        legend=dict(orientation='v', x=1.02, y=0.5),
        height=460,
        width=640,
    )
    return fig
