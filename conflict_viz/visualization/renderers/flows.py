"""
Flow and network views of the type -> country relationship.

* ``render_sankey``  - links from each conflict type to the top-N countries,
  sized by deaths.
* ``render_network`` - bipartite country/type graph laid out with networkx's
  force-directed spring layout; node area is proportional to deaths.
"""

import math
from typing import List, Union

import networkx as nx
import numpy as np
import plotly.graph_objects as go

from ...models.data_models import CanonicalRecord, ChartRequest, ConflictType, EmptySubset
from ..theme import RenderContext
from .common import ranked_by_total, hex_to_rgba

MIN_NODE_SIZE = 10
MAX_NODE_SIZE = 50


def _no_data(request: ChartRequest) -> EmptySubset:
    return EmptySubset(f"No country data for year {request.year}.")


# ============================================================================
# SANKEY
# ============================================================================

def render_sankey(records: List[CanonicalRecord], request: ChartRequest,
                  context: RenderContext) -> Union[go.Figure, EmptySubset]:
    rows = ranked_by_total(records, request.top_n)
    if not rows:
        return _no_data(request)

    types = list(ConflictType)
    all_nodes = [t.value for t in types] + [r.entity for r in rows]

    source, target, value, link_colors = [], [], [], []
    for t_idx, t in enumerate(types):
        for r_idx, record in enumerate(rows):
            deaths = record.count(t)
            if deaths > 0:
                source.append(t_idx)
                target.append(len(types) + r_idx)
                value.append(deaths)
                link_colors.append(hex_to_rgba(context.theme.color_for(t), 0.4))

    node_colors = context.theme.type_palette() + [context.theme.bar_color] * len(rows)

    fig = go.Figure(go.Sankey(
        node=dict(
            pad=15,
            thickness=20,
            line=dict(color='white', width=0.5),
            label=all_nodes,
            color=node_colors,
        ),
        link=dict(
            source=source,
            target=target,
            value=value,
            color=link_colors,
        ),
    ))
    context.theme.apply(fig, axes=False)
    fig.update_layout(
        title=dict(text=request.title or f'Conflict types to top {len(rows)} countries, {request.year}',
                   font=dict(size=18)),
        height=520,
    )
    return fig


# ============================================================================
# NETWORK
# ============================================================================

def build_graph(rows: List[CanonicalRecord]) -> nx.Graph:
    """Bipartite graph: type and country nodes, edges weighted by deaths."""
    G = nx.Graph()
    for t in ConflictType:
        G.add_node(t.value, kind='type', deaths=0.0)
    for record in rows:
        G.add_node(record.entity, kind='country', deaths=record.total)
        for t in ConflictType:
            deaths = record.count(t)
            if deaths > 0:
                G.add_edge(record.entity, t.value, weight=deaths)
                G.nodes[t.value]['deaths'] += deaths
    # Types with no deaths among the selected countries carry no information
    G.remove_nodes_from([n for n, d in G.nodes(data=True) if d['kind'] == 'type' and G.degree(n) == 0])
    return G


def node_size(deaths: float, max_deaths: float) -> float:
    """Marker diameter with area proportional to deaths."""
    if max_deaths <= 0:
        return MIN_NODE_SIZE
    return MIN_NODE_SIZE + (MAX_NODE_SIZE - MIN_NODE_SIZE) * math.sqrt(deaths / max_deaths)


def render_network(records: List[CanonicalRecord], request: ChartRequest,
                   context: RenderContext) -> Union[go.Figure, EmptySubset]:
    rows = ranked_by_total(records, request.top_n)
    if not rows:
        return _no_data(request)

    G = build_graph(rows)
    n = G.number_of_nodes()
    pos = nx.spring_layout(G, seed=42, k=2.0 / max(np.sqrt(n), 1), weight=None)

    edge_x, edge_y = [], []
    for u, v in G.edges():
        edge_x += [pos[u][0], pos[v][0], None]
        edge_y += [pos[u][1], pos[v][1], None]

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=edge_x, y=edge_y,
        mode='lines',
        line=dict(color='rgba(148, 163, 184, 0.4)', width=1),
        hoverinfo='skip',
        showlegend=False,
    ))

    max_deaths = max(d['deaths'] for _, d in G.nodes(data=True))
    for kind, label in (('type', 'Conflict type'), ('country', 'Country')):
        nodes = [node for node, d in G.nodes(data=True) if d['kind'] == kind]
        if kind == 'type':
            colors = [context.theme.color_for(node) for node in nodes]
        else:
            colors = context.theme.bar_color
        fig.add_trace(go.Scatter(
            name=label,
            x=[pos[node][0] for node in nodes],
            y=[pos[node][1] for node in nodes],
            mode='markers+text',
            text=nodes,
            textposition='top center',
            customdata=[G.nodes[node]['deaths'] for node in nodes],
            marker=dict(
                size=[node_size(G.nodes[node]['deaths'], max_deaths) for node in nodes],
                color=colors,
                symbol='diamond' if kind == 'type' else 'circle',
                line=dict(color='white', width=1),
            ),
            hovertemplate='<b>%{text}</b><br>%{customdata:,.0f} deaths<extra></extra>',
        ))

    context.theme.apply(fig, axes=False)
    hidden = dict(visible=False, showgrid=False, zeroline=False)
    fig.update_layout(
        title=dict(text=request.title or f'Countries and conflict types, {request.year}', font=dict(size=18)),
        xaxis=hidden,
        yaxis=hidden,
        legend=dict(orientation='h', y=-0.05),
        height=560,
    )
    return fig
