"""
Chart theme and render context.

Every renderer receives a ``RenderContext`` explicitly instead of reading
module-level state.  The context carries:

* ``ChartTheme``  - the conflict-type palette, the dark plotly layout
  (transparent background, Inter font, compact margins), the axis grid style
  and the sequential colour scale.
* ``geo``         - an optional GeoJSON FeatureCollection for the choropleth,
  together with the feature property that holds the ISO alpha-3 code.

Usage::

    fig = go.Figure(...)
    context.theme.apply(fig)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import plotly.graph_objects as go

from ..core.config import TYPE_COLORS, BAR_COLOR, SEQUENTIAL_SCALE
from ..models.data_models import ConflictType


def get_plotly_theme() -> Dict[str, Any]:
    """Layout kwargs shared by every chart; unpack into ``fig.update_layout``."""
    return dict(
        paper_bgcolor='rgba(0,0,0,0)',
        plot_bgcolor='rgba(0,0,0,0)',
        font=dict(family='Inter', color='#E0E0E0'),
        margin=dict(l=40, r=40, t=50, b=40),
    )


# Subtle grid lines that blend with the dark background
AXIS_STYLE = dict(
    gridcolor='#1e293b',
    zerolinecolor='#1e293b',
)


@dataclass(frozen=True)
class ChartTheme:
    """Palette and layout applied to every figure."""
    type_colors: Dict[str, str] = field(default_factory=lambda: dict(TYPE_COLORS), hash=False)
    bar_color: str = BAR_COLOR
    sequential_scale: str = SEQUENTIAL_SCALE
    layout: Dict[str, Any] = field(default_factory=get_plotly_theme, hash=False)
    axis_style: Dict[str, Any] = field(default_factory=lambda: dict(AXIS_STYLE), hash=False)

    def color_for(self, conflict_type) -> str:
        return self.type_colors.get(str(ConflictType(conflict_type)), self.bar_color)

    def type_palette(self) -> list:
        """Colours in conflict-type display order."""
        return [self.color_for(t) for t in ConflictType]

    def apply(self, fig: go.Figure, axes: bool = True) -> go.Figure:
        """Merge the layout (and optionally the axis grid style) into *fig*."""
        fig.update_layout(**self.layout)
        if axes:
            fig.update_xaxes(**self.axis_style)
            fig.update_yaxes(**self.axis_style)
        return fig


@dataclass(frozen=True)
class RenderContext:
    """Everything a renderer needs besides the records and the request."""
    theme: ChartTheme = field(default_factory=ChartTheme)
    geo: Optional[Dict[str, Any]] = field(default=None, hash=False)
    geo_key: Optional[str] = None

    @property
    def has_geo(self) -> bool:
        return bool(self.geo) and self.geo_key is not None

    @property
    def featureidkey(self) -> Optional[str]:
        """Path plotly uses to match ``locations`` against the geo features."""
        if self.geo_key is None:
            return None
        if self.geo_key == 'id':
            return 'id'
        return f'properties.{self.geo_key}'
