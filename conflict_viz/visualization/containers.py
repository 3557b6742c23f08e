"""
Chart containers.

A ``ChartContainer`` is the output slot a single chart is drawn into.  It
holds exactly one thing at a time: a plotly figure, or a message (an
informational "no data" note or an error).  ``clear()`` followed by a draw
fully replaces the previous content, so redrawing a chart never accumulates
figures.

A ``ChartPage`` is the ordered set of containers that make up one report.
It can be rendered to a self-contained HTML page (run.py) or walked
container by container by the streamlit dashboard.
"""

import html
import logging
from collections import OrderedDict
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import plotly.graph_objects as go

logger = logging.getLogger(__name__)

INFO = 'info'
ERROR = 'error'


class ChartContainer:
    """Output slot for one chart."""

    def __init__(self, key: str, title: str = ""):
        self.key = key
        self.title = title or key
        self.figure: Optional[go.Figure] = None
        self.message: Optional[str] = None
        self.level: Optional[str] = None

    def clear(self):
        self.figure = None
        self.message = None
        self.level = None

    def render_figure(self, fig: go.Figure):
        self.clear()
        self.figure = fig

    def show_message(self, message: str, level: str = INFO):
        self.clear()
        self.message = message
        self.level = level

    @property
    def is_empty(self) -> bool:
        return self.figure is None and self.message is None

    def snapshot(self) -> Tuple:
        """Comparable summary of the current content."""
        if self.is_empty:
            return ('empty',)
        if self.figure is not None:
            return ('figure', self.figure.to_json())
        return ('message', self.level, self.message)

    def to_html(self, include_plotlyjs=False) -> str:
        """HTML fragment for this container (a <section>)."""
        parts = [f'<section class="chart" id="{html.escape(self.key)}">',
                 f'<h2>{html.escape(self.title)}</h2>']
        if self.figure is not None:
            parts.append(self.figure.to_html(full_html=False, include_plotlyjs=include_plotlyjs))
        elif self.message is not None:
            parts.append(f'<div class="alert {self.level}">{html.escape(self.message)}</div>')
        parts.append('</section>')
        return '\n'.join(parts)

    def __repr__(self):
        state = 'figure' if self.figure is not None else (self.level or 'empty')
        return f"ChartContainer({self.key!r}, {state})"


PAGE_CSS = """
body { background: #0f172a; color: #E0E0E0; font-family: Inter, sans-serif; margin: 2rem; }
h1 { font-weight: 600; }
section.chart { margin-bottom: 2.5rem; }
.alert { padding: 0.75rem 1rem; border-radius: 6px; background: #1e293b; }
.alert.error { background: #7f1d1d; }
"""


class ChartPage:
    """Ordered collection of containers making up one report."""

    def __init__(self, title: str = ""):
        self.title = title
        self._containers: "OrderedDict[str, ChartContainer]" = OrderedDict()

    def add(self, key: str, title: str = "") -> ChartContainer:
        if key not in self._containers:
            self._containers[key] = ChartContainer(key, title)
        return self._containers[key]

    def get(self, key: str) -> ChartContainer:
        return self._containers[key]

    def __getitem__(self, key: str) -> ChartContainer:
        return self._containers[key]

    def __contains__(self, key) -> bool:
        return key in self._containers

    def __iter__(self) -> Iterator[ChartContainer]:
        return iter(self._containers.values())

    def __len__(self):
        return len(self._containers)

    @property
    def keys(self) -> List[str]:
        return list(self._containers.keys())

    def clear(self):
        for container in self:
            container.clear()

    def to_html(self) -> str:
        """Self-contained HTML page; plotly.js is inlined once."""
        sections = []
        js_included = False
        for container in self:
            include = container.figure is not None and not js_included
            sections.append(container.to_html(include_plotlyjs=include))
            js_included = js_included or include
        return (
            '<!DOCTYPE html>\n<html>\n<head>\n<meta charset="utf-8">\n'
            f'<title>{html.escape(self.title)}</title>\n'
            f'<style>{PAGE_CSS}</style>\n</head>\n<body>\n'
            f'<h1>{html.escape(self.title)}</h1>\n'
            + '\n'.join(sections)
            + '\n</body>\n</html>\n'
        )

    def write_html(self, path) -> Path:
        path = Path(path)
        if path.parent and not path.parent.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_html(), encoding='utf-8')
        logger.info(f"[Page] Wrote {len(self)} charts to {path}")
        return path
