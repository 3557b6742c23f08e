"""
Conflict Viz - charts of deaths in armed conflicts by UCDP conflict type.

This package turns a per-country, per-year CSV of conflict deaths into a
suite of interactive plotly charts:
- Tolerant column detection for the many header spellings in circulation
- Lenient row normalization into typed, immutable records
- Country vs aggregate (World, regional) classification
- A registry-driven dispatcher feeding twelve chart renderers
- A self-contained HTML report (run.py) and a streamlit dashboard
"""

__version__ = "1.0.0"
__author__ = "Conflict Viz Team"

# Core imports
from .core.config import *
from .core.exceptions import ConflictVizError, LoadError, MissingColumnsError, UnknownChartError

# Models
from .models import ConflictType, ColumnMapping, CanonicalRecord, EntityPartition, ChartRequest, EmptySubset

# Pipeline stages
from .pipeline import (
    load_raw_records,
    load_geojson,
    resolve_columns,
    normalize_rows,
    records_to_frame,
    partition_entities,
)

# Visualization
from .visualization import (
    ChartTheme,
    RenderContext,
    ChartContainer,
    ChartPage,
    CHART_REGISTRY,
    dispatch,
    render_failure,
)

# Orchestration
from .pipeline.orchestrator import ConflictChartPipeline, build_requests, prepare_page, run_pipeline

__all__ = [
    # Version
    '__version__',
    # Exceptions
    'ConflictVizError',
    'LoadError',
    'MissingColumnsError',
    'UnknownChartError',
    # Models
    'ConflictType',
    'ColumnMapping',
    'CanonicalRecord',
    'EntityPartition',
    'ChartRequest',
    'EmptySubset',
    # Pipeline
    'load_raw_records',
    'load_geojson',
    'resolve_columns',
    'normalize_rows',
    'records_to_frame',
    'partition_entities',
    'ConflictChartPipeline',
    'build_requests',
    'prepare_page',
    'run_pipeline',
    # Visualization
    'ChartTheme',
    'RenderContext',
    'ChartContainer',
    'ChartPage',
    'CHART_REGISTRY',
    'dispatch',
    'render_failure',
]
