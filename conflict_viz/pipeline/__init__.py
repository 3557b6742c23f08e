"""
Pipeline module for Conflict Viz.

Contains the data stages (loader, column resolver, row normalizer, entity
classifier).  The orchestrator lives in ``conflict_viz.pipeline.orchestrator``
and is imported from there, since it depends on the visualization package.
"""

from .loader import (
    load_raw_records, parse_csv_text, read_text, load_geojson, geo_code_property, normalize_feature_codes,
)
from .columns import resolve_columns, detect_columns
from .normalizer import normalize_row, normalize_rows, records_to_frame
from .classifier import (
    is_country,
    partition_entities,
    country_records,
    aggregate_records,
    world_records,
)

__all__ = [
    'load_raw_records',
    'parse_csv_text',
    'read_text',
    'load_geojson',
    'geo_code_property',
    'normalize_feature_codes',
    'resolve_columns',
    'detect_columns',
    'normalize_row',
    'normalize_rows',
    'records_to_frame',
    'is_country',
    'partition_entities',
    'country_records',
    'aggregate_records',
    'world_records',
]
