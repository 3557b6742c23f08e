"""
Models module for Conflict Viz.

Contains the typed records passed between pipeline stages.
"""

from .data_models import (
    ConflictType,
    ColumnMapping,
    CanonicalRecord,
    EntityPartition,
    ChartRequest,
    EmptySubset,
)

__all__ = [
    'ConflictType',
    'ColumnMapping',
    'CanonicalRecord',
    'EntityPartition',
    'ChartRequest',
    'EmptySubset',
]
