"""
Core module for Conflict Viz.

Contains configuration, the exception taxonomy, and parsing utilities.
"""

from conflict_viz.core.config import *
from conflict_viz.core.exceptions import (
    ConflictVizError,
    LoadError,
    MissingColumnsError,
    UnknownChartError,
)
from conflict_viz.core.utils import normalize_header, clean_text, coerce_number, parse_year

__all__ = [
    # Exceptions
    'ConflictVizError',
    'LoadError',
    'MissingColumnsError',
    'UnknownChartError',
    # Utils
    'normalize_header',
    'clean_text',
    'coerce_number',
    'parse_year',
]
