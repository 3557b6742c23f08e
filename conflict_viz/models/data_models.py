"""
Data models for the conflict-deaths chart suite.

This module defines the **schema layer** of the pipeline: typed,
immutable records for everything that flows between the column resolver,
the row normalizer, the entity classifier and the chart dispatcher.

Dataclass overview
------------------
::

    ConflictType
        The fixed five-member enumeration of UCDP conflict types.

    ColumnMapping
        Output of the column resolver: which header to read for each
        canonical field (or None when the header could not be found).

    CanonicalRecord
        One entity-year row after column resolution and numeric coercion.
        ``total`` is a derived property, never stored.

    EntityPartition
        Countries vs aggregates split produced by the entity classifier.

    ChartRequest
        Parameters for one dispatch: chart kind, year or year range, focus
        entities, top-N and rendering options.

    EmptySubset
        Returned (not raised) when a chart has nothing to draw.

Classification conventions
--------------------------
- A record is a **country** when its code is exactly three uppercase ASCII
  letters and its entity is not ``"World"``.
- Everything else (``OWID_WRL``, empty codes, regional rollups, the World
  row itself) is an **aggregate**.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Any, Tuple

from ..core.config import ISO3_PATTERN, WORLD_ENTITY, TOP_N

_ISO3_RE = re.compile(ISO3_PATTERN)


# ============================================================================
# CONFLICT TYPES
# ============================================================================

class ConflictType(str, Enum):
    """The five UCDP conflict types, in display order."""
    INTERSTATE = "Interstate"
    INTRASTATE = "Intrastate"
    EXTRASYSTEMIC = "Extrasystemic"
    NON_STATE = "Non-state"
    ONE_SIDED = "One-sided"

    @classmethod
    def labels(cls) -> List[str]:
        return [t.value for t in cls]

    def __str__(self):
        return self.value


# ============================================================================
# RESOLVED COLUMNS
# ============================================================================

@dataclass(frozen=True)
class ColumnMapping:
    """Header to read for each canonical field; None means not found.

    Built once per load by ``pipeline.columns.resolve_columns`` so that no
    other stage performs string lookups on raw header names.
    """
    entity: Optional[str]
    code: Optional[str]
    year: Optional[str]
    type_columns: Dict[ConflictType, Optional[str]] = field(default_factory=dict, hash=False)

    def get(self, name: str) -> Optional[str]:
        """Header for a canonical field name ('entity', 'code', 'year' or a type label)."""
        if name in ('entity', 'code', 'year'):
            return getattr(self, name)
        return self.type_columns.get(ConflictType(name))

    def column_for(self, conflict_type: ConflictType) -> Optional[str]:
        return self.type_columns.get(conflict_type)

    def unresolved(self) -> List[str]:
        """All canonical field names that did not resolve to a header."""
        names = [n for n in ('entity', 'code', 'year') if getattr(self, n) is None]
        names.extend(t.value for t in ConflictType if self.type_columns.get(t) is None)
        return names

    def to_dict(self) -> Dict[str, Optional[str]]:
        out = {'entity': self.entity, 'code': self.code, 'year': self.year}
        out.update({t.value: self.type_columns.get(t) for t in ConflictType})
        return out


# ============================================================================
# CANONICAL RECORD
# ============================================================================

@dataclass(frozen=True)
class CanonicalRecord:
    """One entity-year row of conflict deaths.

    ``year`` is None when the source cell was not a whole number; None
    never equals a real year, so such rows drop out of every year filter.
    """
    entity: str
    code: str
    year: Optional[int]
    counts: Tuple[float, ...] = ()   # one value per ConflictType, display order

    def __init__(self, entity: str, code: str, year: Optional[int],
                 type_counts: Optional[Mapping[Any, float]] = None):
        # Every type is present; absent source columns count as zero
        given = {ConflictType(k): max(float(v), 0.0) for k, v in (type_counts or {}).items()}
        object.__setattr__(self, 'entity', entity)
        object.__setattr__(self, 'code', code)
        object.__setattr__(self, 'year', year)
        object.__setattr__(self, 'counts', tuple(given.get(t, 0.0) for t in ConflictType))

    @property
    def type_counts(self) -> Mapping[ConflictType, float]:
        """Read-only view of the counts keyed by ConflictType."""
        return MappingProxyType(dict(zip(ConflictType, self.counts)))

    @property
    def total(self) -> float:
        """Sum of all five type counts (derived, never stored)."""
        return sum(self.counts)

    def count(self, conflict_type) -> float:
        return self.type_counts[ConflictType(conflict_type)]

    @property
    def is_country(self) -> bool:
        return bool(_ISO3_RE.match(self.code or "")) and self.entity != WORLD_ENTITY

    @property
    def is_world(self) -> bool:
        return self.entity == WORLD_ENTITY

    def to_dict(self) -> Dict[str, Any]:
        """Flat dict keyed by type label, used to build DataFrames."""
        out: Dict[str, Any] = {
            'entity': self.entity,
            'code': self.code,
            'year': self.year,
        }
        out.update({t.value: self.type_counts[t] for t in ConflictType})
        out['total'] = self.total
        return out


# ============================================================================
# ENTITY PARTITION
# ============================================================================

@dataclass
class EntityPartition:
    """Records split into countries and aggregates."""
    countries: List[CanonicalRecord] = field(default_factory=list)
    aggregates: List[CanonicalRecord] = field(default_factory=list)

    @property
    def world(self) -> List[CanonicalRecord]:
        """Aggregate rows for the World entity only."""
        return [r for r in self.aggregates if r.is_world]


# ============================================================================
# CHART REQUEST / EMPTY SUBSET
# ============================================================================

@dataclass(frozen=True)
class ChartRequest:
    """Parameters for one chart dispatch.

    Attributes:
        kind: Registry key of the chart (``'bar'``, ``'heatmap'``, ...).
        year: Reference year for snapshot charts.
        year_range: Inclusive (start, end) for time-based charts; None
            means every year in the data.
        focus: Entities compared by focus charts (grouped bar, time series).
        top_n: How many countries the ranking charts keep.
        log_scale: Use a log axis for magnitude charts.
        title: Overrides the registry title.
    """
    kind: str
    year: Optional[int] = None
    year_range: Optional[Tuple[int, int]] = None
    focus: Tuple[str, ...] = ()
    top_n: int = TOP_N
    log_scale: bool = False
    title: Optional[str] = None

    def __post_init__(self):
        # Repeated names keep their first position
        object.__setattr__(self, 'focus', tuple(dict.fromkeys(self.focus or ())))
        if self.year_range is not None:
            start, end = self.year_range
            if start > end:
                start, end = end, start
            object.__setattr__(self, 'year_range', (int(start), int(end)))


@dataclass(frozen=True)
class EmptySubset:
    """A chart had nothing to draw; ``reason`` completes "No ... for ..."."""
    reason: str

    @property
    def message(self) -> str:
        return self.reason
