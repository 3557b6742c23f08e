"""Helpers shared by the renderer modules."""

from typing import Dict, Iterable, List, Sequence

import numpy as np

from ...models.data_models import CanonicalRecord, ConflictType


def fmt_deaths(value: float) -> str:
    return f"{value:,.0f}"


def hex_to_rgba(color: str, alpha: float = 0.4) -> str:
    color = color.lstrip('#')
    r, g, b = (int(color[i:i + 2], 16) for i in (0, 2, 4))
    return f"rgba({r}, {g}, {b}, {alpha})"


def ranked_by_total(records: Iterable[CanonicalRecord], top_n: int) -> List[CanonicalRecord]:
    """Records with a positive total, largest first; ties broken by entity name."""
    positive = [r for r in records if r.total > 0]
    positive.sort(key=lambda r: (-r.total, r.entity))
    return positive[:top_n]


def one_per_year(records: Iterable[CanonicalRecord]) -> List[CanonicalRecord]:
    """First record per year, sorted by year; rows without a year are dropped."""
    by_year: Dict[int, CanonicalRecord] = {}
    for record in records:
        if record.year is not None and record.year not in by_year:
            by_year[record.year] = record
    return [by_year[y] for y in sorted(by_year)]


def in_focus_order(records: Iterable[CanonicalRecord], focus: Sequence[str]) -> List[CanonicalRecord]:
    """Records ordered by their entity's position in *focus*, then by year."""
    order = {name: i for i, name in enumerate(focus)}
    return sorted((r for r in records if r.entity in order),
                  key=lambda r: (order[r.entity], r.year if r.year is not None else 0))


def log10p(values) -> np.ndarray:
    """log10(1 + x), so zero counts stay at zero on a log colour scale."""
    return np.log10(1 + np.asarray(values, dtype=float))


def type_matrix(records: Sequence[CanonicalRecord]) -> np.ndarray:
    """Array of shape (5, len(records)): one row per conflict type."""
    return np.array([[r.count(t) for r in records] for t in ConflictType], dtype=float).reshape(
        len(ConflictType), len(records))
