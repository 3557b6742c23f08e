"""
Row Normalizer.

Turns raw ``{header: cell}`` records into immutable ``CanonicalRecord``
objects using a resolved ``ColumnMapping``.

Parsing is lenient by policy: a blank, missing or malformed count becomes 0
and a malformed year becomes None (which no year filter ever matches).
Nothing in this module raises on bad cell content.
"""

import logging
from typing import Any, Iterable, List, Mapping

import pandas as pd

from ..core.utils import clean_text, coerce_number, parse_year
from ..models.data_models import CanonicalRecord, ColumnMapping, ConflictType

logger = logging.getLogger(__name__)

FRAME_COLUMNS = ['entity', 'code', 'year'] + ConflictType.labels() + ['total']


def _cell(raw: Mapping[str, Any], header):
    if header is None:
        return None
    return raw.get(header)


def normalize_row(raw: Mapping[str, Any], columns: ColumnMapping) -> CanonicalRecord:
    """Build one CanonicalRecord from a raw CSV row."""
    counts = {
        t: coerce_number(_cell(raw, columns.column_for(t)))
        for t in ConflictType
    }
    return CanonicalRecord(
        entity=clean_text(_cell(raw, columns.entity)),
        code=clean_text(_cell(raw, columns.code)),
        year=parse_year(_cell(raw, columns.year)),
        type_counts=counts,
    )


def normalize_rows(raw_records: Iterable[Mapping[str, Any]], columns: ColumnMapping) -> List[CanonicalRecord]:
    """Normalize a whole load, logging how many rows lost their year."""
    records = [normalize_row(raw, columns) for raw in raw_records]
    bad_years = sum(1 for r in records if r.year is None)
    if bad_years:
        logger.warning(f"[Normalizer] {bad_years} rows have no usable year and will be excluded by year filters")
    logger.info(f"[Normalizer] Normalized {len(records)} rows")
    return records


def records_to_frame(records: Iterable[CanonicalRecord]) -> pd.DataFrame:
    """DataFrame with entity, code, year, one column per type, and total."""
    rows = [r.to_dict() for r in records]
    df = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    if not df.empty:
        df['year'] = df['year'].astype('Int64')
    return df
