"""
Column Resolver.

Maps the loosely named headers of a conflict-deaths CSV onto the canonical
fields of ``CanonicalRecord``.  Exports differ in casing, spacing and
prefixes ("Conflict type: Interstate", "interstate deaths", ...), so each
canonical field has an ordered list of substring needles in
``core.config.COLUMN_CANDIDATES``.

Resolution order per field:
  1. Each needle in turn is tested against every normalized header; the
     first needle that matches anything wins, and within it the left-most
     header.
  2. ``entity`` / ``code`` / ``year`` then try their literal fallback name
     ("Entity", "Code", "Year"), which only counts when such a header exists.
  3. Otherwise the field is unresolved (None).

The result is evaluated once per load; downstream stages only ever see the
typed ``ColumnMapping``.
"""

import logging
from typing import Dict, List, Optional, Sequence

from ..core.config import COLUMN_CANDIDATES, COLUMN_FALLBACKS, REQUIRED_FIELDS
from ..core.exceptions import MissingColumnsError
from ..core.utils import normalize_header
from ..models.data_models import ColumnMapping, ConflictType

logger = logging.getLogger(__name__)


def find_header(headers: Sequence[str], needles: Sequence[str],
                normalized: Optional[List[str]] = None) -> Optional[str]:
    """Return the first header containing the earliest matching needle."""
    if normalized is None:
        normalized = [normalize_header(h) for h in headers]
    for needle in needles:
        needle = normalize_header(needle)
        for header, norm in zip(headers, normalized):
            if needle in norm:
                return header
    return None


def _fallback(headers: Sequence[str], normalized: List[str], name: str) -> Optional[str]:
    target = normalize_header(name)
    for header, norm in zip(headers, normalized):
        if norm == target:
            return header
    return None


def detect_columns(headers: Sequence[str],
                   candidates: Optional[Dict[str, List[str]]] = None) -> ColumnMapping:
    """Resolve every canonical field without validating the result.

    Args:
        headers: Header row in file order.
        candidates: Needle lists per field; defaults to COLUMN_CANDIDATES.

    Returns:
        ColumnMapping with None for every field that was not found.
    """
    candidates = candidates or COLUMN_CANDIDATES
    headers = [str(h) for h in headers]
    normalized = [normalize_header(h) for h in headers]

    resolved: Dict[str, Optional[str]] = {}
    for name in ('entity', 'code', 'year'):
        header = find_header(headers, candidates.get(name, []), normalized)
        if header is None and name in COLUMN_FALLBACKS:
            header = _fallback(headers, normalized, COLUMN_FALLBACKS[name])
        resolved[name] = header

    type_columns = {
        t: find_header(headers, candidates.get(t.value, []), normalized)
        for t in ConflictType
    }

    return ColumnMapping(
        entity=resolved['entity'],
        code=resolved['code'],
        year=resolved['year'],
        type_columns=type_columns,
    )


def resolve_columns(headers: Sequence[str],
                    candidates: Optional[Dict[str, List[str]]] = None) -> ColumnMapping:
    """Resolve the header row and enforce the required fields.

    Raises:
        MissingColumnsError: If entity, code, year, or any of the Intrastate,
            Non-state and One-sided counts could not be resolved.
    """
    mapping = detect_columns(headers, candidates)
    unresolved = mapping.unresolved()

    missing = [name for name in REQUIRED_FIELDS if name in unresolved]
    if missing:
        logger.error(f"[Columns] Unresolved required columns: {missing}. Headers: {list(headers)}")
        raise MissingColumnsError(missing)

    for name in unresolved:
        logger.warning(f"[Columns] No '{name}' column found; its counts default to 0")

    logger.debug(f"[Columns] Resolved mapping: {mapping.to_dict()}")
    return mapping
