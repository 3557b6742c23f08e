"""
Data Loading
============

Single entry point for all data ingestion in the chart suite.  It reads the
conflict-deaths CSV (from a local path or an http(s) URL) into raw records,
and optionally a GeoJSON FeatureCollection of country boundaries for the
choropleth.

Data Flow
---------
1. Path or URL  -->  text (requests for URLs, plain file read otherwise)
2. Text  -->  pd.read_csv with every cell kept as a string
3. DataFrame  -->  (headers, raw records)  where a raw record is a plain
   ``{header: cell}`` dict, one per row

Cells are deliberately *not* typed here: numeric coercion belongs to the row
normalizer so that a malformed cell in one column never aborts the load.

Every failure (missing file, HTTP error, undecodable bytes, unparseable CSV,
header-only file) is raised as ``LoadError`` so the pipeline's single
top-level handler can report it uniformly.
"""

import io
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
import requests

from ..core.config import HTTP_TIMEOUT, GEO_CODE_PROPERTIES
from ..core.exceptions import LoadError

logger = logging.getLogger(__name__)

RawRecord = Dict[str, str]


def is_url(source) -> bool:
    """True when *source* is an http(s) URL rather than a local path."""
    return str(source).lower().startswith(("http://", "https://"))


def read_text(source, timeout: Optional[float] = HTTP_TIMEOUT) -> str:
    """Fetch the raw UTF-8 text of a local file or URL.

    Raises:
        LoadError: If the file is missing, the request fails, or the bytes
                   are not valid UTF-8.
    """
    source = str(source)
    if is_url(source):
        logger.info(f"[Loader] Fetching {source}")
        try:
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise LoadError(f"Cannot fetch {source}: {e}", source=source) from e
        try:
            return response.content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise LoadError(f"{source} is not valid UTF-8: {e}", source=source) from e

    path = Path(source)
    if not path.is_file():
        raise LoadError(f"File not found: {source}", source=source)
    try:
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise LoadError(f"Cannot read {source}: {e}", source=source) from e


def parse_csv_text(text: str, source: str = "") -> Tuple[List[str], List[RawRecord]]:
    """Parse CSV text into the header row and one raw record per data row.

    Raises:
        LoadError: If the text is not parseable CSV or holds no data rows.
    """
    try:
        df = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,   # Keep blanks as '' so the normalizer decides
            index_col=False,         # Rows ending in a trailing comma keep their columns
            skipinitialspace=True,
        )
    except pd.errors.EmptyDataError as e:
        raise LoadError("CSV is empty.", source=source) from e
    except (pd.errors.ParserError, ValueError) as e:
        raise LoadError(f"Cannot parse CSV: {e}", source=source) from e

    headers = [str(c) for c in df.columns]
    if df.empty:
        raise LoadError("CSV is empty.", source=source)

    records = df.to_dict(orient="records")
    logger.info(f"[Loader] Loaded rows: {len(records)} ({len(headers)} columns)")
    return headers, records


def load_raw_records(source, timeout: Optional[float] = HTTP_TIMEOUT) -> Tuple[List[str], List[RawRecord]]:
    """Load a CSV file or URL into ``(headers, raw_records)``."""
    return parse_csv_text(read_text(source, timeout=timeout), source=str(source))


# ============================================================================
# GEOJSON
# ============================================================================

def load_geojson(source, timeout: Optional[float] = HTTP_TIMEOUT) -> Dict[str, Any]:
    """Load a GeoJSON FeatureCollection of country boundaries.

    Raises:
        LoadError: If the file cannot be read, is not JSON, or is not a
                   FeatureCollection.
    """
    text = read_text(source, timeout=timeout)
    try:
        geo = json.loads(text)
    except json.JSONDecodeError as e:
        raise LoadError(f"Cannot parse geo file {source}: {e}", source=str(source)) from e

    if not isinstance(geo, dict) or geo.get("type") != "FeatureCollection":
        raise LoadError(f"Geo file {source} is not a FeatureCollection", source=str(source))

    logger.info(f"[Loader] Loaded {len(geo.get('features', []))} geo features")
    return geo


def feature_code(feature: Dict[str, Any], key: str) -> Optional[str]:
    """Upper-cased ISO alpha-3 code stored under *key* (a property name or 'id'), or None."""
    value = feature.get("id") if key == "id" else (feature.get("properties") or {}).get(key)
    if isinstance(value, str) and value.strip():
        return value.strip().upper()
    return None


def normalize_feature_codes(geo: Dict[str, Any], key: str) -> int:
    """Rewrite every feature's code under *key* to its upper-cased form, in place.

    plotly matches ``featureidkey`` values case-sensitively against the
    record codes, which are upper case.  Returns how many features carry a code.
    """
    found = 0
    for feature in geo.get("features") or []:
        code = feature_code(feature, key)
        if code is None:
            continue
        found += 1
        if key == "id":
            feature["id"] = code
        else:
            feature.setdefault("properties", {})[key] = code
    return found


def geo_code_property(geo: Dict[str, Any]) -> Optional[str]:
    """Name of the feature property holding the ISO code, for plotly's featureidkey.

    Returns ``'id'`` when codes live in the feature id, or None when the
    collection carries no recognisable code at all.
    """
    features = geo.get("features") or []
    for key in GEO_CODE_PROPERTIES:
        if any(isinstance((f.get("properties") or {}).get(key), str) for f in features):
            return key
    if any(isinstance(f.get("id"), str) for f in features):
        return "id"
    return None
