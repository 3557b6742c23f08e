"""
Central Configuration Module for Conflict Viz.

=== PURPOSE ===
This module is the single source of truth for every tunable constant used
across the chart suite: where the dataset lives, which year the snapshot
charts show, which countries the focus charts compare, the conflict-type
palette, and the header needles the column resolver tries.  Every other
module imports from here rather than defining its own magic values.

=== DATA FLOW ===
  1. DATA_PATH / GEO_PATH feed the loader (conflict_viz.pipeline.loader).
  2. COLUMN_CANDIDATES / COLUMN_FALLBACKS drive the column resolver.
  3. WORLD_ENTITY and ISO3_PATTERN drive the entity classifier.
  4. SNAPSHOT_YEAR, FOCUS_COUNTRIES and TOP_N are the default ChartRequest
     parameters used by run.py and the dashboard.
  5. TYPE_COLORS and the layout dicts feed visualization.theme.ChartTheme.

Environment overrides are read once at import time so that containerised
deployments can point the suite at a different dataset without code changes.
"""

import os
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

# ==========================================
# DATA SOURCES
# ==========================================
# Default CSV location, relative to the working directory.  May also be an
# http(s) URL; the loader fetches it with requests in that case.
DATA_PATH = os.environ.get("CONFLICT_DATA_PATH", "data/conflict_deaths_by_type.csv")

# Optional GeoJSON FeatureCollection with country boundaries for the
# choropleth.  Empty means "use plotly's built-in ISO-3 country shapes".
GEO_PATH = os.environ.get("CONFLICT_GEO_PATH", "")

# Seconds to wait for an HTTP fetch.  Unset means no timeout: a slow
# server simply delays the first render.
_timeout = os.environ.get("CONFLICT_HTTP_TIMEOUT", "")
try:
    HTTP_TIMEOUT = float(_timeout) if _timeout else None
except ValueError:
    logger.warning(f"[Config] Ignoring invalid CONFLICT_HTTP_TIMEOUT={_timeout!r}; no timeout applied")
    HTTP_TIMEOUT = None

# ==========================================
# DEFAULT CHART PARAMETERS
# ==========================================
SNAPSHOT_YEAR = int(os.environ.get("CONFLICT_SNAPSHOT_YEAR", "2023"))

FOCUS_COUNTRIES = ["Ukraine", "Palestine", "Sudan", "Mexico", "Burkina Faso"]

# Number of countries shown by the ranking charts (bar, sankey, network)
TOP_N = 10

# ==========================================
# CONFLICT TYPES & PALETTE
# ==========================================
# Display order of the five UCDP conflict types.  The enumeration in
# conflict_viz.models.data_models follows this list.
CONFLICT_TYPE_NAMES = ["Interstate", "Intrastate", "Extrasystemic", "Non-state", "One-sided"]

TYPE_COLORS = {
    "Interstate": "#6c8ae4",
    "Intrastate": "#f28e2b",
    "Extrasystemic": "#edc948",
    "Non-state": "#59a14f",
    "One-sided": "#e15759",
}

BAR_COLOR = "#8da2fb"

# Sequential scale for heatmaps and the choropleth
SEQUENTIAL_SCALE = "OrRd"

# ==========================================
# COLUMN DETECTION
# ==========================================
# Ordered needles per canonical field.  Headers are lower-cased and
# whitespace-collapsed before matching; the first needle that matches any
# header wins, and within a needle the left-most header wins.
COLUMN_CANDIDATES = {
    "entity": ["entity", "country"],
    "code": ["code", "iso3", "iso_a3"],
    "year": ["year"],
    "Interstate": ["conflict type: interstate", "interstate"],
    "Intrastate": ["conflict type: intrastate", "intrastate"],
    "Extrasystemic": ["conflict type: extrasystemic", "extrasystemic"],
    "Non-state": ["conflict type: non-state", "non-state", "non state"],
    "One-sided": ["conflict type: one-sided", "one-sided", "one sided"],
}

# Literal header names tried last for the identity fields
COLUMN_FALLBACKS = {
    "entity": "Entity",
    "code": "Code",
    "year": "Year",
}

# Fields without which the pipeline refuses to continue
REQUIRED_FIELDS = ["entity", "code", "year", "Intrastate", "Non-state", "One-sided"]

# ==========================================
# ENTITY CLASSIFICATION
# ==========================================
WORLD_ENTITY = "World"
ISO3_PATTERN = r"^[A-Z]{3}$"

# Feature properties that may carry the ISO alpha-3 code in a GeoJSON file,
# tried in order.  The feature ``id`` is used when none is present.
GEO_CODE_PROPERTIES = ["iso_a3", "ISO_A3", "ADM0_A3", "iso3", "ISO3"]

# ==========================================
# USER-FACING MESSAGES
# ==========================================
MSG_MISSING_COLUMNS = "Could not detect needed columns in the CSV. Check header names."
MSG_LOAD_FAILED = "Failed to load the CSV. Ensure the file exists at {path}"
MSG_GEO_FAILED = "Failed to load the geo boundaries. Ensure the file exists at {path}"

# ==========================================
# OUTPUT
# ==========================================
LOG_DIR = Path(os.environ.get("CONFLICT_LOG_DIR", "logs"))
DEFAULT_OUTPUT = "conflict_charts.html"
PAGE_TITLE = "Deaths in Armed Conflicts by Type"
