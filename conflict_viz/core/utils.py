"""
Utility functions for header normalisation and lenient cell parsing.
"""

import math
import re

import pandas as pd


def normalize_header(header):
    """Lower-case a header and collapse runs of whitespace to one space"""
    if header is None:
        return ""
    return re.sub(r'\s+', ' ', str(header)).strip().lower()


def clean_text(value):
    """Trim a cell to a plain string; missing cells become ''"""
    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    return str(value).replace("\xa0", " ").strip()


def coerce_number(value, default=0.0):
    """Coerce a cell to a non-negative float.

    Blank, missing, non-numeric, NaN, infinite and negative cells all
    yield ``default``.  Never raises.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.replace("\xa0", "").strip()
        if not value:
            return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number) or number < 0:
        return default
    return number


def parse_year(value):
    """Parse a year cell to ``int``; returns None when it is not a whole number"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number) or not number.is_integer():
        return None
    return int(number)
