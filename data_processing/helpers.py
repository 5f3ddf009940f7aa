# efficience_root/data_processing/helpers.py
#
# Core numeric utilities shared by the aggregation boundary and the
# statistical core: NA-aware numeric coercion, safe division and rounding.

import logging
import math
import re
from typing import Any, Optional, Type

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

# Pre-compiled regex for the various "Not Available" strings found in exports.
_NA_REGEX_PATTERN = re.compile(
    r'(?i)^\s*(nan|none|n/a|#n/a|na|null|nil|<na>|undefined|unknown|-|)\s*$'
)


def convert_to_numeric(
    data: Any,
    default_value: Any = np.nan,
    target_type: Optional[Type] = None
) -> Any:
    """
    Converts a scalar or a pandas Series to numbers, treating common
    "Not Available" strings as missing.

    Args:
        data: A scalar, list, or pandas Series.
        default_value: Value used for items that cannot be converted.
        target_type: int or float. Ints use the nullable Int64 dtype when
                     missing values remain.

    Returns:
        The converted data in the same shape as the input.
    """
    is_series = isinstance(data, pd.Series)
    series = data if is_series else pd.Series([data], dtype=object)

    if pd.api.types.is_object_dtype(series.dtype) or pd.api.types.is_string_dtype(series.dtype):
        series = series.replace(_NA_REGEX_PATTERN, np.nan, regex=True)

    numeric_series = pd.to_numeric(series, errors='coerce')
    if not pd.isna(default_value):
        numeric_series = numeric_series.fillna(default_value)

    if target_type is int and pd.api.types.is_numeric_dtype(numeric_series.dtype):
        if numeric_series.isnull().any():
            numeric_series = numeric_series.astype(pd.Int64Dtype())
        else:
            numeric_series = numeric_series.astype(int)
    elif target_type is float:
        numeric_series = numeric_series.astype(float)

    if is_series:
        return numeric_series
    return numeric_series.iloc[0] if not numeric_series.empty else default_value


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """
    Divides two numbers, returning `default` instead of NaN or Infinity
    when the denominator is zero or either operand is not finite.
    """
    try:
        num = float(numerator)
        den = float(denominator)
    except (TypeError, ValueError):
        return default
    if den == 0 or not math.isfinite(num) or not math.isfinite(den):
        return default
    result = num / den
    return result if math.isfinite(result) else default


def round_half_up(value: float, ndigits: int = 0) -> float:
    """
    Rounds .5 upward, like a dashboard would display it. NaN and infinities
    are returned unchanged.
    """
    if not math.isfinite(value):
        return value
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def format_fr(value: float) -> str:
    """Formats an integer-like number with French thousands separators (12 300)."""
    if not math.isfinite(value):
        return "-"
    rounded = int(round_half_up(value))
    return f"{rounded:,}".replace(",", " ")
