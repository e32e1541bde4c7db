# Purpose: Utility functions for robust coercion of raw bond fields (numbers, timestamps) in the dashboard.
# Raw uploads are duck-typed JSON, so every helper here degrades to a ground value and logs instead of raising.

import logging
import numbers
from datetime import datetime, timezone
from typing import Any, Optional

import numpy as np
import pandas as pd
from dateutil import parser as date_parser

logger = logging.getLogger(__name__)


def _float_or_none(value: Any) -> Optional[float]:
    """Numbers and numeric text as float; anything else (dicts, lists, huge ints, garbage) becomes None."""
    if isinstance(value, numbers.Number):
        try:
            return float(value)
        except (OverflowError, TypeError, ValueError):
            return None
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def convert_to_numeric_robustly(series: pd.Series, log: bool = True) -> pd.Series:
    """
    Converts a pandas Series to float, replacing every value that is missing,
    non-numeric or non-finite with 0.0.
    Args:
        series (pd.Series): Raw values (numbers, numeric strings, None, garbage).
        log (bool): Whether to log how many values were defaulted.
    Returns:
        pd.Series: Float series without NaN or infinities.
    """
    if series.empty:
        return pd.Series(dtype=float, index=series.index)

    cleaned = series.astype(object).map(_float_or_none)
    numeric = pd.to_numeric(cleaned, errors="coerce").astype(float)
    finite = np.isfinite(numeric)
    defaulted = int((~finite).sum())
    if log:
        if defaulted > 0:
            logger.debug(
                f"convert_to_numeric_robustly: {defaulted}/{len(series)} values were missing or not numeric and default to 0."
            )
        else:
            logger.debug(
                f"convert_to_numeric_robustly: All {len(series)} values converted to numeric."
            )
    return numeric.where(finite, 0.0)


def _parse_text(text: str) -> Optional[datetime]:
    try:
        return date_parser.isoparse(text)
    except (ValueError, OverflowError):
        pass
    # Non-ISO spellings ("25 June 2025") go through pandas' flexible parser
    try:
        ts = pd.to_datetime(text, utc=True, errors="coerce")
    except (ValueError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    return ts.to_pydatetime()


def parse_instant(value: Any) -> Optional[datetime]:
    """
    Parses a single timestamp value into an aware UTC datetime.

    ISO-8601 text is read with dateutil, so far-future dates such as the
    9999-12-31 perpetual sentinel stay representable; other text falls back to
    pandas. Naive values are interpreted as UTC. Anything unparseable, or a
    value that cannot be expressed in UTC, yields None.
    """
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, pd.Timestamp):
        parsed = value.to_pydatetime()
    elif isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        parsed = _parse_text(value.strip())
    else:
        return None

    if parsed is None:
        return None
    try:
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        return None


def parse_instants_robustly(series: pd.Series) -> pd.Series:
    """
    Parses a Series of raw timestamp values into timezone-aware UTC datetimes.
    Logs a warning with examples when some values could not be parsed.
    Args:
        series (pd.Series): Raw values (ISO-8601 strings, datetimes, garbage).
    Returns:
        pd.Series: dtype object holding UTC datetimes, None for unparseable values.
            Python datetimes cover years 1-9999, wider than datetime64[ns].
    """
    if series.empty:
        return pd.Series(dtype=object, index=series.index)

    parsed = pd.Series([parse_instant(v) for v in series], index=series.index, dtype=object)
    failed = parsed.isna()
    failed_count = int(failed.sum())
    if failed_count > 0:
        failed_examples = [str(v) for v in series[failed].tolist()[:5]]
        logger.warning(
            f"parse_instants_robustly: {failed_count}/{len(series)} values could not be parsed as dates. "
            f"Examples of failed values: {failed_examples}"
        )
    else:
        logger.debug(f"parse_instants_robustly: Successfully parsed all {len(series)} date values.")
    return parsed


def text_or_empty(value: Any) -> str:
    """Returns the value as text, '' for None/NaN."""
    if value is None:
        return ""
    if isinstance(value, float) and np.isnan(value):
        return ""
    return str(value)
