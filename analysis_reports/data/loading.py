"""Loading and cleaning of the report datasets (CSV files or URLs)."""

from __future__ import annotations

import re
import logging
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd

logger = logging.getLogger(__name__)

_URL_RE = re.compile(r"^(https?|ftp)://", re.IGNORECASE)


def load_csv(source, **kwargs) -> pd.DataFrame:
    """Read a CSV from a local path or an http(s) URL."""
    src = str(source)
    if not _URL_RE.match(src):
        path = Path(src).expanduser()
        if not path.is_file():
            raise FileNotFoundError(f"CSV file not found: {path}")
        src = str(path)
    df = pd.read_csv(src, **kwargs)
    logger.info("Loaded %d rows x %d columns from %s", len(df), df.shape[1], source)
    return df


def snake_case(name) -> str:
    s = re.sub(r"[^0-9a-zA-Z]+", "_", str(name).strip())
    s = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s)
    return s.strip("_").lower()


def to_numeric(series: pd.Series) -> pd.Series:
    """Coerce '$1,250' style strings to floats; unparseable values become NaN."""
    if pd.api.types.is_numeric_dtype(series):
        return series
    cleaned = series.astype(str).str.replace(r"[$,%\s]", "", regex=True)
    return pd.to_numeric(cleaned, errors="coerce")


def coerce_mostly_numeric(df: pd.DataFrame, columns: Iterable[str],
                          threshold: float = 0.9) -> pd.DataFrame:
    """Convert text columns to numbers when at least `threshold` of the
    non-missing cells parse; other columns are left as categories."""
    out = df.copy()
    for col in columns:
        if col not in out.columns:
            raise KeyError(f"Missing column: {col}")
        if pd.api.types.is_numeric_dtype(out[col]):
            continue
        present = out[col].notna()
        parsed = to_numeric(out[col])
        if present.sum() and parsed[present].notna().mean() >= threshold:
            out[col] = parsed
    return out


def clean_frame(df: pd.DataFrame, required: Optional[Iterable[str]] = None,
                numeric: Optional[Iterable[str]] = None, dropna: bool = True) -> pd.DataFrame:
    """Normalize column names, strip text, coerce numerics, drop duplicates.

    Column names in `required` and `numeric` refer to the snake_case names.
    """
    out = df.copy()
    out.columns = [snake_case(c) for c in out.columns]

    required = list(required or [])
    numeric = list(numeric or [])
    missing = [c for c in required + numeric if c not in out.columns]
    if missing:
        raise KeyError(f"Missing column(s): {', '.join(missing)}")

    for col in out.columns:
        if not pd.api.types.is_numeric_dtype(out[col]):
            out[col] = out[col].map(lambda v: v.strip() if isinstance(v, str) else v)
    for col in numeric:
        out[col] = to_numeric(out[col])

    n0 = len(out)
    out = out.drop_duplicates()
    if dropna and required:
        out = out.dropna(subset=required)
    logger.info("clean_frame: %d -> %d rows", n0, len(out))
    return out.reset_index(drop=True)


def remove_outliers_iqr(df: pd.DataFrame, column: str, k: float = 1.5) -> pd.DataFrame:
    """Keep rows with column inside [Q1 - k*IQR, Q3 + k*IQR]."""
    if column not in df.columns:
        raise KeyError(f"Missing column: {column}")
    q1, q3 = df[column].quantile([0.25, 0.75])
    iqr = q3 - q1
    lo, hi = q1 - k * iqr, q3 + k * iqr
    kept = df[df[column].between(lo, hi)]
    logger.info("IQR filter on %s [%.2f, %.2f]: dropped %d rows",
                column, lo, hi, len(df) - len(kept))
    return kept.reset_index(drop=True)
