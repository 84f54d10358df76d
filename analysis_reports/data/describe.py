"""Descriptive statistics tables for the reports."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

import numpy as np
import pandas as pd


def _numeric_columns(df: pd.DataFrame, columns: Optional[Iterable[str]] = None):
    if columns is None:
        return list(df.select_dtypes(include=[np.number]).columns)
    columns = list(columns)
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise KeyError(f"Missing column(s): {', '.join(missing)}")
    return columns


def describe_numeric(df: pd.DataFrame, columns: Optional[Iterable[str]] = None) -> pd.DataFrame:
    """count/mean/std/min/quartiles/max plus skew, one row per column."""
    cols = _numeric_columns(df, columns)
    if not cols:
        return pd.DataFrame()
    table = df[cols].describe().T
    table["skew"] = df[cols].skew()
    table["missing"] = df[cols].isna().sum()
    return table


def group_summary(df: pd.DataFrame, by, value: str,
                  agg: Sequence[str] = ("count", "mean", "median", "std")) -> pd.DataFrame:
    """Aggregate `value` per group, largest mean first."""
    for col in ([by] if isinstance(by, str) else list(by)) + [value]:
        if col not in df.columns:
            raise KeyError(f"Missing column: {col}")
    out = df.groupby(by, observed=True)[value].agg(list(agg))
    if "mean" in out.columns:
        out = out.sort_values("mean", ascending=False)
    return out


def correlation_table(df: pd.DataFrame, columns: Optional[Iterable[str]] = None,
                      method: str = "pearson") -> pd.DataFrame:
    cols = _numeric_columns(df, columns)
    return df[cols].corr(method=method)


def top_n(df: pd.DataFrame, column: str, n: int = 10, ascending: bool = False) -> pd.DataFrame:
    if column not in df.columns:
        raise KeyError(f"Missing column: {column}")
    return df.sort_values(column, ascending=ascending).head(n)
