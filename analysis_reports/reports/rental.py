"""
Rental price exploration.

Steps: clean -> drop price outliers (IQR) -> descriptive stats ->
price by group -> price per bedroom -> correlations -> charts ->
optional regression comparison (OLS / ridge / lasso).
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from analysis_reports.data.loading import (
    clean_frame, coerce_mostly_numeric, remove_outliers_iqr, snake_case,
)
from analysis_reports.data.describe import (
    correlation_table, describe_numeric, group_summary,
)
from analysis_reports.data import plots
from analysis_reports.modeling.regression import compare_models
from analysis_reports.reports.base import Report

logger = logging.getLogger(__name__)


def rental_report(df: pd.DataFrame, price: str = "price", group: Optional[str] = "neighbourhood",
                  bedrooms: Optional[str] = "bedrooms",
                  features: Optional[Sequence[str]] = None,
                  outlier_k: Optional[float] = 1.5, seed: int = 0) -> Report:
    # column names are matched after clean_frame renames them
    price = snake_case(price)
    group = snake_case(group) if group else group
    bedrooms = snake_case(bedrooms) if bedrooms else bedrooms
    features = [snake_case(c) for c in features] if features else features
    data = clean_frame(df, required=[price], numeric=[price])
    data = coerce_mostly_numeric(data, [c for c in (features or []) if c != group])
    data = data[data[price] > 0]
    if outlier_k is not None and len(data) >= 4:
        data = remove_outliers_iqr(data, price, k=outlier_k)
    if data.empty:
        raise ValueError(f"No rows with a positive '{price}' left after cleaning")

    rep = Report(title="Rental price exploration")
    rep.tables["describe"] = describe_numeric(data)
    rep.figures["price_hist"] = plots.plot_histogram(data, price, title="Rental price distribution")

    if group and group in data.columns:
        rep.tables["price_by_group"] = group_summary(data, group, price)
        rep.figures["price_by_group"] = plots.plot_box_by_group(data, price, group)

    if bedrooms and bedrooms in data.columns and pd.api.types.is_numeric_dtype(data[bedrooms]):
        rooms = data[data[bedrooms] > 0]
        per_room = (rooms[price] / rooms[bedrooms]).rename("price_per_bedroom")
        rep.tables["price_per_bedroom"] = (
            rooms.assign(price_per_bedroom=per_room)
            .groupby(bedrooms)["price_per_bedroom"].agg(["count", "mean", "median"])
        )
        rep.figures["price_vs_bedrooms"] = plots.plot_scatter_fit(data, bedrooms, price)

    num_cols = list(data.select_dtypes(include=[np.number]).columns)
    if len(num_cols) >= 2:
        corr = correlation_table(data, num_cols)
        rep.tables["correlation"] = corr
        rep.tables["price_correlation"] = (
            corr[price].drop(price).sort_values(ascending=False).to_frame()
        )
        rep.figures["correlation"] = plots.plot_correlation(corr)

    if features:
        rep.models = compare_models(data, price, list(features), seed=seed)

    logger.info("Rental report built on %d rows", len(data))
    return rep
