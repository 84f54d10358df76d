"""
Report charts (matplotlib).

Every function builds its own Figure, saves it when `path` is given,
and returns it.  Callers close figures they no longer need.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt


def _finish(fig, path):
    fig.tight_layout()
    if path is not None:
        fig.savefig(path, dpi=120)
    return fig


def plot_histogram(df: pd.DataFrame, column: str, bins: int = 30,
                   title: Optional[str] = None, path=None):
    fig, ax = plt.subplots(figsize=(8, 4.5))
    values = df[column].dropna()
    ax.hist(values, bins=bins, color="steelblue", edgecolor="white")
    ax.axvline(values.mean(), color="red", linestyle="--", label=f"mean={values.mean():.2f}")
    ax.axvline(values.median(), color="black", linestyle=":", label=f"median={values.median():.2f}")
    ax.set_xlabel(column)
    ax.set_ylabel("Count")
    ax.set_title(title or f"Distribution of {column}")
    ax.legend()
    return _finish(fig, path)


def plot_box_by_group(df: pd.DataFrame, value: str, group: str, max_groups: int = 15,
                      title: Optional[str] = None, path=None):
    """Box plot of `value` for the largest groups, ordered by median."""
    counts = df[group].value_counts()
    keep = counts.index[:max_groups]
    sub = df[df[group].isin(keep)]
    order = sub.groupby(group, observed=True)[value].median().sort_values().index
    data = [sub.loc[sub[group] == g, value].dropna().values for g in order]

    fig, ax = plt.subplots(figsize=(10, 5))
    ax.boxplot(data)
    ax.set_xticks(range(1, len(order) + 1))
    ax.set_xticklabels([str(g) for g in order], rotation=30, ha="right")
    ax.set_ylabel(value)
    ax.set_title(title or f"{value} by {group}")
    return _finish(fig, path)


def plot_scatter_fit(df: pd.DataFrame, x: str, y: str,
                     title: Optional[str] = None, path=None):
    """Scatter with a least-squares line."""
    sub = df[[x, y]].dropna()
    fig, ax = plt.subplots(figsize=(7, 5))
    ax.scatter(sub[x], sub[y], alpha=0.5, s=14)
    if len(sub) >= 2 and sub[x].nunique() > 1:
        slope, intercept = np.polyfit(sub[x], sub[y], 1)
        xs = np.linspace(sub[x].min(), sub[x].max(), 50)
        ax.plot(xs, slope * xs + intercept, color="red",
                label=f"y = {slope:.2f}x + {intercept:.2f}")
        ax.legend()
    ax.set_xlabel(x)
    ax.set_ylabel(y)
    ax.set_title(title or f"{y} vs {x}")
    return _finish(fig, path)


def plot_correlation(corr: pd.DataFrame, title: str = "Correlation matrix", path=None):
    n = len(corr.columns)
    fig, ax = plt.subplots(figsize=(1.0 + 0.8 * n, 0.8 + 0.7 * n))
    im = ax.imshow(corr.values, cmap="coolwarm", vmin=-1, vmax=1)
    ax.set_xticks(range(n))
    ax.set_xticklabels(corr.columns, rotation=45, ha="right")
    ax.set_yticks(range(n))
    ax.set_yticklabels(corr.index)
    for i in range(n):
        for j in range(n):
            ax.text(j, i, f"{corr.values[i, j]:.2f}", ha="center", va="center", fontsize=8)
    fig.colorbar(im, ax=ax)
    ax.set_title(title)
    return _finish(fig, path)


def plot_bar(series: pd.Series, title: str = "", ylabel: str = "", path=None):
    fig, ax = plt.subplots(figsize=(10, 5))
    x = np.arange(len(series))
    bars = ax.bar(x, series.values)
    for i, b in enumerate(bars):
        ax.text(b.get_x() + b.get_width() / 2, b.get_height(), f"{series.values[i]:.1f}",
                ha="center", va="bottom", fontsize=8)
    ax.set_xticks(x)
    ax.set_xticklabels([str(i) for i in series.index], rotation=30, ha="right")
    ax.set_ylabel(ylabel)
    ax.set_title(title)
    return _finish(fig, path)
