"""
Linear and regularized regression (scikit-learn).

fit_linear / fit_ridge / fit_lasso share one preprocessing step:
numeric features are standardized, categorical features one-hot encoded.
Coefficients are therefore per standard deviation for numeric inputs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from scipy import stats
from sklearn.compose import ColumnTransformer
from sklearn.linear_model import LassoCV, LinearRegression, RidgeCV
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score
from sklearn.model_selection import train_test_split
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder, StandardScaler

logger = logging.getLogger(__name__)

ALPHAS = np.logspace(-3, 3, 25)


# ============================================================
# RESULT
# ============================================================
@dataclass
class RegressionResult:
    name: str
    pipeline: Pipeline
    coefficients: pd.Series
    intercept: float
    r2_train: float
    r2_test: float
    adj_r2_train: float
    rmse_test: float
    mae_test: float
    n_train: int
    n_test: int
    alpha: Optional[float] = None
    features: List[str] = field(default_factory=list)

    def predict(self, df: pd.DataFrame) -> np.ndarray:
        return self.pipeline.predict(df[self.features])

    def summary(self) -> Dict[str, float]:
        return dict(
            model=self.name, alpha=self.alpha, r2_train=self.r2_train,
            adj_r2_train=self.adj_r2_train, r2_test=self.r2_test,
            rmse_test=self.rmse_test, mae_test=self.mae_test,
            n_train=self.n_train, n_test=self.n_test,
            nonzero_coefs=int((self.coefficients.abs() > 1e-10).sum()),
        )


# ============================================================
# HELPERS
# ============================================================
def adjusted_r2(r2: float, n: int, p: int) -> float:
    if n - p - 1 <= 0:
        return float("nan")
    return 1.0 - (1.0 - r2) * (n - 1) / (n - p - 1)


def _preprocessor(df: pd.DataFrame, features: Sequence[str]) -> ColumnTransformer:
    num = [c for c in features if pd.api.types.is_numeric_dtype(df[c])]
    cat = [c for c in features if c not in num]
    parts = []
    if num:
        parts.append(("num", StandardScaler(), num))
    if cat:
        parts.append(("cat", OneHotEncoder(handle_unknown="ignore", sparse_output=False), cat))
    return ColumnTransformer(parts)


def _prepare(df: pd.DataFrame, target: str, features: Sequence[str]):
    features = list(features)
    missing = [c for c in [target] + features if c not in df.columns]
    if missing:
        raise KeyError(f"Missing column(s): {', '.join(missing)}")
    if not features:
        raise ValueError("At least one feature is required")
    data = df[[target] + features].dropna()
    if len(data) < len(features) + 2:
        raise ValueError(
            f"Need at least {len(features) + 2} complete rows for {len(features)} "
            f"feature(s), got {len(data)}"
        )
    return data[features], data[target].astype(float), features


def _split(X, y, test_size, seed):
    n_test = int(round(len(X) * test_size))
    if test_size <= 0 or n_test < 2 or len(X) - n_test < 3:
        return X, X.iloc[0:0], y, y.iloc[0:0]
    return train_test_split(X, y, test_size=test_size, random_state=seed)


def _fit(name, estimator, df, target, features, test_size, seed) -> RegressionResult:
    X, y, features = _prepare(df, target, features)
    X_train, X_test, y_train, y_test = _split(X, y, test_size, seed)

    pipe = Pipeline([("pre", _preprocessor(X, features)), ("model", estimator)])
    pipe.fit(X_train, y_train)

    model = pipe.named_steps["model"]
    names = pipe.named_steps["pre"].get_feature_names_out()
    coefs = pd.Series(np.ravel(model.coef_), index=names, name=name)

    r2_train = float(r2_score(y_train, pipe.predict(X_train)))
    if len(X_test):
        pred = pipe.predict(X_test)
        r2_test = float(r2_score(y_test, pred))
        rmse = float(np.sqrt(mean_squared_error(y_test, pred)))
        mae = float(mean_absolute_error(y_test, pred))
    else:
        r2_test = rmse = mae = float("nan")

    result = RegressionResult(
        name=name, pipeline=pipe, coefficients=coefs,
        intercept=float(model.intercept_),
        r2_train=r2_train, r2_test=r2_test,
        adj_r2_train=adjusted_r2(r2_train, len(X_train), len(names)),
        rmse_test=rmse, mae_test=mae,
        n_train=len(X_train), n_test=len(X_test),
        alpha=float(model.alpha_) if hasattr(model, "alpha_") else None,
        features=features,
    )
    logger.info("%s: R2 train=%.3f test=%.3f alpha=%s", name, r2_train, r2_test, result.alpha)
    return result


# ============================================================
# MODELS
# ============================================================
def fit_linear(df: pd.DataFrame, target: str, features: Sequence[str],
               test_size: float = 0.2, seed: int = 0) -> RegressionResult:
    """Ordinary least squares."""
    return _fit("ols", LinearRegression(), df, target, features, test_size, seed)


def fit_ridge(df: pd.DataFrame, target: str, features: Sequence[str],
              test_size: float = 0.2, seed: int = 0, alphas=ALPHAS) -> RegressionResult:
    """L2-penalized regression, alpha chosen by leave-one-out CV."""
    return _fit("ridge", RidgeCV(alphas=alphas), df, target, features, test_size, seed)


def fit_lasso(df: pd.DataFrame, target: str, features: Sequence[str],
              test_size: float = 0.2, seed: int = 0, alphas=ALPHAS) -> RegressionResult:
    """L1-penalized regression, alpha chosen by k-fold CV."""
    n_rows = len(df[[target] + list(features)].dropna()) if features else 0
    folds = max(2, min(5, int(n_rows * (1 - test_size)) // 2))
    est = LassoCV(alphas=alphas, cv=folds, max_iter=20000, random_state=seed)
    return _fit("lasso", est, df, target, features, test_size, seed)


def compare_models(df: pd.DataFrame, target: str, features: Sequence[str],
                   test_size: float = 0.2, seed: int = 0) -> pd.DataFrame:
    """Fit OLS, ridge and lasso on the same split; one row per model."""
    results = [
        fit_linear(df, target, features, test_size, seed),
        fit_ridge(df, target, features, test_size, seed),
        fit_lasso(df, target, features, test_size, seed),
    ]
    return pd.DataFrame([r.summary() for r in results]).set_index("model")


# ============================================================
# DIAGNOSTICS
# ============================================================
def residual_plots(result: RegressionResult, df: pd.DataFrame, target: str, path=None):
    """Residuals vs fitted and a normal Q-Q plot of the residuals."""
    data = df[[target] + result.features].dropna()
    fitted = result.predict(data)
    resid = data[target].to_numpy(dtype=float) - fitted

    fig, axes = plt.subplots(1, 2, figsize=(12, 5))
    axes[0].scatter(fitted, resid, alpha=0.5, s=14)
    axes[0].axhline(0, color="red", linestyle="--")
    axes[0].set_xlabel("Fitted")
    axes[0].set_ylabel("Residual")
    axes[0].set_title(f"{result.name}: residuals vs fitted")

    stats.probplot(resid, dist="norm", plot=axes[1])
    axes[1].set_title(f"{result.name}: normal Q-Q")
    fig.tight_layout()
    if path is not None:
        fig.savefig(path, dpi=120)
    return fig
