"""
dnam_age.core.metrics

Agreement statistics between chronological and predicted age.

Design goals:
- Deterministic, well-defined behavior on missing values (NaNs): only pairs where
  both ages are finite contribute.
- One container per model so reports and figure annotations read the same numbers.
"""

from __future__ import annotations

import warnings
from dataclasses import asdict, dataclass
from typing import Dict, List, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from scipy import stats
from sklearn.metrics import mean_absolute_error, median_absolute_error


ArrayLike = Union[np.ndarray, Sequence[float], pd.Series]


@dataclass(frozen=True)
class AgeMetrics:
    """Agreement between chronological and predicted age for one model."""
    n_total: int
    n_valid: int
    pearson_r: float
    median_ae: float
    mean_ae: float
    model: str = ""

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def _to_1d_float_array(x: ArrayLike, name: str) -> np.ndarray:
    """Convert input into a 1D float numpy array."""
    arr = np.asarray(x, dtype=float)
    if arr.ndim != 1:
        raise ValueError(f"{name} must be 1D; got shape {arr.shape}")
    return arr


def complete_pairs(y_true: ArrayLike, y_pred: ArrayLike) -> Tuple[np.ndarray, np.ndarray]:
    """Return the (true, pred) values of the pairs where both are finite."""
    yt = _to_1d_float_array(y_true, "y_true")
    yp = _to_1d_float_array(y_pred, "y_pred")
    if yt.shape[0] != yp.shape[0]:
        raise ValueError(f"Length mismatch: y_true={yt.shape[0]}, y_pred={yp.shape[0]}")
    mask = np.isfinite(yt) & np.isfinite(yp)
    return yt[mask], yp[mask]


def pearson_correlation(y_true: ArrayLike, y_pred: ArrayLike) -> float:
    """
    Pairwise-complete Pearson correlation.

    NaN when fewer than two complete pairs exist or either side is constant.
    """
    yt, yp = complete_pairs(y_true, y_pred)
    if yt.shape[0] < 2 or np.ptp(yt) == 0 or np.ptp(yp) == 0:
        return float("nan")
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        r, _ = stats.pearsonr(yt, yp)
    return float(r)


def compute_age_metrics(y_true: ArrayLike, y_pred: ArrayLike, model: str = "") -> AgeMetrics:
    """
    Compute correlation and absolute-error statistics over complete pairs.

    Args:
        y_true: Chronological ages (NaN = unknown).
        y_pred: Predicted ages (NaN = no prediction).
        model: Model name carried into the result.

    Returns:
        AgeMetrics with NaN statistics when no complete pair exists.
    """
    n_total = len(_to_1d_float_array(y_true, "y_true"))
    yt, yp = complete_pairs(y_true, y_pred)
    n_valid = int(yt.shape[0])

    if n_valid == 0:
        return AgeMetrics(n_total, 0, float("nan"), float("nan"), float("nan"), model)

    return AgeMetrics(
        n_total=n_total,
        n_valid=n_valid,
        pearson_r=pearson_correlation(yt, yp),
        median_ae=float(median_absolute_error(yt, yp)),
        mean_ae=float(mean_absolute_error(yt, yp)),
        model=model,
    )


def metrics_table(metrics: List[AgeMetrics]) -> pd.DataFrame:
    """One row per model, in the order given."""
    columns = ["model", "n_total", "n_valid", "pearson_r", "median_ae", "mean_ae"]
    return pd.DataFrame([m.to_dict() for m in metrics], columns=columns)
