"""
dnam_age.core

Core mathematical and statistical components of the clock.
"""

from .age_transform import AgeTransformer
from .metrics import AgeMetrics, compute_age_metrics, metrics_table, pearson_correlation
from .predictor import linear_predictor, predict_ages, predict_model, prediction_column, usable_probes

__all__ = [
    "AgeTransformer",
    "AgeMetrics",
    "compute_age_metrics",
    "metrics_table",
    "pearson_correlation",
    "linear_predictor",
    "predict_ages",
    "predict_model",
    "prediction_column",
    "usable_probes",
]
