"""
Comparison plots of chronological versus predicted age.
"""

import math
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from dnam_age.core.metrics import AgeMetrics, compute_age_metrics
from dnam_age.core.predictor import prediction_column


def format_metrics(metrics: AgeMetrics) -> str:
    """Annotation text shown in the corner of each panel."""
    r = "NA" if np.isnan(metrics.pearson_r) else f"{metrics.pearson_r:.2f}"
    err = "NA" if np.isnan(metrics.median_ae) else f"{metrics.median_ae:.1f}"
    return f"r = {r}\nmedian abs. error = {err} y\nn = {metrics.n_valid}"


def plot_age_scatter(
    ax: plt.Axes,
    age: Sequence[float],
    predicted: Sequence[float],
    metrics: Optional[AgeMetrics] = None,
    title: str = "",
    axis_range: Tuple[float, float] = (0.0, 100.0),
) -> plt.Axes:
    """
    Scatter of chronological (x) against predicted (y) age on fixed axes.

    Parameters:
    -----------
    ax : plt.Axes
        Axes to draw on
    age, predicted : array-like
        Paired ages; pairs with a missing value are not drawn
    metrics : AgeMetrics, optional
        Statistics for the annotation; computed from the pairs when omitted
    title : str
        Panel title
    axis_range : Tuple[float, float]
        Shared limits of both axes

    Returns:
    --------
    plt.Axes
    """
    age = np.asarray(age, dtype=float)
    predicted = np.asarray(predicted, dtype=float)
    if metrics is None:
        metrics = compute_age_metrics(age, predicted)

    mask = np.isfinite(age) & np.isfinite(predicted)
    ax.scatter(age[mask], predicted[mask], alpha=0.6, edgecolor='none')

    # 1:1 line
    low, high = axis_range
    ax.plot([low, high], [low, high], 'r--', lw=1.5)
    ax.set_xlim(low, high)
    ax.set_ylim(low, high)
    ax.set_aspect('equal')

    ax.set_xlabel('Chronological age (years)')
    ax.set_ylabel('Predicted age (years)')
    if title:
        ax.set_title(title)

    ax.text(0.05, 0.95, format_metrics(metrics), transform=ax.transAxes,
            verticalalignment='top',
            bbox=dict(boxstyle="round,pad=0.3", facecolor="white", alpha=0.7))
    return ax


def plot_model_panels(
    predictions: pd.DataFrame,
    models: List[str],
    metrics: Optional[List[AgeMetrics]] = None,
    age_column: str = 'age',
    axis_range: Tuple[float, float] = (0.0, 100.0),
    ncols: int = 3,
    panel_size: float = 4.0,
) -> plt.Figure:
    """
    One scatter panel per model, in the given order, composed into a single figure.

    Unused grid cells are hidden.
    """
    if not models:
        raise ValueError("At least one model is required to build the figure")
    if metrics is not None and len(metrics) != len(models):
        raise ValueError(f"Got {len(metrics)} metrics for {len(models)} models")

    ncols = min(ncols, len(models))
    nrows = math.ceil(len(models) / ncols)
    fig, axes = plt.subplots(nrows, ncols, figsize=(panel_size * ncols, panel_size * nrows), squeeze=False)

    flat_axes = axes.ravel()
    for i, model in enumerate(models):
        model_metrics = metrics[i] if metrics is not None else None
        plot_age_scatter(
            flat_axes[i],
            predictions[age_column],
            predictions[prediction_column(model)],
            metrics=model_metrics,
            title=model,
            axis_range=axis_range,
        )
    for ax in flat_axes[len(models):]:
        ax.set_visible(False)

    fig.suptitle('Epigenetic vs. chronological age', fontsize=14)
    fig.tight_layout()
    return fig


def save_figure(fig: plt.Figure, path, dpi: int = 150) -> Path:
    """Write the figure (format from the suffix), close it and return the path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=dpi, bbox_inches='tight')
    plt.close(fig)
    return path
