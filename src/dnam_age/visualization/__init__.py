"""
dnam_age.visualization

Annotated chronological-versus-predicted age scatterplots.
"""

from .plots import format_metrics, plot_age_scatter, plot_model_panels, save_figure

__all__ = [
    "format_metrics",
    "plot_age_scatter",
    "plot_model_panels",
    "save_figure",
]
