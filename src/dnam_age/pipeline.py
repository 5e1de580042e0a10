"""
dnam_age.pipeline

High-level orchestration: coefficients -> sample metadata -> filtered matrix ->
predicted ages, statistics and the comparison figure.
"""

import os
from dataclasses import dataclass
from typing import Iterable, List, Optional

import pandas as pd

from dnam_age.config import AnalysisConfig
from dnam_age.core.metrics import AgeMetrics, compute_age_metrics, metrics_table
from dnam_age.core.predictor import predict_ages, prediction_column
from dnam_age.data.coefficients import all_model_probes, load_coefficients, select_models
from dnam_age.data.metadata import read_sample_descriptors
from dnam_age.data.methylation import load_methylation_subset
from dnam_age.utils.logging import log
from dnam_age.visualization.plots import plot_model_panels, save_figure


@dataclass
class AnalysisResult:
    """Everything a run produces; only figure_path is written by default."""
    models: List[str]
    predictions: pd.DataFrame
    metrics: List[AgeMetrics]
    figure_path: Optional[str] = None

    def metrics_frame(self) -> pd.DataFrame:
        return metrics_table(self.metrics)


def filter_methylation(
    coefficients_path,
    descriptors_path,
    methylation_path,
    models: Optional[Iterable[str]] = None,
    config: AnalysisConfig = AnalysisConfig(),
):
    """
    Stages 1-3: load coefficients and metadata, then stream the matrix down to
    the model probes and retained samples.

    Returns:
        (coef_table, model_list, metadata, betas)
    """
    log("=== Pipeline: Loading coefficients ===")
    coef_table = load_coefficients(coefficients_path, sep=config.coefficient_sep, intercept_label=config.intercept_label)
    model_list = select_models(coef_table, models)

    log("=== Pipeline: Extracting sample metadata ===")
    metadata = read_sample_descriptors(descriptors_path, config=config)

    log("=== Pipeline: Filtering methylation matrix ===")
    probes = all_model_probes(coef_table, model_list, intercept_label=config.intercept_label)
    betas = load_methylation_subset(
        methylation_path,
        probes=probes,
        samples=metadata["sample_id"].tolist(),
        chunk_size=config.chunk_size,
    )
    return coef_table, model_list, metadata, betas


def score_models(
    coef_table: pd.DataFrame,
    betas: pd.DataFrame,
    metadata: pd.DataFrame,
    models: List[str],
    config: AnalysisConfig = AnalysisConfig(),
):
    """Stage 4 without plotting: predictions joined to metadata plus per-model statistics."""
    predictions = predict_ages(
        coef_table, betas, metadata, models,
        adult_age=config.adult_age,
        intercept_label=config.intercept_label,
        strict_probes=config.strict_probes,
    )
    metrics = []
    for model in models:
        m = compute_age_metrics(predictions["age"], predictions[prediction_column(model)], model=model)
        log(f"Model '{model}': r = {m.pearson_r:.3f}, median absolute error = {m.median_ae:.2f} (n = {m.n_valid})")
        metrics.append(m)
    return predictions, metrics


def run_analysis(
    coefficients_path,
    descriptors_path,
    methylation_path,
    figure_path,
    models: Optional[Iterable[str]] = None,
    config: AnalysisConfig = AnalysisConfig(),
    predictions_path=None,
    metrics_path=None,
) -> AnalysisResult:
    """
    Run the full clock analysis and write the comparison figure.

    Args:
        coefficients_path: Semicolon-separated coefficient table.
        descriptors_path: Sample descriptor table (GEO phenotype columns).
        methylation_path: Probe x sample matrix (.csv or .csv.gz).
        figure_path: Output image; format from the suffix.
        models: Model columns to apply; all, in table order, when None.
        config: Run settings.
        predictions_path: Optional CSV of the metadata with predicted ages.
        metrics_path: Optional CSV of the per-model statistics.
    """
    coef_table, model_list, metadata, betas = filter_methylation(
        coefficients_path, descriptors_path, methylation_path, models=models, config=config
    )

    log("=== Pipeline: Predicting ages ===")
    predictions, metrics = score_models(coef_table, betas, metadata, model_list, config=config)

    log("=== Pipeline: Rendering figure ===")
    fig = plot_model_panels(
        predictions, model_list, metrics,
        axis_range=config.axis_range,
        ncols=config.panel_columns,
    )
    figure_path = str(save_figure(fig, figure_path))
    log(f"Figure saved to {figure_path}")

    result = AnalysisResult(models=model_list, predictions=predictions, metrics=metrics, figure_path=figure_path)

    if predictions_path:
        _write_csv(predictions, predictions_path)
        log(f"Predictions saved to {predictions_path}")
    if metrics_path:
        _write_csv(result.metrics_frame(), metrics_path)
        log(f"Metrics saved to {metrics_path}")

    log("=== Pipeline: Analysis completed ===")
    return result


def _write_csv(df: pd.DataFrame, path) -> None:
    out_dir = os.path.dirname(str(path))
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    df.to_csv(path, index=False)
