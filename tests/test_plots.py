import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest
from dnam_age.core.metrics import compute_age_metrics
from dnam_age.visualization.plots import format_metrics, plot_age_scatter, plot_model_panels, save_figure


@pytest.fixture
def predictions():
    return pd.DataFrame({
        "sample_id": ["S1", "S2", "S3", "S4"],
        "age": [30.0, 40.0, 50.0, np.nan],
        "pred_age_A": [32.0, 38.0, 55.0, 45.0],
        "pred_age_B": [29.0, np.nan, 52.0, 40.0],
        "pred_age_C": [31.0, 41.0, 49.0, 40.0],
        "pred_age_D": [35.0, 45.0, 52.0, 40.0],
    })


def test_scatter_fixed_axes_and_annotation(predictions):
    """Axes use the fixed range and carry the statistics text."""
    fig, ax = plt.subplots()
    plot_age_scatter(ax, predictions["age"], predictions["pred_age_A"], title="A", axis_range=(0, 80))
    assert ax.get_xlim() == (0, 80)
    assert ax.get_ylim() == (0, 80)
    assert ax.get_title() == "A"
    texts = [t.get_text() for t in ax.texts]
    assert any("r = 0.96" in t for t in texts)
    # 1:1 reference line
    assert len(ax.lines) == 1
    # the pair with a missing age is not drawn
    assert len(ax.collections[0].get_offsets()) == 3
    plt.close(fig)

def test_panels_follow_model_order(predictions):
    """One visible panel per model, in order; spare cells hidden."""
    models = ["D", "A", "C", "B"]
    fig = plot_model_panels(predictions, models, ncols=3)
    visible = [ax for ax in fig.axes if ax.get_visible()]
    assert [ax.get_title() for ax in visible] == models
    assert len(fig.axes) == 6
    plt.close(fig)

def test_panels_reject_mismatched_metrics(predictions):
    """Metrics must line up with models."""
    metrics = [compute_age_metrics(predictions["age"], predictions["pred_age_A"], model="A")]
    with pytest.raises(ValueError):
        plot_model_panels(predictions, ["A", "B"], metrics)

def test_format_metrics_handles_nan():
    """Undefined statistics render as NA."""
    text = format_metrics(compute_age_metrics([np.nan], [1.0]))
    assert "r = NA" in text
    assert "n = 0" in text

def test_save_figure(tmp_path, predictions):
    """The composed figure is written to disk."""
    fig = plot_model_panels(predictions, ["A", "B"])
    path = save_figure(fig, tmp_path / "out" / "ages.png")
    assert path.exists()
    assert path.stat().st_size > 0
