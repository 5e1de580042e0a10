import numpy as np
import pandas as pd
import pytest
from dnam_age.core.predictor import linear_predictor, predict_ages, predict_model, usable_probes
from dnam_age.exceptions import MissingProbesError, UnknownModelError


@pytest.fixture
def coef_table():
    table = pd.DataFrame(
        {"M": [0.5, 2.0, -1.0]},
        index=pd.Index(["(Intercept)", "P1", "P2"], name="probe_id"),
    )
    return table


@pytest.fixture
def betas():
    return pd.DataFrame(
        {"S1": [0.3, 0.1], "S2": [np.nan, 0.2]},
        index=pd.Index(["P1", "P2"], name="probe_id"),
    )


def test_concrete_scenario(coef_table, betas):
    """0.5 + 2.0*0.3 - 1.0*0.1 = 1.0 maps to 41 years."""
    preds = predict_model(coef_table, betas, "M")
    assert preds["S1"] == pytest.approx(41.0)

def test_missing_beta_propagates(coef_table, betas):
    """A missing beta for a usable probe gives a missing prediction, not zero."""
    preds = predict_model(coef_table, betas, "M")
    assert np.isnan(preds["S2"])

def test_zero_coefficient_is_inert(betas):
    """Including a zero-coefficient probe does not change predictions."""
    coefs = pd.Series([2.0, -1.0], index=["P1", "P2"])
    with_zero = pd.Series([2.0, -1.0, 0.0], index=["P1", "P2", "P3"])
    extended = pd.concat([betas, pd.DataFrame({"S1": [np.nan], "S2": [0.9]}, index=["P3"])])
    base = linear_predictor(coefs, betas, 0.5)
    other = linear_predictor(with_zero, extended, 0.5)
    pd.testing.assert_series_equal(base, other)
    assert "P3" not in usable_probes(with_zero, extended)

def test_absent_probe_is_excluded(coef_table, betas):
    """Model probes missing from the matrix drop out of the dot product."""
    table = pd.concat([coef_table, pd.DataFrame({"M": [5.0]}, index=["P9"])])
    preds = predict_model(table, betas, "M")
    assert preds["S1"] == pytest.approx(41.0)

def test_strict_probes(coef_table, betas):
    """Strict mode refuses to degrade silently."""
    table = pd.concat([coef_table, pd.DataFrame({"M": [5.0]}, index=["P9"])])
    with pytest.raises(MissingProbesError, match="P9"):
        predict_model(table, betas, "M", strict_probes=True)

def test_negative_predictor_uses_exponential_branch(betas):
    """A negative linear predictor is mapped through the exponential branch."""
    table = pd.DataFrame({"M": [-1.0, 0.0, 0.0]}, index=["(Intercept)", "P1", "P2"])
    preds = predict_model(table, betas, "M")
    assert preds["S1"] == pytest.approx(21 * np.exp(-1.0) - 1)

def test_predict_ages_joins_on_sample_id(coef_table, betas):
    """Predictions are appended per model; samples without data are NaN."""
    metadata = pd.DataFrame({"sample_id": ["S3", "S1", "S2"], "age": [10.0, 40.0, 50.0]})
    result = predict_ages(coef_table, betas, metadata)
    assert result.columns.tolist() == ["sample_id", "age", "pred_age_M"]
    assert np.isnan(result["pred_age_M"].iloc[0])
    assert result["pred_age_M"].iloc[1] == pytest.approx(41.0)
    assert np.isnan(result["pred_age_M"].iloc[2])
    # input metadata is left untouched
    assert "pred_age_M" not in metadata.columns

def test_predict_ages_unknown_model(coef_table, betas):
    """Unknown model names abort before predicting."""
    metadata = pd.DataFrame({"sample_id": ["S1"], "age": [40.0]})
    with pytest.raises(UnknownModelError):
        predict_ages(coef_table, betas, metadata, models=["Other"])

def test_models_are_independent(coef_table, betas):
    """Model order changes column order only, never values."""
    table = coef_table.assign(N=[0.0, 1.0, 1.0])
    metadata = pd.DataFrame({"sample_id": ["S1", "S2"], "age": [40.0, 50.0]})
    a = predict_ages(table, betas, metadata, models=["M", "N"])
    b = predict_ages(table, betas, metadata, models=["N", "M"])
    assert a.columns.tolist()[-2:] == ["pred_age_M", "pred_age_N"]
    assert b.columns.tolist()[-2:] == ["pred_age_N", "pred_age_M"]
    pd.testing.assert_frame_equal(a, b[a.columns])
