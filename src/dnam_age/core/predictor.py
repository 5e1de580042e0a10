"""
dnam_age.core.predictor

Applies linear clock models to a filtered methylation matrix.

For each model: intercept + sum(coefficient * beta) over the probes the model
references and the matrix contains, then the inverse log-linear transform.
Missing beta values are not imputed; they make that sample's prediction NaN.
"""

from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

from dnam_age.config import DEFAULT_ADULT_AGE, INTERCEPT_LABEL
from dnam_age.core.age_transform import AgeTransformer
from dnam_age.data.coefficients import intercept, model_probes, select_models
from dnam_age.exceptions import MissingProbesError
from dnam_age.utils.contract import validate_sample_table
from dnam_age.utils.logging import log

PREDICTION_PREFIX = "pred_age_"


def prediction_column(model: str) -> str:
    return f"{PREDICTION_PREFIX}{model}"


def usable_probes(coefs: pd.Series, betas: pd.DataFrame) -> pd.Index:
    """Probes with a non-zero coefficient that are present in the matrix, in coefficient order."""
    referenced = coefs.index[coefs.to_numpy() != 0]
    return referenced[referenced.isin(betas.index)]


def linear_predictor(coefs: pd.Series, betas: pd.DataFrame, intercept_value: float = 0.0) -> pd.Series:
    """
    Raw model output per sample.

    Args:
        coefs: Coefficients indexed by probe (intercept excluded).
        betas: Matrix indexed by probe, one column per sample.
        intercept_value: Model intercept.

    Returns:
        pd.Series indexed by sample; NaN where any usable probe's beta is missing.
    """
    probes = usable_probes(coefs, betas)
    weights = coefs.loc[probes].to_numpy(dtype=float)
    values = betas.loc[probes].to_numpy(dtype=float)
    # NaN * w stays NaN, so a missing beta voids the whole sum
    linear = intercept_value + weights @ values if len(probes) else np.full(betas.shape[1], intercept_value)
    return pd.Series(np.asarray(linear, dtype=float), index=betas.columns, name="linear_predictor")


def predict_model(
    coef_table: pd.DataFrame,
    betas: pd.DataFrame,
    model: str,
    adult_age: float = DEFAULT_ADULT_AGE,
    intercept_label: str = INTERCEPT_LABEL,
    strict_probes: bool = False,
) -> pd.Series:
    """
    Predicted age in years per sample for one model.

    Raises:
        UnknownModelError: model is not a column of coef_table.
        MissingProbesError: strict_probes and some referenced probes are absent from betas.
    """
    coefs = model_probes(coef_table, model, intercept_label)
    missing = coefs.index[~coefs.index.isin(betas.index)]
    if len(missing):
        if strict_probes:
            raise MissingProbesError(model, missing)
        log(
            f"Model '{model}': {len(missing)} of {len(coefs)} probes absent from the matrix; "
            f"predicting from the remaining {len(coefs) - len(missing)}",
            level="WARNING",
        )

    linear = linear_predictor(coefs, betas, intercept(coef_table, model, intercept_label))
    ages = AgeTransformer(adult_age=adult_age).inverse_transform(linear.to_numpy())
    return pd.Series(ages, index=betas.columns, name=prediction_column(model))


def predict_ages(
    coef_table: pd.DataFrame,
    betas: pd.DataFrame,
    metadata: pd.DataFrame,
    models: Optional[Iterable[str]] = None,
    adult_age: float = DEFAULT_ADULT_AGE,
    intercept_label: str = INTERCEPT_LABEL,
    strict_probes: bool = False,
) -> pd.DataFrame:
    """
    Append one pred_age_<model> column per model to the sample metadata.

    Predictions are joined on sample_id; samples without a matrix column get NaN.
    Columns follow the model order returned by select_models.
    """
    validate_sample_table(metadata, source="sample metadata")

    result = metadata.copy()
    model_list: List[str] = select_models(coef_table, models)
    for model in model_list:
        preds = predict_model(
            coef_table, betas, model,
            adult_age=adult_age,
            intercept_label=intercept_label,
            strict_probes=strict_probes,
        )
        result[preds.name] = result["sample_id"].map(preds).astype(float)
        n_pred = int(result[preds.name].notna().sum())
        log(f"Model '{model}': predicted ages for {n_pred} of {len(result)} samples")
    return result
