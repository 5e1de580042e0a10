"""
dnam_age.core.age_transform

Log-linear age scale used by Horvath-type clocks.
- Logarithmic below the adult age (development).
- Linear above it (aging).

Clocks are fitted on the transformed scale, so a raw linear predictor must be
passed through inverse_transform to read as years. Prediction only uses
inverse_transform; the forward transform maps chronological ages onto the
clock scale for round-trip checks against published ages.
"""

import numpy as np
from sklearn.base import BaseEstimator, TransformerMixin


class AgeTransformer(BaseEstimator, TransformerMixin):
    def __init__(self, adult_age: float = 20.0):
        """
        Args:
            adult_age (float): Age at which development ends and linear aging begins.
                               Standard value is 20.
        """
        self.adult_age = adult_age

    def fit(self, X, y=None):
        return self

    def transform(self, age: np.ndarray) -> np.ndarray:
        """
        Chronological age (years) to the clock scale. Not used during
        prediction; inverse_transform(transform(age)) == age.

        Formula:
        - If age <= adult_age: log(age + 1) - log(adult_age + 1)
        - If age > adult_age:  (age - adult_age) / (adult_age + 1)

        NaN ages stay NaN.
        """
        age = np.asarray(age, dtype=float)
        transformed = np.full_like(age, np.nan)

        mask_young = age <= self.adult_age
        mask_old = age > self.adult_age

        if np.any(mask_young):
            transformed[mask_young] = np.log(age[mask_young] + 1) - np.log(self.adult_age + 1)

        if np.any(mask_old):
            transformed[mask_old] = (age[mask_old] - self.adult_age) / (self.adult_age + 1)

        return transformed

    def inverse_transform(self, transformed_age: np.ndarray) -> np.ndarray:
        """
        Clock scale back to years.

        Inverse Formula:
        - If y < 0:  (adult_age + 1) * exp(y) - 1
        - If y >= 0: (adult_age + 1) * y + adult_age

        y == 0 takes the linear branch and maps to adult_age exactly. NaN stays NaN.
        """
        transformed_age = np.asarray(transformed_age, dtype=float)
        original_age = np.full_like(transformed_age, np.nan)

        mask_young = transformed_age < 0
        mask_old = transformed_age >= 0

        if np.any(mask_young):
            original_age[mask_young] = (self.adult_age + 1) * np.exp(transformed_age[mask_young]) - 1

        if np.any(mask_old):
            original_age[mask_old] = (self.adult_age + 1) * transformed_age[mask_old] + self.adult_age

        return original_age
