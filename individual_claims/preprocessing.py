"""Predictor preprocessing for the claim classifiers.

Continuous predictors are Yeo-Johnson power transformed, then centred and
scaled; status predictors become 0/1 "is open" indicators. The transform
is learned on training rows only and reapplied unchanged to new rows.
"""

from typing import List, Optional, Sequence

import pandas as pd
from sklearn.preprocessing import PowerTransformer

from .claim_types import OPEN
from .exceptions import ModelNotFittedError


class PredictorTransformer:
    """Fit-once transform from claim columns to a numeric design frame.

    Attributes:
        continuous: Names of continuous predictors.
        categorical: Names of status predictors.
        lambdas_: Fitted Yeo-Johnson exponents by continuous predictor.
    """

    def __init__(self, continuous: Sequence[str], categorical: Sequence[str] = ()):
        self.continuous = list(continuous)
        self.categorical = list(categorical)
        self._power: Optional[PowerTransformer] = None

    @property
    def feature_names(self) -> List[str]:
        """Column names of the transformed design frame."""
        return [f"{c}_open" for c in self.categorical] + list(self.continuous)

    @property
    def is_fitted(self) -> bool:
        """Whether :meth:`fit` has been called."""
        return self._power is not None or not self.continuous

    def fit(self, claims: pd.DataFrame) -> "PredictorTransformer":
        """Learn the power transform and scaling from training rows.

        Args:
            claims: Training rows containing every predictor column.

        Returns:
            self
        """
        if self.continuous:
            self._power = PowerTransformer(method="yeo-johnson", standardize=True)
            self._power.fit(claims[self.continuous].to_numpy(dtype=float))
        return self

    @property
    def lambdas_(self) -> dict:
        if self._power is None:
            return {}
        return dict(zip(self.continuous, self._power.lambdas_))

    def transform(self, claims: pd.DataFrame) -> pd.DataFrame:
        """Build the design frame for ``claims``.

        Args:
            claims: Rows containing every predictor column.

        Returns:
            DataFrame with :attr:`feature_names` columns and the input index.

        Raises:
            ModelNotFittedError: If called before :meth:`fit`.
        """
        if not self.is_fitted:
            raise ModelNotFittedError(type(self).__name__)

        design = pd.DataFrame(index=claims.index)
        for column in self.categorical:
            design[f"{column}_open"] = (claims[column] == OPEN).astype(float)
        if self.continuous:
            values = self._power.transform(claims[self.continuous].to_numpy(dtype=float))
            for j, column in enumerate(self.continuous):
                design[column] = values[:, j]
        return design

    def fit_transform(self, claims: pd.DataFrame) -> pd.DataFrame:
        """Fit on ``claims`` and return their design frame."""
        return self.fit(claims).transform(claims)
