"""Incremental payment amount model.

A generalized additive model with a log link and quasi-Poisson variance:
the mean is Poisson-like, the dispersion is estimated from Pearson
residuals. Case reserve and prior incremental payment enter as penalized
cubic B-spline smooths on a signed log scale with equally spaced knots,
future status as a linear term. The model is
trained only on claims whose next incremental payment was positive.
"""

import logging
from typing import List, Optional

import numpy as np
import pandas as pd
import statsmodels.api as sm
from statsmodels.gam.api import BSplines, GLMGam

from .claim_types import OPEN
from .config.modeling import PaymentModelConfig
from .exceptions import ClaimsDataError, ModelNotFittedError

logger = logging.getLogger(__name__)


def signed_log(values: np.ndarray) -> np.ndarray:
    """Symmetric log1p, defined for negative amounts such as recoveries."""
    return np.sign(values) * np.log1p(np.abs(values))


class PaymentAmountModel:
    """Expected incremental payment for claims known to pay.

    Smooth inputs outside the training range are clamped to it, so the
    fitted curve is held flat beyond the observed data.

    Attributes:
        config: Spline and penalty settings.
        linear_terms_: Linear design columns used by the fit.
        lower_: Training minimum of each smooth input.
        upper_: Training maximum of each smooth input.
    """

    name = "payment model"
    smooth_terms = ("case_reserve", "paid_incre")

    def __init__(self, config: Optional[PaymentModelConfig] = None):
        self.config = config or PaymentModelConfig()
        self.linear_terms_: List[str] = []
        self.lower_: Optional[np.ndarray] = None
        self.upper_: Optional[np.ndarray] = None
        self.smoother_ = None
        self.result_ = None
        self.n_train_ = 0
        self._null_deviance = np.nan

    @property
    def is_fitted(self) -> bool:
        return self.result_ is not None

    def training_frame(self, claims: pd.DataFrame) -> pd.DataFrame:
        """Claims with a strictly positive future incremental payment."""
        return claims.loc[claims["future_paid_incre"] > 0]

    def _linear_design(self, claims: pd.DataFrame) -> pd.DataFrame:
        design = pd.DataFrame({"const": 1.0}, index=claims.index)
        if "future_status_open" in self.linear_terms_:
            design["future_status_open"] = (claims["future_status"] == OPEN).astype(float)
        return design

    def _smooth_values(self, claims: pd.DataFrame) -> np.ndarray:
        values = claims[list(self.smooth_terms)].to_numpy(dtype=float)
        return signed_log(np.clip(values, self.lower_, self.upper_))

    def fit(self, claims: pd.DataFrame) -> "PaymentAmountModel":
        """Fit the additive model on claims with positive payments.

        Args:
            claims: Historical claims with actual future outcomes.

        Returns:
            self

        Raises:
            ClaimsDataError: If too few positive payments remain or a
                smooth input is constant.
        """
        frame = self.training_frame(claims)
        min_rows = 2 * self.config.spline_df * len(self.smooth_terms)
        if len(frame) < min_rows:
            raise ClaimsDataError(
                f"The {self.name} needs at least {min_rows} positive payments, got {len(frame)}"
            )

        x = frame[list(self.smooth_terms)].to_numpy(dtype=float)
        self.lower_, self.upper_ = x.min(axis=0), x.max(axis=0)
        constant = [t for t, lo, hi in zip(self.smooth_terms, self.lower_, self.upper_) if hi <= lo]
        if constant:
            raise ClaimsDataError(f"Smooth inputs are constant in training data: {constant}")

        self.linear_terms_ = ["const"]
        if frame["future_status"].nunique() > 1:
            self.linear_terms_.append("future_status_open")

        n_smooth = len(self.smooth_terms)
        self.smoother_ = BSplines(
            signed_log(x),
            df=[self.config.spline_df] * n_smooth,
            degree=[self.config.spline_degree] * n_smooth,
            constraints="center",
            variable_names=list(self.smooth_terms),
            knot_kwds=[{"spacing": "equal"}] * n_smooth,
        )
        y = frame["future_paid_incre"].to_numpy(dtype=float)
        family = sm.families.Poisson()
        model = GLMGam(
            y,
            exog=self._linear_design(frame),
            smoother=self.smoother_,
            alpha=[self.config.penalty] * n_smooth,
            family=family,
        )
        # Pearson chi-square dispersion makes this quasi-Poisson
        self.result_ = model.fit(scale="X2", maxiter=self.config.max_iterations)
        self._null_deviance = float(family.deviance(y, np.full_like(y, y.mean())))
        self.n_train_ = len(frame)

        logger.info(
            "Fitted %s on %d positive payments (dispersion %.1f)",
            self.name,
            self.n_train_,
            self.result_.scale,
        )
        return self

    def predict_expectation(self, claims: pd.DataFrame) -> np.ndarray:
        """Expected incremental payment for each row of ``claims``.

        Raises:
            ModelNotFittedError: If called before :meth:`fit`.
        """
        if not self.is_fitted:
            raise ModelNotFittedError(self.name)
        prediction = self.result_.predict(
            exog=self._linear_design(claims).to_numpy(),
            exog_smooth=self._smooth_values(claims),
        )
        return np.asarray(prediction, dtype=float)

    def partial_curve(
        self, term: str, grid: np.ndarray, reference: pd.DataFrame, future_status: str = OPEN
    ) -> np.ndarray:
        """Expected payment along ``grid`` for one smooth input.

        The other smooth input is held at its median in ``reference``.

        Args:
            term: Smooth input to vary.
            grid: Values of ``term``.
            reference: Claims supplying the median of the other input.
            future_status: Future status used for the linear term.

        Returns:
            Expected payments, one per grid value.
        """
        if term not in self.smooth_terms:
            raise ValueError(f"Unknown smooth term '{term}'; expected one of {self.smooth_terms}")
        frame = pd.DataFrame({"future_status": future_status}, index=range(len(grid)))
        for other in self.smooth_terms:
            frame[other] = grid if other == term else float(reference[other].median())
        return self.predict_expectation(frame)

    def coefficients(self) -> pd.DataFrame:
        """Parameter table: linear terms and spline basis coefficients."""
        if not self.is_fitted:
            raise ModelNotFittedError(self.name)
        r = self.result_
        return pd.DataFrame(
            {
                "estimate": np.asarray(r.params),
                "std_error": np.asarray(r.bse),
                "z_value": np.asarray(r.tvalues),
                "p_value": np.asarray(r.pvalues),
            },
            index=r.model.exog_names,
        )

    def fit_statistics(self) -> dict:
        """Summary statistics of the fitted model."""
        if not self.is_fitted:
            raise ModelNotFittedError(self.name)
        r = self.result_
        deviance = float(r.deviance)
        return {
            "n_obs": self.n_train_,
            "deviance": deviance,
            "null_deviance": self._null_deviance,
            "deviance_explained": 1.0 - deviance / self._null_deviance,
            "dispersion": float(r.scale),
            "penalty": self.config.penalty,
            "spline_df": self.config.spline_df,
        }
