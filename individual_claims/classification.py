"""Stepwise logistic classifiers for claim closure and zero payments.

Two binary stages share one fitting recipe: predictors are preprocessed
with :class:`~individual_claims.preprocessing.PredictorTransformer`, then
a binomial GLM is fitted with stepwise term selection by AIC.

- :class:`ClosureModel` gives the probability a claim is open at the
  future age.
- :class:`ZeroPaymentModel` gives the probability the next incremental
  payment is nonzero, for claims that are not closed at both ages.

Both are validated with repeated stratified k-fold cross-validation, with
preprocessing and term selection refit inside every fold.
"""

from dataclasses import dataclass, field
import logging
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd
from sklearn.metrics import (
    accuracy_score,
    brier_score_loss,
    cohen_kappa_score,
    log_loss,
    roc_auc_score,
)
from sklearn.model_selection import RepeatedStratifiedKFold
import statsmodels.api as sm

from .claim_types import CLOSED, OPEN
from .config.modeling import ClassifierConfig
from .exceptions import ClaimsDataError, ModelNotFittedError
from .preprocessing import PredictorTransformer

logger = logging.getLogger(__name__)

CV_METRICS = ("accuracy", "kappa", "auc", "log_loss", "brier")


@dataclass(frozen=True)
class SelectionStep:
    """One accepted move of the stepwise search."""

    step: int
    action: str
    term: Optional[str]
    aic: float


class StepwiseLogisticRegression:
    """Binomial GLM with stepwise AIC term selection.

    ``both`` starts from the full model and at each step takes whichever
    single drop or re-add lowers AIC the most; ``backward`` only drops and
    ``forward`` starts from the intercept and only adds. The search stops
    when no move lowers AIC. The intercept is always kept.
    """

    def __init__(self, direction: str = "both", max_steps: int = 100):
        if direction not in ("both", "backward", "forward"):
            raise ValueError(f"Unknown stepwise direction: {direction}")
        self.direction = direction
        self.max_steps = max_steps
        self.selected_features_: List[str] = []
        self.history_: List[SelectionStep] = []
        self.result_ = None

    @staticmethod
    def _design(X: pd.DataFrame, terms: Sequence[str]) -> pd.DataFrame:
        design = X[list(terms)].astype(float)
        design.insert(0, "const", 1.0)
        return design

    def _fit_terms(self, X: pd.DataFrame, y: np.ndarray, terms: Sequence[str]):
        model = sm.GLM(y, self._design(X, terms), family=sm.families.Binomial())
        return model.fit()

    def fit(self, X: pd.DataFrame, y) -> "StepwiseLogisticRegression":
        """Select terms and fit the final model.

        Args:
            X: Preprocessed predictors, one column per candidate term.
            y: Binary target (0/1).

        Returns:
            self
        """
        y = np.asarray(y, dtype=float)
        candidates = list(X.columns)
        selected = [] if self.direction == "forward" else list(candidates)

        current = self._fit_terms(X, y, selected)
        history = [SelectionStep(0, "start", None, float(current.aic))]

        for step in range(1, self.max_steps + 1):
            moves = []
            if self.direction != "forward":
                moves.extend(("drop", term) for term in selected)
            if self.direction != "backward":
                moves.extend(("add", term) for term in candidates if term not in selected)

            best = None
            for action, term in moves:
                if action == "drop":
                    terms = [t for t in selected if t != term]
                else:
                    terms = [t for t in candidates if t in selected or t == term]
                result = self._fit_terms(X, y, terms)
                if best is None or result.aic < best[2].aic:
                    best = (action, term, result, terms)

            if best is None or best[2].aic >= current.aic:
                break

            action, term, current, selected = best
            history.append(SelectionStep(step, action, term, float(current.aic)))
            logger.debug("Step %d: %s %s (AIC %.2f)", step, action, term, current.aic)

        self.selected_features_ = selected
        self.history_ = history
        self.result_ = current
        return self

    def predict_proba(self, X: pd.DataFrame) -> np.ndarray:
        """Predicted probability of the positive class for each row."""
        if self.result_ is None:
            raise ModelNotFittedError(type(self).__name__)
        design = self._design(X, self.selected_features_)
        return np.asarray(self.result_.predict(design), dtype=float)

    def coefficients(self) -> pd.DataFrame:
        """Coefficient table of the selected model.

        Returns:
            DataFrame indexed by term with estimate, standard error, z value
            and p-value.
        """
        if self.result_ is None:
            raise ModelNotFittedError(type(self).__name__)
        r = self.result_
        return pd.DataFrame(
            {
                "estimate": r.params,
                "std_error": r.bse,
                "z_value": r.tvalues,
                "p_value": r.pvalues,
            }
        )


@dataclass
class CrossValidationResult:
    """Per-fold metrics from repeated stratified k-fold cross-validation."""

    folds: pd.DataFrame
    n_splits: int
    n_repeats: int
    metrics: Sequence[str] = field(default=CV_METRICS)

    def summary(self) -> pd.DataFrame:
        """Mean and standard deviation of every metric across folds."""
        stats = self.folds[list(self.metrics)].agg(["mean", "std"]).T
        stats.index.name = "metric"
        return stats

    def mean(self, metric: str) -> float:
        """Average of one metric across folds, ignoring undefined folds."""
        return float(self.folds[metric].mean())


def closed_closed_mask(claims: pd.DataFrame, future_column: str = "future_status") -> pd.Series:
    """Rows closed at the current age and at the future age."""
    return (claims["status"] == CLOSED) & (claims[future_column] == CLOSED)


class BinaryClaimModel:
    """Stepwise logistic model over claim predictors.

    Subclasses name their predictors and define the training filter and
    binary target.
    """

    name = "binary claim model"
    categorical: Sequence[str] = ()
    continuous: Sequence[str] = ("case_reserve", "paid_incre")

    def __init__(self, config: Optional[ClassifierConfig] = None):
        self.config = config or ClassifierConfig()
        self.transformer = PredictorTransformer(self.continuous, self.categorical)
        self.regression = StepwiseLogisticRegression(
            direction=self.config.stepwise_direction, max_steps=self.config.max_steps
        )
        self.n_train_ = 0
        self.cv_result_: Optional[CrossValidationResult] = None

    @property
    def predictors(self) -> List[str]:
        """Raw claim columns the model reads."""
        return list(self.categorical) + list(self.continuous)

    @property
    def is_fitted(self) -> bool:
        return self.regression.result_ is not None

    def training_frame(self, claims: pd.DataFrame) -> pd.DataFrame:
        """Rows eligible for training. All rows by default."""
        return claims

    def target(self, claims: pd.DataFrame) -> np.ndarray:
        """Binary training target for ``claims``."""
        raise NotImplementedError

    def fit(self, claims: pd.DataFrame) -> "BinaryClaimModel":
        """Fit preprocessing and stepwise regression on training claims.

        Args:
            claims: Historical claims with actual future outcomes.

        Returns:
            self

        Raises:
            ClaimsDataError: If no eligible rows remain or the target has
                a single class.
        """
        frame = self.training_frame(claims)
        if frame.empty:
            raise ClaimsDataError(f"No training rows for the {self.name}")
        y = self.target(frame)
        if len(np.unique(y)) < 2:
            raise ClaimsDataError(f"The {self.name} training target has a single class")

        X = self.transformer.fit_transform(frame)
        self.regression.fit(X, y)
        self.n_train_ = len(frame)
        logger.info(
            "Fitted %s on %d claims; selected terms %s (AIC %.1f)",
            self.name,
            self.n_train_,
            self.regression.selected_features_,
            self.regression.result_.aic,
        )
        return self

    def predict_probability(self, claims: pd.DataFrame) -> np.ndarray:
        """Modelled probability for each row of ``claims``.

        Raises:
            ModelNotFittedError: If called before :meth:`fit`.
        """
        if not self.is_fitted:
            raise ModelNotFittedError(self.name)
        return self.regression.predict_proba(self.transformer.transform(claims))

    def cross_validate(self, claims: pd.DataFrame) -> CrossValidationResult:
        """Repeated stratified k-fold cross-validation of the full recipe.

        Args:
            claims: Historical claims; the training filter is applied first.

        Returns:
            CrossValidationResult, also stored on ``cv_result_``.
        """
        frame = self.training_frame(claims).reset_index(drop=True)
        y = self.target(frame)
        splitter = RepeatedStratifiedKFold(
            n_splits=self.config.cv_folds,
            n_repeats=self.config.cv_repeats,
            random_state=self.config.cv_seed,
        )

        rows = []
        for i, (train_idx, test_idx) in enumerate(splitter.split(frame, y)):
            model = type(self)(self.config)
            model.fit(frame.iloc[train_idx])
            y_test = y[test_idx]
            p = model.predict_probability(frame.iloc[test_idx])
            predicted = (p >= 0.5).astype(int)
            rows.append(
                {
                    "repeat": i // self.config.cv_folds + 1,
                    "fold": i % self.config.cv_folds + 1,
                    "n_test": len(test_idx),
                    "accuracy": accuracy_score(y_test, predicted),
                    "kappa": cohen_kappa_score(y_test, predicted),
                    "auc": roc_auc_score(y_test, p) if len(np.unique(y_test)) == 2 else np.nan,
                    "log_loss": log_loss(y_test, p, labels=[0, 1]),
                    "brier": brier_score_loss(y_test, p, pos_label=1),
                }
            )

        self.cv_result_ = CrossValidationResult(
            folds=pd.DataFrame(rows),
            n_splits=self.config.cv_folds,
            n_repeats=self.config.cv_repeats,
        )
        logger.info(
            "Cross-validated %s: accuracy %.3f, AUC %.3f over %d folds",
            self.name,
            self.cv_result_.mean("accuracy"),
            self.cv_result_.mean("auc"),
            len(rows),
        )
        return self.cv_result_

    def coefficients(self) -> pd.DataFrame:
        """Coefficients of the selected model on the transformed scale."""
        return self.regression.coefficients()

    def fit_statistics(self) -> dict:
        """Summary statistics of the fitted model."""
        if not self.is_fitted:
            raise ModelNotFittedError(self.name)
        r = self.regression.result_
        return {
            "n_obs": int(r.nobs),
            "aic": float(r.aic),
            "deviance": float(r.deviance),
            "null_deviance": float(r.null_deviance),
            "df_resid": float(r.df_resid),
            "selected_terms": ", ".join(self.regression.selected_features_) or "(intercept only)",
        }

    @property
    def step_history(self) -> pd.DataFrame:
        """Accepted stepwise moves as a DataFrame."""
        return pd.DataFrame([vars(s) for s in self.regression.history_])


class ClosureModel(BinaryClaimModel):
    """Probability a claim is open at the future evaluation age."""

    name = "closure model"
    categorical = ("status",)

    def target(self, claims: pd.DataFrame) -> np.ndarray:
        return (claims["future_status"] == OPEN).to_numpy(dtype=int)


class ZeroPaymentModel(BinaryClaimModel):
    """Probability a claim's next incremental payment is nonzero.

    Negative incrementals such as recoveries count as nonzero. Closed-closed
    claims pay nothing by construction and are excluded from training. At
    prediction time ``future_status`` may be actual or
    simulated.
    """

    name = "zero-payment model"
    categorical = ("status", "future_status")

    def training_frame(self, claims: pd.DataFrame) -> pd.DataFrame:
        return claims.loc[~closed_closed_mask(claims)]

    def target(self, claims: pd.DataFrame) -> np.ndarray:
        return (claims["future_paid_incre"] != 0).to_numpy(dtype=int)


def cross_validate_classifier(model: BinaryClaimModel, claims: pd.DataFrame) -> CrossValidationResult:
    """Cross-validate the fitting recipe of ``model`` on ``claims``.

    Every fold fits a fresh copy; ``model`` itself is not refit.
    """
    return model.cross_validate(claims)
