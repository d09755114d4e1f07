"""Tests for the stepwise closure and zero-payment classifiers."""

import numpy as np
import pandas as pd
import pytest

from individual_claims.claim_types import CLOSED, OPEN
from individual_claims.classification import (
    ClosureModel,
    CrossValidationResult,
    StepwiseLogisticRegression,
    ZeroPaymentModel,
    closed_closed_mask,
    cross_validate_classifier,
)
from individual_claims.config import ClassifierConfig
from individual_claims.exceptions import ClaimsDataError, ModelNotFittedError


@pytest.fixture
def signal_and_noise():
    """One informative predictor and one pure-noise predictor."""
    rng = np.random.default_rng(11)
    n = 600
    X = pd.DataFrame({"signal": rng.normal(size=n), "noise": rng.normal(size=n)})
    p = 1 / (1 + np.exp(-(0.3 + 2.0 * X["signal"])))
    y = (rng.random(n) < p).astype(int)
    return X, y


class TestStepwiseLogisticRegression:
    """AIC-driven term selection."""

    def test_backward_keeps_signal(self, signal_and_noise):
        X, y = signal_and_noise
        model = StepwiseLogisticRegression(direction="backward").fit(X, y)
        assert "signal" in model.selected_features_
        assert model.history_[0].action == "start"

    def test_forward_adds_signal_first(self, signal_and_noise):
        X, y = signal_and_noise
        model = StepwiseLogisticRegression(direction="forward").fit(X, y)
        assert model.history_[1].action == "add"
        assert model.history_[1].term == "signal"

    def test_aic_never_increases(self, signal_and_noise):
        X, y = signal_and_noise
        model = StepwiseLogisticRegression().fit(X, y)
        aics = [step.aic for step in model.history_]
        assert all(b < a for a, b in zip(aics, aics[1:]))

    def test_coefficients_table(self, signal_and_noise):
        X, y = signal_and_noise
        table = StepwiseLogisticRegression().fit(X, y).coefficients()
        assert list(table.columns) == ["estimate", "std_error", "z_value", "p_value"]
        assert "const" in table.index
        assert table.loc["signal", "estimate"] == pytest.approx(2.0, abs=0.5)

    def test_probabilities_in_unit_interval(self, signal_and_noise):
        X, y = signal_and_noise
        p = StepwiseLogisticRegression().fit(X, y).predict_proba(X)
        assert p.shape == (len(X),)
        assert ((p > 0) & (p < 1)).all()

    def test_unknown_direction(self):
        with pytest.raises(ValueError, match="direction"):
            StepwiseLogisticRegression(direction="sideways")

    def test_predict_before_fit(self, signal_and_noise):
        with pytest.raises(ModelNotFittedError):
            StepwiseLogisticRegression().predict_proba(signal_and_noise[0])


class TestClosureModel:
    """Probability of being open at the future age."""

    def test_fitted_statistics(self, fitted_models, model_data):
        stats = fitted_models["closure"].fit_statistics()
        assert stats["n_obs"] == len(model_data.training)
        assert stats["deviance"] < stats["null_deviance"]

    def test_open_claims_more_likely_open(self, fitted_models, model_data):
        model = fitted_models["closure"]
        p = model.predict_probability(model_data.prediction)
        is_open = (model_data.prediction["status"] == OPEN).to_numpy()
        assert p[is_open].mean() > p[~is_open].mean()

    def test_predict_before_fit(self, model_data):
        with pytest.raises(ModelNotFittedError, match="closure model"):
            ClosureModel().predict_probability(model_data.prediction)

    def test_single_class_target_raises(self, model_data):
        training = model_data.training.assign(future_status=CLOSED)
        with pytest.raises(ClaimsDataError, match="single class"):
            ClosureModel().fit(training)

    def test_step_history(self, fitted_models):
        history = fitted_models["closure"].step_history
        assert list(history.columns) == ["step", "action", "term", "aic"]


class TestZeroPaymentModel:
    """Probability of a nonzero next payment."""

    def test_training_excludes_closed_closed(self, model_data):
        model = ZeroPaymentModel()
        frame = model.training_frame(model_data.training)
        assert not closed_closed_mask(frame).any()
        assert len(frame) < len(model_data.training)

    def test_prediction_uses_supplied_future_status(self, fitted_models, model_data):
        model = fitted_models["zero_payment"]
        as_open = model.predict_probability(model_data.prediction.assign(future_status=OPEN))
        as_closed = model.predict_probability(model_data.prediction.assign(future_status=CLOSED))
        assert as_open.shape == as_closed.shape
        if "future_status_open" in model.regression.selected_features_:
            assert not np.allclose(as_open, as_closed)

    def test_recovery_counts_as_nonzero(self):
        frame = pd.DataFrame(
            {
                "status": [OPEN, OPEN, OPEN],
                "future_status": [OPEN, CLOSED, OPEN],
                "future_paid_incre": [-500.0, 0.0, 250.0],
            }
        )
        assert ZeroPaymentModel().target(frame).tolist() == [1, 0, 1]

    def test_predictors(self):
        assert ZeroPaymentModel().predictors == [
            "status",
            "future_status",
            "case_reserve",
            "paid_incre",
        ]


class TestCrossValidation:
    """Repeated stratified k-fold validation."""

    def test_fold_metrics(self, model_data):
        config = ClassifierConfig(cv_folds=3, cv_repeats=2, cv_seed=5)
        model = ClosureModel(config)
        result = cross_validate_classifier(model, model_data.training)

        assert isinstance(result, CrossValidationResult)
        assert len(result.folds) == 6
        assert model.cv_result_ is result
        assert not model.is_fitted
        assert 0.5 < result.mean("accuracy") <= 1.0
        assert result.folds["brier"].between(0, 1).all()

    def test_summary(self, model_data):
        config = ClassifierConfig(cv_folds=3, cv_repeats=1)
        result = ZeroPaymentModel(config).cross_validate(model_data.training)
        summary = result.summary()
        assert list(summary.columns) == ["mean", "std"]
        assert set(summary.index) == {"accuracy", "kappa", "auc", "log_loss", "brier"}
