"""Tests for the payment amount GAM."""

import numpy as np
import pytest

from individual_claims.claim_types import CLOSED, OPEN
from individual_claims.config import PaymentModelConfig
from individual_claims.exceptions import ClaimsDataError, ModelNotFittedError
from individual_claims.payment_model import PaymentAmountModel, signed_log


class TestPaymentAmountModel:
    """Quasi-Poisson GAM on positive payments."""

    def test_trained_on_positive_payments(self, fitted_models, model_data):
        model = fitted_models["payment"]
        positive = (model_data.training["future_paid_incre"] > 0).sum()
        assert model.fit_statistics()["n_obs"] == positive

    def test_expectations_positive(self, fitted_models, model_data):
        model = fitted_models["payment"]
        for status in (OPEN, CLOSED):
            mu = model.predict_expectation(model_data.prediction.assign(future_status=status))
            assert mu.shape == (len(model_data.prediction),)
            assert np.isfinite(mu).all()
            assert (mu > 0).all()

    def test_fit_statistics(self, fitted_models):
        stats = fitted_models["payment"].fit_statistics()
        assert stats["dispersion"] > 1.0
        assert stats["deviance"] < stats["null_deviance"]
        assert 0 < stats["deviance_explained"] < 1

    def test_inputs_clamped_to_training_range(self, fitted_models, model_data):
        model = fitted_models["payment"]
        row = model_data.prediction.iloc[[0]].assign(future_status=OPEN)
        at_max = model.predict_expectation(row.assign(case_reserve=model.upper_[0]))
        beyond = model.predict_expectation(row.assign(case_reserve=model.upper_[0] * 100))
        np.testing.assert_allclose(at_max, beyond)

    def test_partial_curve(self, fitted_models, model_data):
        model = fitted_models["payment"]
        grid = np.linspace(0, 10_000, 25)
        curve = model.partial_curve("case_reserve", grid, model_data.training)
        assert curve.shape == (25,)
        with pytest.raises(ValueError, match="Unknown smooth term"):
            model.partial_curve("status", grid, model_data.training)

    def test_coefficients_indexed_by_term(self, fitted_models):
        table = fitted_models["payment"].coefficients()
        assert "const" in table.index
        assert len(table) == len(fitted_models["payment"].result_.params)

    def test_too_few_positive_payments(self, model_data):
        training = model_data.training.copy()
        training["future_paid_incre"] = 0.0
        training.loc[training.index[:5], "future_paid_incre"] = 100.0
        with pytest.raises(ClaimsDataError, match="at least"):
            PaymentAmountModel(PaymentModelConfig(spline_df=6)).fit(training)

    def test_predict_before_fit(self, model_data):
        with pytest.raises(ModelNotFittedError):
            PaymentAmountModel().predict_expectation(model_data.prediction)


def test_signed_log_symmetric():
    values = np.array([-99.0, 0.0, 99.0])
    np.testing.assert_allclose(signed_log(values), [-np.log(100), 0.0, np.log(100)])
