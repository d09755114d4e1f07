"""Pytest configuration and shared fixtures."""

from datetime import date
from pathlib import Path
from unittest.mock import Mock

import matplotlib

matplotlib.use("Agg")

import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402
import pytest  # noqa: E402

from individual_claims.claim_types import CLOSED, OPEN  # noqa: E402
from individual_claims.claims_data import prepare_model_data  # noqa: E402
from individual_claims.classification import ClosureModel, ZeroPaymentModel  # noqa: E402
from individual_claims.config import ClassifierConfig  # noqa: E402
from individual_claims.payment_model import PaymentAmountModel  # noqa: E402
from individual_claims.synthetic import generate_claims  # noqa: E402

EVALUATION_DATE = date(2016, 12, 31)


@pytest.fixture
def project_root():
    """Return the package root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def parameters_dir(project_root):
    """Return the packaged parameters directory."""
    return project_root / "data" / "parameters"


@pytest.fixture(scope="session")
def synthetic_claims():
    """Small synthetic claims table, evaluated yearly through 2017."""
    return generate_claims(claims_per_year=150, seed=7)


@pytest.fixture(scope="session")
def model_data(synthetic_claims):
    """Training and prediction sets at 24 months, evaluated at 2016 year-end."""
    return prepare_model_data(synthetic_claims, development_age=24, evaluation_date=EVALUATION_DATE)


@pytest.fixture(scope="session")
def fitted_models(model_data):
    """The three stages fitted on the synthetic training set."""
    config = ClassifierConfig(run_cross_validation=False)
    return {
        "closure": ClosureModel(config).fit(model_data.training),
        "zero_payment": ZeroPaymentModel(config).fit(model_data.training),
        "payment": PaymentAmountModel().fit(model_data.training),
    }


@pytest.fixture
def claims_frame():
    """Three prediction claims: one open, two closed."""
    return pd.DataFrame(
        {
            "claim_number": ["A-1", "B-2", "C-3"],
            "status": [OPEN, CLOSED, CLOSED],
            "case_reserve": [5000.0, 0.0, 0.0],
            "paid_incre": [1200.0, 300.0, 0.0],
        }
    )


def _per_row(value, n):
    return np.broadcast_to(np.asarray(value, dtype=float), (n,)).copy()


@pytest.fixture
def make_stage_models():
    """Factory for mocked closure, zero-payment and payment models.

    Each rate may be a scalar or one value per claim. Zero-payment and
    payment outputs depend on the ``future_status`` column they receive.
    """

    def factory(p_open=0.5, p_nonzero_open=0.7, p_nonzero_closed=0.4, mu_open=800.0, mu_closed=300.0):
        closure = Mock()
        closure.predict_probability.side_effect = lambda df: _per_row(p_open, len(df))

        zero_payment = Mock()
        zero_payment.predict_probability.side_effect = lambda df: np.where(
            df["future_status"] == OPEN,
            _per_row(p_nonzero_open, len(df)),
            _per_row(p_nonzero_closed, len(df)),
        )

        payment = Mock()
        payment.predict_expectation.side_effect = lambda df: np.where(
            df["future_status"] == OPEN,
            _per_row(mu_open, len(df)),
            _per_row(mu_closed, len(df)),
        )
        return closure, zero_payment, payment

    return factory
