"""Tests for claims loading and model-data preparation."""

from datetime import date

import numpy as np
import pandas as pd
import pytest

from individual_claims._warnings import DataQualityWarning
from individual_claims.claim_types import CLOSED, OPEN
from individual_claims.claims_data import (
    attach_future_outcomes,
    load_claims,
    normalize_claims,
    prepare_model_data,
)
from individual_claims.exceptions import ClaimsDataError


@pytest.fixture
def raw_claims():
    """Claims from accident years 2014 and 2015 at three year-ends, with source column names."""
    return pd.DataFrame(
        {
            "claim_id": ["1", "1", "1", "2", "2", "2"],
            "eval_date": [
                "2014-12-31",
                "2015-12-31",
                "2016-12-31",
                "2015-12-31",
                "2016-12-31",
                "2017-12-31",
            ],
            "devt": [12, 24, 36, 12, 24, 36],
            "status": ["O", "O", "C", "o", "C", "C"],
            "case": [1000.0, 500.0, 0.0, 200.0, 0.0, 0.0],
            "paid": [100.0, 400.0, 900.0, 50.0, 250.0, 250.0],
        }
    )


class TestNormalizeClaims:
    """Canonical names, labels and derived payment columns."""

    def test_aliases_and_status_labels(self, raw_claims):
        claims = normalize_claims(raw_claims)
        assert {"claim_number", "development_age", "case_reserve"} <= set(claims.columns)
        assert set(claims["status"]) == {OPEN, CLOSED}
        assert claims["eval_date"].dtype.kind == "M"

    def test_incremental_paid_derived(self, raw_claims):
        claims = normalize_claims(raw_claims)
        first = claims[claims["claim_number"] == "1"]
        assert first["paid_incre"].tolist() == [100.0, 300.0, 500.0]

    def test_cumulative_paid_derived(self, raw_claims):
        raw = raw_claims.drop(columns="paid").assign(paid_incre=[100.0, 300.0, 500.0, 50, 200, 0])
        claims = normalize_claims(raw)
        assert claims.loc[claims["claim_number"] == "2", "paid"].tolist() == [50, 250, 250]

    def test_sorted_by_claim_and_age(self, raw_claims):
        claims = normalize_claims(raw_claims.sample(frac=1.0, random_state=0))
        assert claims["development_age"].tolist() == [12, 24, 36, 12, 24, 36]

    def test_input_not_modified(self, raw_claims):
        before = raw_claims.copy()
        normalize_claims(raw_claims)
        pd.testing.assert_frame_equal(raw_claims, before)

    def test_missing_column_raises(self, raw_claims):
        with pytest.raises(ClaimsDataError, match="missing required columns"):
            normalize_claims(raw_claims.drop(columns="case"))

    def test_missing_payments_raises(self, raw_claims):
        with pytest.raises(ClaimsDataError, match="paid"):
            normalize_claims(raw_claims.drop(columns="paid"))

    def test_unknown_status_raises(self, raw_claims):
        raw_claims.loc[0, "status"] = "Pending"
        with pytest.raises(ClaimsDataError, match="Pending"):
            normalize_claims(raw_claims)

    def test_duplicate_snapshots_raise(self, raw_claims):
        with pytest.raises(ClaimsDataError, match="duplicate"):
            normalize_claims(pd.concat([raw_claims, raw_claims.iloc[[0]]]))


class TestLoadClaims:
    """Reading claims tables from disk."""

    def test_load_csv(self, raw_claims, tmp_path):
        path = tmp_path / "claims.csv"
        raw_claims.to_csv(path, index=False)
        claims = load_claims(path)
        assert len(claims) == 6
        assert claims["claim_number"].tolist() == ["1", "1", "1", "2", "2", "2"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_claims(tmp_path / "nope.csv")


class TestFutureOutcomes:
    """Joining each snapshot to its successor."""

    def test_future_columns(self, raw_claims):
        claims = attach_future_outcomes(normalize_claims(raw_claims), period_months=12)
        first = claims[claims["claim_number"] == "1"].reset_index(drop=True)
        assert first["future_status"].tolist()[:2] == [OPEN, CLOSED]
        assert first["future_paid_incre"].tolist()[:2] == [300.0, 500.0]
        assert pd.isna(first.loc[2, "future_status"])
        assert np.isnan(first.loc[2, "future_paid_incre"])

    def test_gap_warns(self, raw_claims):
        claims = normalize_claims(raw_claims[raw_claims["devt"] != 24])
        with pytest.warns(DataQualityWarning, match="exactly 12 months"):
            attach_future_outcomes(claims, period_months=12)


class TestPrepareModelData:
    """Training and prediction split at one development age."""

    def test_split(self, raw_claims):
        data = prepare_model_data(raw_claims, development_age=12, evaluation_date=date(2015, 12, 31))
        assert data.training["claim_number"].tolist() == ["1"]
        assert data.prediction["claim_number"].tolist() == ["2"]
        assert data.has_actuals
        assert (data.prediction["eval_date"] == pd.Timestamp("2015-12-31")).all()

    def test_training_future_observed_by_evaluation_date(self, model_data):
        observed = model_data.training["future_eval_date"] <= pd.Timestamp(date(2016, 12, 31))
        assert observed.all()
        assert model_data.training["future_status"].notna().all()

    def test_prediction_has_backtest_actuals(self, model_data):
        assert model_data.has_actuals
        assert (model_data.prediction["development_age"] == 24).all()

    def test_summary(self, model_data):
        summary = model_data.summary()
        assert list(summary.columns) == ["training", "prediction"]
        assert summary.loc["claims", "training"] == len(model_data.training)

    def test_no_prediction_rows_raise(self, raw_claims):
        with pytest.raises(ClaimsDataError, match="evaluated on"):
            prepare_model_data(raw_claims, development_age=12, evaluation_date=date(2016, 12, 31))

    def test_no_training_rows_raise(self, raw_claims):
        with pytest.raises(ClaimsDataError, match="No training claims"):
            prepare_model_data(raw_claims, development_age=12, evaluation_date=date(2014, 12, 31))

    def test_missing_predictors_dropped_with_warning(self, raw_claims):
        extra = raw_claims[raw_claims["claim_id"] == "1"].assign(claim_id="3")
        claims = pd.concat([raw_claims, extra], ignore_index=True)
        claims.loc[1, "case"] = np.nan
        with pytest.warns(DataQualityWarning, match="Dropped 1"):
            data = prepare_model_data(claims, development_age=24, evaluation_date=date(2016, 12, 31))
        assert data.training["claim_number"].tolist() == ["3"]
