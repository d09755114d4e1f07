"""Tests for the synthetic claims generator."""

import pandas as pd
import pytest

from individual_claims.claim_types import CLOSED, OPEN
from individual_claims.claims_data import normalize_claims
from individual_claims.synthetic import generate_claims


@pytest.fixture(scope="module")
def claims():
    """Four accident years of generated claims."""
    return generate_claims(first_accident_year=2012, n_accident_years=4, claims_per_year=40, seed=3)


class TestGenerateClaims:
    """Shape and consistency of generated claims."""

    def test_same_seed_same_table(self, claims):
        again = generate_claims(
            first_accident_year=2012, n_accident_years=4, claims_per_year=40, seed=3
        )
        pd.testing.assert_frame_equal(claims, again)

    def test_different_seed_differs(self, claims):
        other = generate_claims(
            first_accident_year=2012, n_accident_years=4, claims_per_year=40, seed=4
        )
        assert not claims["paid"].equals(other["paid"])

    def test_snapshots_per_accident_year(self, claims):
        # Accident year 2012 is evaluated at 2012..2017
        per_claim = claims.groupby("claim_number").size()
        assert per_claim["2012-00001"] == 6
        assert per_claim["2015-00001"] == 3
        assert claims["claim_number"].nunique() == 160

    def test_year_end_evaluations(self, claims):
        assert (claims["eval_date"].dt.month == 12).all()
        assert (claims["eval_date"].dt.day == 31).all()
        ages = claims["development_age"]
        assert ages.min() == 12
        assert (ages % 12 == 0).all()

    def test_closed_claims_have_no_reserve(self, claims):
        assert set(claims["status"]) == {OPEN, CLOSED}
        assert (claims.loc[claims["status"] == CLOSED, "case_reserve"] == 0).all()

    def test_payments_consistent(self, claims):
        assert (claims["paid_incre"] >= 0).all()
        cumulative = claims.groupby("claim_number")["paid_incre"].cumsum()
        assert (cumulative == claims["paid"]).all()
        assert (claims["paid_incre"] == 0).any()

    def test_passes_normalization(self, claims):
        normalized = normalize_claims(claims)
        assert len(normalized) == len(claims)

    def test_accident_years_capped_at_last_evaluation(self):
        claims = generate_claims(
            first_accident_year=2016,
            n_accident_years=5,
            claims_per_year=5,
            last_evaluation_year=2017,
            seed=1,
        )
        assert claims["accident_date"].dt.year.max() == 2017
