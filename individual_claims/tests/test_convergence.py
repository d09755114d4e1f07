"""Tests for simulation convergence diagnostics."""

import numpy as np
import pandas as pd
import pytest

from individual_claims.config import SimulationConfig
from individual_claims.convergence import (
    ConvergenceStats,
    check_convergence,
    convergence_table,
    monte_carlo_standard_error,
    running_means,
)
from individual_claims.simulation import ClaimSimulator


class TestMonteCarloStandardError:
    def test_matches_formula(self):
        values = np.array([1.0, 2.0, 3.0, 4.0])
        assert monte_carlo_standard_error(values) == pytest.approx(np.std(values, ddof=1) / 2)

    def test_single_value(self):
        assert monte_carlo_standard_error(np.array([5.0])) == 0.0


class TestRunningMeans:
    def test_cumulative_mean(self):
        totals = pd.DataFrame({"total_paid": [2.0, 4.0, 6.0]})
        means = running_means(totals)
        assert means["total_paid"].tolist() == [2.0, 3.0, 4.0]
        assert means.index.name == "n_sims"
        assert means.index.tolist() == [1, 2, 3]


class TestConvergenceStats:
    def test_z_score(self):
        stats = ConvergenceStats("total_paid", 105.0, 100.0, 2.5, 1000, False)
        assert stats.z_score == pytest.approx(2.0)
        assert "total_paid" in str(stats)

    def test_zero_mcse(self):
        assert ConvergenceStats("open_count", 3.0, 3.0, 0.0, 10, True).z_score == 0.0


class TestCheckConvergence:
    @pytest.fixture
    def results(self, make_stage_models, claims_frame):
        simulator = ClaimSimulator(
            *make_stage_models(), config=SimulationConfig(n_sims=3000, seed=8)
        )
        return simulator.simulate(claims_frame)

    def test_all_metrics_checked(self, results):
        stats = check_convergence(results)
        assert set(stats) == {"open_count", "nonzero_count", "total_paid"}
        assert all(s.n_iterations == 3000 for s in stats.values())
        assert all(s.converged for s in stats.values())

    def test_zero_tolerance_fails(self, results):
        stats = check_convergence(results, tolerance=0.0)
        assert not stats["total_paid"].converged

    def test_table(self, results):
        table = convergence_table(check_convergence(results))
        assert list(table.index) == ["open_count", "nonzero_count", "total_paid"]
        assert "z_score" in table.columns
