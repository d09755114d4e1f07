"""Convergence diagnostics for the claim simulation.

Trials are independent, so the Monte Carlo standard error of a mean is
the sample standard deviation over the square root of the trial count.
Simulated means are compared to the analytic expectations implied by the
per-claim model outputs.
"""

from dataclasses import dataclass
import logging
from typing import Dict

import numpy as np
import pandas as pd

from .simulation import SimulationResults

logger = logging.getLogger(__name__)


@dataclass
class ConvergenceStats:
    """Convergence of one simulated total."""

    metric: str
    simulated_mean: float
    expected: float
    mcse: float
    n_iterations: int
    converged: bool

    @property
    def z_score(self) -> float:
        """Standardised gap between simulated and expected mean."""
        if self.mcse == 0:
            return 0.0 if self.simulated_mean == self.expected else float(np.inf)
        return (self.simulated_mean - self.expected) / self.mcse

    def __str__(self) -> str:
        return (
            f"ConvergenceStats(metric={self.metric}, mean={self.simulated_mean:.2f}, "
            f"expected={self.expected:.2f}, mcse={self.mcse:.4f}, converged={self.converged})"
        )


def monte_carlo_standard_error(values: np.ndarray) -> float:
    """Standard error of the mean of independent draws.

    Args:
        values: 1D array of per-trial values.

    Returns:
        MCSE, or 0.0 for fewer than two values.
    """
    values = np.asarray(values, dtype=float)
    if len(values) < 2:
        return 0.0
    return float(np.std(values, ddof=1) / np.sqrt(len(values)))


def running_means(totals: pd.DataFrame) -> pd.DataFrame:
    """Cumulative mean of every column of per-trial totals, by trial count."""
    counts = np.arange(1, len(totals) + 1)
    means = totals.cumsum().div(counts, axis=0)
    means.index = pd.Index(counts, name="n_sims")
    return means


def check_convergence(results: SimulationResults, tolerance: float = 4.0) -> Dict[str, ConvergenceStats]:
    """Compare simulated total means with their model expectations.

    A metric converges when ``|mean - expected| <= tolerance * MCSE``.

    Args:
        results: Simulation output.
        tolerance: Allowed gap in standard errors.

    Returns:
        ConvergenceStats keyed by metric name.
    """
    totals = results.trial_totals()
    expected = results.expected_totals()
    stats = {}
    for metric, target in expected.items():
        values = totals[metric].to_numpy(dtype=float)
        mean = float(values.mean())
        mcse = monte_carlo_standard_error(values)
        stats[metric] = ConvergenceStats(
            metric=metric,
            simulated_mean=mean,
            expected=target,
            mcse=mcse,
            n_iterations=len(values),
            converged=abs(mean - target) <= tolerance * mcse,
        )
        if not stats[metric].converged:
            logger.warning("Simulated %s has not converged: %s", metric, stats[metric])
    return stats


def convergence_table(stats: Dict[str, ConvergenceStats]) -> pd.DataFrame:
    """ConvergenceStats as a DataFrame indexed by metric."""
    return pd.DataFrame(
        [
            {
                "metric": s.metric,
                "simulated_mean": s.simulated_mean,
                "expected": s.expected,
                "mcse": s.mcse,
                "z_score": s.z_score,
                "converged": s.converged,
            }
            for s in stats.values()
        ]
    ).set_index("metric")
