"""Monte Carlo simulation of next-period claim outcomes.

Each trial draws, per claim:

1. the future status, Bernoulli with the closure model's P(open);
2. for claims closed now and simulated closed, a payment of exactly zero;
3. otherwise a nonzero indicator, Bernoulli with the zero-payment model's
   P(nonzero) given the simulated future status, and for nonzero draws a
   negative binomial payment whose mean is the payment model's expected
   value ``mu``: size ``mu**e`` and probability ``1 / (1 + mu**(1 - e))``.

Model outputs depend only on a claim's predictors and its simulated
future status, so they are computed once per claim and status
(:class:`ClaimRates`) and reused by every trial. Trials are split into
chunks seeded from ``SeedSequence(seed).spawn(n_chunks)``; results are
bit-identical for a fixed seed, trial count and chunk size whether chunks
run sequentially or in worker processes.
"""

from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
import logging
from pathlib import Path
import time
from typing import Dict, Iterator, List, Optional, Sequence, Union

import numpy as np
import pandas as pd
from scipy import stats
from tqdm import tqdm

from .claim_types import (
    CLOSED,
    OPEN,
    ExpectationModel,
    OutcomeCategory,
    ProbabilityModel,
    SimulatedOutcome,
)
from .config.simulation import SimulationConfig

logger = logging.getLogger(__name__)

OUTCOME_CODES = {
    OutcomeCategory.CLOSED_CLOSED: 0,
    OutcomeCategory.ZERO: 1,
    OutcomeCategory.NONZERO: 2,
}
OUTCOME_LABELS = [c.value for c in OUTCOME_CODES]
RATE_COLUMNS = ("p_open", "p_nonzero_open", "p_nonzero_closed", "mu_open", "mu_closed")


@dataclass
class ClaimRates:
    """Per-claim model outputs shared by all trials.

    Attributes:
        frame: One row per claim with ``claim_number``, ``status`` and the
            rate columns: P(open), P(nonzero | future open),
            P(nonzero | future closed), E[payment | future open] and
            E[payment | future closed].
    """

    frame: pd.DataFrame

    def __len__(self) -> int:
        return len(self.frame)

    @property
    def current_open(self) -> np.ndarray:
        return (self.frame["status"] == OPEN).to_numpy()

    def arrays(self) -> Dict[str, np.ndarray]:
        """Rate columns as plain arrays for the trial kernel."""
        arrays = {c: self.frame[c].to_numpy(dtype=float) for c in RATE_COLUMNS}
        arrays["current_open"] = self.current_open
        return arrays

    def expected_nonzero(self) -> np.ndarray:
        """Probability of a nonzero-branch draw for each claim."""
        f = self.frame
        return (
            f["p_open"] * f["p_nonzero_open"]
            + (1 - f["p_open"]) * f["p_nonzero_closed"] * self.current_open
        ).to_numpy()

    def expected_payment(self) -> np.ndarray:
        """Model-implied mean simulated payment for each claim."""
        f = self.frame
        return (
            f["p_open"] * f["p_nonzero_open"] * f["mu_open"]
            + (1 - f["p_open"]) * f["p_nonzero_closed"] * f["mu_closed"] * self.current_open
        ).to_numpy()

    def expected_totals(self) -> Dict[str, float]:
        """Model-implied means of the per-trial totals."""
        return {
            "open_count": float(self.frame["p_open"].sum()),
            "nonzero_count": float(self.expected_nonzero().sum()),
            "total_paid": float(self.expected_payment().sum()),
        }


def simulate_trials(
    rates: Dict[str, np.ndarray],
    n_trials: int,
    seed: Union[int, np.random.SeedSequence, None],
    size_exponent: float = 0.2,
) -> Dict[str, np.ndarray]:
    """Draw ``n_trials`` independent outcomes for every claim.

    Module-level so it can run in worker processes.

    Args:
        rates: Output of :meth:`ClaimRates.arrays`.
        n_trials: Number of trials in this chunk.
        seed: Seed or SeedSequence for this chunk's generator.
        size_exponent: Negative binomial size exponent ``e``.

    Returns:
        Dict of ``(n_trials, n_claims)`` arrays: ``future_open`` (bool),
        ``payment`` (int64) and ``outcome`` (int8 codes).
    """
    rng = np.random.default_rng(seed)
    shape = (n_trials, len(rates["p_open"]))

    future_open = rng.random(shape) < rates["p_open"]
    closed_closed = ~rates["current_open"] & ~future_open

    p_nonzero = np.where(future_open, rates["p_nonzero_open"], rates["p_nonzero_closed"])
    nonzero = (rng.random(shape) < p_nonzero) & ~closed_closed

    mu = np.where(future_open, rates["mu_open"], rates["mu_closed"])
    payment = np.zeros(shape, dtype=np.int64)
    draw = nonzero & (mu > 0)
    mu_draw = mu[draw]
    payment[draw] = rng.negative_binomial(
        mu_draw**size_exponent, 1.0 / (1.0 + mu_draw ** (1.0 - size_exponent))
    )

    outcome = np.full(shape, OUTCOME_CODES[OutcomeCategory.ZERO], dtype=np.int8)
    outcome[closed_closed] = OUTCOME_CODES[OutcomeCategory.CLOSED_CLOSED]
    outcome[nonzero] = OUTCOME_CODES[OutcomeCategory.NONZERO]
    return {"future_open": future_open, "payment": payment, "outcome": outcome}


@dataclass
class SimulationResults:
    """Trial-level simulated outcomes and their aggregations.

    Attributes:
        trials: One row per (trial, claim): ``sim``, ``claim_number``,
            ``status``, ``future_status_sim``, ``paid_incre_sim`` and
            ``outcome``.
        rates: Per-claim model outputs the trials were drawn from.
        config: Simulation settings used.
        n_sims: Number of trials.
        seed: Root seed used.
        execution_time: Wall-clock seconds spent drawing trials.
    """

    trials: pd.DataFrame
    rates: ClaimRates
    config: SimulationConfig
    n_sims: int
    seed: Optional[int]
    execution_time: float

    @property
    def claim_numbers(self) -> List[str]:
        return self.rates.frame["claim_number"].tolist()

    def trial_totals(self) -> pd.DataFrame:
        """Open count, nonzero count and total payment for every trial."""
        t = self.trials
        totals = pd.DataFrame(
            {
                "open_count": (t["future_status_sim"] == OPEN).groupby(t["sim"]).sum(),
                "nonzero_count": (t["outcome"] == OutcomeCategory.NONZERO.value)
                .groupby(t["sim"])
                .sum(),
                "total_paid": t.groupby("sim")["paid_incre_sim"].sum(),
            }
        )
        totals.index.name = "sim"
        return totals

    def claim_summary(self, percentiles: Sequence[float] = (0.05, 0.5, 0.95)) -> pd.DataFrame:
        """Per-claim simulated statistics next to the model-implied means.

        Args:
            percentiles: Payment percentiles to report.

        Returns:
            DataFrame indexed by claim number.
        """
        t = self.trials
        grouped = t.groupby("claim_number", sort=False)
        summary = pd.DataFrame(
            {
                "status": grouped["status"].first(),
                "prob_open_sim": (t["future_status_sim"] == OPEN).groupby(t["claim_number"]).mean(),
                "prob_nonzero_sim": (t["outcome"] == OutcomeCategory.NONZERO.value)
                .groupby(t["claim_number"])
                .mean(),
                "mean_paid": grouped["paid_incre_sim"].mean(),
                "std_paid": grouped["paid_incre_sim"].std(),
            }
        )
        for q in percentiles:
            summary[f"p{int(round(q * 100)):02d}_paid"] = grouped["paid_incre_sim"].quantile(q)

        rates = self.rates.frame.set_index("claim_number")
        summary["p_open"] = rates["p_open"]
        summary["expected_paid"] = pd.Series(self.rates.expected_payment(), index=rates.index)
        return summary.loc[self.claim_numbers]

    def claim_distribution(self, claim_number: str) -> pd.DataFrame:
        """All trials of one claim.

        Raises:
            KeyError: If the claim was not simulated.
        """
        rows = self.trials[self.trials["claim_number"] == str(claim_number)]
        if rows.empty:
            raise KeyError(f"Claim {claim_number!r} is not in the simulation results")
        return rows.reset_index(drop=True)

    def outcome_shares(self) -> pd.Series:
        """Share of (trial, claim) rows in each outcome category."""
        return self.trials["outcome"].value_counts(normalize=True).reindex(OUTCOME_LABELS)

    def records(self) -> Iterator[SimulatedOutcome]:
        """Iterate over trial rows as immutable records."""
        for row in self.trials.itertuples(index=False):
            yield SimulatedOutcome(
                sim=int(row.sim),
                claim_number=row.claim_number,
                status=row.status,
                future_status=row.future_status_sim,
                payment=int(row.paid_incre_sim),
                outcome=OutcomeCategory(row.outcome),
            )

    def expected_totals(self) -> Dict[str, float]:
        """Model-implied means of the per-trial totals."""
        return self.rates.expected_totals()

    def compare_with_actual(self, prediction: pd.DataFrame) -> pd.DataFrame:
        """Back-test simulated totals against observed outcomes.

        Args:
            prediction: The simulated claims with actual ``future_status``
                and ``future_paid_incre``.

        Returns:
            DataFrame indexed by metric (``open_count``, ``total_paid``) with
            the actual value, simulated mean and 5th/95th percentiles, and
            the share of trials at or below the actual value.

        Raises:
            ValueError: If actual outcomes are missing.
        """
        if prediction[["future_status", "future_paid_incre"]].isna().any().any():
            raise ValueError("Actual future outcomes are missing for some claims")

        totals = self.trial_totals()
        actuals = {
            "open_count": float((prediction["future_status"] == OPEN).sum()),
            "total_paid": float(prediction["future_paid_incre"].sum()),
        }
        rows = {}
        for metric, actual in actuals.items():
            simulated = totals[metric].to_numpy(dtype=float)
            rows[metric] = {
                "actual": actual,
                "simulated_mean": float(simulated.mean()),
                "simulated_p05": float(np.quantile(simulated, 0.05)),
                "simulated_p95": float(np.quantile(simulated, 0.95)),
                "percentile_rank": stats.percentileofscore(simulated, actual, kind="weak") / 100,
            }
        return pd.DataFrame(rows).T

    def summary(self) -> str:
        """Plain-text summary of the run."""
        totals = self.trial_totals()
        expected = self.expected_totals()
        shares = self.outcome_shares()
        lines = [
            "Claim Simulation Results",
            "=" * 40,
            f"Claims: {len(self.rates):,}",
            f"Simulations: {self.n_sims:,}",
            f"Seed: {self.seed}",
            f"Execution Time: {self.execution_time:.2f}s",
            f"Mean Open Claims: {totals['open_count'].mean():,.1f} "
            f"(expected {expected['open_count']:,.1f})",
            f"Mean Total Paid: ${totals['total_paid'].mean():,.0f} "
            f"(expected ${expected['total_paid']:,.0f})",
        ]
        for label, share in shares.items():
            lines.append(f"Outcome {label}: {share:.2%}")
        return "\n".join(lines)

    def to_csv(self, path: Union[str, Path]) -> Path:
        """Write the trial-level results to CSV."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.trials.to_csv(path, index=False)
        return path


class ClaimSimulator:
    """Compose the three fitted stages into per-claim outcome draws.

    Args:
        closure_model: P(open at the future age).
        zero_payment_model: P(nonzero payment) given a future status.
        payment_model: Expected payment given a future status.
        config: Simulation settings.

    Examples:
        Simulate prepared claims::

            simulator = ClaimSimulator(closure, zero_payment, payment)
            results = simulator.simulate(model_data.prediction)
            print(results.summary())
    """

    def __init__(
        self,
        closure_model: ProbabilityModel,
        zero_payment_model: ProbabilityModel,
        payment_model: ExpectationModel,
        config: Optional[SimulationConfig] = None,
    ):
        self.closure_model = closure_model
        self.zero_payment_model = zero_payment_model
        self.payment_model = payment_model
        self.config = config or SimulationConfig()

    def claim_rates(self, claims: pd.DataFrame) -> ClaimRates:
        """Evaluate the three stages once per claim and future status.

        Args:
            claims: Claims to simulate, with the models' predictor columns.

        Returns:
            ClaimRates for ``claims`` in their original order.

        Raises:
            ValueError: If any model output is not finite.
        """
        claims = claims.reset_index(drop=True)
        as_open = claims.assign(future_status=OPEN)
        as_closed = claims.assign(future_status=CLOSED)

        frame = pd.DataFrame(
            {
                "claim_number": claims["claim_number"].astype(str),
                "status": claims["status"],
                "p_open": self.closure_model.predict_probability(claims),
                "p_nonzero_open": self.zero_payment_model.predict_probability(as_open),
                "p_nonzero_closed": self.zero_payment_model.predict_probability(as_closed),
                "mu_open": self.payment_model.predict_expectation(as_open),
                "mu_closed": self.payment_model.predict_expectation(as_closed),
            }
        )
        values = frame[list(RATE_COLUMNS)].to_numpy(dtype=float)
        if not np.isfinite(values).all():
            bad = frame.loc[~np.isfinite(values).all(axis=1), "claim_number"].tolist()[:5]
            raise ValueError(f"Model outputs are not finite for claims {bad}")
        for column in ("p_open", "p_nonzero_open", "p_nonzero_closed"):
            frame[column] = frame[column].clip(0.0, 1.0)
        return ClaimRates(frame)

    def _chunk_sizes(self, n_sims: int) -> List[int]:
        size = self.config.chunk_size or n_sims
        return [min(size, n_sims - start) for start in range(0, n_sims, size)]

    def simulate(
        self,
        claims: pd.DataFrame,
        n_sims: Optional[int] = None,
        seed: Optional[int] = None,
    ) -> SimulationResults:
        """Run the Monte Carlo simulation.

        Args:
            claims: Claims to simulate.
            n_sims: Trial count; defaults to ``config.n_sims``.
            seed: Root seed; defaults to ``config.seed``.

        Returns:
            SimulationResults with one row per trial and claim.

        Raises:
            ValueError: If ``n_sims`` is less than 1.
        """
        n_sims = self.config.n_sims if n_sims is None else n_sims
        if n_sims < 1:
            raise ValueError(f"n_sims must be at least 1, got {n_sims}")
        seed = self.config.seed if seed is None else seed
        rates = self.claim_rates(claims)
        arrays = rates.arrays()
        sizes = self._chunk_sizes(n_sims)
        children = np.random.SeedSequence(seed).spawn(len(sizes))
        exponent = self.config.size_exponent

        start_time = time.time()
        if self.config.n_workers > 1 and len(sizes) > 1:
            with ProcessPoolExecutor(max_workers=self.config.n_workers) as executor:
                futures = [
                    executor.submit(simulate_trials, arrays, size, child, exponent)
                    for size, child in zip(sizes, children)
                ]
                chunks = [
                    f.result()
                    for f in tqdm(
                        futures, desc="Simulating", disable=not self.config.progress_bar
                    )
                ]
        else:
            chunks = [
                simulate_trials(arrays, size, child, exponent)
                for size, child in tqdm(
                    list(zip(sizes, children)),
                    desc="Simulating",
                    disable=not self.config.progress_bar,
                )
            ]
        execution_time = time.time() - start_time

        trials = self._assemble(rates, chunks)
        logger.info(
            "Simulated %d trials for %d claims in %.2fs (%d chunks)",
            n_sims,
            len(rates),
            execution_time,
            len(sizes),
        )
        return SimulationResults(
            trials=trials,
            rates=rates,
            config=self.config,
            n_sims=n_sims,
            seed=seed,
            execution_time=execution_time,
        )

    @staticmethod
    def _assemble(rates: ClaimRates, chunks: List[Dict[str, np.ndarray]]) -> pd.DataFrame:
        """Stack chunk arrays into the long trial frame, trial-major."""
        claim_numbers = rates.frame["claim_number"].to_numpy()
        statuses = rates.frame["status"].to_numpy()
        n_claims = len(claim_numbers)

        future_open = np.concatenate([c["future_open"] for c in chunks]).ravel()
        payment = np.concatenate([c["payment"] for c in chunks]).ravel()
        outcome = np.concatenate([c["outcome"] for c in chunks]).ravel()
        n_sims = len(future_open) // n_claims if n_claims else 0

        return pd.DataFrame(
            {
                "sim": np.repeat(np.arange(1, n_sims + 1), n_claims),
                "claim_number": np.tile(claim_numbers, n_sims),
                "status": np.tile(statuses, n_sims),
                "future_status_sim": np.where(future_open, OPEN, CLOSED),
                "paid_incre_sim": payment,
                "outcome": pd.Categorical.from_codes(outcome, categories=OUTCOME_LABELS),
            }
        )
