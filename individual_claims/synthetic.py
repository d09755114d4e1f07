"""Synthetic individual claims for demonstrations and tests.

Generates a long-format claims table with one snapshot per claim per
year-end evaluation. Development age is measured in months from the start
of the accident year, so a claim's first snapshot is at age 12.

Claims follow a simple open/closed process: open claims close with a
probability that rises with age and pay part of their outstanding amount
along the way; closed claims occasionally reopen.
"""

from datetime import date, timedelta
import logging
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from .claim_types import CLOSED, OPEN

logger = logging.getLogger(__name__)


def _closure_probability(period: int) -> float:
    """Probability an open claim closes during its ``period``-th year."""
    return min(0.9, 0.3 + 0.12 * period)


def generate_claims(
    first_accident_year: int = 2008,
    n_accident_years: int = 10,
    claims_per_year: int = 300,
    last_evaluation_year: int = 2017,
    seed: Optional[int] = 42,
    reopen_probability: float = 0.04,
) -> pd.DataFrame:
    """Generate a synthetic claims table.

    Args:
        first_accident_year: Earliest accident year.
        n_accident_years: Number of consecutive accident years.
        claims_per_year: Claims per accident year, all reported in the
            accident year.
        last_evaluation_year: Final year-end evaluation. Accident years
            after it are not generated.
        seed: Random seed; the same seed yields the same table.
        reopen_probability: Yearly probability a closed claim reopens.

    Returns:
        DataFrame with ``claim_number``, ``accident_date``, ``eval_date``,
        ``development_age``, ``status``, ``case_reserve``, ``paid`` and
        ``paid_incre``.
    """
    rng = np.random.default_rng(seed)
    rows: List[Dict[str, Any]] = []

    last_accident_year = min(first_accident_year + n_accident_years - 1, last_evaluation_year)
    for accident_year in range(first_accident_year, last_accident_year + 1):
        for i in range(claims_per_year):
            claim_number = f"{accident_year}-{i + 1:05d}"
            accident_date = date(accident_year, 1, 1) + timedelta(days=int(rng.integers(0, 365)))
            severity = float(rng.lognormal(9.0, 1.2))
            outstanding = severity
            status = OPEN
            paid = 0.0

            for period, eval_year in enumerate(range(accident_year, last_evaluation_year + 1)):
                payment = 0.0
                if status == OPEN:
                    if rng.random() < _closure_probability(period):
                        if rng.random() < 0.8:
                            payment = outstanding * rng.uniform(0.6, 1.0)
                        outstanding = 0.0
                        status = CLOSED
                    else:
                        if rng.random() < 0.7:
                            payment = outstanding * rng.beta(2, 5)
                        outstanding = (outstanding - payment) * rng.lognormal(0.0, 0.15)
                elif rng.random() < reopen_probability:
                    status = OPEN
                    outstanding = severity * rng.uniform(0.05, 0.3)
                    if rng.random() < 0.5:
                        payment = outstanding * rng.beta(2, 5)
                        outstanding -= payment

                payment = float(round(payment))
                paid += payment
                case_reserve = (
                    float(round(outstanding * rng.uniform(0.6, 1.3))) if status == OPEN else 0.0
                )
                rows.append(
                    {
                        "claim_number": claim_number,
                        "accident_date": pd.Timestamp(accident_date),
                        "eval_date": pd.Timestamp(date(eval_year, 12, 31)),
                        "development_age": 12 * (period + 1),
                        "status": status,
                        "case_reserve": case_reserve,
                        "paid": paid,
                        "paid_incre": payment,
                    }
                )

    claims = pd.DataFrame(rows)
    logger.info(
        "Generated %d snapshots for %d synthetic claims",
        len(claims),
        claims["claim_number"].nunique() if len(claims) else 0,
    )
    return claims
