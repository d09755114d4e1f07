"""Shared types for claim records, fitted models and simulated outcomes.

The three fitted stages are consumed through two capability protocols so
that any of them can be replaced or mocked independently:

- :class:`ProbabilityModel` for the closure and zero-payment classifiers.
- :class:`ExpectationModel` for the payment-amount regression.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

import numpy as np
import pandas as pd

OPEN = "Open"
CLOSED = "Closed"
STATUSES = (OPEN, CLOSED)


class OutcomeCategory(Enum):
    """How a simulated payment was determined."""

    CLOSED_CLOSED = "closed-closed"  # Closed now and closed at the future age
    ZERO = "zero"  # Zero-payment draw came up zero
    NONZERO = "nonzero"  # Drawn from the payment distribution


@runtime_checkable
class ProbabilityModel(Protocol):
    """A fitted classifier returning one probability per claim row."""

    def predict_probability(self, claims: pd.DataFrame) -> np.ndarray:
        """Return the modelled event probability for each row of ``claims``."""
        ...


@runtime_checkable
class ExpectationModel(Protocol):
    """A fitted regression returning one expected value per claim row."""

    def predict_expectation(self, claims: pd.DataFrame) -> np.ndarray:
        """Return the expected response for each row of ``claims``."""
        ...


@dataclass(frozen=True)
class SimulatedOutcome:
    """One claim's outcome in one simulation trial."""

    sim: int
    claim_number: str
    status: str
    future_status: str
    payment: int
    outcome: OutcomeCategory

    @property
    def is_closed_closed(self) -> bool:
        """True when the claim was closed at both ages."""
        return self.outcome is OutcomeCategory.CLOSED_CLOSED
