"""Monte Carlo simulation configuration."""

import logging
from typing import Optional
import warnings

from pydantic import BaseModel, Field, field_validator, model_validator

from .._warnings import ConfigurationWarning

logger = logging.getLogger(__name__)


class SimulationConfig(BaseModel):
    """Simulation execution parameters.

    Attributes:
        n_sims: Number of independent trials per claim.
        seed: Root seed. Results are bit-identical for a fixed seed,
            trial count and chunk size. None draws fresh entropy.
        size_exponent: Exponent ``e`` of the negative binomial size
            parameter ``mu**e``; the success probability is
            ``1 / (1 + mu**(1 - e))`` so the draw has mean ``mu``.
        chunk_size: Trials per independently seeded chunk. None runs all
            trials as one chunk.
        n_workers: Worker processes for chunked execution.
        progress_bar: Show a tqdm progress bar over chunks.

    Examples:
        Quick run for a notebook::

            sim = SimulationConfig(n_sims=500, seed=7)
    """

    n_sims: int = Field(default=2000, ge=1, le=10_000_000, description="Number of trials")
    seed: Optional[int] = Field(default=1234, description="Random seed (None for random)")
    size_exponent: float = Field(
        default=0.2, gt=0, lt=1, description="Negative binomial size exponent"
    )
    chunk_size: Optional[int] = Field(default=None, ge=1, description="Trials per chunk")
    n_workers: int = Field(default=1, ge=1, le=256, description="Worker processes")
    progress_bar: bool = Field(default=False, description="Show progress bar")

    @field_validator("n_sims")
    @classmethod
    def warn_small_trial_count(cls, v: int) -> int:
        """Warn when the trial count is too small for stable percentiles.

        Args:
            v: Number of trials.

        Returns:
            int: The unchanged trial count.
        """
        if v < 100:
            warnings.warn(
                f"n_sims={v} gives unstable tail percentiles; 1000 or more is typical",
                ConfigurationWarning,
                stacklevel=2,
            )
        return v

    @model_validator(mode="after")
    def validate_workers(self):
        """Ensure parallel execution has chunks to distribute.

        Returns:
            SimulationConfig: The validated config object.

        Raises:
            ValueError: If several workers are requested without chunking.
        """
        if self.n_workers > 1 and self.chunk_size is None:
            raise ValueError("n_workers > 1 requires chunk_size to split trials across workers")
        return self

    @property
    def n_chunks(self) -> int:
        """Number of independently seeded trial chunks."""
        if self.chunk_size is None:
            return 1
        return -(-self.n_sims // self.chunk_size)
