"""Claims data source and model-data preparation configuration.

Contains the settings that decide which claims feed the models: where the
claims table comes from, the development age projected from, the evaluation
date predictions are made at, and the length of one development period.
"""

from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class SyntheticDataConfig(BaseModel):
    """Settings for the built-in synthetic claims generator.

    Used when no ``data_path`` is configured, and by the demo and tests.

    Attributes:
        first_accident_year: Earliest accident year generated.
        n_accident_years: Number of consecutive accident years.
        claims_per_year: Number of claims reported per accident year.
        last_evaluation_year: Final year-end evaluation in the table.
        seed: Random seed for the generator.
    """

    first_accident_year: int = Field(default=2008, ge=1900, le=2200)
    n_accident_years: int = Field(default=10, ge=1, le=100)
    claims_per_year: int = Field(default=300, ge=1)
    last_evaluation_year: int = Field(default=2017, ge=1900, le=2200)
    seed: Optional[int] = Field(default=42, description="Generator seed (None for random)")


class DataConfig(BaseModel):
    """Model-data preparation parameters.

    Attributes:
        data_path: CSV or parquet claims table. When ``None`` the synthetic
            generator is used instead.
        development_age: Development age in months the models project from.
        evaluation_date: Date of the snapshots to predict. Training rows must
            have their future outcome observed on or before this date.
        period_months: Months between the current and the future evaluation.
        synthetic: Synthetic generator settings.

    Examples:
        Project 24-month claims evaluated at year-end 2016::

            data = DataConfig(development_age=24, evaluation_date=date(2016, 12, 31))
    """

    data_path: Optional[str] = Field(default=None, description="Claims table path")
    development_age: int = Field(default=24, ge=1, description="Age (months) to project from")
    evaluation_date: date = Field(
        default=date(2016, 12, 31), description="Evaluation date of claims to predict"
    )
    period_months: int = Field(default=12, ge=1, le=120, description="Development period length")
    synthetic: SyntheticDataConfig = Field(default_factory=SyntheticDataConfig)

    @field_validator("data_path")
    @classmethod
    def validate_data_path(cls, v: Optional[str]) -> Optional[str]:
        """Check the claims table has a supported extension.

        Args:
            v: Configured path, or None.

        Returns:
            The validated path.

        Raises:
            ValueError: If the extension is neither csv nor parquet.
        """
        if v is not None and Path(v).suffix.lower() not in (".csv", ".parquet"):
            raise ValueError(f"Claims table must be a .csv or .parquet file, got {v}")
        return v
