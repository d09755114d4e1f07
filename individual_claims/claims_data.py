"""Loading, validation and preparation of individual claim snapshots.

A claims table holds one row per claim per evaluation. This module brings
such a table to canonical form, joins each snapshot to the same claim's
snapshot one development period later, and splits the rows at the
modelled development age into a training set (future outcome known as of
the evaluation date) and a prediction set (snapshots taken at the
evaluation date).
"""

from dataclasses import dataclass
from datetime import date
import logging
from pathlib import Path
from typing import Iterable, Union
import warnings

import numpy as np
import pandas as pd

from ._warnings import DataQualityWarning
from .claim_types import CLOSED, OPEN
from .exceptions import ClaimsDataError

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("claim_number", "eval_date", "development_age", "status", "case_reserve")
PREDICTORS = ("status", "case_reserve", "paid_incre")
FUTURE_COLUMNS = ("future_status", "future_paid_incre")

# Column names used by common claims extracts
COLUMN_ALIASES = {
    "claim_id": "claim_number",
    "evaluation_date": "eval_date",
    "devt": "development_age",
    "case": "case_reserve",
    "reserve": "case_reserve",
    "paid_incremental": "paid_incre",
    "status_act": "future_status",
    "paid_incre_act": "future_paid_incre",
}

_STATUS_LABELS = {
    "o": OPEN,
    "open": OPEN,
    "reopen": OPEN,
    "reopened": OPEN,
    "c": CLOSED,
    "closed": CLOSED,
}


@dataclass
class ModelData:
    """Training and prediction rows at one development age.

    Attributes:
        training: Snapshots at ``development_age`` whose future outcome was
            observed on or before ``evaluation_date``.
        prediction: Snapshots at ``development_age`` taken at
            ``evaluation_date``. Carries actual future outcomes when the
            data extends past the evaluation date.
        development_age: Modelled development age in months.
        evaluation_date: Evaluation date of the prediction snapshots.
        period_months: Length of the projected development period.
    """

    training: pd.DataFrame
    prediction: pd.DataFrame
    development_age: int
    evaluation_date: date
    period_months: int

    @property
    def has_actuals(self) -> bool:
        """True when every prediction row has an observed future outcome."""
        return bool(
            len(self.prediction) > 0
            and self.prediction["future_status"].notna().all()
            and self.prediction["future_paid_incre"].notna().all()
        )

    def summary(self) -> pd.DataFrame:
        """Describe the training and prediction sets side by side.

        Returns:
            DataFrame indexed by statistic with one column per set.
        """
        rows = {}
        for name, frame in (("training", self.training), ("prediction", self.prediction)):
            stats = {
                "claims": len(frame),
                "open_share": float((frame["status"] == OPEN).mean()) if len(frame) else np.nan,
                "mean_case_reserve": float(frame["case_reserve"].mean()),
                "mean_paid_incre": float(frame["paid_incre"].mean()),
            }
            if frame["future_status"].notna().any():
                stats["future_open_share"] = float((frame["future_status"] == OPEN).mean())
                stats["future_nonzero_share"] = float((frame["future_paid_incre"] != 0).mean())
                stats["future_paid_total"] = float(frame["future_paid_incre"].sum())
            rows[name] = stats
        return pd.DataFrame(rows)


def load_claims(path: Union[str, Path]) -> pd.DataFrame:
    """Read and normalise a claims table.

    Args:
        path: CSV or parquet file with one row per claim per evaluation.

    Returns:
        Normalised claims DataFrame (see :func:`normalize_claims`).

    Raises:
        FileNotFoundError: If the file does not exist.
        ClaimsDataError: If the table does not have the required columns.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Claims table not found: {path}")

    if path.suffix.lower() == ".parquet":
        raw = pd.read_parquet(path)
    else:
        raw = pd.read_csv(path, dtype={"claim_number": str, "claim_id": str})

    logger.info("Loaded %d claim snapshots from %s", len(raw), path)
    return normalize_claims(raw)


def _normalize_status(values: pd.Series) -> pd.Series:
    """Map status codes to the canonical Open/Closed labels."""
    lowered = values.astype(str).str.strip().str.lower()
    mapped = lowered.map(_STATUS_LABELS)
    unknown = sorted(values[mapped.isna() & values.notna()].astype(str).unique())
    if unknown:
        raise ClaimsDataError(f"Unrecognised claim status values: {unknown}")
    return mapped.where(values.notna())


def normalize_claims(claims: pd.DataFrame) -> pd.DataFrame:
    """Bring a claims table to canonical column names, types and order.

    Derives cumulative ``paid`` from ``paid_incre`` or the reverse when only
    one of them is present.

    Args:
        claims: Raw claims table.

    Returns:
        New DataFrame sorted by claim number and development age.

    Raises:
        ClaimsDataError: On missing columns, unknown statuses or duplicate
            (claim, development age) snapshots.
    """
    renames = {
        old: new
        for old, new in COLUMN_ALIASES.items()
        if old in claims.columns and new not in claims.columns
    }
    df = claims.rename(columns=renames).copy()

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ClaimsDataError(f"Claims table is missing required columns: {missing}")
    if "paid" not in df.columns and "paid_incre" not in df.columns:
        raise ClaimsDataError("Claims table needs a 'paid' or 'paid_incre' column")

    df["claim_number"] = df["claim_number"].astype(str)
    df["eval_date"] = pd.to_datetime(df["eval_date"])
    if "accident_date" in df.columns:
        df["accident_date"] = pd.to_datetime(df["accident_date"])
    if df["development_age"].isna().any():
        raise ClaimsDataError("development_age has missing values")
    df["development_age"] = pd.to_numeric(df["development_age"]).astype("int64")
    df["status"] = _normalize_status(df["status"])
    df["case_reserve"] = pd.to_numeric(df["case_reserve"], errors="coerce")
    if "future_status" in df.columns:
        df["future_status"] = _normalize_status(df["future_status"])

    df = df.sort_values(["claim_number", "development_age"]).reset_index(drop=True)
    duplicated = df.duplicated(["claim_number", "development_age"])
    if duplicated.any():
        examples = df.loc[duplicated, "claim_number"].unique()[:5].tolist()
        raise ClaimsDataError(
            f"{int(duplicated.sum())} duplicate claim snapshots at the same development age, "
            f"e.g. claims {examples}"
        )

    grouped = df.groupby("claim_number", sort=False)
    if "paid" not in df.columns:
        df["paid"] = grouped["paid_incre"].cumsum()
    elif "paid_incre" not in df.columns:
        df["paid_incre"] = grouped["paid"].diff().fillna(df["paid"])
    df["paid"] = pd.to_numeric(df["paid"], errors="coerce")
    df["paid_incre"] = pd.to_numeric(df["paid_incre"], errors="coerce")

    return df


def attach_future_outcomes(claims: pd.DataFrame, period_months: int) -> pd.DataFrame:
    """Join each snapshot to the same claim's snapshot one period later.

    Adds ``future_status``, ``future_paid_incre`` (cumulative paid at the
    future age minus cumulative paid now) and ``future_eval_date``. Rows
    without a later snapshot keep missing values.

    Args:
        claims: Normalised claims table.
        period_months: Months between the current and future snapshot.

    Returns:
        New DataFrame with the future columns attached.
    """
    future = claims[["claim_number", "development_age", "eval_date", "status", "paid"]].rename(
        columns={
            "eval_date": "future_eval_date",
            "status": "future_status",
            "paid": "_future_paid",
        }
    )
    future["development_age"] = future["development_age"] - period_months

    existing = [c for c in FUTURE_COLUMNS + ("future_eval_date",) if c in claims.columns]
    merged = claims.drop(columns=existing).merge(
        future, on=["claim_number", "development_age"], how="left"
    )
    merged["future_paid_incre"] = merged["_future_paid"] - merged["paid"]
    merged = merged.drop(columns="_future_paid")

    # A later snapshot exists but not exactly one period on
    last_age = merged.groupby("claim_number")["development_age"].transform("max")
    gaps = merged["future_status"].isna() & (merged["development_age"] + period_months <= last_age)
    if gaps.any():
        warnings.warn(
            f"{int(gaps.sum())} snapshots have later evaluations but none exactly "
            f"{period_months} months on; their future outcome is treated as unobserved",
            DataQualityWarning,
            stacklevel=2,
        )
    return merged


def _drop_incomplete(frame: pd.DataFrame, columns: Iterable[str], label: str) -> pd.DataFrame:
    """Drop rows with missing values in ``columns``, warning when any are dropped."""
    columns = list(columns)
    complete = frame[columns].notna().all(axis=1)
    n_dropped = int((~complete).sum())
    if n_dropped:
        warnings.warn(
            f"Dropped {n_dropped} {label} rows with missing values in {columns}",
            DataQualityWarning,
            stacklevel=3,
        )
    return frame.loc[complete].reset_index(drop=True)


def prepare_model_data(
    claims: pd.DataFrame,
    development_age: int,
    evaluation_date: date,
    period_months: int = 12,
) -> ModelData:
    """Split claims at one development age into training and prediction sets.

    Args:
        claims: Claims table, raw or normalised. Future outcome columns are
            derived unless already present.
        development_age: Development age (months) the models project from.
        evaluation_date: Evaluation date of the snapshots to predict.
        period_months: Length of the projected development period.

    Returns:
        ModelData with the training and prediction rows.

    Raises:
        ClaimsDataError: If either set ends up empty.
    """
    df = normalize_claims(claims)
    if all(c in df.columns for c in FUTURE_COLUMNS):
        if "future_eval_date" not in df.columns:
            df["future_eval_date"] = df["eval_date"] + pd.DateOffset(months=period_months)
    else:
        df = attach_future_outcomes(df, period_months)

    eval_ts = pd.Timestamp(evaluation_date)
    at_age = df[df["development_age"] == development_age]

    observed = at_age["future_status"].notna() & (at_age["future_eval_date"] <= eval_ts)
    training = _drop_incomplete(at_age[observed], PREDICTORS + FUTURE_COLUMNS, "training")
    prediction = _drop_incomplete(at_age[at_age["eval_date"] == eval_ts], PREDICTORS, "prediction")

    if training.empty:
        raise ClaimsDataError(
            f"No training claims at age {development_age} with outcomes observed "
            f"by {evaluation_date}"
        )
    if prediction.empty:
        raise ClaimsDataError(
            f"No claims at age {development_age} evaluated on {evaluation_date}"
        )

    logger.info(
        "Prepared %d training and %d prediction claims at age %d",
        len(training),
        len(prediction),
        development_age,
    )
    return ModelData(
        training=training,
        prediction=prediction,
        development_age=development_age,
        evaluation_date=evaluation_date,
        period_months=period_months,
    )
