"""Table generation for the claim development report.

Tables are rendered with tabulate in HTML (for the report), Markdown or
plain grid format (for the console).
"""

from typing import Any, Dict, List, Literal, Optional, Union

import numpy as np
import pandas as pd
from tabulate import tabulate  # type: ignore[import-untyped]

from ..classification import CrossValidationResult
from ..convergence import ConvergenceStats, convergence_table
from ..simulation import SimulationResults


class TableGenerator:
    """Generate formatted tables for reports.

    Attributes:
        default_format: Default output format for tables.
        precision: Default precision for numeric values.
    """

    def __init__(
        self,
        default_format: Literal["markdown", "html", "grid"] = "html",
        precision: int = 3,
    ):
        self.default_format = default_format
        self.precision = precision
        self._format_map = {"markdown": "pipe", "html": "html", "grid": "grid"}

    def generate(
        self,
        data: Union[pd.DataFrame, Dict, List],
        caption: str = "",
        index: bool = False,
        format: Optional[str] = None,
        precision: Optional[int] = None,
    ) -> str:
        """Generate a formatted table from data.

        Args:
            data: Input data (DataFrame, dict, or list).
            caption: Table caption.
            index: Whether to include row index.
            format: Output format (uses default if None).
            precision: Decimal precision (uses default if None).

        Returns:
            Formatted table string.

        Examples:
            >>> gen = TableGenerator(default_format="grid")
            >>> print(gen.generate(pd.DataFrame({"a": [1.0, 2.5]}), caption="Sample"))
        """
        df = self._to_dataframe(data)
        precision = self.precision if precision is None else precision
        for col in df.select_dtypes(include=[np.number]).columns:
            df[col] = df[col].round(precision)

        format_key = format or self.default_format
        table = tabulate(
            df,
            headers="keys",
            tablefmt=self._format_map.get(format_key, "pipe"),
            showindex=index,
            floatfmt=f",.{precision}f",
            intfmt=",",
        )
        if caption:
            table = self._add_caption(str(table), caption, format_key)
        return str(table)

    def _to_dataframe(self, data: Union[pd.DataFrame, Dict, List]) -> pd.DataFrame:
        if isinstance(data, pd.DataFrame):
            return data.copy()
        if isinstance(data, (dict, list)):
            return pd.DataFrame(data)
        raise ValueError(f"Unsupported data type: {type(data)}")

    def _add_caption(self, table: str, caption: str, format: str) -> str:
        if format == "html":
            return table.replace("<table>", f"<table>\n<caption>{caption}</caption>", 1)
        if format == "markdown":
            return f"**Table: {caption}**\n\n{table}"
        return f"{caption}\n{'-' * len(caption)}\n{table}"

    def key_value_table(self, values: Dict[str, Any], caption: str = "", **kwargs) -> str:
        """Two-column table of named values."""
        frame = pd.DataFrame({"Item": list(values), "Value": [_display(v) for v in values.values()]})
        return self.generate(frame, caption=caption, **kwargs)

    def coefficient_table(self, coefficients: pd.DataFrame, caption: str = "", **kwargs) -> str:
        """Model coefficient table indexed by term."""
        frame = coefficients.rename(
            columns={
                "estimate": "Estimate",
                "std_error": "Std. Error",
                "z_value": "z value",
                "p_value": "Pr(>|z|)",
            }
        )
        return self.generate(frame, caption=caption, index=True, **kwargs)

    def cross_validation_table(
        self, result: CrossValidationResult, caption: str = "", **kwargs
    ) -> str:
        """Mean and standard deviation of cross-validation metrics."""
        summary = result.summary().rename(columns={"mean": "Mean", "std": "Std. Dev."})
        caption = caption or f"{result.n_repeats} x {result.n_splits}-fold cross-validation"
        return self.generate(summary, caption=caption, index=True, **kwargs)

    def simulation_summary_table(self, results: SimulationResults, **kwargs) -> str:
        """Distribution of the per-trial totals next to their expectations."""
        totals = results.trial_totals()
        summary = totals.describe(percentiles=[0.05, 0.25, 0.5, 0.75, 0.95]).T
        summary["expected"] = pd.Series(results.expected_totals())
        return self.generate(
            summary.drop(columns="count"),
            caption=f"Simulated totals over {results.n_sims:,} trials",
            index=True,
            precision=1,
            **kwargs,
        )

    def outcome_table(self, results: SimulationResults, **kwargs) -> str:
        """Share of simulated claim outcomes by category."""
        shares = results.outcome_shares().rename("share").to_frame()
        shares.index.name = "outcome"
        return self.generate(shares, caption="Simulated outcome categories", index=True, **kwargs)

    def backtest_table(self, comparison: pd.DataFrame, **kwargs) -> str:
        """Actual totals against the simulated distribution."""
        return self.generate(
            comparison, caption="Simulated vs actual totals", index=True, precision=2, **kwargs
        )

    def convergence_table(self, stats: Dict[str, ConvergenceStats], **kwargs) -> str:
        """Simulated means against their model expectations."""
        return self.generate(
            convergence_table(stats), caption="Convergence diagnostics", index=True, **kwargs
        )


def _display(value: Any) -> Any:
    if isinstance(value, float):
        return f"{value:,.4g}"
    return value
