"""Diagnostic figures for the fitted models and the simulation."""

from typing import Optional, Tuple

from matplotlib.figure import Figure
import matplotlib.pyplot as plt
from matplotlib.ticker import FuncFormatter
import numpy as np
import pandas as pd
import seaborn as sns

from ..claim_types import CLOSED, OPEN
from ..classification import BinaryClaimModel
from ..convergence import monte_carlo_standard_error, running_means
from ..payment_model import PaymentAmountModel
from ..simulation import SimulationResults
from .core import COLOR_SEQUENCE, STATUS_COLORS, WSJ_COLORS, WSJFormatter, set_wsj_style


def _reserve_grid(claims: pd.DataFrame, n_points: int = 100) -> np.ndarray:
    upper = float(claims["case_reserve"].quantile(0.99))
    return np.linspace(0.0, max(upper, 1.0), n_points)


def plot_probability_curve(
    model: BinaryClaimModel,
    claims: pd.DataFrame,
    title: Optional[str] = None,
    figsize: Tuple[int, int] = (9, 5),
) -> Figure:
    """Fitted probability against case reserve, one line per status mix.

    Prior incremental payment is held at its training median.

    Args:
        model: Fitted closure or zero-payment model.
        claims: Training claims, for the grid range and medians.
        title: Plot title; defaults to the model name.
        figsize: Figure size (width, height).

    Returns:
        Matplotlib figure.
    """
    set_wsj_style()
    frame = model.training_frame(claims)
    grid = _reserve_grid(frame)

    if "future_status" in model.categorical:
        combos = [(OPEN, OPEN), (OPEN, CLOSED), (CLOSED, OPEN)]
    else:
        combos = [(OPEN, None), (CLOSED, None)]

    fig, ax = plt.subplots(figsize=figsize)
    for (status, future), color in zip(combos, COLOR_SEQUENCE):
        curve = pd.DataFrame(
            {
                "status": status,
                "case_reserve": grid,
                "paid_incre": float(frame["paid_incre"].median()),
            }
        )
        label = status
        if future is not None:
            curve["future_status"] = future
            label = f"{status} → {future}"
        ax.plot(grid, model.predict_probability(curve), color=color, label=label)

    ax.set_ylim(0, 1)
    ax.set_xlabel("Case reserve")
    ax.set_ylabel("Probability")
    ax.xaxis.set_major_formatter(FuncFormatter(WSJFormatter.currency_formatter))
    ax.yaxis.set_major_formatter(FuncFormatter(WSJFormatter.percentage_formatter))
    ax.set_title(title or f"Fitted {model.name}")
    ax.legend(title="Status")
    fig.tight_layout()
    return fig


def plot_payment_fit(
    model: PaymentAmountModel,
    claims: pd.DataFrame,
    figsize: Tuple[int, int] = (13, 5),
) -> Figure:
    """Payment model fitted values against actuals, and its reserve curve.

    Args:
        model: Fitted payment model.
        claims: Training claims.
        figsize: Figure size (width, height).

    Returns:
        Matplotlib figure with two panels.
    """
    set_wsj_style()
    frame = model.training_frame(claims)
    fitted = model.predict_expectation(frame)

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=figsize)
    sns.scatterplot(
        x=frame["future_paid_incre"].to_numpy(),
        y=fitted,
        hue=frame["future_status"].to_numpy(),
        palette=STATUS_COLORS,
        alpha=0.6,
        s=18,
        ax=ax1,
    )
    actual = frame["future_paid_incre"]
    limits = [max(1.0, min(fitted.min(), actual.min())), max(fitted.max(), actual.max())]
    ax1.plot(limits, limits, color=WSJ_COLORS["gray"], linestyle="--", linewidth=1)
    ax1.set_xscale("log")
    ax1.set_yscale("log")
    ax1.set_xlabel("Actual payment")
    ax1.set_ylabel("Fitted payment")
    ax1.set_title("Fitted vs actual")
    ax1.legend(title="Future status")

    grid = _reserve_grid(frame)
    for status in (OPEN, CLOSED):
        ax2.plot(
            grid,
            model.partial_curve("case_reserve", grid, frame, future_status=status),
            color=STATUS_COLORS[status],
            label=status,
        )
    ax2.set_xlabel("Case reserve")
    ax2.set_ylabel("Expected payment")
    ax2.xaxis.set_major_formatter(FuncFormatter(WSJFormatter.currency_formatter))
    ax2.yaxis.set_major_formatter(FuncFormatter(WSJFormatter.currency_formatter))
    ax2.set_title("Expected payment by case reserve")
    ax2.legend(title="Future status")

    fig.suptitle("Payment model")
    fig.tight_layout()
    return fig


def plot_simulated_vs_actual(
    results: SimulationResults,
    prediction: Optional[pd.DataFrame] = None,
    bins: int = 40,
    figsize: Tuple[int, int] = (13, 5),
) -> Figure:
    """Histograms of simulated open counts and total payments.

    Args:
        results: Simulation output.
        prediction: Claims with actual future outcomes; when given, actual
            totals are marked.
        bins: Histogram bins.
        figsize: Figure size (width, height).

    Returns:
        Matplotlib figure with two panels.
    """
    set_wsj_style()
    totals = results.trial_totals()
    expected = results.expected_totals()
    actuals = {}
    if prediction is not None and not prediction["future_paid_incre"].isna().any():
        actuals = {
            "open_count": (prediction["future_status"] == OPEN).sum(),
            "total_paid": prediction["future_paid_incre"].sum(),
        }

    fig, axes = plt.subplots(1, 2, figsize=figsize)
    panels = (("open_count", "Open claims"), ("total_paid", "Total incremental payments"))
    for ax, (metric, label) in zip(axes, panels):
        sns.histplot(totals[metric], bins=bins, color=WSJ_COLORS["blue"], alpha=0.7, ax=ax)
        ax.axvline(expected[metric], color=WSJ_COLORS["gray"], linestyle="--", label="Expected")
        if metric in actuals:
            ax.axvline(actuals[metric], color=WSJ_COLORS["red"], label="Actual")
        ax.set_xlabel(label)
        ax.set_ylabel("Trials")
        ax.set_title(f"Simulated {label.lower()}")
        ax.legend()
    axes[1].xaxis.set_major_formatter(FuncFormatter(WSJFormatter.currency_formatter))

    fig.tight_layout()
    return fig


def plot_claim_distribution(
    results: SimulationResults,
    claim_number: str,
    bins: int = 30,
    figsize: Tuple[int, int] = (9, 5),
) -> Figure:
    """Histogram of one claim's simulated payments.

    Raises:
        KeyError: If the claim was not simulated.
    """
    set_wsj_style()
    trials = results.claim_distribution(claim_number)
    payments = trials["paid_incre_sim"]

    fig, ax = plt.subplots(figsize=figsize)
    sns.histplot(payments, bins=bins, color=WSJ_COLORS["blue"], alpha=0.7, ax=ax)
    ax.axvline(payments.mean(), color=WSJ_COLORS["red"], label=f"Mean {payments.mean():,.0f}")
    ax.set_xlabel("Simulated incremental payment")
    ax.set_ylabel("Trials")
    ax.xaxis.set_major_formatter(FuncFormatter(WSJFormatter.currency_formatter))
    ax.set_title(f"Claim {claim_number} ({trials['status'].iloc[0]})")
    ax.legend()
    fig.tight_layout()
    return fig


def plot_convergence(results: SimulationResults, figsize: Tuple[int, int] = (13, 5)) -> Figure:
    """Running means of the trial totals with a two-standard-error band.

    Args:
        results: Simulation output.
        figsize: Figure size (width, height).

    Returns:
        Matplotlib figure with one panel per total.
    """
    set_wsj_style()
    totals = results.trial_totals()[["open_count", "total_paid"]]
    means = running_means(totals)
    expected = results.expected_totals()
    n = means.index.to_numpy()

    fig, axes = plt.subplots(1, 2, figsize=figsize)
    for ax, metric in zip(axes, means.columns):
        sd = totals[metric].std(ddof=1) if len(totals) > 1 else 0.0
        band = 2 * sd / np.sqrt(n)
        ax.plot(n, means[metric], color=WSJ_COLORS["blue"], label="Running mean")
        ax.fill_between(
            n,
            expected[metric] - band,
            expected[metric] + band,
            color=WSJ_COLORS["light_gray"],
            alpha=0.6,
            label="Expected ± 2 SE",
        )
        ax.axhline(expected[metric], color=WSJ_COLORS["gray"], linestyle="--")
        ax.set_xlabel("Trials")
        ax.set_title(
            f"{metric.replace('_', ' ').capitalize()} "
            f"(MCSE {monte_carlo_standard_error(totals[metric].to_numpy()):,.2f})"
        )
        ax.legend()
    axes[1].yaxis.set_major_formatter(FuncFormatter(WSJFormatter.currency_formatter))

    fig.tight_layout()
    return fig
