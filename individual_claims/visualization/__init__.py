"""Plots for the claim models and simulation.

- House styling and formatters
- Diagnostic figures for the fitted stages and the simulated totals
- An interactive single-claim viewer
"""

from .core import (
    COLOR_SEQUENCE,
    STATUS_COLORS,
    WSJ_COLORS,
    WSJFormatter,
    figure_to_base64,
    format_currency,
    format_percentage,
    set_wsj_style,
)
from .diagnostic_plots import (
    plot_claim_distribution,
    plot_convergence,
    plot_payment_fit,
    plot_probability_curve,
    plot_simulated_vs_actual,
)
from .interactive_plots import create_claim_viewer

__all__ = [
    "COLOR_SEQUENCE",
    "STATUS_COLORS",
    "WSJ_COLORS",
    "WSJFormatter",
    "create_claim_viewer",
    "figure_to_base64",
    "format_currency",
    "format_percentage",
    "plot_claim_distribution",
    "plot_convergence",
    "plot_payment_fit",
    "plot_probability_curve",
    "plot_simulated_vs_actual",
    "set_wsj_style",
]
