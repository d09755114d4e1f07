"""Shared plot styling, colours and formatters."""

import base64
import io

import matplotlib.pyplot as plt
from matplotlib.figure import Figure
import seaborn as sns

from ..claim_types import CLOSED, OPEN

WSJ_COLORS = {
    "blue": "#0080C7",
    "dark_blue": "#003F5C",
    "red": "#D32F2F",
    "green": "#4CAF50",
    "gray": "#666666",
    "light_gray": "#E0E0E0",
    "black": "#000000",
    "orange": "#FF9800",
    "teal": "#00796B",
}

COLOR_SEQUENCE = [
    WSJ_COLORS["blue"],
    WSJ_COLORS["red"],
    WSJ_COLORS["green"],
    WSJ_COLORS["orange"],
    WSJ_COLORS["teal"],
    WSJ_COLORS["dark_blue"],
]

STATUS_COLORS = {OPEN: WSJ_COLORS["blue"], CLOSED: WSJ_COLORS["red"]}


def set_wsj_style():
    """Apply the house plot style to matplotlib and seaborn."""
    sns.set_theme(style="whitegrid", palette=COLOR_SEQUENCE)
    plt.rcParams.update(
        {
            "font.family": "sans-serif",
            "font.sans-serif": ["Arial", "Helvetica", "DejaVu Sans"],
            "font.size": 11,
            "axes.titlesize": 13,
            "axes.labelsize": 11,
            "legend.fontsize": 10,
            "axes.spines.top": False,
            "axes.spines.right": False,
            "axes.edgecolor": WSJ_COLORS["gray"],
            "axes.linewidth": 0.8,
            "grid.color": WSJ_COLORS["light_gray"],
            "grid.linewidth": 0.5,
            "lines.linewidth": 2,
        }
    )


def format_currency(value: float, decimals: int = 0, abbreviate: bool = False) -> str:
    """Format value as currency.

    Args:
        value: Numeric value to format
        decimals: Number of decimal places
        abbreviate: If True, use K/M/B notation for large numbers

    Returns:
        Formatted string (e.g., "$1,000" or "$1K" if abbreviate=True)

    Examples:
        >>> format_currency(1000)
        '$1,000'
        >>> format_currency(1500000, abbreviate=True, decimals=1)
        '$1.5M'
    """
    sign = "-" if value < 0 else ""
    value = abs(value)
    if abbreviate:
        for threshold, suffix in ((1e9, "B"), (1e6, "M"), (1e3, "K")):
            if value >= threshold:
                return f"{sign}${value / threshold:.{decimals}f}{suffix}"
        return f"{sign}${value:.{decimals}f}"
    return f"{sign}${value:,.{decimals}f}"


def format_percentage(value: float, decimals: int = 1) -> str:
    """Format value as percentage.

    Examples:
        >>> format_percentage(0.05)
        '5.0%'
    """
    return f"{value * 100:.{decimals}f}%"


class WSJFormatter:
    """Matplotlib tick formatters in the house style."""

    @staticmethod
    def currency_formatter(x, pos):
        return format_currency(x, decimals=0, abbreviate=True)

    @staticmethod
    def percentage_formatter(x, pos):
        return format_percentage(x, decimals=0)


def figure_to_base64(fig: Figure, dpi: int = 100) -> str:
    """Encode a figure as a base64 PNG for embedding in HTML.

    The figure is closed afterwards.
    """
    buffer = io.BytesIO()
    fig.savefig(buffer, format="png", dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    return base64.b64encode(buffer.getvalue()).decode("ascii")
