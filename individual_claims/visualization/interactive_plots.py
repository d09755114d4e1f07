"""Interactive claim viewer built with Plotly.

The viewer is a single self-contained figure: one histogram trace per
claim, with a dropdown that switches which trace is visible. Embedded in
the HTML report it needs no server.
"""

import logging
from typing import Optional, Sequence

import plotly.graph_objects as go

from ..simulation import SimulationResults
from .core import COLOR_SEQUENCE, WSJ_COLORS

logger = logging.getLogger(__name__)

LAYOUT_THEME = {
    "plot_bgcolor": "white",
    "paper_bgcolor": "white",
    "font": {"family": "Arial, sans-serif", "size": 11, "color": WSJ_COLORS["black"]},
    "xaxis": {"gridcolor": WSJ_COLORS["light_gray"], "gridwidth": 0.5},
    "yaxis": {"gridcolor": WSJ_COLORS["light_gray"], "gridwidth": 0.5},
    "colorway": COLOR_SEQUENCE,
}


def create_claim_viewer(
    results: SimulationResults,
    claim_numbers: Optional[Sequence[str]] = None,
    max_claims: int = 200,
    title: str = "Simulated payments by claim",
    height: int = 500,
) -> go.Figure:
    """Dropdown-driven histogram of simulated payments for each claim.

    Args:
        results: Simulation output.
        claim_numbers: Claims to include; defaults to the simulated claims
            ordered by expected payment, largest first.
        max_claims: Cap on the number of claims in the dropdown.
        title: Figure title.
        height: Figure height in pixels.

    Returns:
        Plotly figure.

    Raises:
        KeyError: If a requested claim was not simulated.
    """
    summary = results.claim_summary()
    if claim_numbers is None:
        claim_numbers = summary.sort_values("expected_paid", ascending=False).index.tolist()
    if len(claim_numbers) > max_claims:
        logger.info("Claim viewer limited to %d of %d claims", max_claims, len(claim_numbers))
        claim_numbers = list(claim_numbers)[:max_claims]

    fig = go.Figure()
    for i, claim_number in enumerate(claim_numbers):
        trials = results.claim_distribution(claim_number)
        fig.add_trace(
            go.Histogram(
                x=trials["paid_incre_sim"],
                nbinsx=30,
                marker_color=WSJ_COLORS["blue"],
                opacity=0.8,
                name=str(claim_number),
                visible=i == 0,
            )
        )

    buttons = []
    for i, claim_number in enumerate(claim_numbers):
        row = summary.loc[claim_number]
        visible = [j == i for j in range(len(claim_numbers))]
        subtitle = (
            f"{title}: {claim_number} ({row['status']}, "
            f"P(open) {row['prob_open_sim']:.1%}, mean ${row['mean_paid']:,.0f})"
        )
        buttons.append(
            {
                "label": str(claim_number),
                "method": "update",
                "args": [{"visible": visible}, {"title": {"text": subtitle}}],
            }
        )

    first_title = buttons[0]["args"][1]["title"]["text"] if buttons else title
    fig.update_layout(
        title={"text": first_title},
        xaxis_title="Simulated incremental payment",
        yaxis_title="Trials",
        height=height,
        showlegend=False,
        updatemenus=[
            {
                "buttons": buttons,
                "direction": "down",
                "x": 1.0,
                "xanchor": "right",
                "y": 1.15,
                "yanchor": "top",
            }
        ],
        **LAYOUT_THEME,
    )
    return fig
