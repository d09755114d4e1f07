"""Tests for diagnostic plots and the interactive claim viewer."""

from matplotlib.figure import Figure
import matplotlib.pyplot as plt
import plotly.graph_objects as go
import pytest

from individual_claims.config import SimulationConfig
from individual_claims.simulation import ClaimSimulator
from individual_claims.visualization import (
    create_claim_viewer,
    figure_to_base64,
    format_currency,
    format_percentage,
    plot_claim_distribution,
    plot_convergence,
    plot_payment_fit,
    plot_probability_curve,
    plot_simulated_vs_actual,
)


@pytest.fixture
def results(make_stage_models, claims_frame):
    simulator = ClaimSimulator(*make_stage_models(), config=SimulationConfig(n_sims=200, seed=1))
    return simulator.simulate(claims_frame)


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


class TestFormatters:
    def test_currency(self):
        assert format_currency(1000) == "$1,000"
        assert format_currency(-2500) == "-$2,500"
        assert format_currency(1_500_000, decimals=1, abbreviate=True) == "$1.5M"
        assert format_currency(12, abbreviate=True) == "$12"

    def test_percentage(self):
        assert format_percentage(0.05) == "5.0%"


class TestModelPlots:
    def test_closure_curve(self, fitted_models, model_data):
        fig = plot_probability_curve(fitted_models["closure"], model_data.training)
        assert isinstance(fig, Figure)
        assert len(fig.axes[0].lines) == 2

    def test_zero_payment_curve(self, fitted_models, model_data):
        fig = plot_probability_curve(fitted_models["zero_payment"], model_data.training)
        assert len(fig.axes[0].lines) == 3

    def test_payment_fit(self, fitted_models, model_data):
        fig = plot_payment_fit(fitted_models["payment"], model_data.training)
        assert len(fig.axes) == 2


class TestSimulationPlots:
    def test_simulated_vs_actual(self, results, claims_frame):
        prediction = claims_frame.assign(
            future_status=["Open", "Closed", "Closed"], future_paid_incre=[100.0, 0.0, 0.0]
        )
        fig = plot_simulated_vs_actual(results, prediction)
        # Expected and actual markers on each panel
        assert all(len(ax.lines) == 2 for ax in fig.axes)

    def test_simulated_without_actuals(self, results):
        fig = plot_simulated_vs_actual(results)
        assert all(len(ax.lines) == 1 for ax in fig.axes)

    def test_claim_distribution(self, results):
        fig = plot_claim_distribution(results, "A-1")
        assert "A-1" in fig.axes[0].get_title()

    def test_unknown_claim(self, results):
        with pytest.raises(KeyError):
            plot_claim_distribution(results, "nope")

    def test_convergence(self, results):
        fig = plot_convergence(results)
        assert len(fig.axes) == 2

    def test_base64_export(self, results):
        encoded = figure_to_base64(plot_convergence(results), dpi=50)
        assert encoded.startswith("iVBOR")


class TestClaimViewer:
    def test_one_trace_per_claim(self, results):
        fig = create_claim_viewer(results)
        assert isinstance(fig, go.Figure)
        assert len(fig.data) == 3
        assert [trace.visible for trace in fig.data] == [True, False, False]
        buttons = fig.layout.updatemenus[0].buttons
        assert len(buttons) == 3
        assert buttons[1].args[0]["visible"] == [False, True, False]

    def test_claim_cap(self, results):
        fig = create_claim_viewer(results, max_claims=2)
        assert len(fig.data) == 2

    def test_explicit_claims(self, results):
        fig = create_claim_viewer(results, claim_numbers=["C-3"])
        assert fig.data[0].name == "C-3"
