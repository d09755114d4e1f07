"""HTML report assembly for a completed analysis.

Tables come from :class:`TableGenerator`, figures are embedded as base64
PNGs and the claim viewer as an inline Plotly widget, so the rendered file
is standalone.
"""

from datetime import datetime
from importlib import metadata
import logging
from pathlib import Path
import platform
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

from jinja2 import Environment, FileSystemLoader
import yaml

from ..config import ReportConfig
from ..visualization import (
    create_claim_viewer,
    figure_to_base64,
    plot_convergence,
    plot_payment_fit,
    plot_probability_curve,
    plot_simulated_vs_actual,
)
from .table_generator import TableGenerator

if TYPE_CHECKING:
    from ..analysis import AnalysisResults

logger = logging.getLogger(__name__)

ENVIRONMENT_PACKAGES = (
    "numpy",
    "pandas",
    "scipy",
    "statsmodels",
    "scikit-learn",
    "pydantic",
    "matplotlib",
    "seaborn",
    "plotly",
    "jinja2",
    "tabulate",
)


def environment_info() -> Dict[str, str]:
    """Python and key package versions for the report footer."""
    info = {"python": platform.python_version(), "platform": platform.platform()}
    for package in ENVIRONMENT_PACKAGES:
        try:
            info[package] = metadata.version(package)
        except metadata.PackageNotFoundError:
            info[package] = "not installed"
    return info


class ClaimReportBuilder:
    """Render an :class:`~individual_claims.analysis.AnalysisResults` to HTML.

    Attributes:
        config: Report configuration.
        table_generator: Table generation utility.
        env: Jinja2 environment over the template directory.
    """

    template_name = "report.html.j2"

    def __init__(
        self,
        config: Optional[ReportConfig] = None,
        template_dir: Optional[Union[str, Path]] = None,
    ):
        self.config = config or ReportConfig()
        self.table_generator = TableGenerator(default_format="html")
        self.template_dir = (
            Path(template_dir) if template_dir else Path(__file__).parent / "templates"
        )
        self.env = Environment(loader=FileSystemLoader(str(self.template_dir)))

    def _figures(self, results: "AnalysisResults") -> Dict[str, str]:
        training = results.model_data.training
        prediction = results.model_data.prediction if results.model_data.has_actuals else None
        dpi = self.config.figure_dpi
        return {
            "closure": figure_to_base64(
                plot_probability_curve(results.closure_model, training), dpi
            ),
            "zero_payment": figure_to_base64(
                plot_probability_curve(results.zero_payment_model, training), dpi
            ),
            "payment": figure_to_base64(plot_payment_fit(results.payment_model, training), dpi),
            "totals": figure_to_base64(
                plot_simulated_vs_actual(results.simulation, prediction), dpi
            ),
            "convergence": figure_to_base64(plot_convergence(results.simulation), dpi),
        }

    def _model_section(self, model, cv_result=None) -> Dict[str, Any]:
        tables = self.table_generator
        section = {
            "name": model.name,
            "statistics": tables.key_value_table(model.fit_statistics(), caption="Fit statistics"),
            "coefficients": tables.coefficient_table(model.coefficients(), caption="Coefficients"),
            "cross_validation": None,
        }
        if cv_result is not None:
            section["cross_validation"] = tables.cross_validation_table(cv_result)
        return section

    def build_context(self, results: "AnalysisResults") -> Dict[str, Any]:
        """Collect everything the template renders.

        Args:
            results: Completed analysis.

        Returns:
            Template context dictionary.
        """
        tables = self.table_generator
        simulation = results.simulation
        viewer = create_claim_viewer(simulation, max_claims=self.config.max_viewer_claims)

        return {
            "title": self.config.title,
            "generated": datetime.now().strftime("%Y-%m-%d %H:%M"),
            "config_yaml": yaml.safe_dump(
                results.config.model_dump(mode="json"), default_flow_style=False, sort_keys=False
            ),
            "data_summary": tables.generate(
                results.model_data.summary(), caption="Modelling data", index=True
            ),
            "models": [
                self._model_section(
                    results.closure_model, results.cv_results.get("closure")
                ),
                self._model_section(
                    results.zero_payment_model, results.cv_results.get("zero_payment")
                ),
                self._model_section(results.payment_model),
            ],
            "figures": self._figures(results),
            "simulation_summary": tables.simulation_summary_table(simulation),
            "outcomes": tables.outcome_table(simulation),
            "convergence": tables.convergence_table(results.convergence),
            "backtest": (
                tables.backtest_table(results.backtest) if results.backtest is not None else None
            ),
            "claim_viewer": viewer.to_html(full_html=False, include_plotlyjs=True),
            "n_sims": simulation.n_sims,
            "seed": simulation.seed,
            "environment": environment_info(),
        }

    def render(self, results: "AnalysisResults") -> str:
        """Render the report HTML."""
        template = self.env.get_template(self.template_name)
        return template.render(**self.build_context(results))

    def save(self, results: "AnalysisResults", path: Optional[Union[str, Path]] = None) -> Path:
        """Render the report and write it to ``path``.

        Args:
            results: Completed analysis.
            path: Output file; defaults to ``config.report_path``.

        Returns:
            Path of the written report.
        """
        path = Path(path) if path else self.config.report_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render(results), encoding="utf-8")
        logger.info("Report written to %s", path)
        return path
