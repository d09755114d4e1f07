"""End-to-end claim development analysis.

:func:`run_analysis` is the one-call entry point: it prepares the claims,
fits the closure, zero-payment and payment models, simulates the next
development period for every claim in the prediction set and checks the
simulation against the model expectations and, where available, the
actual outcomes.
"""

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Dict, Optional, Union

import pandas as pd

from .claims_data import ModelData, load_claims, prepare_model_data
from .classification import ClosureModel, CrossValidationResult, ZeroPaymentModel
from .config import Config
from .convergence import ConvergenceStats, check_convergence
from .payment_model import PaymentAmountModel
from .simulation import ClaimSimulator, SimulationResults
from .synthetic import generate_claims

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResults:
    """Container for ``run_analysis()`` output.

    Attributes:
        config: The Config used for the run.
        model_data: Training and prediction claims.
        closure_model: Fitted closure model.
        zero_payment_model: Fitted zero-payment model.
        payment_model: Fitted payment-amount model.
        simulation: Simulated outcomes for the prediction claims.
        convergence: Convergence of the simulated totals, by metric.
        backtest: Simulated vs actual totals, or None when the actual
            outcomes of the prediction claims are not in the data.
        cv_results: Cross-validation results keyed ``closure`` and
            ``zero_payment``; empty when cross-validation is disabled.

    Examples:
        Quick inspection::

            results = run_analysis(Config())
            print(results.summary())
            results.render_report()
    """

    config: Config
    model_data: ModelData
    closure_model: ClosureModel
    zero_payment_model: ZeroPaymentModel
    payment_model: PaymentAmountModel
    simulation: SimulationResults
    convergence: Dict[str, ConvergenceStats]
    backtest: Optional[pd.DataFrame] = None
    cv_results: Dict[str, CrossValidationResult] = field(default_factory=dict)

    def summary(self) -> str:
        """Human-readable summary of the analysis."""
        data = self.model_data
        lines = [
            "Individual Claim Development Analysis",
            "=" * 40,
            f"Development age: {data.development_age} months",
            f"Evaluation date: {data.evaluation_date}",
            f"Training claims: {len(data.training):,}",
            f"Prediction claims: {len(data.prediction):,}",
            "",
        ]
        for model in (self.closure_model, self.zero_payment_model):
            stats = model.fit_statistics()
            lines.append(f"{model.name}: terms [{stats['selected_terms']}], AIC {stats['aic']:.1f}")
        payment = self.payment_model.fit_statistics()
        lines.append(
            f"{self.payment_model.name}: deviance explained "
            f"{payment['deviance_explained']:.1%}, dispersion {payment['dispersion']:.1f}"
        )
        for key, cv in self.cv_results.items():
            lines.append(
                f"CV {key}: accuracy {cv.mean('accuracy'):.3f}, AUC {cv.mean('auc'):.3f}"
            )
        lines.extend(["", self.simulation.summary(), ""])
        for stats in self.convergence.values():
            flag = "converged" if stats.converged else "NOT converged"
            lines.append(f"Convergence {stats.metric}: z = {stats.z_score:+.2f} ({flag})")
        if self.backtest is not None:
            lines.append("")
            for metric, row in self.backtest.iterrows():
                lines.append(
                    f"Actual {metric}: {row['actual']:,.0f} "
                    f"(simulated mean {row['simulated_mean']:,.0f}, "
                    f"percentile {row['percentile_rank']:.0%})"
                )
        return "\n".join(lines)

    def render_report(self, path: Optional[Union[str, Path]] = None) -> Path:
        """Write the HTML report.

        Args:
            path: Output file; defaults to the configured report path.

        Returns:
            Path of the written report.
        """
        from .reporting import ClaimReportBuilder

        return ClaimReportBuilder(self.config.report).save(self, path)


def load_configured_claims(config: Config) -> pd.DataFrame:
    """Claims from the configured file, or a synthetic table when none is set."""
    if config.data.data_path:
        return load_claims(config.data.data_path)
    synthetic = config.data.synthetic
    logger.info("No data path configured; generating synthetic claims")
    return generate_claims(
        first_accident_year=synthetic.first_accident_year,
        n_accident_years=synthetic.n_accident_years,
        claims_per_year=synthetic.claims_per_year,
        last_evaluation_year=synthetic.last_evaluation_year,
        seed=synthetic.seed,
    )


def run_analysis(
    config: Optional[Config] = None, claims: Optional[pd.DataFrame] = None
) -> AnalysisResults:
    """Run the full claim development pipeline.

    Args:
        config: Analysis configuration; defaults to ``Config()``.
        claims: Claims table to use instead of the configured source.

    Returns:
        AnalysisResults with the fitted models and simulated outcomes.

    Raises:
        ConfigurationError: If the configuration is inconsistent.
        ClaimsDataError: If the claims cannot support the models.
    """
    config = config or Config()
    if claims is None:
        config.validate()
        claims = load_configured_claims(config)

    data = prepare_model_data(
        claims,
        development_age=config.data.development_age,
        evaluation_date=config.data.evaluation_date,
        period_months=config.data.period_months,
    )

    closure = ClosureModel(config.modeling.closure).fit(data.training)
    zero_payment = ZeroPaymentModel(config.modeling.zero_payment).fit(data.training)
    payment = PaymentAmountModel(config.modeling.payment).fit(data.training)

    cv_results = {}
    if config.modeling.closure.run_cross_validation:
        cv_results["closure"] = closure.cross_validate(data.training)
    if config.modeling.zero_payment.run_cross_validation:
        cv_results["zero_payment"] = zero_payment.cross_validate(data.training)

    simulator = ClaimSimulator(closure, zero_payment, payment, config.simulation)
    simulation = simulator.simulate(data.prediction)

    backtest = simulation.compare_with_actual(data.prediction) if data.has_actuals else None
    if config.report.save_simulations:
        simulation.to_csv(config.report.output_path / "simulated_claims.csv")

    return AnalysisResults(
        config=config,
        model_data=data,
        closure_model=closure,
        zero_payment_model=zero_payment,
        payment_model=payment,
        simulation=simulation,
        convergence=check_convergence(simulation),
        backtest=backtest,
        cv_results=cv_results,
    )
