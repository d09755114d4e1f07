"""Individual Claim Development Simulation"""

from ._version import __version__

# Modules are imported on first attribute access

__all__ = [
    "__version__",
    "AnalysisResults",
    "ClaimReportBuilder",
    "ClaimSimulator",
    "ClaimsDataError",
    "ClosureModel",
    "Config",
    "ModelData",
    "ModelNotFittedError",
    "OutcomeCategory",
    "PaymentAmountModel",
    "SimulationConfig",
    "SimulationResults",
    "ZeroPaymentModel",
    "generate_claims",
    "load_claims",
    "prepare_model_data",
    "run_analysis",
]


def __getattr__(name):
    """Lazy import of the public API."""
    if name in ("AnalysisResults", "run_analysis"):
        from .analysis import AnalysisResults, run_analysis

        return locals()[name]
    elif name == "ClaimReportBuilder":
        from .reporting import ClaimReportBuilder

        return ClaimReportBuilder
    elif name in ("ClaimSimulator", "SimulationResults"):
        from .simulation import ClaimSimulator, SimulationResults

        return locals()[name]
    elif name in ("ClaimsDataError", "ModelNotFittedError"):
        from .exceptions import ClaimsDataError, ModelNotFittedError

        return locals()[name]
    elif name in ("ClosureModel", "ZeroPaymentModel"):
        from .classification import ClosureModel, ZeroPaymentModel

        return locals()[name]
    elif name in ("Config", "SimulationConfig"):
        from .config import Config, SimulationConfig

        return locals()[name]
    elif name in ("ModelData", "load_claims", "prepare_model_data"):
        from .claims_data import ModelData, load_claims, prepare_model_data

        return locals()[name]
    elif name == "OutcomeCategory":
        from .claim_types import OutcomeCategory

        return OutcomeCategory
    elif name == "PaymentAmountModel":
        from .payment_model import PaymentAmountModel

        return PaymentAmountModel
    elif name == "generate_claims":
        from .synthetic import generate_claims

        return generate_claims
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
