"""Configuration management using Pydantic v2 models.

The configuration is hierarchical: one section per pipeline concern,
composed into the master :class:`Config`.

Sub-modules:
    core: Master Config class with YAML loading, overrides and validation.
    data: Claims source and model-data preparation settings.
    modeling: Stepwise classifier and payment GAM settings.
    simulation: Monte Carlo trial count, seeding and execution settings.
    reporting: Report output and logging settings.

Examples:
    Quick start with defaults (synthetic claims)::

        from individual_claims.config import Config

        config = Config()

    Packaged baseline with an override::

        config = Config.load("baseline", {"simulation.n_sims": 5000})
"""

from .core import Config
from .data import DataConfig, SyntheticDataConfig
from .exceptions import ConfigurationError
from .modeling import ClassifierConfig, ModelingConfig, PaymentModelConfig
from .reporting import LoggingConfig, ReportConfig
from .simulation import SimulationConfig

__all__ = [
    "ClassifierConfig",
    "Config",
    "ConfigurationError",
    "DataConfig",
    "LoggingConfig",
    "ModelingConfig",
    "PaymentModelConfig",
    "ReportConfig",
    "SimulationConfig",
    "SyntheticDataConfig",
]
