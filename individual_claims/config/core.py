"""Master configuration class composing all sub-configurations."""

import logging
from pathlib import Path
import sys
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field
import yaml

from .data import DataConfig
from .exceptions import ConfigurationError
from .modeling import ModelingConfig
from .reporting import LoggingConfig, ReportConfig
from .simulation import SimulationConfig
from .utils import deep_merge

DEFAULT_CONFIG_DIR = Path(__file__).parent.parent / "data" / "parameters"


class Config(BaseModel):
    """Complete configuration for an analysis run.

    Every section has defaults, so ``Config()`` runs the synthetic example
    end to end.

    Examples:
        Quick start with defaults::

            config = Config()

        Loading from file::

            config = Config.from_yaml(Path("config.yaml"))

        Overriding a nested value::

            config = Config().override({"simulation.n_sims": 500})
    """

    data: DataConfig = Field(default_factory=DataConfig)
    modeling: ModelingConfig = Field(default_factory=ModelingConfig)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> "Config":
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file.

        Returns:
            Config object with validated parameters.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            ValidationError: If configuration is invalid.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        # Remove private anchors if present
        data = {k: v for k, v in data.items() if not k.startswith("_")}

        return cls(**data)

    @classmethod
    def load(cls, name: str = "baseline", overrides: Optional[Dict[str, Any]] = None) -> "Config":
        """Load a packaged parameter file by name.

        Args:
            name: File name under ``data/parameters`` without the extension.
            overrides: Optional dot-notation overrides.

        Returns:
            Config object.
        """
        config = cls.from_yaml(DEFAULT_CONFIG_DIR / f"{name}.yaml")
        if overrides:
            config = config.override(overrides)
        return config

    @classmethod
    def from_dict(cls, data: dict, base_config: Optional["Config"] = None) -> "Config":
        """Create config from dictionary, optionally overriding base config.

        Args:
            data: Dictionary with configuration parameters.
            base_config: Optional base configuration to override.

        Returns:
            Config object with validated parameters.
        """
        if base_config is None:
            return cls(**data)

        merged = deep_merge(base_config.model_dump(), data)
        return cls(**merged)

    def override(self, overrides: Dict[str, Any]) -> "Config":
        """Create a new config with overridden parameters.

        Args:
            overrides: Dictionary mapping dot-notation paths to values.
                Example: ``{"simulation.n_sims": 5000}``

        Returns:
            New Config object with overrides applied.

        Raises:
            ValueError: If a path references an unknown config section or field.
        """
        override_dict: Dict[str, Any] = {}
        for key, value in overrides.items():
            parts = key.split(".")
            self._validate_override_path(key, parts)
            current = override_dict
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            current[parts[-1]] = value

        return Config.from_dict(override_dict, base_config=self)

    def _validate_override_path(self, key: str, parts: list) -> None:
        """Validate that a dot-notation path refers to valid config fields.

        Args:
            key: The full dot-notation key, for error messages.
            parts: The key split on dots.

        Raises:
            ValueError: If any part of the path is not a known field.
        """
        model: Any = self
        for depth, part in enumerate(parts):
            fields = type(model).model_fields
            if part not in fields:
                valid = ", ".join(sorted(fields.keys()))
                raise ValueError(
                    f"Invalid config path '{key}': '{part}' is not a valid field. "
                    f"Valid fields: {valid}"
                )
            model = getattr(model, part)
            if depth < len(parts) - 1 and not isinstance(model, BaseModel):
                raise ValueError(f"Invalid config path '{key}': '{part}' is not a section")

    def validation_issues(self) -> List[str]:
        """Collect issues that would stop an analysis run.

        Returns:
            List of problems; empty when the configuration is usable.
        """
        issues = []
        if self.data.data_path is not None:
            if not Path(self.data.data_path).exists():
                issues.append(f"Claims table not found: {self.data.data_path}")
        else:
            # Synthetic snapshots are taken at year-end, 12 months apart
            synthetic = self.data.synthetic
            evaluation_date = self.data.evaluation_date
            last_accident_year = synthetic.first_accident_year + synthetic.n_accident_years - 1
            if (evaluation_date.month, evaluation_date.day) != (12, 31):
                issues.append(f"Synthetic data is evaluated at year-end, got {evaluation_date}")
            if self.data.development_age % 12 or self.data.period_months % 12:
                issues.append("Synthetic data needs development_age and period_months in years")
            if evaluation_date.year > synthetic.last_evaluation_year:
                issues.append(
                    f"Evaluation date {evaluation_date} is after the last synthetic "
                    f"evaluation year {synthetic.last_evaluation_year}"
                )
            predicted_accident_year = evaluation_date.year + 1 - self.data.development_age // 12
            if not synthetic.first_accident_year <= predicted_accident_year <= last_accident_year:
                issues.append(
                    f"No synthetic accident year reaches age {self.data.development_age} "
                    f"at {evaluation_date}"
                )
        return issues

    def validate(self) -> None:
        """Raise if the configuration cannot drive an analysis run.

        Raises:
            ConfigurationError: Listing every issue found.
        """
        issues = self.validation_issues()
        if issues:
            raise ConfigurationError(issues)

    def to_yaml(self, path: Path) -> None:
        """Save configuration to YAML file.

        Args:
            path: Path where to save the configuration.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False, sort_keys=False)

    def setup_logging(self) -> None:
        """Configure logging based on settings.

        Sets up logging handlers for console and/or file output based
        on the logging configuration.
        """
        if not self.logging.enabled:
            return

        logger = logging.getLogger("individual_claims")
        logger.setLevel(getattr(logging, self.logging.level))
        logger.handlers.clear()

        formatter = logging.Formatter(self.logging.format)

        if self.logging.console_output:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

        if self.logging.log_file:
            log_path = self.report.output_path / self.logging.log_file
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
