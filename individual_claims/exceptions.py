"""Exceptions raised while preparing claims data and applying models."""


class ClaimsDataError(ValueError):
    """Raised when a claims table cannot be used for modelling.

    Covers missing required columns, unrecognised status values, and
    filters that leave no training or prediction rows.
    """


class ModelNotFittedError(RuntimeError):
    """Raised when a model is used for prediction before ``fit`` was called."""

    def __init__(self, model_name: str) -> None:
        self.model_name = model_name
        super().__init__(f"{model_name} has not been fitted; call fit() first")
