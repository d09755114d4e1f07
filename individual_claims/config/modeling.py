"""Model fitting configuration.

Covers the two stepwise logistic classifiers (closure and zero-payment) and
the quasi-Poisson additive model used for incremental payment amounts.
"""

from typing import Literal

from pydantic import BaseModel, Field


class ClassifierConfig(BaseModel):
    """Stepwise logistic regression and cross-validation settings.

    Attributes:
        stepwise_direction: ``both`` starts from the full model and may drop
            or re-add terms; ``backward`` only drops; ``forward`` starts from
            the intercept-only model and only adds.
        max_steps: Upper bound on selection steps.
        cv_folds: Folds per cross-validation repeat.
        cv_repeats: Number of cross-validation repeats.
        cv_seed: Seed for fold assignment.
        run_cross_validation: Skip cross-validation entirely when False.
    """

    stepwise_direction: Literal["both", "backward", "forward"] = Field(default="both")
    max_steps: int = Field(default=100, ge=1)
    cv_folds: int = Field(default=5, ge=2, le=50)
    cv_repeats: int = Field(default=3, ge=1, le=100)
    cv_seed: int = Field(default=1234)
    run_cross_validation: bool = Field(default=True)


class PaymentModelConfig(BaseModel):
    """Generalized additive model settings for payment amounts.

    Attributes:
        spline_df: Basis dimension of each B-spline smooth.
        spline_degree: Polynomial degree of the B-splines.
        penalty: Smoothing penalty weight applied to each smooth term.
        max_iterations: Maximum penalized IRLS iterations.
    """

    spline_df: int = Field(default=6, ge=4, le=30)
    spline_degree: int = Field(default=3, ge=1, le=5)
    penalty: float = Field(default=1.0, ge=0)
    max_iterations: int = Field(default=1000, ge=10)


class ModelingConfig(BaseModel):
    """Settings for the three fitted stages."""

    closure: ClassifierConfig = Field(default_factory=ClassifierConfig)
    zero_payment: ClassifierConfig = Field(default_factory=ClassifierConfig)
    payment: PaymentModelConfig = Field(default_factory=PaymentModelConfig)
