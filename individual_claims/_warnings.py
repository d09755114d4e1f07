"""Custom warning classes for the individual_claims package.

These warning classes allow users to programmatically filter, suppress,
or capture warnings using Python's standard ``warnings`` module.

Example:
    Silence data-quality warnings while preparing a large extract::

        import warnings
        from individual_claims._warnings import DataQualityWarning

        warnings.filterwarnings("ignore", category=DataQualityWarning)
"""


class IndividualClaimsWarning(UserWarning):
    """Base class for all individual_claims warnings."""


class ConfigurationWarning(IndividualClaimsWarning):
    """Unusual but accepted configuration parameters.

    Raised when a setting is valid but likely unintended, such as a
    simulation trial count too small for stable percentiles.
    """


class DataQualityWarning(IndividualClaimsWarning):
    """Data anomalies found while preparing claims.

    Raised when rows are dropped for missing predictors or when a
    claim history has gaps between evaluations.
    """
