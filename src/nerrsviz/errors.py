"""
Exceptions and warnings raised by nerrsviz.

Contract violations (unknown parameter, mismatched argument lengths) are
errors and abort the call before anything is computed. Data-quality and
methodological concerns are warnings; the computation still returns.
"""


class NerrsVizError(Exception):
    """Base class for nerrsviz errors."""


class InvalidParameter(NerrsVizError, KeyError):
    """A requested parameter is not a column of the observation table."""

    def __str__(self) -> str:
        # KeyError quotes its message; keep it readable
        return str(self.args[0]) if self.args else ""


class InvalidArity(NerrsVizError, ValueError):
    """Parameter, threshold and operator vectors differ in length."""


class DataQualityWarning(UserWarning):
    """QA/QC flag columns are still present; quality control was not applied."""


class GranularityMismatchWarning(UserWarning):
    """Monthly aggregation was requested on periodic (nutrient) grab-sample data."""
