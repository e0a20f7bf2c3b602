"""
Exception types for dashmath.

Degenerate numeric inputs (empty matrices, constant columns, singular
covariances) are handled with documented fallback values. The exceptions
below are reserved for caller contract violations.
"""


class DashmathError(ValueError):
    """Base class for all dashmath errors."""


class RaggedMatrixError(DashmathError):
    """Raised when matrix rows have different lengths or the input is not 2-D."""


class NonFiniteValueError(DashmathError):
    """Raised when a matrix contains NaN or infinite values."""


class LabelMismatchError(DashmathError):
    """Raised when a label vector does not line up with its counterpart."""


class FeatureMismatchError(DashmathError):
    """Raised when a matrix has a different feature count than the fitted model."""


class NotFittedError(DashmathError):
    """Raised when a classifier is used before fit() has been called."""


class UnknownModelError(DashmathError):
    """Raised when a classifier name is not registered."""


class DatasetError(DashmathError):
    """Raised for unknown datasets, unknown columns or empty datasets."""
