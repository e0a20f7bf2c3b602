"""
Statistical primitives for the dashmath engine.

This module provides the mean vector, sample covariance and z-score
standardization used by the PCA pipeline, the classifiers and the
density surfaces.
"""

import numpy as np
from typing import Any, Dict, Optional, Sequence

from dashmath.utils.general import MatrixLike, as_labels, as_matrix, as_vector, group_indices
from dashmath.utils.errors import FeatureMismatchError, LabelMismatchError


def mean(matrix: MatrixLike) -> np.ndarray:
    """
    Calculate the per-column arithmetic mean of a matrix.

    Args:
        matrix: Data matrix (rows are observations, columns are features)

    Returns:
        Mean vector of length p, or an empty vector for a zero-row matrix
    """
    data = as_matrix(matrix)

    if data.shape[0] == 0:
        return np.zeros(0)

    return data.mean(axis=0)


def covariance(matrix: MatrixLike, means: Optional[Sequence[float]] = None) -> np.ndarray:
    """
    Calculate the sample covariance matrix with Bessel's correction.

    The result is symmetric by construction. With fewer than two rows the
    covariance is undefined, and a zero-filled p x p matrix is returned.

    Args:
        matrix: Data matrix (rows are observations, columns are features)
        means: Column means (computed from the matrix when omitted)

    Returns:
        p x p covariance matrix
    """
    data = as_matrix(matrix)
    n_rows, n_cols = data.shape

    if means is None:
        center = mean(data)
    else:
        center = as_vector(means)

    if n_cols == 0:
        n_cols = len(center)

    if n_rows < 2:
        return np.zeros((n_cols, n_cols))

    if len(center) != n_cols:
        raise FeatureMismatchError(
            f"Got {len(center)} means for a matrix with {n_cols} columns"
        )

    centered = data - center
    cov = centered.T @ centered / (n_rows - 1)

    # Exact symmetry is required by the Jacobi eigensolver
    return (cov + cov.T) / 2.0


def column_std(matrix: MatrixLike) -> np.ndarray:
    """
    Calculate per-column sample standard deviations for standardization.

    Zero (or undefined) standard deviations are replaced by 1.0.

    Args:
        matrix: Data matrix

    Returns:
        Vector of divisors, one per column
    """
    data = as_matrix(matrix)
    n_rows, n_cols = data.shape

    if n_rows < 2:
        return np.ones(n_cols)

    stds = data.std(axis=0, ddof=1)
    return np.where(stds == 0, 1.0, stds)


def standardize(matrix: MatrixLike) -> np.ndarray:
    """
    Z-score standardize each column of a matrix.

    Each column has its mean subtracted and is divided by its sample
    standard deviation. Constant columns are only mean-centered.

    Args:
        matrix: Data matrix

    Returns:
        Standardized matrix with the same shape
    """
    data = as_matrix(matrix)

    if data.shape[0] == 0:
        return data

    return (data - mean(data)) / column_std(data)


def class_statistics(matrix: MatrixLike,
                     labels: Sequence[Any],
                     min_count: int = 2) -> Dict[str, Dict[str, Any]]:
    """
    Compute the mean vector and covariance matrix of each class.

    Classes with fewer than min_count rows are omitted because their
    covariance is not informative.

    Args:
        matrix: Data matrix
        labels: One class label per row
        min_count: Minimum number of rows for a class to be reported

    Returns:
        Mapping from class label (sorted) to a dict with 'mean', 'cov' and 'count'
    """
    data = as_matrix(matrix)
    labels = as_labels(labels)

    if len(labels) != data.shape[0]:
        raise LabelMismatchError(
            f"Got {len(labels)} labels for a matrix with {data.shape[0]} rows"
        )

    result = {}
    for label, indices in group_indices(labels).items():
        if len(indices) < min_count:
            continue

        class_data = data[indices]
        class_mean = mean(class_data)
        result[label] = {
            'mean': class_mean,
            'cov': covariance(class_data, class_mean),
            'count': len(indices)
        }

    return result
