"""
PCA (Principal Component Analysis) implementation for dashmath.

This module computes principal components from the eigen-decomposition
of the sample covariance matrix, and projects rows onto them.
Standardization is left to the caller, so PCA runs on whichever matrix
it is given.
"""

import numpy as np
from typing import Any, Dict, Sequence

from dashmath.math.eigen import MAX_ITERATIONS, TOLERANCE, eigen_symmetric
from dashmath.math.stats import covariance, mean
from dashmath.utils.general import MatrixLike, as_matrix, as_vector, nonzero_or_one
from dashmath.utils.errors import FeatureMismatchError

MIN_PCA_ROWS = 3
MIN_PCA_FEATURES = 2


def explained_variance(eigenvalues: Sequence[float]) -> np.ndarray:
    """
    Calculate the fraction of total variance carried by each eigenvalue.

    Args:
        eigenvalues: Eigenvalues of the covariance matrix

    Returns:
        Explained-variance ratios (all zero when the eigenvalues sum to zero)
    """
    values = as_vector(eigenvalues)
    total = nonzero_or_one(float(np.sum(values)))
    return values / total


def cumulative_variance(explained: Sequence[float]) -> np.ndarray:
    """
    Calculate the running sum of explained-variance ratios.

    Args:
        explained: Explained-variance ratios

    Returns:
        Cumulative ratios of the same length
    """
    return np.cumsum(as_vector(explained))


def pca_available(n_rows: int, n_features: int,
                  min_rows: int = MIN_PCA_ROWS,
                  min_features: int = MIN_PCA_FEATURES) -> bool:
    """
    Check whether a dataset is large enough for a meaningful PCA.

    Args:
        n_rows: Number of rows
        n_features: Number of features
        min_rows: Minimum number of rows
        min_features: Minimum number of features

    Returns:
        True if PCA results are meaningful for this shape
    """
    return n_rows >= min_rows and n_features >= min_features


def run_pca(matrix: MatrixLike,
            max_iterations: int = MAX_ITERATIONS,
            tol: float = TOLERANCE) -> Dict[str, Any]:
    """
    Run PCA on a data matrix.

    Args:
        matrix: Data matrix, standardized or raw at the caller's choice
        max_iterations: Iteration cap for the eigensolver
        tol: Convergence tolerance for the eigensolver

    Returns:
        Dictionary with keys:
        - 'eigenvalues': descending eigenvalues, shape (p,)
        - 'eigenvectors': one unit vector per eigenvalue, shape (p, p)
        - 'explained_variance': eigenvalue / sum of eigenvalues
        - 'cumulative_variance': running sum of explained_variance
        - 'covariance_matrix': the p x p sample covariance
        - 'iterations': rotations used by the eigensolver
        - 'converged': whether the eigensolver converged
    """
    data = as_matrix(matrix)

    means = mean(data)
    cov = covariance(data, means)
    eigen = eigen_symmetric(cov, max_iterations=max_iterations, tol=tol)

    explained = explained_variance(eigen['eigenvalues'])

    return {
        'eigenvalues': eigen['eigenvalues'],
        'eigenvectors': eigen['eigenvectors'],
        'explained_variance': explained,
        'cumulative_variance': cumulative_variance(explained),
        'covariance_matrix': cov,
        'iterations': eigen['iterations'],
        'converged': eigen['converged']
    }


def project(matrix: MatrixLike,
            eigenvectors: MatrixLike,
            n_comps: int = 3) -> np.ndarray:
    """
    Project each row onto the leading principal components.

    The projection onto component k is the dot product of the row with
    eigenvector k. Components beyond those available are treated as zero
    vectors, so their projections are 0.

    Args:
        matrix: Data matrix, in the same form (standardized or raw) used for PCA
        eigenvectors: Eigenvectors from run_pca, one per row
        n_comps: Number of components to project onto

    Returns:
        Array of shape (n_rows, n_comps)
    """
    data = as_matrix(matrix)
    vecs = as_matrix(eigenvectors)
    n_rows, n_cols = data.shape

    comps = np.zeros((n_comps, n_cols))
    n_avail = min(n_comps, vecs.shape[0])
    if n_avail > 0:
        if vecs.shape[1] != n_cols:
            raise FeatureMismatchError(
                f"Eigenvectors have {vecs.shape[1]} entries, matrix has {n_cols} columns"
            )
        comps[:n_avail] = vecs[:n_avail]

    if n_rows == 0:
        return np.zeros((0, n_comps))

    return data @ comps.T


def pca_project(matrix: MatrixLike,
                n_comps: int = 3,
                max_iterations: int = MAX_ITERATIONS,
                tol: float = TOLERANCE) -> Dict[str, Any]:
    """
    Run PCA on a matrix and project its rows.

    Args:
        matrix: Data matrix
        n_comps: Number of components to project onto
        max_iterations: Iteration cap for the eigensolver
        tol: Convergence tolerance for the eigensolver

    Returns:
        Dictionary with 'pca' (the run_pca result) and 'projections'
    """
    data = as_matrix(matrix)
    pca_result = run_pca(data, max_iterations=max_iterations, tol=tol)
    return {
        'pca': pca_result,
        'projections': project(data, pca_result['eigenvectors'], n_comps)
    }
