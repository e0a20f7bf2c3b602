"""
Symmetric eigensolver for dashmath.

This module implements the classical (largest pivot) Jacobi rotation
method for real symmetric matrices such as covariance and correlation
matrices.
"""

import logging
import math
import numpy as np
from typing import Any, Dict, Tuple

from dashmath.utils.general import MatrixLike, as_matrix
from dashmath.utils.errors import RaggedMatrixError

# Set up logging
logger = logging.getLogger(__name__)

MAX_ITERATIONS = 100
TOLERANCE = 1e-9


def find_pivot(d: np.ndarray) -> Tuple[int, int, float]:
    """
    Find the largest-magnitude element above the diagonal.

    Ties are resolved in favour of the first element in row-major order.

    Args:
        d: Square working matrix

    Returns:
        Tuple of (row, column, magnitude)
    """
    n = d.shape[0]
    if n < 2:
        return 0, 1, 0.0

    upper = np.abs(np.triu(d, k=1))
    flat_idx = int(np.argmax(upper))
    p, q = divmod(flat_idx, n)
    return p, q, float(upper[p, q])


def jacobi_rotate(d: np.ndarray, v: np.ndarray, p: int, q: int) -> None:
    """
    Apply one Givens rotation in place, zeroing d[p, q] and d[q, p].

    Args:
        d: Symmetric working matrix (modified in place)
        v: Accumulated rotation matrix (modified in place)
        p: Pivot row
        q: Pivot column
    """
    phi = 0.5 * math.atan2(2.0 * d[p, q], d[q, q] - d[p, p])
    c = math.cos(phi)
    s = math.sin(phi)

    d_pp = d[p, p] * c * c - 2.0 * d[p, q] * c * s + d[q, q] * s * s
    d_qq = d[p, p] * s * s + 2.0 * d[p, q] * c * s + d[q, q] * c * c

    # Rows and columns p and q of the remaining entries
    col_p = d[:, p].copy()
    col_q = d[:, q].copy()
    d[:, p] = c * col_p - s * col_q
    d[:, q] = s * col_p + c * col_q
    d[p, :] = d[:, p]
    d[q, :] = d[:, q]

    d[p, p] = d_pp
    d[q, q] = d_qq
    d[p, q] = 0.0
    d[q, p] = 0.0

    v_p = v[:, p].copy()
    v_q = v[:, q].copy()
    v[:, p] = c * v_p - s * v_q
    v[:, q] = s * v_p + c * v_q


def eigen_symmetric(matrix: MatrixLike,
                    max_iterations: int = MAX_ITERATIONS,
                    tol: float = TOLERANCE) -> Dict[str, Any]:
    """
    Compute eigenvalues and eigenvectors of a symmetric matrix.

    Each iteration eliminates the largest off-diagonal element with a
    plane rotation. Iteration stops once that element is below tol, or
    after max_iterations rotations, in which case the current
    approximation is returned as-is.

    The input must be exactly symmetric; only the upper triangle is
    searched for pivots.

    Args:
        matrix: Symmetric p x p matrix
        max_iterations: Maximum number of rotations
        tol: Off-diagonal magnitude treated as zero

    Returns:
        Dictionary with keys:
        - 'eigenvalues': descending eigenvalues, shape (p,)
        - 'eigenvectors': unit eigenvectors, one row per eigenvalue, shape (p, p)
        - 'iterations': number of rotations applied
        - 'converged': whether the off-diagonal fell below tol
    """
    a = as_matrix(matrix)
    n = a.shape[0]

    if a.shape[1] != n:
        raise RaggedMatrixError(f"Expected a square matrix, got shape {a.shape}")

    d = a.copy()
    v = np.eye(n)

    iterations = 0
    converged = False

    while True:
        p, q, max_val = find_pivot(d)
        if max_val < tol:
            converged = True
            break
        if iterations >= max_iterations:
            break

        jacobi_rotate(d, v, p, q)
        iterations += 1

    if not converged:
        logger.warning(
            f"Jacobi eigensolver stopped at {iterations} iterations "
            f"(off-diagonal {max_val:.3g} >= {tol:g}); returning approximation"
        )

    eigenvalues = np.diag(d).copy()
    order = np.argsort(-eigenvalues, kind='stable')

    return {
        'eigenvalues': eigenvalues[order],
        'eigenvectors': v.T[order],
        'iterations': iterations,
        'converged': converged
    }
