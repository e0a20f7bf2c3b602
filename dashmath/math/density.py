"""
Multivariate Gaussian density for dashmath.

Only the two-dimensional case is supported, using a closed-form 2x2
determinant and inverse. This is what the likelihood surfaces need.
"""

import math
import numpy as np
from typing import Any, Dict, Sequence

from dashmath.utils.general import as_vector

SINGULAR_THRESHOLD = 1e-9
GRID_STEPS = 50
GRID_PADDING = 0.2


def gaussian_pdf_2d(point: Sequence[float],
                    mean: Sequence[float],
                    cov: Sequence[Sequence[float]]) -> float:
    """
    Evaluate a bivariate Gaussian density.

    Returns 0 for near-singular covariances (determinant <= 1e-9) and for
    any input that is not two-dimensional.

    Args:
        point: Point [x, y]
        mean: Mean vector [mx, my]
        cov: 2x2 covariance matrix

    Returns:
        Density value
    """
    try:
        x = as_vector(point)
        mu = as_vector(mean)
        sigma = np.asarray(cov, dtype=float)
    except (TypeError, ValueError):
        # Ragged or non-numeric input is not a 2-D Gaussian
        return 0.0

    if x.shape != (2,) or mu.shape != (2,) or sigma.shape != (2, 2):
        return 0.0

    a, b = sigma[0]
    c, d = sigma[1]
    det = a * d - b * c

    if det <= SINGULAR_THRESHOLD:
        return 0.0

    inv_det = 1.0 / det
    inv = [[d * inv_det, -b * inv_det],
           [-c * inv_det, a * inv_det]]

    dx = x[0] - mu[0]
    dy = x[1] - mu[1]

    # (x - mu)^T * inv * (x - mu)
    mahalanobis_sq = ((dx * inv[0][0] + dy * inv[1][0]) * dx +
                      (dx * inv[0][1] + dy * inv[1][1]) * dy)

    return float(math.exp(-0.5 * mahalanobis_sq) / (2 * math.pi * math.sqrt(det)))


def grid_axis(values: Sequence[float],
              steps: int = GRID_STEPS,
              padding: float = GRID_PADDING) -> np.ndarray:
    """
    Build evenly spaced grid coordinates covering a set of values.

    The range is [min - pad, max + pad] with pad = padding * (max - min).

    Args:
        values: Observed values along one axis
        steps: Number of grid points
        padding: Fraction of the range added on each side

    Returns:
        Array of grid coordinates
    """
    vals = as_vector(values)
    if vals.size == 0:
        return np.zeros(0)

    lo = float(vals.min())
    hi = float(vals.max())
    pad = (hi - lo) * padding
    return np.linspace(lo - pad, hi + pad, steps)


def density_grid(x_values: Sequence[float],
                 y_values: Sequence[float],
                 mean: Sequence[float],
                 cov: Sequence[Sequence[float]]) -> np.ndarray:
    """
    Evaluate the bivariate Gaussian density on a grid.

    Args:
        x_values: Grid coordinates along x
        y_values: Grid coordinates along y
        mean: Mean vector [mx, my]
        cov: 2x2 covariance matrix

    Returns:
        Array z of shape (len(y_values), len(x_values)), z[i][j] = pdf(x_j, y_i)
    """
    xs = as_vector(x_values)
    ys = as_vector(y_values)
    z = np.zeros((len(ys), len(xs)))
    for i, y in enumerate(ys):
        for j, x in enumerate(xs):
            z[i, j] = gaussian_pdf_2d([x, y], mean, cov)
    return z


def likelihood_surfaces(x_values: Sequence[float],
                        y_values: Sequence[float],
                        class_stats: Dict[str, Dict[str, Any]]) -> Dict[str, np.ndarray]:
    """
    Evaluate a density surface for each class.

    Only the first two dimensions of each class mean and covariance are
    used.

    Args:
        x_values: Grid coordinates along x
        y_values: Grid coordinates along y
        class_stats: Mapping from class label to a dict with 'mean' and 'cov'

    Returns:
        Mapping from class label to its density grid
    """
    surfaces = {}
    for label, stats in class_stats.items():
        mean2 = as_vector(stats['mean'])[:2]
        cov2 = np.asarray(stats['cov'], dtype=float)[:2, :2]
        surfaces[label] = density_grid(x_values, y_values, mean2, cov2)
    return surfaces
