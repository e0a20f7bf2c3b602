"""
Tests for the PCA module.
"""

import pytest
import numpy as np
import sys
import os

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from dashmath.math.pca import (
    explained_variance, cumulative_variance, pca_available,
    run_pca, project, pca_project
)
from dashmath.math.stats import covariance, standardize
from dashmath.utils.errors import FeatureMismatchError


class TestPCAFunctions:
    """Tests for the PCA helper functions."""

    def test_explained_variance(self):
        """Ratios divide each eigenvalue by the total."""
        assert np.allclose(explained_variance([3.0, 1.0]), [0.75, 0.25])

    def test_explained_variance_zero_total(self):
        """An all-zero spectrum gives all-zero ratios."""
        assert np.all(explained_variance([0.0, 0.0]) == 0.0)

    def test_cumulative_variance(self):
        """Cumulative ratios are the running sum."""
        assert np.allclose(cumulative_variance([0.5, 0.3, 0.2]), [0.5, 0.8, 1.0])

    def test_pca_available(self):
        """PCA needs at least 3 rows and 2 features."""
        assert pca_available(3, 2)
        assert pca_available(100, 5)
        assert not pca_available(2, 5)
        assert not pca_available(10, 1)


class TestRunPCA:
    """Tests for run_pca."""

    def test_pca_basic(self):
        """Test PCA on random standardized data."""
        rng = np.random.RandomState(42)
        data = standardize(rng.randn(40, 4) @ rng.randn(4, 4))

        result = run_pca(data, max_iterations=1000)

        assert result['converged']
        assert result['eigenvalues'].shape == (4,)
        assert result['eigenvectors'].shape == (4, 4)
        assert np.isclose(np.sum(result['explained_variance']), 1.0)
        assert np.all(np.diff(result['cumulative_variance']) >= 0)
        assert np.isclose(result['cumulative_variance'][-1], 1.0)
        assert np.allclose(result['covariance_matrix'], covariance(data))

    def test_pca_collinear(self):
        """Points on a line put all variance in the first component."""
        t = np.arange(10.0)
        data = np.column_stack([t, t])

        result = run_pca(data)

        assert np.allclose(result['explained_variance'], [1.0, 0.0])
        assert np.allclose(np.abs(result['eigenvectors'][0]), [np.sqrt(0.5), np.sqrt(0.5)])

    def test_pca_zero_variance(self):
        """Identical rows give zero eigenvalues and zero ratios."""
        data = [[1.0, 2.0, 3.0]] * 5

        result = run_pca(data)

        assert np.all(result['eigenvalues'] == 0.0)
        assert np.all(result['explained_variance'] == 0.0)
        assert result['converged']

    def test_pca_idempotent(self):
        """Running PCA twice gives identical results."""
        rng = np.random.RandomState(3)
        data = rng.randn(20, 3)

        first = run_pca(data)
        second = run_pca(data)

        assert np.array_equal(first['eigenvalues'], second['eigenvalues'])
        assert np.array_equal(first['eigenvectors'], second['eigenvectors'])


class TestProjection:
    """Tests for projecting rows onto principal components."""

    def test_project(self):
        """Projection is the dot product with each eigenvector."""
        data = [[1.0, 2.0], [3.0, 4.0]]
        vecs = [[0.0, 1.0], [1.0, 0.0]]

        result = project(data, vecs, n_comps=2)

        assert np.allclose(result, [[2.0, 1.0], [4.0, 3.0]])

    def test_project_missing_components(self):
        """Missing components project to zero."""
        data = [[1.0, 2.0], [3.0, 4.0]]

        result = project(data, np.eye(2), n_comps=3)

        assert result.shape == (2, 3)
        assert np.allclose(result, [[1.0, 2.0, 0.0], [3.0, 4.0, 0.0]])

    def test_project_feature_mismatch(self):
        """Eigenvectors must match the matrix width."""
        with pytest.raises(FeatureMismatchError):
            project([[1.0, 2.0]], np.eye(3))

    def test_pca_project(self):
        """pca_project returns both the PCA result and the projections."""
        rng = np.random.RandomState(8)
        data = standardize(rng.randn(25, 4))

        result = pca_project(data, n_comps=3, max_iterations=1000)

        assert set(result.keys()) == {'pca', 'projections'}
        assert result['projections'].shape == (25, 3)

        # Variance along each component equals its eigenvalue for centered data
        proj_var = result['projections'].var(axis=0, ddof=1)
        assert np.allclose(proj_var, result['pca']['eigenvalues'][:3], atol=1e-6)
