"""
Core numerical algorithms for the analytics dashboard.

This module contains implementations of:
- Statistics primitives (mean, covariance, standardization)
- Jacobi eigensolver for symmetric matrices
- Principal Component Analysis (PCA)
- Gaussian Naive Bayes and Minimum-Distance classifiers
- Classification metrics
- Bivariate Gaussian density
"""

from dashmath.math.stats import mean, covariance, standardize, class_statistics
from dashmath.math.eigen import eigen_symmetric
from dashmath.math.pca import run_pca, project
from dashmath.math.classifiers import (
    GaussianNaiveBayes, MinimumDistanceClassifier, make_classifier
)
from dashmath.math.metrics import calculate_metrics
from dashmath.math.density import gaussian_pdf_2d

__all__ = [
    'mean',
    'covariance',
    'standardize',
    'class_statistics',
    'eigen_symmetric',
    'run_pca',
    'project',
    'GaussianNaiveBayes',
    'MinimumDistanceClassifier',
    'make_classifier',
    'calculate_metrics',
    'gaussian_pdf_2d',
]
