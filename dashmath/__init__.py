"""
Dashmath package for the classification and PCA analytics dashboard.

This is the numerical engine behind the dashboard: covariance, Jacobi
eigen-decomposition and PCA, Gaussian Naive Bayes and Minimum-Distance
classifiers, classification metrics and bivariate Gaussian densities.
"""

__version__ = '0.1.0'

from dashmath.system import System, SystemManager
from dashmath.components.config import Config, ConfigManager
