"""
Dataset management for the analytics dashboard.

This module provides functionality for holding tabular datasets,
extracting feature matrices and labels, and running analyses on them.
"""

from dashmath.dataset.dataset import Dataset
from dashmath.dataset.manager import DatasetManager
