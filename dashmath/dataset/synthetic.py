"""
Seeded demo datasets.

Each generator draws class-shifted uniform noise from an explicit
numpy RandomState, so the same seed always yields the same table.
"""

import numpy as np
import pandas as pd
from typing import Callable, Dict


def _noise(rng: np.random.RandomState, n: int, width: float) -> np.ndarray:
    """Uniform noise in [-width/2, width/2)."""
    return (rng.random_sample(n) - 0.5) * width


def wine_data(seed: int = 42) -> pd.DataFrame:
    """
    Wine-like dataset: 178 rows, 5 features, target column 'Label'.

    Args:
        seed: Random seed

    Returns:
        DataFrame with the features followed by the target column
    """
    rng = np.random.RandomState(seed)
    idx = np.arange(178)
    labels = np.where(idx < 59, 'Class_1', np.where(idx < 130, 'Class_2', 'Class_3'))
    offset = np.where(idx < 59, 0.8, np.where(idx < 130, 0.0, -0.8))
    n = len(idx)

    return pd.DataFrame({
        'Alcohol': 13 + offset + _noise(rng, n, 2.0),
        'MalicAcid': 2 + _noise(rng, n, 3.0),
        'Ash': 2.3 + _noise(rng, n, 1.0),
        'Alkalinity': 19 - offset + _noise(rng, n, 8.0),
        'Magnesium': 100 + offset * 5 + _noise(rng, n, 40.0),
        'Label': labels
    })


def iris_data(seed: int = 42) -> pd.DataFrame:
    """
    Iris-like dataset: 150 rows, 4 features, target column 'Species'.

    Args:
        seed: Random seed

    Returns:
        DataFrame with the features followed by the target column
    """
    rng = np.random.RandomState(seed)
    idx = np.arange(150)
    labels = np.where(idx < 50, 'Setosa', np.where(idx < 100, 'Versicolor', 'Virginica'))
    offset = np.where(idx < 50, -0.8, np.where(idx < 100, 0.0, 0.8))
    n = len(idx)

    return pd.DataFrame({
        'Sepal_L': 5.8 + offset + _noise(rng, n, 2.5),
        'Sepal_W': 3.0 - offset * 0.2 + _noise(rng, n, 2.0),
        'Petal_L': 3.7 + offset * 1.5 + _noise(rng, n, 2.5),
        'Petal_W': 1.2 + offset * 0.8 + _noise(rng, n, 1.5),
        'Species': labels
    })


def cancer_data(seed: int = 42) -> pd.DataFrame:
    """
    Breast-cancer-like dataset: 200 rows, 5 features, target column 'Diagnosis'.

    Args:
        seed: Random seed

    Returns:
        DataFrame with the features followed by the target column
    """
    rng = np.random.RandomState(seed)
    malignant = np.arange(200) < 100
    labels = np.where(malignant, 'Malignant', 'Benign')
    shift = np.where(malignant, 1.0, -1.0)
    n = len(malignant)

    return pd.DataFrame({
        'Radius': 15 + shift + _noise(rng, n, 8.0),
        'Texture': 20 + shift + _noise(rng, n, 10.0),
        'Perimeter': 90 + shift * 3 + _noise(rng, n, 30.0),
        'Area': 700 + shift * 50 + _noise(rng, n, 300.0),
        'Smoothness': 0.1 + np.where(malignant, 0.01, 0.0) + _noise(rng, n, 0.04),
        'Diagnosis': labels
    })


SYNTHETIC_DATASETS: Dict[str, Callable[[int], pd.DataFrame]] = {
    'Wine Quality': wine_data,
    'Iris Flowers': iris_data,
    'Breast Cancer': cancer_data,
}
