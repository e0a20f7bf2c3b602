"""
Dataset manager for handling multiple datasets.

This module provides a manager that keeps named datasets, runs analyses
on them and caches the results.
"""

import logging
import threading
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd

from dashmath.components.config import Config, ConfigManager
from dashmath.dataset.dataset import Dataset
from dashmath.dataset.synthetic import SYNTHETIC_DATASETS
from dashmath.utils.errors import DatasetError


# Logging configuration
logger = logging.getLogger(__name__)


class DatasetManager:
    """
    Manages named datasets and caches their analysis results.

    Analysis results are pure functions of (dataset, feature selection,
    target, normalization flag, model), so they are cached under that key.
    Replacing a dataset bumps its version, which retires stale entries.
    """

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize a dataset manager.

        Args:
            config: Configuration for the manager
        """
        self.config = config or ConfigManager.get_config()
        self.datasets: Dict[str, Dataset] = {}
        self._versions: Dict[str, int] = {}
        self._cache: 'OrderedDict[Tuple, Dict[str, Any]]' = OrderedDict()
        self.lock = threading.RLock()

        if self.config.get('datasets.load-synthetic', True):
            self.load_synthetic(self.config.get('datasets.seed', 42))

    def load_synthetic(self, seed: int = 42) -> None:
        """
        Register the built-in demo datasets.

        Args:
            seed: Random seed for the generators
        """
        for name, generator in SYNTHETIC_DATASETS.items():
            self.register(name, generator(seed))

    def register(self,
                 name: str,
                 data: Union[pd.DataFrame, Sequence[Dict[str, Any]]],
                 target: Optional[str] = None) -> Dataset:
        """
        Register or replace a dataset.

        Args:
            name: Dataset name
            data: DataFrame or list of records
            target: Target column (defaults to the last column)

        Returns:
            The registered dataset
        """
        dataset = Dataset(name, data, target)

        with self.lock:
            self.datasets[name] = dataset
            self._versions[name] = self._versions.get(name, 0) + 1

        logger.info(f"Registered dataset {name} ({dataset.row_count} rows, "
                    f"{len(dataset.features)} numeric features)")
        return dataset

    def get_dataset(self, name: str) -> Optional[Dataset]:
        """
        Get a dataset by name.

        Args:
            name: Dataset name

        Returns:
            Dataset, or None if not found
        """
        with self.lock:
            return self.datasets.get(name)

    def remove(self, name: str) -> bool:
        """
        Remove a dataset.

        Args:
            name: Dataset name

        Returns:
            True if the dataset existed
        """
        with self.lock:
            if name not in self.datasets:
                return False

            del self.datasets[name]
            self._versions[name] = self._versions.get(name, 0) + 1
            for key in [k for k in self._cache if k[0] == name]:
                del self._cache[key]

        logger.info(f"Removed dataset {name}")
        return True

    def analyze(self,
                name: str,
                features: Optional[Sequence[str]] = None,
                target: Optional[str] = None,
                model: Optional[str] = None,
                normalize: Optional[bool] = None) -> Dict[str, Any]:
        """
        Analyze a dataset, using the cache when possible.

        Args:
            name: Dataset name
            features: Selected features (defaults to all numeric features)
            target: Target column (defaults to the dataset's target)
            model: Classifier name (defaults to the configured model)
            normalize: Whether PCA uses standardized data (defaults to config)

        Returns:
            Analysis result dictionary
        """
        with self.lock:
            dataset = self.datasets.get(name)
            version = self._versions.get(name, 0)

        if dataset is None:
            raise DatasetError(f"Unknown dataset '{name}'")

        if model is None:
            model = self.config.get('classifier.default-model', 'bayes')
        if normalize is None:
            normalize = bool(self.config.get('analysis.normalize', True))
        if target is None:
            target = dataset.target

        key = (name, version,
               tuple(features) if features is not None else None,
               target, normalize, model)

        with self.lock:
            cached = self._cache.get(key)
            if cached is not None:
                self._cache.move_to_end(key)
                logger.debug(f"Cache hit for dataset {name}")
                return cached

        result = dataset.analyze(features, target, model, normalize, self.config)

        with self.lock:
            self._cache[key] = result
            max_entries = self.config.get('cache.max-entries', 128)
            while len(self._cache) > max_entries:
                self._cache.popitem(last=False)

        return result

    def clear_cache(self) -> None:
        """Discard all cached analysis results."""
        with self.lock:
            self._cache.clear()

    def get_summary(self) -> List[Dict[str, Any]]:
        """
        Get summaries of all datasets.

        Returns:
            List of dataset summaries
        """
        with self.lock:
            return [dataset.get_summary() for dataset in self.datasets.values()]
