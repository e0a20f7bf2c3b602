"""
Dataset handling and analysis for the dashboard.

A Dataset is the ingestion boundary between tabular data and the
numerical core: every candidate feature column is parsed explicitly, and
columns that do not parse completely as finite numbers are excluded
rather than coerced to zero.
"""

import copy
import logging
import time
import numpy as np
import pandas as pd
from typing import Any, Dict, List, Optional, Sequence, Union

from dashmath.components.config import Config
from dashmath.math.classifiers import CLASSIFIERS, fit_predict
from dashmath.math.density import GRID_PADDING, GRID_STEPS, grid_axis, likelihood_surfaces
from dashmath.math.eigen import MAX_ITERATIONS, TOLERANCE
from dashmath.math.metrics import calculate_metrics
from dashmath.math.pca import MIN_PCA_FEATURES, MIN_PCA_ROWS, pca_available, project, run_pca
from dashmath.math.stats import class_statistics, standardize
from dashmath.utils.general import distinct
from dashmath.utils.errors import DatasetError, UnknownModelError

# Set up logging
logger = logging.getLogger(__name__)

DEFAULT_MODEL = 'bayes'
PCA_COMPONENTS = 3


def parse_numeric_column(series: pd.Series) -> Optional[np.ndarray]:
    """
    Parse a column as floats.

    Args:
        series: Column values

    Returns:
        Float array, or None if any value is missing or not a finite number
    """
    parsed = pd.to_numeric(series, errors='coerce')
    values = parsed.to_numpy(dtype=float, na_value=np.nan)

    if not np.all(np.isfinite(values)):
        return None

    return values


class Dataset:
    """
    A named table of observations with a target (class label) column.
    """

    def __init__(self,
                 name: str,
                 data: Union[pd.DataFrame, Sequence[Dict[str, Any]]],
                 target: Optional[str] = None,
                 last_updated: Optional[int] = None):
        """
        Initialize a dataset.

        Args:
            name: Unique dataset name
            data: DataFrame or list of records (one dict per row)
            target: Target column (defaults to the last column)
            last_updated: Timestamp of last update (milliseconds since epoch)
        """
        frame = data.copy() if isinstance(data, pd.DataFrame) else pd.DataFrame(list(data))

        if frame.shape[0] == 0 or frame.shape[1] == 0:
            raise DatasetError(f"Dataset '{name}' has no rows or no columns")

        frame.columns = [str(c) for c in frame.columns]

        self.name = name
        self.frame = frame
        self.last_updated = last_updated or int(time.time() * 1000)

        # Parse every column once; the target decides which are features
        self._numeric: Dict[str, np.ndarray] = {}
        for column in frame.columns:
            values = parse_numeric_column(frame[column])
            if values is not None:
                self._numeric[column] = values

        self.target = None
        self.set_target(target if target is not None else frame.columns[-1])

    @property
    def columns(self) -> List[str]:
        """All column names."""
        return list(self.frame.columns)

    @property
    def row_count(self) -> int:
        """Number of rows."""
        return self.frame.shape[0]

    @property
    def features(self) -> List[str]:
        """Numeric feature columns, excluding the target."""
        return [c for c in self.frame.columns if c in self._numeric and c != self.target]

    @property
    def excluded_features(self) -> List[str]:
        """Non-target columns that did not parse as numbers."""
        return [c for c in self.frame.columns if c not in self._numeric and c != self.target]

    def set_target(self, target: str) -> None:
        """
        Set the target column.

        Args:
            target: Column holding the class labels
        """
        if target not in self.frame.columns:
            raise DatasetError(f"Unknown target column '{target}' in dataset '{self.name}'")
        self.target = target

    def with_target(self, target: str) -> 'Dataset':
        """
        Return a view of this dataset with a different target column.

        The view shares the underlying table and parsed columns.

        Args:
            target: Column holding the class labels

        Returns:
            Dataset view
        """
        view = copy.copy(self)
        view.set_target(target)
        return view

    def labels(self) -> List[str]:
        """Class labels of every row, as strings."""
        return [str(v) for v in self.frame[self.target].tolist()]

    def classes(self) -> List[str]:
        """Distinct class labels in sorted order."""
        return sorted(set(self.labels()))

    def _resolve_features(self, features: Optional[Sequence[str]]) -> List[str]:
        if features is None:
            return self.features

        selected = distinct(str(f) for f in features)
        available = set(self.features)
        unknown = [f for f in selected if f not in available]
        if unknown:
            raise DatasetError(
                f"Features {unknown} are not numeric features of dataset '{self.name}'"
            )
        return selected

    def matrix(self, features: Optional[Sequence[str]] = None, normalize: bool = False) -> np.ndarray:
        """
        Build the feature matrix for a feature selection.

        Args:
            features: Feature columns (defaults to all numeric features)
            normalize: Whether to z-score standardize each column

        Returns:
            n_rows x n_features float array
        """
        selected = self._resolve_features(features)

        if selected:
            data = np.column_stack([self._numeric[f] for f in selected])
        else:
            data = np.zeros((self.row_count, 0))

        return standardize(data) if normalize else data

    def _classify(self, features: List[str], model: str) -> Optional[Dict[str, Any]]:
        """Fit and predict on the same rows, returning metrics."""
        if not features:
            return None

        labels = self.labels()
        predictions = fit_predict(model, self.matrix(features), labels)
        return calculate_metrics(labels, predictions)

    def analyze(self,
                features: Optional[Sequence[str]] = None,
                target: Optional[str] = None,
                model: Optional[str] = None,
                normalize: Optional[bool] = None,
                config: Optional[Config] = None) -> Dict[str, Any]:
        """
        Run the full analysis for a feature selection.

        Computes baseline metrics on all numeric features, metrics on the
        selected features, per-class statistics, PCA with projections and
        likelihood surfaces for the first two selected features.

        Args:
            features: Selected features (defaults to all numeric features)
            target: Target column (defaults to the dataset's current target)
            model: Classifier name ('bayes' or 'mindist')
            normalize: Whether PCA runs on standardized features
            config: Configuration supplying numeric settings

        Returns:
            Dictionary of analysis results
        """
        def setting(path: str, default: Any) -> Any:
            return config.get(path, default) if config is not None else default

        if target is not None and target != self.target:
            return self.with_target(target).analyze(features, None, model, normalize, config)

        if model is None:
            model = setting('classifier.default-model', DEFAULT_MODEL)
        if normalize is None:
            normalize = setting('analysis.normalize', True)
        if model not in CLASSIFIERS:
            raise UnknownModelError(
                f"Unknown model '{model}', expected one of {sorted(CLASSIFIERS)}"
            )

        selected = self._resolve_features(features)
        labels = self.labels()

        result = {
            'dataset': self.name,
            'target': self.target,
            'features': selected,
            'model': model,
            'normalize': normalize,
            'classes': self.classes(),
            'baseline_metrics': self._classify(self.features, model),
            'metrics': self._classify(selected, model),
            'class_stats': class_statistics(self.matrix(selected), labels) if selected else {},
            'pca': None,
            'projections': None,
            'density': None
        }

        # PCA on the (optionally standardized) selection
        min_rows = setting('analysis.min-pca-rows', MIN_PCA_ROWS)
        min_features = setting('analysis.min-pca-features', MIN_PCA_FEATURES)
        if pca_available(self.row_count, len(selected), min_rows, min_features):
            pca_matrix = self.matrix(selected, normalize=normalize)
            pca_result = run_pca(
                pca_matrix,
                max_iterations=setting('pca.max-iterations', MAX_ITERATIONS),
                tol=setting('pca.tolerance', TOLERANCE)
            )
            result['pca'] = pca_result
            result['projections'] = project(
                pca_matrix,
                pca_result['eigenvectors'],
                setting('pca.components', PCA_COMPONENTS)
            )
        else:
            logger.debug(
                f"PCA unavailable for dataset '{self.name}': "
                f"{self.row_count} rows, {len(selected)} features"
            )

        # Likelihood surfaces over the first two selected features
        if len(selected) >= 2 and result['class_stats']:
            steps = setting('density.grid-steps', GRID_STEPS)
            padding = setting('density.padding', GRID_PADDING)
            xs = grid_axis(self._numeric[selected[0]], steps, padding)
            ys = grid_axis(self._numeric[selected[1]], steps, padding)
            result['density'] = {
                'features': selected[:2],
                'x': xs,
                'y': ys,
                'surfaces': likelihood_surfaces(xs, ys, result['class_stats'])
            }

        return result

    def get_summary(self) -> Dict[str, Any]:
        """
        Get a summary of the dataset.

        Returns:
            Dictionary with dataset summary
        """
        return {
            'name': self.name,
            'last_updated': self.last_updated,
            'row_count': self.row_count,
            'target': self.target,
            'features': self.features,
            'excluded_features': self.excluded_features,
            'classes': self.classes()
        }

    def __repr__(self) -> str:
        """String representation of the dataset."""
        return f"Dataset(name={self.name!r}, rows={self.row_count}, target={self.target!r})"
