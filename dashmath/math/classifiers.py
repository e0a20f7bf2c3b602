"""
Statistical classifiers for dashmath.

This module provides two from-scratch classifiers sharing a fit/predict
interface:
- Gaussian Naive Bayes (independent per-feature Gaussians)
- Minimum-Distance (nearest class centroid)

Classes are always kept in sorted label order, so ties between classes
are broken in favour of the lexicographically smallest label.

A fitted model is built as a complete new state object and published
with a single attribute assignment. predict() reads that attribute once,
so a concurrent re-fit never exposes a half-updated model.
"""

import math
import numpy as np
from typing import Any, Dict, List, Optional, Sequence, Type

from dashmath.math.stats import mean
from dashmath.utils.general import MatrixLike, as_labels, as_matrix, group_indices
from dashmath.utils.errors import (
    DashmathError, FeatureMismatchError, LabelMismatchError,
    NotFittedError, UnknownModelError
)

VARIANCE_FLOOR = 1e-9


class FittedState:
    """
    Immutable snapshot of a fitted classifier.
    """

    def __init__(self, classes: List[str], params: Dict[str, np.ndarray], n_features: int):
        """
        Initialize a fitted state.

        Args:
            classes: Class labels in sorted order
            params: Named parameter arrays, one row per class
            n_features: Number of features seen during fit
        """
        self.classes = classes
        self.params = params
        self.n_features = n_features

    def __repr__(self) -> str:
        """String representation of the state."""
        return f"FittedState(classes={self.classes}, n_features={self.n_features})"


class Classifier:
    """
    Base class for dashmath classifiers.

    Subclasses implement _fit_params() and _scores(); the base class
    handles validation, grouping by label and the snapshot discipline.
    """

    name = None

    def __init__(self):
        self._state: Optional[FittedState] = None

    @property
    def is_fitted(self) -> bool:
        """Whether fit() has been called."""
        return self._state is not None

    @property
    def classes(self) -> List[str]:
        """Class labels of the fitted model, in sorted order."""
        return list(self._require_state().classes)

    def _require_state(self) -> FittedState:
        state = self._state
        if state is None:
            raise NotFittedError(f"{type(self).__name__} must be fitted before use")
        return state

    def fit(self, matrix: MatrixLike, labels: Sequence[Any]) -> None:
        """
        Fit the classifier, replacing any previously fitted state.

        Args:
            matrix: Training matrix (rows are samples)
            labels: One class label per row
        """
        data = as_matrix(matrix)
        labels = as_labels(labels)

        if len(labels) != data.shape[0]:
            raise LabelMismatchError(
                f"Got {len(labels)} labels for a matrix with {data.shape[0]} rows"
            )
        if data.shape[0] == 0:
            raise DashmathError("Cannot fit a classifier on an empty matrix")

        groups = group_indices(labels)
        classes = list(groups.keys())
        params = self._fit_params(data, groups)

        self._state = FittedState(classes, params, data.shape[1])

    def predict(self, matrix: MatrixLike) -> List[str]:
        """
        Predict a class label for each row.

        Args:
            matrix: Matrix of samples to classify

        Returns:
            List of predicted labels
        """
        state = self._require_state()
        data = as_matrix(matrix)

        if data.shape[0] == 0:
            return []
        if data.shape[1] != state.n_features:
            raise FeatureMismatchError(
                f"Model was fitted on {state.n_features} features, got {data.shape[1]}"
            )

        scores = self._scores(state, data)
        # argmax returns the first maximum, i.e. the smallest label on ties
        best = np.argmax(scores, axis=1)
        return [state.classes[i] for i in best]

    def _fit_params(self, data: np.ndarray,
                    groups: Dict[str, List[int]]) -> Dict[str, np.ndarray]:
        raise NotImplementedError

    def _scores(self, state: FittedState, data: np.ndarray) -> np.ndarray:
        """Return an (n_samples, n_classes) array where larger is better."""
        raise NotImplementedError

    def __repr__(self) -> str:
        """String representation of the classifier."""
        return f"{type(self).__name__}(fitted={self.is_fitted})"


class GaussianNaiveBayes(Classifier):
    """
    Gaussian Naive Bayes classifier.

    Each feature is modelled as an independent Gaussian per class, with
    population variance plus a small floor so that constant features do
    not produce a singular likelihood.
    """

    name = 'bayes'

    def __init__(self, variance_floor: float = VARIANCE_FLOOR):
        """
        Initialize the classifier.

        Args:
            variance_floor: Constant added to every per-feature variance
        """
        super().__init__()
        self.variance_floor = variance_floor

    def _fit_params(self, data, groups):
        n_total = data.shape[0]
        means, variances, priors = [], [], []

        for indices in groups.values():
            class_data = data[indices]
            class_mean = mean(class_data)
            means.append(class_mean)
            variances.append(np.mean((class_data - class_mean) ** 2, axis=0) + self.variance_floor)
            priors.append(len(indices) / n_total)

        return {
            'means': np.array(means),
            'vars': np.array(variances),
            'priors': np.array(priors)
        }

    def _scores(self, state, data):
        means = state.params['means']
        variances = state.params['vars']
        priors = state.params['priors']

        # (n_samples, n_classes, n_features)
        diff = data[:, np.newaxis, :] - means[np.newaxis, :, :]
        log_gauss = -diff ** 2 / (2 * variances) - 0.5 * np.log(2 * math.pi * variances)
        return np.log(priors) + log_gauss.sum(axis=2)

    @property
    def class_stats(self) -> Dict[str, Dict[str, Any]]:
        """
        Per-class statistics of the fitted model.

        Returns:
            Mapping from class label to a dict with 'means', 'vars' and 'prior'
        """
        state = self._require_state()
        return {
            label: {
                'means': state.params['means'][i].copy(),
                'vars': state.params['vars'][i].copy(),
                'prior': float(state.params['priors'][i])
            }
            for i, label in enumerate(state.classes)
        }


class MinimumDistanceClassifier(Classifier):
    """
    Minimum-Distance (nearest centroid) classifier.

    Each sample is assigned to the class whose mean vector is closest in
    squared Euclidean distance.
    """

    name = 'mindist'

    def _fit_params(self, data, groups):
        return {'centroids': np.array([mean(data[indices]) for indices in groups.values()])}

    def _scores(self, state, data):
        centroids = state.params['centroids']
        diff = data[:, np.newaxis, :] - centroids[np.newaxis, :, :]
        return -np.sum(diff ** 2, axis=2)

    @property
    def class_means(self) -> Dict[str, np.ndarray]:
        """Mapping from class label to its centroid."""
        state = self._require_state()
        return {label: state.params['centroids'][i].copy()
                for i, label in enumerate(state.classes)}


CLASSIFIERS: Dict[str, Type[Classifier]] = {
    GaussianNaiveBayes.name: GaussianNaiveBayes,
    MinimumDistanceClassifier.name: MinimumDistanceClassifier,
}


def make_classifier(model: str, **kwargs) -> Classifier:
    """
    Create a classifier by name.

    Args:
        model: Registered classifier name ('bayes' or 'mindist')
        **kwargs: Passed to the classifier constructor

    Returns:
        New, unfitted classifier
    """
    try:
        cls = CLASSIFIERS[model]
    except KeyError:
        raise UnknownModelError(
            f"Unknown model '{model}', expected one of {sorted(CLASSIFIERS)}"
        ) from None
    return cls(**kwargs)


def fit_predict(model: str, matrix: MatrixLike, labels: Sequence[Any]) -> List[str]:
    """
    Fit a classifier and predict on the same matrix.

    Args:
        model: Registered classifier name
        matrix: Data matrix
        labels: One class label per row

    Returns:
        Predicted labels for the training rows
    """
    clf = make_classifier(model)
    clf.fit(matrix, labels)
    return clf.predict(matrix)
