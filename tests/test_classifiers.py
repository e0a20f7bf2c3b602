"""
Tests for the classifiers module.
"""

import pytest
import numpy as np
import sys
import os

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from dashmath.math.classifiers import (
    GaussianNaiveBayes, MinimumDistanceClassifier, VARIANCE_FLOOR,
    make_classifier, fit_predict
)
from dashmath.utils.errors import (
    DashmathError, FeatureMismatchError, LabelMismatchError,
    NotFittedError, UnknownModelError
)


def separated_blobs(seed: int = 0):
    """Generate three well separated Gaussian blobs."""
    rng = np.random.RandomState(seed)
    centers = np.array([[0.0, 0.0, 0.0], [10.0, 10.0, 0.0], [-10.0, 5.0, 10.0]])
    data = []
    labels = []
    for i, center in enumerate(centers):
        data.append(center + rng.randn(30, 3))
        labels.extend([f"class_{i}"] * 30)
    return np.vstack(data), labels


TWO_CLUSTERS = [[0.0, 0.0], [0.0, 0.0], [10.0, 10.0], [10.0, 10.0]]
TWO_LABELS = ['A', 'A', 'B', 'B']


class TestGaussianNaiveBayes:
    """Tests for the Gaussian Naive Bayes classifier."""

    def test_two_clusters(self):
        """Constant clusters are classified exactly thanks to the variance floor."""
        clf = GaussianNaiveBayes()
        clf.fit(TWO_CLUSTERS, TWO_LABELS)

        assert clf.predict(TWO_CLUSTERS) == TWO_LABELS

    def test_class_stats(self):
        """Means, population variances and priors are stored per class."""
        data = [[1.0, 2.0], [3.0, 2.0], [10.0, 0.0]]
        clf = GaussianNaiveBayes()
        clf.fit(data, ['x', 'x', 'y'])

        stats = clf.class_stats

        assert clf.classes == ['x', 'y']
        assert np.allclose(stats['x']['means'], [2.0, 2.0])
        assert np.allclose(stats['x']['vars'], [1.0 + VARIANCE_FLOOR, VARIANCE_FLOOR])
        assert np.isclose(stats['x']['prior'], 2.0 / 3.0)
        assert np.isclose(stats['y']['prior'], 1.0 / 3.0)

    def test_tie_break(self):
        """Exact ties go to the lexicographically smallest label."""
        clf = GaussianNaiveBayes()
        clf.fit([[0.0], [2.0], [4.0], [6.0]], ['b', 'b', 'a', 'a'])

        assert clf.predict([[3.0]]) == ['a']

    def test_prior_shifts_decision(self):
        """A larger prior wins when likelihoods are equal."""
        clf = GaussianNaiveBayes()
        clf.fit([[0.0], [2.0], [0.0], [2.0], [4.0], [6.0]], ['b', 'b', 'b', 'b', 'a', 'a'])

        assert clf.predict([[3.0]]) == ['b']

    @pytest.mark.crosscheck
    def test_matches_sklearn(self):
        """Predictions agree with scikit-learn on well separated data."""
        from sklearn.naive_bayes import GaussianNB

        data, labels = separated_blobs()

        clf = GaussianNaiveBayes()
        clf.fit(data, labels)

        reference = GaussianNB().fit(data, labels)

        rng = np.random.RandomState(1)
        test = data + rng.randn(*data.shape) * 0.5
        assert clf.predict(test) == list(reference.predict(test))


class TestMinimumDistance:
    """Tests for the Minimum-Distance classifier."""

    def test_two_clusters(self):
        """Nearest centroid recovers the clusters."""
        clf = MinimumDistanceClassifier()
        clf.fit(TWO_CLUSTERS, TWO_LABELS)

        assert clf.predict(TWO_CLUSTERS) == TWO_LABELS
        assert clf.predict([[4.0, 4.0], [6.0, 6.0]]) == ['A', 'B']

    def test_class_means(self):
        """Centroids are the per-class means."""
        clf = MinimumDistanceClassifier()
        clf.fit([[0.0, 0.0], [2.0, 4.0], [10.0, 10.0]], ['a', 'a', 'b'])

        assert np.allclose(clf.class_means['a'], [1.0, 2.0])
        assert np.allclose(clf.class_means['b'], [10.0, 10.0])

    def test_tie_break(self):
        """An equidistant point goes to the smallest label."""
        clf = MinimumDistanceClassifier()
        clf.fit([[0.0], [2.0]], ['b', 'a'])

        assert clf.predict([[1.0]]) == ['a']

    @pytest.mark.crosscheck
    def test_matches_sklearn(self):
        """Predictions agree with scikit-learn's NearestCentroid."""
        from sklearn.neighbors import NearestCentroid

        data, labels = separated_blobs(seed=4)

        clf = MinimumDistanceClassifier()
        clf.fit(data, labels)

        reference = NearestCentroid().fit(data, labels)

        rng = np.random.RandomState(5)
        test = data + rng.randn(*data.shape)
        assert clf.predict(test) == list(reference.predict(test))


class TestClassifierContract:
    """Tests for behaviour shared by all classifiers."""

    @pytest.mark.parametrize("model", ['bayes', 'mindist'])
    def test_not_fitted(self, model):
        """Predicting before fitting raises."""
        clf = make_classifier(model)

        assert not clf.is_fitted
        with pytest.raises(NotFittedError):
            clf.predict([[1.0, 2.0]])

    @pytest.mark.parametrize("model", ['bayes', 'mindist'])
    def test_label_mismatch(self, model):
        """Label count must match the row count."""
        clf = make_classifier(model)
        with pytest.raises(LabelMismatchError):
            clf.fit([[1.0], [2.0], [3.0]], ['a', 'b'])

    @pytest.mark.parametrize("model", ['bayes', 'mindist'])
    def test_empty_fit(self, model):
        """Fitting on an empty matrix raises."""
        clf = make_classifier(model)
        with pytest.raises(DashmathError):
            clf.fit([], [])

    @pytest.mark.parametrize("model", ['bayes', 'mindist'])
    def test_feature_mismatch(self, model):
        """Prediction input must have the fitted number of features."""
        clf = make_classifier(model)
        clf.fit(TWO_CLUSTERS, TWO_LABELS)
        with pytest.raises(FeatureMismatchError):
            clf.predict([[1.0, 2.0, 3.0]])

    @pytest.mark.parametrize("model", ['bayes', 'mindist'])
    def test_predict_empty(self, model):
        """An empty matrix gives no predictions."""
        clf = make_classifier(model)
        clf.fit(TWO_CLUSTERS, TWO_LABELS)
        assert clf.predict([]) == []

    @pytest.mark.parametrize("model", ['bayes', 'mindist'])
    def test_refit_replaces_state(self, model):
        """A second fit fully replaces the first."""
        clf = make_classifier(model)
        clf.fit(TWO_CLUSTERS, TWO_LABELS)
        clf.fit([[0.0], [5.0]], ['x', 'y'])

        assert clf.classes == ['x', 'y']
        assert clf.predict([[1.0]]) == ['x']

    def test_labels_are_strings(self):
        """Non-string labels are treated as their string form."""
        clf = make_classifier('mindist')
        clf.fit([[0.0], [10.0]], [1, 2])
        assert clf.predict([[9.0]]) == ['2']

    def test_single_class(self):
        """A single class predicts that class everywhere."""
        assert fit_predict('bayes', [[1.0], [2.0]], ['only', 'only']) == ['only', 'only']

    def test_make_classifier(self):
        """Classifiers are created by name."""
        assert isinstance(make_classifier('bayes'), GaussianNaiveBayes)
        assert isinstance(make_classifier('mindist'), MinimumDistanceClassifier)
        assert make_classifier('bayes', variance_floor=1e-3).variance_floor == 1e-3

    def test_unknown_model(self):
        """Unknown model names raise."""
        with pytest.raises(UnknownModelError):
            make_classifier('svm')
