"""
Classification metrics for dashmath.

This module builds the confusion matrix and the accuracy and
macro-averaged precision, recall and F1 scores from actual and predicted
labels.
"""

import numpy as np
from typing import Any, Dict, List, Sequence

from dashmath.utils.general import as_labels, nonzero_or_one, sorted_distinct
from dashmath.utils.errors import LabelMismatchError


def confusion_matrix(actual: Sequence[Any],
                     predicted: Sequence[Any],
                     classes: List[str]) -> np.ndarray:
    """
    Build a confusion matrix.

    cm[i][j] counts samples of true class i predicted as class j.
    Predictions naming a class outside `classes` are not counted.

    Args:
        actual: True labels
        predicted: Predicted labels
        classes: Class labels indexing the rows and columns

    Returns:
        k x k integer array
    """
    index = {label: i for i, label in enumerate(classes)}
    cm = np.zeros((len(classes), len(classes)), dtype=int)

    for a, p in zip(actual, predicted):
        a_idx = index.get(a)
        p_idx = index.get(p)
        if a_idx is not None and p_idx is not None:
            cm[a_idx, p_idx] += 1

    return cm


def per_class_scores(cm: np.ndarray) -> Dict[str, np.ndarray]:
    """
    Calculate per-class precision and recall from a confusion matrix.

    A zero denominator is replaced by 1, giving a score of 0.

    Args:
        cm: k x k confusion matrix

    Returns:
        Dictionary with 'precision' and 'recall' arrays of length k
    """
    tp = np.diag(cm).astype(float)
    predicted_totals = cm.sum(axis=0)
    actual_totals = cm.sum(axis=1)

    precision = np.array([t / nonzero_or_one(d) for t, d in zip(tp, predicted_totals)])
    recall = np.array([t / nonzero_or_one(d) for t, d in zip(tp, actual_totals)])

    return {'precision': precision, 'recall': recall}


def calculate_metrics(actual: Sequence[Any], predicted: Sequence[Any]) -> Dict[str, Any]:
    """
    Calculate classification metrics.

    The class set is the distinct actual labels in lexicographic order.
    Precision and recall are macro-averaged, and F1 is the harmonic mean
    of the macro precision and macro recall.

    Args:
        actual: True labels
        predicted: Predicted labels, same length as actual

    Returns:
        Dictionary with 'accuracy', 'precision', 'recall', 'f1',
        'confusion_matrix' and 'classes'
    """
    actual = as_labels(actual)
    predicted = as_labels(predicted)

    if len(actual) != len(predicted):
        raise LabelMismatchError(
            f"Got {len(actual)} actual labels and {len(predicted)} predicted labels"
        )

    classes = sorted_distinct(actual)
    cm = confusion_matrix(actual, predicted, classes)

    if not actual:
        return {
            'accuracy': 0.0,
            'precision': 0.0,
            'recall': 0.0,
            'f1': 0.0,
            'confusion_matrix': cm,
            'classes': classes
        }

    correct = sum(1 for a, p in zip(actual, predicted) if a == p)
    accuracy = correct / len(actual)

    scores = per_class_scores(cm)
    precision = float(np.mean(scores['precision']))
    recall = float(np.mean(scores['recall']))
    f1 = 2 * precision * recall / nonzero_or_one(precision + recall)

    return {
        'accuracy': accuracy,
        'precision': precision,
        'recall': recall,
        'f1': f1,
        'confusion_matrix': cm,
        'classes': classes
    }
