"""
General utility functions for the dashmath package.

These helpers sit at the boundary between caller-supplied Python
sequences and the numpy arrays used by the numerical core.
"""

import numpy as np
from typing import Any, Dict, Hashable, Iterable, List, Sequence, TypeVar, Union

from dashmath.utils.errors import NonFiniteValueError, RaggedMatrixError

T = TypeVar('T', bound=Hashable)

MatrixLike = Union[np.ndarray, Sequence[Sequence[float]]]


def as_matrix(matrix: MatrixLike) -> np.ndarray:
    """
    Convert a matrix-like input to a 2-D float array.

    An empty sequence becomes a 0x0 array. Rows of differing length are
    rejected rather than padded.

    Args:
        matrix: Nested sequence of floats or numpy array

    Returns:
        2-D float64 array

    Raises:
        RaggedMatrixError: If the rows are not all the same length
        NonFiniteValueError: If the matrix contains NaN or infinity
    """
    if isinstance(matrix, np.ndarray):
        arr = matrix.astype(float)
        if arr.size == 0 and arr.ndim == 1:
            arr = arr.reshape(0, 0)
        if arr.ndim != 2:
            raise RaggedMatrixError(f"Expected a 2-D matrix, got {arr.ndim} dimension(s)")
    else:
        rows = list(matrix)
        if not rows:
            return np.zeros((0, 0))

        try:
            lengths = {len(row) for row in rows}
        except TypeError:
            raise RaggedMatrixError("Expected a 2-D matrix, got a flat sequence") from None
        if len(lengths) > 1:
            raise RaggedMatrixError(f"Matrix rows have differing lengths: {sorted(lengths)}")

        try:
            arr = np.array(rows, dtype=float)
        except ValueError as e:
            raise RaggedMatrixError(f"Matrix rows are not a rectangular array: {e}") from e
        if arr.ndim != 2:
            raise RaggedMatrixError(f"Expected a 2-D matrix, got {arr.ndim} dimension(s)")

    if not np.all(np.isfinite(arr)):
        raise NonFiniteValueError("Matrix contains NaN or infinite values")

    return arr


def as_vector(vector: Iterable[float]) -> np.ndarray:
    """
    Convert a sequence of floats to a 1-D float array.

    Args:
        vector: Sequence of floats

    Returns:
        1-D float64 array
    """
    if not isinstance(vector, np.ndarray):
        vector = list(vector)
    return np.asarray(vector, dtype=float).reshape(-1)


def as_labels(labels: Iterable[Any]) -> List[str]:
    """Convert class identifiers to strings."""
    return [str(label) for label in labels]


def sorted_distinct(coll: Iterable[T]) -> List[T]:
    """
    Return the distinct items of a collection in sorted order.

    Args:
        coll: Collection to process

    Returns:
        Sorted list with duplicates removed
    """
    return sorted(set(coll))


def distinct(coll: Iterable[T]) -> List[T]:
    """
    Return a list with duplicates removed, preserving order.

    Args:
        coll: Collection to process

    Returns:
        List with duplicates removed
    """
    seen = set()
    result = []
    for item in coll:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def group_indices(labels: Sequence[T]) -> Dict[T, List[int]]:
    """
    Group row indices by label, with keys in sorted label order.

    Args:
        labels: One label per row

    Returns:
        Ordered mapping from label to the row indices carrying it
    """
    groups: Dict[T, List[int]] = {label: [] for label in sorted_distinct(labels)}
    for i, label in enumerate(labels):
        groups[label].append(i)
    return groups


def nonzero_or_one(value: float) -> float:
    """Return value, or 1.0 when value is exactly zero."""
    return value if value != 0 else 1.0


def to_jsonable(data: Any) -> Any:
    """
    Recursively convert numpy values inside a result to plain Python types.

    Args:
        data: Any Python data structure (dict, list, array or primitive value)

    Returns:
        Structure made of dicts, lists, str, int, float, bool and None
    """
    if data is None or isinstance(data, (str, int, float, bool)):
        return data

    # numpy arrays and scalars
    if hasattr(data, 'tolist') and callable(getattr(data, 'tolist')):
        return data.tolist()

    if isinstance(data, dict):
        return {str(key): to_jsonable(value) for key, value in data.items()}

    if isinstance(data, (list, tuple)):
        return [to_jsonable(item) for item in data]

    return data
