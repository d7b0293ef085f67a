"""
Rolling window extraction.

Partitions a time-ordered series (or a matrix whose rows are observations)
into overlapping windows of fixed length.

For t observations and bandwidth bw:
    bw < t:  t - bw + 1 windows, window i covering rows [i, i + bw)
    bw >= t: a single window holding the whole input

Windows are read-only views on the input array.
"""

from numbers import Integral
from typing import Iterator, List

import numpy as np

from histvol.utils import InvalidArgument


def _validate(data, bandwidth) -> np.ndarray:
    if isinstance(bandwidth, bool) or not isinstance(bandwidth, Integral):
        raise InvalidArgument(f"Bandwidth must be an integer, got {bandwidth!r}")
    if bandwidth < 2:
        raise InvalidArgument(f"Bandwidth must be at least 2, got {bandwidth}")

    array = np.asarray(data)
    if array.dtype == object or not np.issubdtype(array.dtype, np.number):
        raise InvalidArgument(f"Data must be numeric, got dtype {array.dtype}")
    if array.ndim not in (1, 2):
        raise InvalidArgument(f"Data must be 1-D or 2-D, got {array.ndim} dimensions")
    if array.shape[0] == 0 or array.size == 0:
        raise InvalidArgument("Data must not be empty")

    return array


def _readonly(view: np.ndarray) -> np.ndarray:
    view.flags.writeable = False
    return view


def iter_windows(data, bandwidth: int) -> Iterator[np.ndarray]:
    """
    Lazily yield rolling windows.

    Validation happens when the generator is created, not on first use.

    Args:
        data: 1-D or 2-D numeric array, rows are observations
        bandwidth: Number of rows per window (integer >= 2)

    Returns:
        Iterator over window views, in order of their first row

    Raises:
        InvalidArgument: If data or bandwidth are malformed
    """
    array = _validate(data, bandwidth)

    def _generate():
        t = array.shape[0]
        if bandwidth >= t:
            yield _readonly(array[:])
            return
        for start in range(t - bandwidth + 1):
            yield _readonly(array[start:start + bandwidth])

    return _generate()


def extract_windows(data, bandwidth: int) -> List[np.ndarray]:
    """
    Extract all rolling windows of a series.

    Args:
        data: 1-D or 2-D numeric array, rows are observations
        bandwidth: Number of rows per window (integer >= 2)

    Returns:
        List of window views. When bandwidth >= number of rows the list
        holds one window equal to the whole input.

    Raises:
        InvalidArgument: If data or bandwidth are malformed
    """
    return list(iter_windows(data, bandwidth))


def window_count(observations: int, bandwidth: int) -> int:
    """Number of windows extract_windows produces for a series length."""
    if bandwidth >= observations:
        return 1
    return observations - bandwidth + 1
