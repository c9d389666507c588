import numpy as np

from ..config import DEFAULT_MOVING_AVERAGE_WINDOW

def simple_moving_average(data, window: int = DEFAULT_MOVING_AVERAGE_WINDOW) -> np.ndarray:
    """
    Simple moving average with the same length as the input.

    The first window-1 outputs average over a growing window (1, 2, ..., window-1
    samples); from index window-1 on, a full window slides over the data.
    """
    values = np.asarray(data, dtype=float)
    if window <= 0:
        raise ValueError(f"Window size must be positive, got {window}.")
    if len(values) < window:
        raise ValueError(f"Data length must be at least as long as the window size "
                         f"(length={len(values)}, window={window}).")

    csum = np.concatenate(([0.0], np.cumsum(values)))
    idx = np.arange(len(values))
    lower = np.maximum(idx + 1 - window, 0)
    counts = idx + 1 - lower
    return (csum[idx + 1] - csum[lower]) / counts
