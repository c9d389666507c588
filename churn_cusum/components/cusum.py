import numpy as np
from typing import NamedTuple, Optional

from ..config import (DEFAULT_CUSUM_SMOOTHING, DEFAULT_CUSUM_REFERENCE, DEFAULT_CUSUM_THRESHOLD,
                      DEFAULT_CUSUM_IGNORE_ZERO_VALUES)

class CusumResult(NamedTuple):
    cusum_values: np.ndarray
    anomaly_index: Optional[int]


class CusumDetector:
    """
    Smoothed cumulative sum of deviations from a reference level.

        cusum[0]   = 0
        cusum[i+1] = s * (cusum[i] + x[i] - reference) + (1 - s) * cusum[i]

    s = 1 is the raw CUSUM, s = 0 never moves. With ignore_zero_values, a zero
    sample carries the previous value forward (silence is not a drop).
    The anomaly index is the first i with |cusum[i+1]| > threshold.
    """
    def __init__(self, smoothing: float = DEFAULT_CUSUM_SMOOTHING,
                 reference: float = DEFAULT_CUSUM_REFERENCE,
                 threshold: float = DEFAULT_CUSUM_THRESHOLD,
                 ignore_zero_values: bool = DEFAULT_CUSUM_IGNORE_ZERO_VALUES):
        self.smoothing = smoothing
        self.reference = reference
        self.threshold = threshold
        self.ignore_zero_values = ignore_zero_values

    def compute(self, data) -> CusumResult:
        if not 0.0 <= self.smoothing <= 1.0:
            raise ValueError(f"Smoothing must be between 0 and 1, got {self.smoothing}.")
        values = np.asarray(data, dtype=float)

        # s*(c + x - r) + (1-s)*c == c + s*(x - r), so the recurrence is a cumulative sum
        increments = self.smoothing * (values - self.reference)
        if self.ignore_zero_values:
            increments[values == 0] = 0.0
        cusum_values = np.concatenate(([0.0], np.cumsum(increments)))

        crossings = np.flatnonzero(np.abs(cusum_values[1:]) > self.threshold)
        anomaly_index = int(crossings[0]) if crossings.size else None
        return CusumResult(cusum_values, anomaly_index)
