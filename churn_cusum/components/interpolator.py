import numpy as np

def interpolate_zeroes(signal) -> np.ndarray:
    """
    Replaces zero samples by linear interpolation between the surrounding
    non-zero samples. Zeros before the first / after the last non-zero sample
    take that sample's value (flat, never extrapolated linearly).

    A signal with 0 or 1 non-zero samples has no line to interpolate along and is
    returned unchanged (as a float copy).
    """
    values = np.asarray(signal, dtype=float).copy()
    anchors = np.flatnonzero(values != 0)
    if len(anchors) <= 1:
        return values

    zeros = np.flatnonzero(values == 0)
    # np.interp holds the end values constant outside [anchors[0], anchors[-1]]
    values[zeros] = np.interp(zeros, anchors, values[anchors])
    return values
