import numpy as np
from typing import Iterable, Tuple

from ..config import MAD_NORMAL_SCALE
from .utils import next_power_of_two, log2_exact

SQRT2 = np.sqrt(2.0)

class WaveletTransform:
    """
    Orthonormal Haar wavelet transform on power-of-two padded signals.

    Coefficient layout for n = 2**L:
        index 0                        -> level 0 (approximation / DC)
        indices [2**(L-k), 2**(L-k+1)) -> level k, 1 <= k <= L

    Level L is the coarsest detail band (one coefficient), level 1 the finest
    (n/2 coefficients).
    """

    def pad(self, signal) -> Tuple[np.ndarray, int]:
        """
        Prepends zeros up to the next power of two so the most recent samples keep
        their position at the end. Returns (padded, n_padding).
        """
        values = np.asarray(signal, dtype=float)
        if values.size == 0:
            raise ValueError("Cannot transform an empty signal.")
        target = next_power_of_two(len(values))
        n_padding = target - len(values)
        return np.concatenate((np.zeros(n_padding), values)), n_padding

    def transform(self, signal) -> np.ndarray:
        """Pads the signal and returns its Haar coefficients."""
        coeffs, _ = self.pad(signal)
        nn = len(coeffs)
        while nn >= 2:
            even, odd = coeffs[0:nn:2], coeffs[1:nn:2]
            coeffs[:nn] = np.concatenate(((even + odd) / SQRT2, (even - odd) / SQRT2))
            nn >>= 1
        return coeffs

    def inverse(self, coefficients) -> np.ndarray:
        coeffs = np.array(coefficients, dtype=float)
        n = len(coeffs)
        log2_exact(n)
        nn = 2
        while nn <= n:
            half = nn // 2
            smooth, detail = coeffs[:half].copy(), coeffs[half:nn].copy()
            coeffs[0:nn:2] = (smooth + detail) / SQRT2
            coeffs[1:nn:2] = (smooth - detail) / SQRT2
            nn <<= 1
        return coeffs

    def identity_transform(self, signal) -> np.ndarray:
        """Transform followed by inverse; equals the padded input up to rounding."""
        return self.inverse(self.transform(signal))

    @staticmethod
    def level_slice(level: int, n: int) -> slice:
        L = log2_exact(n)
        if level < 0 or level > L:
            raise ValueError(f"Level must be between 0 and {L} but was {level}")
        if level == 0:
            return slice(0, 1)
        block = 1 << (L - level)
        return slice(block, 2 * block)

    def isolate_frequency_level(self, coefficients, level: int) -> np.ndarray:
        """Zeros every coefficient outside the given level."""
        return self.isolate_frequency_levels(coefficients, [level])

    def isolate_frequency_levels(self, coefficients, levels: Iterable[int]) -> np.ndarray:
        """Zeros every coefficient outside the union of the given levels."""
        coeffs = np.asarray(coefficients, dtype=float)
        n = len(coeffs)
        # Validate all levels before building anything
        slices = [self.level_slice(level, n) for level in levels]
        isolated = np.zeros(n)
        for s in slices:
            isolated[s] = coeffs[s]
        return isolated

    def reconstruct_by_frequency(self, signal, level: int) -> np.ndarray:
        return self.inverse(self.isolate_frequency_level(self.transform(signal), level))

    def reconstruct_by_frequencies(self, signal, levels: Iterable[int]) -> np.ndarray:
        return self.inverse(self.isolate_frequency_levels(self.transform(signal), levels))

    def denoise(self, signal, soft: bool = False) -> np.ndarray:
        """
        Wavelet shrinkage with the universal threshold sigma * sqrt(2 ln n), sigma
        estimated from the MAD of the finest detail band. The approximation
        coefficient is kept as is. Returns the padded-length signal.
        """
        coeffs = self.transform(signal)
        n = len(coeffs)
        if n < 2:
            return coeffs

        finest = coeffs[n // 2:]
        sigma = np.median(np.abs(finest - np.median(finest))) / MAD_NORMAL_SCALE
        lam = sigma * np.sqrt(2 * np.log(n))

        details = coeffs[1:]
        if soft:
            coeffs[1:] = np.sign(details) * np.maximum(np.abs(details) - lam, 0.0)
        else:
            coeffs[1:] = np.where(np.abs(details) < lam, 0.0, details)
        return self.inverse(coeffs)
