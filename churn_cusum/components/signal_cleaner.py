import numpy as np
from enum import Enum
from typing import Callable, Dict

from ..config import DEFAULT_MOVING_AVERAGE_WINDOW
from .interpolator import interpolate_zeroes
from .moving_average import simple_moving_average
from .wavelets import WaveletTransform

class SignalCleaningType(str, Enum):
    NONE = "none"
    INTERPOLATE_ZEROES = "interpolate_zeroes"
    SIMPLE_MOVING_AVERAGE = "simple_moving_average"
    SIMPLE_MOVING_AVERAGE_INTERPOLATED = "simple_moving_average_interpolated"
    WAVELET_DENOISING = "wavelet_denoising"
    WAVELET_DENOISING_INTERPOLATED = "wavelet_denoising_interpolated"


class SignalCleaner:
    """
    Applies one named cleaning strategy to a weekly signal.

    Every mode returns a float array of the input length. The *_INTERPOLATED
    modes fill zero weeks first and then smooth/denoise.
    """
    def __init__(self, window: int = DEFAULT_MOVING_AVERAGE_WINDOW, soft_threshold: bool = False):
        self.window = window
        self.soft_threshold = soft_threshold
        self.wavelets = WaveletTransform()
        self._handlers: Dict[SignalCleaningType, Callable[[np.ndarray], np.ndarray]] = {
            SignalCleaningType.NONE: lambda s: s.copy(),
            SignalCleaningType.INTERPOLATE_ZEROES: interpolate_zeroes,
            SignalCleaningType.SIMPLE_MOVING_AVERAGE: self._moving_average,
            SignalCleaningType.SIMPLE_MOVING_AVERAGE_INTERPOLATED:
                lambda s: self._moving_average(interpolate_zeroes(s)),
            SignalCleaningType.WAVELET_DENOISING: self._denoise,
            SignalCleaningType.WAVELET_DENOISING_INTERPOLATED:
                lambda s: self._denoise(interpolate_zeroes(s)),
        }

    def clean(self, signal, mode) -> np.ndarray:
        mode = SignalCleaningType(mode)
        values = np.asarray(signal, dtype=float)
        if values.size == 0:
            raise ValueError(f"Cannot clean an empty signal (mode={mode.value}).")
        return self._handlers[mode](values)

    def _moving_average(self, values: np.ndarray) -> np.ndarray:
        return simple_moving_average(values, self.window)

    def _denoise(self, values: np.ndarray) -> np.ndarray:
        denoised = self.wavelets.denoise(values, soft=self.soft_threshold)
        # Padding was prepended, drop it to realign with the input weeks
        return denoised[len(denoised) - len(values):]
