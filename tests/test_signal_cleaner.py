import pytest
import numpy as np

from churn_cusum.components.interpolator import interpolate_zeroes
from churn_cusum.components.moving_average import simple_moving_average
from churn_cusum.components.signal_cleaner import SignalCleaner, SignalCleaningType


# --- Interpolator ---

def test_interpolate_inner_and_edges():
    signal = [0, 10, 0, 20, 0, 0, 50, 0]
    result = interpolate_zeroes(signal)
    np.testing.assert_allclose(result, [10, 10, 15, 20, 30, 40, 50, 50])


def test_interpolate_keeps_non_zero_samples():
    signal = np.array([10, 31, 0, 20, 12, 0, 0, 0, 34, 14, 0, 23], dtype=float)
    result = interpolate_zeroes(signal)
    mask = signal != 0
    np.testing.assert_array_equal(result[mask], signal[mask])
    assert result[2] == pytest.approx(25.5)
    assert result[10] == pytest.approx(18.5)
    assert np.all(result != 0)


@pytest.mark.parametrize("signal", [[0, 0, 0], [0, 7, 0, 0], []])
def test_interpolate_degenerate_returns_unchanged(signal):
    result = interpolate_zeroes(signal)
    np.testing.assert_array_equal(result, np.asarray(signal, dtype=float))


def test_interpolate_does_not_mutate_input():
    signal = np.array([1.0, 0.0, 3.0])
    interpolate_zeroes(signal)
    np.testing.assert_array_equal(signal, [1.0, 0.0, 3.0])


# --- Moving average ---

def test_moving_average_growing_window():
    signal = [1, 1, 1, 1, 1, 6, 11, 16, 21, 26]
    result = simple_moving_average(signal, 5)
    np.testing.assert_allclose(result, [1, 1, 1, 1, 1, 2, 4, 7, 11, 16])


def test_moving_average_keeps_length():
    signal = np.arange(20, dtype=float)
    assert len(simple_moving_average(signal, 3)) == 20
    np.testing.assert_allclose(simple_moving_average(signal, 1), signal)


@pytest.mark.parametrize("window", [0, -2])
def test_moving_average_rejects_non_positive_window(window):
    with pytest.raises(ValueError, match="Window size must be positive"):
        simple_moving_average([1, 2, 3], window)


def test_moving_average_rejects_window_longer_than_data():
    with pytest.raises(ValueError, match="at least as long as the window"):
        simple_moving_average([1, 2, 3], 5)


# --- Signal cleaner ---

def test_every_mode_has_a_handler():
    cleaner = SignalCleaner()
    assert set(cleaner._handlers) == set(SignalCleaningType)


def test_none_is_pass_through():
    signal = [1, 2, 3, 4, 5]
    cleaned = SignalCleaner().clean(signal, SignalCleaningType.NONE)
    np.testing.assert_array_equal(cleaned, signal)


def test_mode_accepts_string_value():
    cleaned = SignalCleaner().clean([1, 0, 3], "interpolate_zeroes")
    np.testing.assert_allclose(cleaned, [1, 2, 3])


def test_simple_moving_average_mode():
    signal = [1, 1, 1, 1, 1, 6, 11, 16, 21, 26]
    cleaned = SignalCleaner().clean(signal, SignalCleaningType.SIMPLE_MOVING_AVERAGE)
    np.testing.assert_allclose(cleaned, [1, 1, 1, 1, 1, 2, 4, 7, 11, 16])


def test_interpolated_moving_average_fills_zeros_first():
    signal = [2, 0, 2, 0, 2, 0, 2]
    plain = SignalCleaner(window=2).clean(signal, SignalCleaningType.SIMPLE_MOVING_AVERAGE)
    filled = SignalCleaner(window=2).clean(signal, SignalCleaningType.SIMPLE_MOVING_AVERAGE_INTERPOLATED)
    np.testing.assert_allclose(filled, np.full(7, 2.0))
    assert plain[1] == pytest.approx(1.0)


@pytest.mark.parametrize("mode", [SignalCleaningType.WAVELET_DENOISING,
                                  SignalCleaningType.WAVELET_DENOISING_INTERPOLATED])
def test_wavelet_modes_keep_input_length(mode):
    signal = np.random.default_rng(5).normal(100, 10, 50)
    cleaned = SignalCleaner().clean(signal, mode)
    assert len(cleaned) == 50


def test_wavelet_denoising_smooths_noisy_sine(noisy_sine):
    cleaned = SignalCleaner().clean(noisy_sine, SignalCleaningType.WAVELET_DENOISING)
    assert len(cleaned) == len(noisy_sine)
    assert np.sum(np.abs(np.diff(cleaned))) < np.sum(np.abs(np.diff(noisy_sine)))
    mse = np.mean((cleaned - noisy_sine) ** 2)
    assert 0 < mse < 12


@pytest.mark.parametrize("mode", list(SignalCleaningType))
def test_empty_signal_is_rejected(mode):
    with pytest.raises(ValueError, match="empty signal"):
        SignalCleaner().clean([], mode)


def test_short_signal_fails_moving_average():
    with pytest.raises(ValueError):
        SignalCleaner(window=5).clean([1, 2, 3], SignalCleaningType.SIMPLE_MOVING_AVERAGE)


def test_unknown_mode():
    with pytest.raises(ValueError):
        SignalCleaner().clean([1, 2, 3], "median_filter")
