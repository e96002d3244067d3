"""
Test configuration and fixtures for pytest.

Provides deterministic stand-in quantizers and small labelled datasets.
"""
import numpy as np
import pytest
from numpy.lib.stride_tricks import sliding_window_view

from ts2bob import MultivariateSample, bits_needed


class ValueQuantizer:
    """Emits the series values as words, one per window start position.

    Lets a test spell out the exact word sequence it wants: a series
    ``[0, 1, 1, x]`` with window length 2 yields words ``[0, 1, 1]``.
    """

    def __init__(self, histogram_type="equi_depth"):
        self.histogram_type = histogram_type
        self.window_length = None
        self.fit_calls = 0

    def fit_windowing(self, samples, window_length, word_length, alphabet_size,
                      norm_mean, lower_bounding):
        self.fit_calls += 1
        self.window_length = window_length
        return self

    def transform_windowing_int(self, series, word_length):
        n = len(series) - self.window_length + 1
        return [int(v) for v in series[:n]]


class MeanQuantizer:
    """Small SFA-like quantizer for realistic data.

    Samples ``word_length`` points of each window, subtracts the window mean
    and bins the result into ``alphabet_size`` symbols.
    """

    def __init__(self, histogram_type="equi_depth"):
        self.histogram_type = histogram_type
        self.fit_calls = 0

    def fit_windowing(self, samples, window_length, word_length, alphabet_size,
                      norm_mean, lower_bounding):
        self.fit_calls += 1
        self.window_length = window_length
        self.alphabet_size = alphabet_size
        self.norm_mean = norm_mean
        self.bits = bits_needed(alphabet_size)
        self.edges = np.linspace(-1.0, 1.0, alphabet_size + 1)[1:-1]
        return self

    def transform_windowing_int(self, series, word_length):
        windows = sliding_window_view(series, self.window_length)
        positions = np.linspace(0, self.window_length - 1, word_length).astype(int)
        words = []
        for window in windows:
            values = window[positions]
            if self.norm_mean:
                values = values - window.mean()
            symbols = np.digitize(values, self.edges)
            word = 0
            for k, symbol in enumerate(symbols):
                word |= int(symbol) << (self.bits * k)
            words.append(word)
        return words


class FailingQuantizer(ValueQuantizer):
    """Raises while transforming one window length."""

    fail_on = 3

    def transform_windowing_int(self, series, word_length):
        if self.window_length == self.fail_on:
            raise RuntimeError(f"quantizer failed for window {self.window_length}")
        return super().transform_windowing_int(series, word_length)


@pytest.fixture
def value_quantizer():
    return ValueQuantizer


@pytest.fixture
def mean_quantizer():
    return MeanQuantizer


@pytest.fixture
def failing_quantizer():
    return FailingQuantizer


@pytest.fixture
def bigram_scenario():
    """Two univariate samples whose window-2 words are [0,1,1] and [0,0,1]."""
    return [
        MultivariateSample(series=[[0, 1, 1, 0]], label="X"),
        MultivariateSample(series=[[0, 0, 1, 0]], label="Y"),
    ]


@pytest.fixture
def labelled_samples():
    """Two classes of 3-variate series: sines vs. ramps, 6 samples each."""
    rng = np.random.default_rng(42)
    t = np.linspace(0, 4 * np.pi, 64)
    samples = []
    for i in range(6):
        series = [np.sin(t * (d + 1)) + 0.1 * rng.standard_normal(64) for d in range(3)]
        samples.append(MultivariateSample(series=series, label=0))
        series = [np.linspace(-1, 1, 64) * (d + 1) + 0.1 * rng.standard_normal(64) for d in range(3)]
        samples.append(MultivariateSample(series=series, label=1))
    return samples
