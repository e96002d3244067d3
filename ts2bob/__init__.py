"""
ts2bob: Time Series to Bag of Bigrams

Symbolic multivariate time series features (WEASEL+MUSE style): quantized
words at several window lengths, unigram and bigram counts, chi-squared
feature selection and a compact feature dictionary.
"""

from .api import MUSE, bags_to_sparse
from .config import MuseConfig, default_n_jobs
from .timeseries import MultivariateSample, as_samples, check_dimensions
from .core import (
    BagOfBigrams,
    FeatureDictionary,
    WordExtractor,
    bits_needed,
    word_mask,
    chi_squared_scores,
    filter_chi_squared,
)

__version__ = "0.1.0"

__all__ = [
    'MUSE',
    'bags_to_sparse',
    'MuseConfig',
    'default_n_jobs',
    'MultivariateSample',
    'as_samples',
    'check_dimensions',
    'BagOfBigrams',
    'FeatureDictionary',
    'WordExtractor',
    'bits_needed',
    'word_mask',
    'chi_squared_scores',
    'filter_chi_squared',
]
