"""Feature extraction stages: words, dictionary, bags, chi-squared selection."""

from .words import WordExtractor, Quantizer, bits_needed, word_mask
from .dictionary import FeatureDictionary, unigram_key, bigram_key
from .bags import BagOfBigrams, build_bags
from .chi2 import chi_squared_scores, filter_chi_squared

__all__ = [
    'WordExtractor',
    'Quantizer',
    'bits_needed',
    'word_mask',
    'FeatureDictionary',
    'unigram_key',
    'bigram_key',
    'BagOfBigrams',
    'build_bags',
    'chi_squared_scores',
    'filter_chi_squared',
]
