"""
Mutual information matching cost for semi-global stereo matching.

This module contains the stages of the estimator: joint histogram,
probabilities, entropy and the quantized cost table.
"""

from .exceptions import (
    MutualInformationError,
    HistogramConfigurationError,
    ImageLayoutError,
    DegenerateStatisticsError
)
from .smoothing import SmoothingKernel, NormalizedKernel, GaussianKernel
from .histogram_builder import JointHistogramBuilder, scale_pixel_values
from .probability_estimator import JointProbability, compute_probabilities
from .entropy_estimator import EntropyTables, compute_entropy, validate_eps, DEFAULT_EPS
from .cost_table import cost_surface, quantize_cost, random_cost_table

__all__ = [
    'MutualInformationError',
    'HistogramConfigurationError',
    'ImageLayoutError',
    'DegenerateStatisticsError',
    'SmoothingKernel',
    'NormalizedKernel',
    'GaussianKernel',
    'JointHistogramBuilder',
    'scale_pixel_values',
    'JointProbability',
    'compute_probabilities',
    'EntropyTables',
    'compute_entropy',
    'validate_eps',
    'DEFAULT_EPS',
    'cost_surface',
    'quantize_cost',
    'random_cost_table'
]
