"""
Error types raised by the mutual information cost estimator.

Callers can catch ``MutualInformationError`` to fall back to a simpler
photometric cost, or one of the subclasses to tell the failure apart.
"""


class MutualInformationError(Exception):
    """Base class for all estimator failures."""


class HistogramConfigurationError(MutualInformationError, ValueError):
    """Histogram, smoothing or quantization parameters are invalid."""


class ImageLayoutError(MutualInformationError, ValueError):
    """Input images have mismatched shapes or an unsupported memory layout."""


class DegenerateStatisticsError(MutualInformationError, RuntimeError):
    """No valid correspondences were available to estimate the statistics from."""
