"""
Separable smoothing kernels used to approximate a Parzen window estimate.

The entropy pipeline only needs one capability from a kernel: apply a 1D
convolution along an axis. ``SmoothingKernel`` captures that so other
density estimation kernels can be substituted.
"""

from abc import ABC, abstractmethod
from typing import Optional

import cv2
import numpy as np
from scipy import ndimage

from utils.logger_config import get_logger
from .exceptions import HistogramConfigurationError

logger = get_logger(__name__)


class SmoothingKernel(ABC):
    """Strategy for a normalized 1D convolution applied along one axis."""

    @property
    @abstractmethod
    def weights(self) -> np.ndarray:
        """1D kernel weights, summing to one."""

    @abstractmethod
    def apply(self, data: np.ndarray, axis: int = -1,
              output: Optional[np.ndarray] = None) -> np.ndarray:
        """
        Convolve ``data`` with the kernel along ``axis``.

        Args:
            data: Input array
            axis: Axis to convolve along
            output: Optional preallocated array of the same shape as ``data``

        Returns:
            np.ndarray: Smoothed array (``output`` when supplied)
        """


class NormalizedKernel(SmoothingKernel):
    """
    Kernel of positive weights with border renormalization. Weights are
    applied as a true convolution, so asymmetric kernels are mirrored.

    Near the array borders only part of the kernel overlaps the data. The
    response there is divided by the sum of the overlapping weights, so a
    flat input stays flat all the way to the edge.
    """

    def __init__(self, weights: np.ndarray):
        weights = np.asarray(weights, dtype=np.float64).ravel()
        if weights.size == 0 or weights.size % 2 == 0:
            raise HistogramConfigurationError(
                f"Kernel must have an odd, non-zero number of weights, got {weights.size}")
        if not np.all(weights > 0):
            raise HistogramConfigurationError(f"Kernel weights must all be positive, got {weights}")
        total = weights.sum()

        self._weights = weights / total
        self._border_cache = {}

    @property
    def weights(self) -> np.ndarray:
        return self._weights

    @property
    def radius(self) -> int:
        return self._weights.size // 2

    def _border_norm(self, length: int) -> np.ndarray:
        """Sum of in-bounds kernel weights for every position of an axis."""
        norm = self._border_cache.get(length)
        if norm is None:
            norm = ndimage.convolve1d(np.ones(length), self._weights, mode='constant', cval=0.0)
            self._border_cache[length] = norm
        return norm

    def apply(self, data: np.ndarray, axis: int = -1,
              output: Optional[np.ndarray] = None) -> np.ndarray:
        axis = axis % data.ndim
        output = ndimage.convolve1d(
            data, self._weights.astype(data.dtype), axis=axis, output=output,
            mode='constant', cval=0.0
        )

        shape = [1] * data.ndim
        shape[axis] = data.shape[axis]
        norm = self._border_norm(data.shape[axis]).astype(output.dtype).reshape(shape)
        np.divide(output, norm, out=output)
        return output


class GaussianKernel(NormalizedKernel):
    """Normalized Gaussian of width ``2*radius+1``."""

    def __init__(self, radius: int, sigma: Optional[float] = None):
        if radius < 1:
            raise HistogramConfigurationError(f"Smoothing radius must be at least 1, got {radius}")
        if sigma is None:
            sigma = sigma_for_radius(radius)
        elif sigma <= 0:
            raise HistogramConfigurationError(f"Gaussian sigma must be positive, got {sigma}")

        super().__init__(cv2.getGaussianKernel(2 * radius + 1, sigma, ktype=cv2.CV_64F))
        self.sigma = sigma

        logger.debug(f"Gaussian smoothing kernel: radius={radius}, sigma={sigma:.3f}")


def sigma_for_radius(radius: int) -> float:
    """Gaussian sigma whose effective support matches ``radius``."""
    return (2.0 * radius + 1.0) / 5.0


def smooth_2d(data: np.ndarray, kernel: SmoothingKernel, work: Optional[np.ndarray] = None,
              output: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Smooth a 2D surface horizontally and then vertically.

    Args:
        data: 2D input surface
        kernel: Smoothing strategy
        work: Optional scratch buffer for the horizontal pass
        output: Optional output buffer, may alias ``data``

    Returns:
        np.ndarray: Smoothed surface
    """
    work = kernel.apply(data, axis=1, output=work)
    return kernel.apply(work, axis=0, output=output)
