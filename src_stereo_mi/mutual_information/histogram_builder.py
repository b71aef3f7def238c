"""
Joint intensity histogram of corresponding left/right pixels.

The disparity map is aligned with the left image. A pixel ``(x, y)`` with a
valid disparity ``d`` corresponds to ``(x - d - min_disparity, y)`` in the
right image.

Known limitation: occlusions can map two different left pixels onto the
same right pixel, which counts that right pixel twice. This is not
corrected.
"""

from typing import Union

import numpy as np

from utils.logger_config import get_logger
from .exceptions import HistogramConfigurationError, ImageLayoutError

logger = get_logger(__name__)

ArrayOrInt = Union[int, np.ndarray]


def scale_pixel_values(values: ArrayOrInt, max_pixel_value: int, max_histogram_value: int) -> ArrayOrInt:
    """
    Scale raw pixel intensities into the histogram domain.

    Uses integer truncation: ``max_histogram_value * value // max_pixel_value``.

    Args:
        values: Raw intensity or array of intensities in [0, max_pixel_value]
        max_pixel_value: Maximum raw intensity
        max_histogram_value: Maximum histogram bin index

    Returns:
        Histogram bin index (same kind as ``values``)
    """
    if isinstance(values, np.ndarray):
        return (values.astype(np.int64) * max_histogram_value) // max_pixel_value
    return max_histogram_value * int(values) // max_pixel_value


def validate_histogram_range(max_pixel_value: int, max_histogram_value: int) -> None:
    """
    Validate the intensity scaling parameters.

    Raises:
        HistogramConfigurationError: If the histogram is finer than the pixel range
    """
    if max_pixel_value <= 0:
        raise HistogramConfigurationError(f"max_pixel_value must be positive, got {max_pixel_value}")
    if max_histogram_value <= 0:
        raise HistogramConfigurationError(f"max_histogram_value must be positive, got {max_histogram_value}")
    if max_histogram_value > max_pixel_value:
        raise HistogramConfigurationError(
            f"Maximum histogram value can't be more than max pixel value: "
            f"{max_histogram_value} > {max_pixel_value}")


def validate_stereo_layout(left: np.ndarray, right: np.ndarray, disparity: np.ndarray) -> None:
    """
    Check that the stereo pair and disparity map can be indexed directly.

    Raises:
        ImageLayoutError: On mismatched shapes, non 2D images or sub-region views
    """
    for name, image in (('left', left), ('right', right), ('disparity', disparity)):
        if not isinstance(image, np.ndarray):
            raise ImageLayoutError(f"{name} image must be a numpy array, got {type(image).__name__}")
        if image.ndim != 2:
            raise ImageLayoutError(f"{name} image must be single channel 2D, got shape {image.shape}")
        if not image.flags['C_CONTIGUOUS']:
            raise ImageLayoutError(f"Can't process sub-region views, {name} image is not contiguous")
        if not np.issubdtype(image.dtype, np.integer):
            raise ImageLayoutError(f"{name} image must have an integer dtype, got {image.dtype}")

    if left.shape != right.shape:
        raise ImageLayoutError(f"Image shapes don't match: left={left.shape}, right={right.shape}")
    if disparity.shape != left.shape:
        raise ImageLayoutError(
            f"Disparity shape doesn't match left image: disparity={disparity.shape}, left={left.shape}")


class JointHistogramBuilder:
    """Builds the 2D joint histogram H(L, R) from a stereo pair and disparity."""

    def __init__(self, max_pixel_value: int = 255, max_histogram_value: int = 255):
        self.max_pixel_value = None
        self.max_histogram_value = None
        self.histogram = np.zeros((1, 1), dtype=np.int64)
        self.configure(max_pixel_value, max_histogram_value)

    @property
    def bins(self) -> int:
        return self.max_histogram_value + 1

    def configure(self, max_pixel_value: int, max_histogram_value: int) -> None:
        """
        Configure intensity scaling and resize the histogram buffer.

        Args:
            max_pixel_value: The maximum value a pixel in the input image can have
            max_histogram_value: The maximum value a pixel can have after scaling
        """
        validate_histogram_range(max_pixel_value, max_histogram_value)

        self.max_pixel_value = max_pixel_value
        self.max_histogram_value = max_histogram_value
        if self.histogram.shape != (self.bins, self.bins):
            self.histogram = np.zeros((self.bins, self.bins), dtype=np.int64)

    def scale(self, values: ArrayOrInt) -> ArrayOrInt:
        return scale_pixel_values(values, self.max_pixel_value, self.max_histogram_value)

    def build(self, left: np.ndarray, right: np.ndarray, min_disparity: int,
              disparity: np.ndarray, invalid: int) -> np.ndarray:
        """
        Compute the joint histogram, skipping pixels without a correspondence.

        Every valid disparity must keep ``x - d - min_disparity`` inside the
        image. This is the caller's responsibility and is not checked.

        Args:
            left: Left rectified image
            right: Right rectified image
            min_disparity: Offset added to every disparity value
            disparity: Disparity from left to right, aligned with ``left``
            invalid: Disparity value marking pixels without a correspondence

        Returns:
            np.ndarray: Joint histogram indexed ``[left_bin, right_bin]``
        """
        validate_stereo_layout(left, right, disparity)

        self.histogram.fill(0)

        valid = disparity != invalid
        rows, cols = np.nonzero(valid)
        d = disparity[valid].astype(np.int64) + min_disparity

        left_bins = self.scale(left[rows, cols])          # I(x  ,y)
        right_bins = self.scale(right[rows, cols - d])    # I(x-d,y)

        counts = np.bincount(left_bins * self.bins + right_bins, minlength=self.bins * self.bins)
        self.histogram += counts.reshape(self.bins, self.bins)

        logger.debug(f"Joint histogram built: {rows.size}/{disparity.size} valid correspondences, "
                     f"{np.count_nonzero(self.histogram)} occupied bins")
        return self.histogram
