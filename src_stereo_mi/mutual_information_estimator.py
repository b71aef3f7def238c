"""
Mutual information stereo matching cost.

Computes the Mutual Information error metric from a rectified stereo pair.
Mutual information between two images is MI(I1,I2) = H_I1 + H_I2 - H_I1,I2,
where H is an entropy, e.g. H_I = -sum_i P_I(i) log(P_I(i)), with P_I(i)
the probability of a pixel in image I having intensity i.

Images with more than 8 bits per pixel are supported by scaling pixel
intensities into a smaller histogram. A 12-bit image would otherwise need a
4096x4096 joint table and its per-image distributions tend to look flat.

Reference: Hirschmuller, Heiko. "Stereo processing by semiglobal matching
and mutual information." IEEE PAMI 30.2 (2007): 328-341.
"""

from typing import Dict, Any, Optional, Union

import numpy as np

from .mutual_information.smoothing import SmoothingKernel, GaussianKernel
from .mutual_information.histogram_builder import JointHistogramBuilder
from .mutual_information.probability_estimator import (
    JointProbability,
    PROBABILITY_DTYPE,
    compute_probabilities
)
from .mutual_information.entropy_estimator import EntropyTables, DEFAULT_EPS, compute_entropy, validate_eps
from .mutual_information.cost_table import (
    cost_surface,
    mutual_information_cost,
    quantize_cost,
    random_cost_table,
    scaled_cost_dtype,
    validate_max_cost
)

from utils.logger_config import get_logger


class StereoMutualInformation:
    """
    Learns a mutual information cost from a stereo pair and an initial disparity.

    Typical use::

        mi = StereoMutualInformation(max_pixel_value=255, max_histogram_value=255)
        mi.process(left, right, min_disparity, disparity, invalid=255)
        mi.precompute_scaled_cost(max_cost=2047)
        c = mi.cost_scaled(left[y, x], right[y, x - d])

    ``process`` must not be called concurrently on one instance. Once it has
    returned, ``cost`` and ``cost_scaled`` only read the tables.
    """

    def __init__(self, max_pixel_value: int = 255, max_histogram_value: int = 255,
                 smoothing_radius: int = 3, eps: float = DEFAULT_EPS):
        """
        Initialize the estimator.

        Args:
            max_pixel_value: The maximum value a pixel in the input image can have
            max_histogram_value: The maximum value a pixel can have after scaling
            smoothing_radius: Radius of the Gaussian smoothing kernel, 3 is recommended in the paper
            eps: Floor substituted for probabilities that would give log(0)
        """
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")

        self.eps = None
        self.set_eps(eps)

        self.smoothing_kernel: Optional[SmoothingKernel] = None
        self.histogram_builder = JointHistogramBuilder(max_pixel_value, max_histogram_value)

        # Working buffers, reshaped when the histogram resolution changes
        self.probabilities: Optional[JointProbability] = None
        self.entropy: Optional[EntropyTables] = None
        self.scaled_cost: Optional[np.ndarray] = None
        self._smooth_work: Optional[np.ndarray] = None
        self._cost_work: Optional[np.ndarray] = None

        self._processed = False
        self._scaled_cost_ready = False
        self._max_cost: Optional[int] = None

        self.configure_histogram(max_pixel_value, max_histogram_value)
        self.configure_smoothing(smoothing_radius)

    @property
    def max_pixel_value(self) -> int:
        return self.histogram_builder.max_pixel_value

    @property
    def max_histogram_value(self) -> int:
        return self.histogram_builder.max_histogram_value

    @property
    def histogram(self) -> np.ndarray:
        """Joint histogram of the last processed pair."""
        return self.histogram_builder.histogram

    def configure_histogram(self, max_pixel_value: int, max_histogram_value: int) -> None:
        """
        Configures the histogram and how the input is scaled. For an 8-bit
        input image pass 255 for both values.

        Args:
            max_pixel_value: The maximum value a pixel in the input image can have
            max_histogram_value: The maximum value that the pixel can have after being scaled

        Raises:
            HistogramConfigurationError: If max_histogram_value > max_pixel_value
        """
        self.histogram_builder.configure(max_pixel_value, max_histogram_value)

        bins = self.histogram_builder.bins
        if self.entropy is None or self.entropy.joint.shape != (bins, bins):
            self.probabilities = JointProbability(
                joint=np.zeros((bins, bins), dtype=PROBABILITY_DTYPE),
                left=np.zeros(bins, dtype=PROBABILITY_DTYPE),
                right=np.zeros(bins, dtype=PROBABILITY_DTYPE),
                total=0.0
            )
            self.entropy = EntropyTables(
                joint=np.zeros((bins, bins), dtype=PROBABILITY_DTYPE),
                left=np.zeros(bins, dtype=PROBABILITY_DTYPE),
                right=np.zeros(bins, dtype=PROBABILITY_DTYPE),
                total=0.0
            )
            self._smooth_work = np.zeros((bins, bins), dtype=PROBABILITY_DTYPE)
            self._cost_work = np.zeros((bins, bins), dtype=PROBABILITY_DTYPE)
            self.scaled_cost = np.zeros((bins, bins), dtype=np.uint16)

        # Tables learned with another scaling no longer apply
        self._processed = False
        self._scaled_cost_ready = False

        self.logger.info(f"Histogram configured: max_pixel_value={max_pixel_value}, "
                         f"max_histogram_value={max_histogram_value}")

    def configure_smoothing(self, radius_or_kernel: Union[int, SmoothingKernel]) -> None:
        """
        Amount of smoothing applied to the probabilities.

        Args:
            radius_or_kernel: Gaussian radius (3 is recommended in the paper)
                or any ``SmoothingKernel``
        """
        if isinstance(radius_or_kernel, SmoothingKernel):
            self.smoothing_kernel = radius_or_kernel
        else:
            self.smoothing_kernel = GaussianKernel(int(radius_or_kernel))

        self.logger.info(f"Smoothing configured: {type(self.smoothing_kernel).__name__} "
                         f"with {self.smoothing_kernel.weights.size} weights")

    def set_eps(self, eps: float) -> None:
        """
        Raises:
            HistogramConfigurationError: If eps would round to zero in float32 or is not finite
        """
        self.eps = validate_eps(eps)

    def get_eps(self) -> float:
        return self.eps

    def random_histogram(self, rng: Optional[np.random.Generator], max_cost: int) -> None:
        """
        Fill the scaled cost table with random values in [0, max_cost).

        Intended for testing aggregation code, not for real matching.

        Args:
            rng: Random number generator, a fresh default one if None
            max_cost: Exclusive upper bound of the random costs
        """
        self._ensure_scaled_cost_capacity(max_cost)
        random_cost_table(self.scaled_cost.shape, max_cost, rng, out=self.scaled_cost)
        self._max_cost = max_cost
        self._scaled_cost_ready = True

    def process(self, left: np.ndarray, right: np.ndarray, min_disparity: int,
                disparity: np.ndarray, invalid: int, eps: Optional[float] = None) -> None:
        """
        Process the images and compute the entropy terms which are in turn used
        to compute mutual information.

        Args:
            left: Left rectified image
            right: Right rectified image
            min_disparity: The minimum allowed disparity
            disparity: Disparity from left to right
            invalid: Value of disparity pixels which are invalid
            eps: Optional floor for this call, defaults to the configured eps

        Raises:
            HistogramConfigurationError: If eps is not a usable positive floor
            ImageLayoutError: If the images have different shapes or are sub-region views
            DegenerateStatisticsError: If no pixel has a valid disparity
        """
        eps = self.eps if eps is None else validate_eps(eps)
        self._processed = False
        self._scaled_cost_ready = False

        histogram = self.histogram_builder.build(left, right, min_disparity, disparity, invalid)
        if not histogram.any():
            self.logger.error(f"No valid disparities in {disparity.shape} map (invalid={invalid})")

        compute_probabilities(histogram, out=self.probabilities)
        compute_entropy(self.probabilities, self.smoothing_kernel, eps,
                        out=self.entropy, work=self._smooth_work)

        self._processed = True
        self.logger.info(f"Mutual information learned from {int(self.entropy.total)} correspondences "
                         f"({100.0 * self.entropy.total / disparity.size:.1f}% of pixels)")

    def cost(self, left_value, right_value):
        """
        Mutual information cost for pixel values from the left and right images.
        Must call ``process`` first.
        Values must lie in [0, max_pixel_value].

        Args:
            left_value: Value in left image, I(x,y). Scalar or array
            right_value: Value of pixel in right image, I(x-d,y). Scalar or array

        Returns:
            float for scalar input, np.ndarray otherwise
        """
        self._require_processed()
        left_bin, right_bin = self._to_bins(left_value, right_value)

        value = mutual_information_cost(self.entropy, left_bin, right_bin)
        if np.ndim(value) == 0:
            return float(value)
        return value

    def precompute_scaled_cost(self, max_cost: int) -> np.ndarray:
        """
        Precompute cost scaled to have a range of 0 to max_cost, inclusive.

        Args:
            max_cost: Largest value in the scaled table

        Returns:
            np.ndarray: Scaled cost table indexed ``[left_bin, right_bin]``
        """
        self._require_processed()
        self._ensure_scaled_cost_capacity(max_cost)

        surface = cost_surface(self.entropy, out=self._cost_work)
        quantize_cost(surface, max_cost, out=self.scaled_cost)

        self._max_cost = max_cost
        self._scaled_cost_ready = True
        self.logger.info(f"Scaled cost table precomputed: {surface.shape[0]}x{surface.shape[1]}, max_cost={max_cost}")
        return self.scaled_cost

    def cost_scaled(self, left_value, right_value):
        """
        Look up the precomputed integer cost. Must call ``precompute_scaled_cost``
        (or ``random_histogram``) first. Values must lie in [0, max_pixel_value].

        Args:
            left_value: Value in left image, I(x,y). Scalar or array
            right_value: Value of pixel in right image, I(x-d,y). Scalar or array

        Returns:
            int for scalar input, np.ndarray otherwise
        """
        if not self._scaled_cost_ready:
            raise RuntimeError("Scaled cost not available. Call precompute_scaled_cost() first.")

        value = self.scaled_cost[self._to_bins(left_value, right_value)]
        if np.ndim(value) == 0:
            return int(value)
        return value

    def get_statistics(self) -> Dict[str, Any]:
        """
        Summary of the learned tables.

        Returns:
            Dict[str, Any]: Statistics of the last ``process`` call
        """
        stats = {
            'processed': self._processed,
            'max_pixel_value': self.max_pixel_value,
            'max_histogram_value': self.max_histogram_value,
            'smoothing_weights': int(self.smoothing_kernel.weights.size),
            'eps': self.eps
        }
        if self._processed:
            # _cost_work is only written by precompute_scaled_cost
            surface = cost_surface(self.entropy)
            stats.update({
                'valid_correspondences': int(self.entropy.total),
                'occupied_bins': int(np.count_nonzero(self.histogram)),
                'cost_range': [float(surface.min()), float(surface.max())]
            })
        if self._scaled_cost_ready:
            stats['max_cost'] = self._max_cost
        return stats

    def _to_bins(self, left_value, right_value):
        """
        Scale raw intensities into histogram bins.

        Raises:
            ValueError: If a value is outside [0, max_pixel_value]
        """
        for name, value in (('left', left_value), ('right', right_value)):
            if np.any(np.less(value, 0)) or np.any(np.greater(value, self.max_pixel_value)):
                raise ValueError(f"{name} intensity outside [0, {self.max_pixel_value}]")
        return self.histogram_builder.scale(left_value), self.histogram_builder.scale(right_value)

    def _require_processed(self) -> None:
        if not self._processed:
            raise RuntimeError("Entropy tables not computed. Call process() first.")

    def _ensure_scaled_cost_capacity(self, max_cost: int) -> None:
        validate_max_cost(max_cost)
        dtype = scaled_cost_dtype(max_cost)
        if np.iinfo(self.scaled_cost.dtype).max < max_cost:
            self.scaled_cost = np.zeros(self.scaled_cost.shape, dtype=dtype)
