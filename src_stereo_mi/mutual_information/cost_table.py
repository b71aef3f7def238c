"""
Mutual information cost and its fixed-point lookup table.

The cost of matching intensities ``(l, r)`` is the negated mutual
information contribution (Eq. 8b and 9a of the SGM paper):

    C(l, r) = -(h_left(l) + h_right(r) - h_joint(l, r))

Lower mutual information gives a higher cost. For aggregation the float
surface is linearly rescaled into integers ``[0, max_cost]``.
"""

from typing import Optional

import numpy as np

from utils.logger_config import get_logger
from .entropy_estimator import EntropyTables
from .exceptions import HistogramConfigurationError

logger = get_logger(__name__)


def scaled_cost_dtype(max_cost: int) -> np.dtype:
    """Smallest unsigned integer type able to hold ``max_cost``."""
    return np.min_scalar_type(max_cost)


def validate_max_cost(max_cost: int) -> None:
    if not isinstance(max_cost, (int, np.integer)) or isinstance(max_cost, bool):
        raise HistogramConfigurationError(f"max_cost must be an integer, got {type(max_cost).__name__}")
    if max_cost <= 0:
        raise HistogramConfigurationError(f"max_cost must be positive, got {max_cost}")
    if max_cost > np.iinfo(np.uint32).max:
        raise HistogramConfigurationError(f"max_cost is too large for a lookup table: {max_cost}")


def mutual_information_cost(entropy: EntropyTables, left_bins, right_bins):
    """
    Cost for histogram bin indices, scalars or arrays.

    Args:
        entropy: Entropy tables from ``compute_entropy``
        left_bins: Left intensity already scaled into the histogram domain
        right_bins: Right intensity already scaled into the histogram domain
    """
    # Evaluated in the same order as cost_surface
    return entropy.joint[left_bins, right_bins] - entropy.left[left_bins] - entropy.right[right_bins]


def cost_surface(entropy: EntropyTables, out: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Evaluate the cost for every pair of histogram bins.

    Returns:
        np.ndarray: Surface indexed ``[left_bin, right_bin]``
    """
    if out is None:
        out = np.empty_like(entropy.joint)
    np.subtract(entropy.joint, entropy.left[:, np.newaxis], out=out)
    np.subtract(out, entropy.right[np.newaxis, :], out=out)
    return out


def quantize_cost(surface: np.ndarray, max_cost: int, out: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Linearly rescale a float cost surface into integers ``[0, max_cost]``.

    The minimum of the surface maps to 0 and the maximum to ``max_cost``.
    A flat surface has no range to rescale, every cell then gets
    ``max_cost // 2``.

    Args:
        surface: Float cost surface
        max_cost: Largest integer cost
        out: Optional integer output table

    Returns:
        np.ndarray: Integer cost table
    """
    validate_max_cost(max_cost)
    if out is None:
        out = np.empty(surface.shape, dtype=scaled_cost_dtype(max_cost))
    elif np.iinfo(out.dtype).max < max_cost:
        raise HistogramConfigurationError(f"Output table of type {out.dtype} can't hold max_cost={max_cost}")

    min_value = float(surface.min())
    max_value = float(surface.max())
    range_value = max_value - min_value

    if not np.isfinite(range_value):
        raise FloatingPointError(f"Cost surface is not finite: range=[{min_value}, {max_value}]")

    if range_value == 0:
        logger.warning(f"Cost surface is flat ({min_value:.4g}), using constant cost {max_cost // 2}")
        out.fill(max_cost // 2)
        return out

    scaled = (surface.astype(np.float64) - min_value) * (max_cost / range_value)
    np.rint(scaled, out=scaled)
    np.clip(scaled, 0, max_cost, out=scaled)
    out[...] = scaled

    logger.debug(f"Cost quantized: float range=[{min_value:.4g}, {max_value:.4g}] -> [0, {max_cost}]")
    return out


def random_cost_table(shape, max_cost: int, rng: Optional[np.random.Generator] = None,
                      out: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Fill a cost table with random integers in ``[0, max_cost)``.

    Only meant for exercising aggregation code without real imagery.
    """
    validate_max_cost(max_cost)
    if rng is None:
        rng = np.random.default_rng()
    values = rng.integers(0, max_cost, size=shape)
    if out is None:
        return values.astype(scaled_cost_dtype(max_cost))
    out[...] = values
    return out
