"""
Joint and marginal probabilities from the joint intensity histogram.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from utils.logger_config import get_logger
from .exceptions import DegenerateStatisticsError

logger = get_logger(__name__)

PROBABILITY_DTYPE = np.float32


@dataclass
class JointProbability:
    """
    Probability mass functions derived from one joint histogram.

    ``left`` and ``right`` are the row and column sums of ``joint`` so the
    three distributions are always consistent with each other.
    """

    joint: np.ndarray
    left: np.ndarray
    right: np.ndarray
    # number of valid correspondences the histogram was built from
    total: float


def compute_probabilities(histogram: np.ndarray, out: Optional[JointProbability] = None) -> JointProbability:
    """
    Normalize a joint histogram into joint and marginal probabilities.

    Args:
        histogram: Square joint histogram indexed ``[left_bin, right_bin]``
        out: Optional preallocated buffers to write the result into

    Returns:
        JointProbability: Joint surface plus left/right marginals

    Raises:
        DegenerateStatisticsError: If the histogram holds no correspondences
    """
    total = float(histogram.sum())
    if total <= 0:
        raise DegenerateStatisticsError(
            "Joint histogram is empty, no valid disparities to estimate mutual information from")

    bins = histogram.shape[0]
    if out is None:
        out = JointProbability(
            joint=np.empty(histogram.shape, dtype=PROBABILITY_DTYPE),
            left=np.empty(bins, dtype=PROBABILITY_DTYPE),
            right=np.empty(bins, dtype=PROBABILITY_DTYPE),
            total=total
        )
    out.total = total

    np.divide(histogram, total, out=out.joint, casting='unsafe')

    # Marginals are sums of the joint surface, not a separate histogram pass
    np.sum(out.joint, axis=1, out=out.left)
    np.sum(out.joint, axis=0, out=out.right)

    logger.debug(f"Probabilities computed from {int(total)} correspondences")
    return out
