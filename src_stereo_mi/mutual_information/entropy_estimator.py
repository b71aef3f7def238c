"""
Entropy tables for the mutual information cost.

Follows Eq. 5 of Hirschmuller, "Stereo processing by semiglobal matching
and mutual information" (PAMI 2008): the per-intensity entropy terms are

    h(i, k) = -(1/n) * log(P(i, k) * g) * g

where ``g`` is a Gaussian kernel. Convolving, taking the log and
convolving again approximates a Parzen window estimate of the density.
The marginals use the same pipeline in 1D.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from utils.logger_config import get_logger
from .exceptions import DegenerateStatisticsError, HistogramConfigurationError
from .probability_estimator import JointProbability, PROBABILITY_DTYPE
from .smoothing import SmoothingKernel, smooth_2d

logger = get_logger(__name__)

# Floor that replaces zero probabilities before the log
DEFAULT_EPS = float(np.finfo(PROBABILITY_DTYPE).eps)


def validate_eps(eps: float) -> float:
    """
    Check that eps stays a positive, finite floor once stored as float32.

    Raises:
        HistogramConfigurationError: If eps would round to zero or is not finite
    """
    try:
        value = float(eps)
    except (TypeError, ValueError):
        raise HistogramConfigurationError(f"eps must be a number, got {eps!r}")
    if not np.isfinite(value) or value < np.finfo(PROBABILITY_DTYPE).tiny:
        raise HistogramConfigurationError(
            f"eps must be finite and at least {np.finfo(PROBABILITY_DTYPE).tiny:.3e}, got {eps!r}")
    return value


@dataclass
class EntropyTables:
    """Per-intensity entropy contributions for the joint and marginal distributions."""

    joint: np.ndarray
    left: np.ndarray
    right: np.ndarray
    total: float


def _log_with_floor(values: np.ndarray, eps: float) -> np.ndarray:
    # The floor replaces values below eps, it is not added to every cell
    np.maximum(values, eps, out=values)
    np.log(values, out=values)
    return values


def joint_entropy(probability: np.ndarray, total: float, kernel: SmoothingKernel, eps: float,
                  work: Optional[np.ndarray] = None, out: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Entropy surface of the joint distribution.

    Args:
        probability: Joint probability surface
        total: Number of correspondences the probabilities came from
        kernel: Smoothing strategy
        eps: Numerical floor applied before the log
        work: Optional scratch buffer, same shape as ``probability``
        out: Optional output buffer, same shape as ``probability``

    Returns:
        np.ndarray: Joint entropy surface
    """
    if work is None:
        work = np.empty_like(probability)
    out = smooth_2d(probability, kernel, work=work, output=out)
    _log_with_floor(out, eps)
    out = smooth_2d(out, kernel, work=work, output=out)
    np.divide(out, -total, out=out)
    return out


def marginal_entropy(probability: np.ndarray, total: float, kernel: SmoothingKernel, eps: float,
                     work: Optional[np.ndarray] = None, out: Optional[np.ndarray] = None) -> np.ndarray:
    """Entropy vector of a single image's intensity distribution."""
    work = kernel.apply(probability, axis=0, output=work)
    _log_with_floor(work, eps)
    out = kernel.apply(work, axis=0, output=out)
    np.divide(out, -total, out=out)
    return out


def compute_entropy(probabilities: JointProbability, kernel: SmoothingKernel, eps: float = DEFAULT_EPS,
                    out: Optional[EntropyTables] = None,
                    work: Optional[np.ndarray] = None) -> EntropyTables:
    """
    Convert probabilities into joint and marginal entropy tables.

    The probabilities are left untouched; results go into separate buffers.

    Args:
        probabilities: Output of ``compute_probabilities``
        kernel: Smoothing strategy applied before and after the log
        eps: Strictly positive floor substituted for probabilities below it
        out: Optional preallocated output tables
        work: Optional scratch buffer shaped like the joint surface

    Returns:
        EntropyTables: Joint, left and right entropy

    Raises:
        DegenerateStatisticsError: If there were no correspondences
        HistogramConfigurationError: If eps is not a usable positive floor
    """
    eps = validate_eps(eps)
    total = probabilities.total
    if total <= 0:
        raise DegenerateStatisticsError("Can't compute entropy without any valid correspondences")

    if out is None:
        out = EntropyTables(
            joint=np.empty_like(probabilities.joint),
            left=np.empty_like(probabilities.left),
            right=np.empty_like(probabilities.right),
            total=total
        )
    out.total = total

    if work is None:
        work = np.empty_like(probabilities.joint)
    marginal_work = work.reshape(-1)[:probabilities.left.size]

    joint_entropy(probabilities.joint, total, kernel, eps, work=work, out=out.joint)
    marginal_entropy(probabilities.left, total, kernel, eps, work=marginal_work, out=out.left)
    marginal_entropy(probabilities.right, total, kernel, eps, work=marginal_work, out=out.right)

    logger.debug(f"Entropy computed: joint range=[{out.joint.min():.3e}, {out.joint.max():.3e}], eps={eps:.3e}")
    return out
