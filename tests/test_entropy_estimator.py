import numpy as np
import pytest

from src_stereo_mi.mutual_information import (
    DEFAULT_EPS,
    DegenerateStatisticsError,
    GaussianKernel,
    HistogramConfigurationError,
    JointProbability,
    compute_entropy,
    compute_probabilities
)


def test_default_eps_is_float32_epsilon():
    assert DEFAULT_EPS == pytest.approx(float(np.finfo(np.float32).eps))


def test_uniform_histogram_gives_flat_marginal_entropy():
    probabilities = compute_probabilities(np.full((32, 32), 7, dtype=np.int64))

    entropy = compute_entropy(probabilities, GaussianKernel(3))

    np.testing.assert_allclose(entropy.left, entropy.left[0], rtol=1e-4)
    np.testing.assert_allclose(entropy.right, entropy.right[0], rtol=1e-4)
    np.testing.assert_allclose(entropy.joint, entropy.joint[0, 0], rtol=1e-4)


def test_uniform_entropy_matches_closed_form():
    bins = 16
    probabilities = compute_probabilities(np.full((bins, bins), 3, dtype=np.int64))

    entropy = compute_entropy(probabilities, GaussianKernel(1))

    n = probabilities.total
    assert entropy.left[5] == pytest.approx(-np.log(1.0 / bins) / n, rel=1e-4)
    assert entropy.joint[5, 5] == pytest.approx(-np.log(1.0 / bins ** 2) / n, rel=1e-4)


def test_probabilities_not_overwritten(rng):
    probabilities = compute_probabilities(rng.integers(0, 5, size=(16, 16)))
    joint_before = probabilities.joint.copy()
    left_before = probabilities.left.copy()

    compute_entropy(probabilities, GaussianKernel(3))

    np.testing.assert_array_equal(probabilities.joint, joint_before)
    np.testing.assert_array_equal(probabilities.left, left_before)


def test_empty_cells_use_eps_floor():
    histogram = np.zeros((64, 64), dtype=np.int64)
    histogram[0, 0] = 10
    probabilities = compute_probabilities(histogram)

    entropy = compute_entropy(probabilities, GaussianKernel(1), eps=1e-6)

    assert np.all(np.isfinite(entropy.joint))
    # Far from the occupied cell only the floor remains
    assert entropy.joint[63, 63] == pytest.approx(-np.log(1e-6) / 10, rel=1e-5)


def test_eps_changes_result(rng):
    probabilities = compute_probabilities(rng.integers(0, 3, size=(16, 16)) * (rng.random((16, 16)) > 0.7))

    small = compute_entropy(probabilities, GaussianKernel(1), eps=1e-9).joint.copy()
    large = compute_entropy(probabilities, GaussianKernel(1), eps=1e-2).joint

    assert not np.allclose(small, large)


@pytest.mark.parametrize("eps", [0.0, -1e-3, 1e-50, float("nan"), float("inf")])
def test_unusable_eps_rejected(eps):
    probabilities = compute_probabilities(np.ones((4, 4), dtype=np.int64))
    with pytest.raises(HistogramConfigurationError):
        compute_entropy(probabilities, GaussianKernel(1), eps=eps)


def test_smallest_normal_float32_eps_stays_finite():
    probabilities = compute_probabilities(np.eye(4, dtype=np.int64))

    entropy = compute_entropy(probabilities, GaussianKernel(1), eps=float(np.finfo(np.float32).tiny))

    assert np.all(np.isfinite(entropy.joint))


def test_zero_total_is_degenerate():
    probabilities = JointProbability(
        joint=np.zeros((4, 4), dtype=np.float32),
        left=np.zeros(4, dtype=np.float32),
        right=np.zeros(4, dtype=np.float32),
        total=0.0
    )
    with pytest.raises(DegenerateStatisticsError):
        compute_entropy(probabilities, GaussianKernel(1))
