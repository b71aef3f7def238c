import cv2
import numpy as np
import pytest

from utils.image_loader import ImageLoader


def test_loads_sixteen_bit_png(tmp_path, rng):
    image = rng.integers(0, 1024, size=(10, 12)).astype(np.uint16)
    cv2.imwrite(str(tmp_path / "left.png"), image)

    loaded = ImageLoader(tmp_path).load_grayscale("left.png")

    assert loaded.dtype == np.uint16
    np.testing.assert_array_equal(loaded, image)


def test_color_image_converted_to_gray(tmp_path):
    image = np.zeros((6, 6, 3), dtype=np.uint8)
    image[..., 1] = 200
    cv2.imwrite(str(tmp_path / "color.png"), image)

    loaded = ImageLoader(tmp_path).load_grayscale("color.png")

    assert loaded.shape == (6, 6)
    assert loaded.flags['C_CONTIGUOUS']


def test_loads_npy_disparity(tmp_path):
    disparity = np.arange(20, dtype=np.int16).reshape(4, 5)
    np.save(tmp_path / "disparity.npy", disparity)

    loaded = ImageLoader().load_disparity(tmp_path / "disparity.npy")

    np.testing.assert_array_equal(loaded, disparity)


def test_float_disparity_rejected(tmp_path):
    np.save(tmp_path / "disparity.npy", np.zeros((3, 3), dtype=np.float32))
    with pytest.raises(ValueError):
        ImageLoader(tmp_path).load_disparity("disparity.npy")


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        ImageLoader(tmp_path).load_grayscale("missing.png")
