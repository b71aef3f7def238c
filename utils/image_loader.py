"""
Loading of rectified stereo images and disparity maps.

Input formats:
- Rectified images: any format cv2 reads (8 or 16 bit), or .npy arrays
- Disparity maps: integer .npy arrays or 8/16 bit single channel images

All arrays are returned as contiguous single channel numpy arrays.
"""

import cv2
import numpy as np
from pathlib import Path
from typing import Tuple, Union

from utils.logger_config import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]


class ImageLoader:
    """
    Loads the inputs of the mutual information estimator.

    Attributes:
        root_folder (Path): Folder relative paths are resolved against
    """

    def __init__(self, root_folder: PathLike = "."):
        self.root_folder = Path(root_folder)
        self.logger = get_logger(f"{__name__}.ImageLoader")

    def load_stereo_inputs(self, left_path: PathLike, right_path: PathLike,
                           disparity_path: PathLike) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Load a rectified pair and the disparity map aligned with its left image.

        Returns:
            Tuple of (left, right, disparity)

        Raises:
            FileNotFoundError: If one of the files does not exist
            ValueError: If a file can't be decoded
        """
        left = self.load_grayscale(left_path)
        right = self.load_grayscale(right_path)
        disparity = self.load_disparity(disparity_path)
        return left, right, disparity

    def load_grayscale(self, path: PathLike) -> np.ndarray:
        """
        Load an image as single channel, keeping its bit depth.

        Args:
            path: Image or .npy file

        Returns:
            np.ndarray: Contiguous 2D integer array
        """
        image = self._read(path)
        if image.ndim == 3:
            code = cv2.COLOR_BGRA2GRAY if image.shape[2] == 4 else cv2.COLOR_BGR2GRAY
            image = cv2.cvtColor(image, code)
            self.logger.debug(f"Converted {path} to grayscale")
        return np.ascontiguousarray(image)

    def load_disparity(self, path: PathLike) -> np.ndarray:
        """
        Load an integer disparity map.

        Raises:
            ValueError: If the map is not single channel or not integer
        """
        disparity = self._read(path)
        if disparity.ndim != 2:
            raise ValueError(f"Disparity map must be single channel, got shape {disparity.shape}")
        if not np.issubdtype(disparity.dtype, np.integer):
            raise ValueError(f"Disparity map must hold integers, got {disparity.dtype}")
        return np.ascontiguousarray(disparity)

    def _read(self, path: PathLike) -> np.ndarray:
        full_path = self._resolve(path)
        if not full_path.exists():
            raise FileNotFoundError(f"File not found: {full_path}")

        if full_path.suffix == ".npy":
            data = np.load(full_path)
        else:
            data = cv2.imread(str(full_path), cv2.IMREAD_UNCHANGED)
            if data is None:
                raise ValueError(f"Could not decode image: {full_path}")

        self.logger.info(f"Loaded {full_path.name}: shape={data.shape}, dtype={data.dtype}")
        return data

    def _resolve(self, path: PathLike) -> Path:
        path = Path(path)
        return path if path.is_absolute() else self.root_folder / path
