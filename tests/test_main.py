import json
import logging

import cv2
import numpy as np
import pytest

from config.config import Config
from main import main, process_mutual_information
from src_stereo_mi.mutual_information import DegenerateStatisticsError
from utils.logger_config import LoggerConfig


def write_pair(tmp_path, rng, disparity_value):
    left = rng.integers(0, 256, size=(40, 40), dtype=np.uint8)
    disparity = np.full(left.shape, disparity_value, dtype=np.uint8)
    cv2.imwrite(str(tmp_path / "left.png"), left)
    cv2.imwrite(str(tmp_path / "right.png"), left)
    cv2.imwrite(str(tmp_path / "disparity.png"), disparity)
    return {
        "left_image": str(tmp_path / "left.png"),
        "right_image": str(tmp_path / "right.png"),
        "disparity_map": str(tmp_path / "disparity.png"),
        "max_cost": 255
    }


def test_pipeline_produces_scaled_cost(tmp_path, rng):
    config = Config(overrides=write_pair(tmp_path, rng, 0))

    estimator = process_mutual_information(config)

    assert estimator.scaled_cost.max() == 255
    assert estimator.cost_scaled(10, 10) < estimator.cost_scaled(10, 200)


def test_pipeline_reports_missing_disparity(tmp_path, rng):
    config = Config(overrides=write_pair(tmp_path, rng, 255))

    with pytest.raises(DegenerateStatisticsError):
        process_mutual_information(config)


def test_main_applies_configured_log_level(tmp_path, rng, monkeypatch):
    settings = write_pair(tmp_path, rng, 0)
    settings["log_level"] = "WARNING"
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps(settings), encoding="utf-8")
    monkeypatch.setattr("sys.argv", ["main.py", str(config_path)])

    try:
        assert main() == 0
        assert logging.getLogger("stereo_mi").level == logging.WARNING
    finally:
        LoggerConfig.set_level(logging.INFO)


def test_main_returns_error_code_on_degenerate_input(tmp_path, rng, monkeypatch):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps(write_pair(tmp_path, rng, 255)), encoding="utf-8")
    monkeypatch.setattr("sys.argv", ["main.py", str(config_path)])

    assert main() == 1
