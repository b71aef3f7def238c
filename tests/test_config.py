import json
import logging

import pytest

from config.config import Config


def write_config(tmp_path, data):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_defaults_filled_in(tmp_path):
    config = Config(str(write_config(tmp_path, {})))

    assert config.max_pixel_value == 255
    assert config.max_histogram_value == 255
    assert config.smoothing_radius == 3
    assert config.max_cost == 2047
    assert config.eps is None


def test_case_name_formatting(tmp_path):
    config = Config(str(write_config(tmp_path, {
        "case_name": "kitti_000",
        "left_image": "data/{case_name}/left.png"
    })))

    assert config.left_image == "data/kitti_000/left.png"


def test_estimator_config_excludes_unset_eps(tmp_path):
    config = Config(str(write_config(tmp_path, {"max_pixel_value": 1023, "max_histogram_value": 255})))

    assert config.get_estimator_config() == {
        "max_pixel_value": 1023,
        "max_histogram_value": 255,
        "smoothing_radius": 3
    }


def test_estimator_config_passes_eps():
    config = Config(overrides={"eps": 1e-6})
    assert config.get_estimator_config()["eps"] == pytest.approx(1e-6)


def test_histogram_finer_than_pixels_rejected():
    with pytest.raises(ValueError):
        Config(overrides={"max_pixel_value": 255, "max_histogram_value": 511})


@pytest.mark.parametrize("overrides", [
    {"smoothing_radius": 0},
    {"max_cost": -5},
    {"eps": 0},
    {"eps": 1e-50},
    {"eps": float("nan")},
    {"min_disparity": 1.5},
])
def test_invalid_values_rejected(overrides):
    with pytest.raises(ValueError):
        Config(overrides=overrides)


def test_unknown_attribute_raises():
    config = Config()
    with pytest.raises(AttributeError):
        config.not_a_setting


def test_summary_mentions_bins():
    assert "256 bins" in Config().get_config_summary()


def test_log_level_mapped_to_logging_constant():
    assert Config().get_log_level() == logging.INFO
    assert Config(overrides={"log_level": "DEBUG"}).get_log_level() == logging.DEBUG


def test_unknown_log_level_rejected():
    with pytest.raises(ValueError):
        Config(overrides={"log_level": "verbose"})
