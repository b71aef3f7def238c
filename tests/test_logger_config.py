import logging

import pytest

from utils.logger_config import LoggerConfig, get_logger


@pytest.fixture
def restore_level():
    yield
    LoggerConfig.set_level(logging.INFO)


def test_child_loggers_share_root():
    logger = get_logger("tests.child")

    assert logger.name == "stereo_mi.tests.child"
    assert logger.propagate


def test_set_level_updates_root_and_handlers(restore_level):
    LoggerConfig.set_level(logging.WARNING)

    root_logger = logging.getLogger("stereo_mi")
    assert root_logger.level == logging.WARNING
    assert root_logger.handlers
    assert all(handler.level == logging.WARNING for handler in root_logger.handlers)
    assert not get_logger("tests.child").isEnabledFor(logging.INFO)
