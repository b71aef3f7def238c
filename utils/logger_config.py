"""
Unified logging configuration for the mutual information cost estimator.

All modules obtain their logger through ``get_logger`` so that they share
one handler setup under the ``stereo_mi`` root logger.
"""

import logging
import sys
from typing import Optional
from pathlib import Path


class LoggerConfig:
    """Centralized logger configuration manager."""

    _configured = False
    _root_logger_name = 'stereo_mi'

    @classmethod
    def setup_root_logger(
        cls,
        level: int = logging.INFO,
        format_string: Optional[str] = None,
        log_file: Optional[Path] = None,
        force: bool = False
    ) -> logging.Logger:
        """
        Setup the root logger shared by every estimator module.

        Args:
            level: Logging level (default: INFO)
            format_string: Custom format string (optional)
            log_file: Optional file path for logging to file
            force: Replace the handlers of an already configured logger

        Returns:
            logging.Logger: Configured root logger
        """
        if cls._configured and not force:
            return logging.getLogger(cls._root_logger_name)

        root_logger = logging.getLogger(cls._root_logger_name)
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        if format_string is None:
            format_string = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        formatter = logging.Formatter(format_string)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        if log_file is not None:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

        # Child loggers propagate here only
        root_logger.propagate = False

        cls._configured = True

        root_logger.debug(f"Root logger configured: level={logging.getLevelName(level)}")
        if log_file:
            root_logger.info(f"Logging to file: {log_file}")

        return root_logger

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """
        Get a child logger of the ``stereo_mi`` root logger.

        Args:
            name: Logger name (typically __name__ from calling module)

        Returns:
            logging.Logger: Configured logger
        """
        if not cls._configured:
            cls.setup_root_logger()

        logger = logging.getLogger(f"{cls._root_logger_name}.{name}")
        logger.propagate = True
        return logger

    @classmethod
    def set_level(cls, level: int) -> None:
        """
        Change the logging level for the root logger and its handlers.

        Args:
            level: New logging level
        """
        root_logger = logging.getLogger(cls._root_logger_name)
        root_logger.setLevel(level)
        for handler in root_logger.handlers:
            handler.setLevel(level)

        root_logger.info(f"Logging level changed to: {logging.getLevelName(level)}")


def get_logger(name: str) -> logging.Logger:
    """
    Convenience function to get a properly configured logger.

    Args:
        name: Logger name, usually the calling module's __name__

    Returns:
        logging.Logger: Configured logger
    """
    return LoggerConfig.get_logger(name)
