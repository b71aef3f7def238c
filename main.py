import sys
from pathlib import Path

from config.config import Config
from src_stereo_mi.mutual_information_estimator import StereoMutualInformation
from src_stereo_mi.mutual_information import MutualInformationError
from utils.image_loader import ImageLoader
from utils.logger_config import LoggerConfig, get_logger


def load_config(config_path: str) -> Config:
    """
    Load configuration from a JSON file.

    Args:
        config_path (str): Path to the configuration JSON file.

    Returns:
        Config: Loaded configuration object.
    """
    return Config(config_path)


def process_mutual_information(config: Config) -> StereoMutualInformation:
    """
    Learn the mutual information cost for the configured stereo pair.

    Args:
        config (Config): Configuration object containing processing parameters.

    Returns:
        StereoMutualInformation: Estimator holding the learned cost tables.
    """
    logger = get_logger(__name__)
    logger.info(f"Configuration: {config.get_config_summary()}")

    loader = ImageLoader(Path(__file__).parent)
    left, right, disparity = loader.load_stereo_inputs(
        config.left_image, config.right_image, config.disparity_map)

    estimator = StereoMutualInformation(**config.get_estimator_config())
    estimator.process(left, right, config.min_disparity, disparity, config.invalid_disparity)
    estimator.precompute_scaled_cost(config.max_cost)

    logger.info(f"Estimator statistics: {estimator.get_statistics()}")
    return estimator


def main() -> int:
    """
    Main function to execute the mutual information cost pipeline.
    """
    config_file = sys.argv[1] if len(sys.argv) > 1 else "config/config_mutual_information.json"

    config = load_config(config_file)
    if config.log_file:
        LoggerConfig.setup_root_logger(level=config.get_log_level(), log_file=Path(config.log_file), force=True)
    else:
        LoggerConfig.set_level(config.get_log_level())
    logger = get_logger(__name__)

    try:
        process_mutual_information(config)
    except MutualInformationError as e:
        logger.error(f"Mutual information cost unavailable, fall back to a photometric cost: {e}")
        return 1

    logger.info("Processing completed successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
