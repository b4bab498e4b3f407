import logging
import logging.config

from mooded.config import AppConfig


def setup_logger(config: AppConfig) -> logging.Logger:
    if config.log_to_file:
        config.log_dir.mkdir(exist_ok=True, parents=True)
    logging.config.dictConfig(config.get_logging_config())
    return logging.getLogger("mooded")
