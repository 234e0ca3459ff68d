import logging
import sys
from logging.handlers import RotatingFileHandler

LOGGER_NAME = "sticky_checklist"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(config, level=logging.INFO):
    """Send package logs to a rotating file in the data dir and to stderr.

    Safe to call more than once; a handler for the same file is not added twice.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    log_path = str(config.log_file.resolve())
    for handler in logger.handlers:
        if getattr(handler, "baseFilename", None) == log_path:
            return logger

    config.data_dir.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    file_handler = RotatingFileHandler(log_path, maxBytes=1024 * 1024, backupCount=5, encoding="utf-8")
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)
    return logger
