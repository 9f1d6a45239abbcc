import logging
import os
from logging.handlers import RotatingFileHandler

# Scan logs land in ./logs/uxray.log relative to where the service was started
LOG_DIR = os.path.join(os.getcwd(), "logs")
LOG_FILE = os.path.join(LOG_DIR, "uxray.log")

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
MAX_LOG_BYTES = 10_000_000
LOG_BACKUPS = 5

os.makedirs(LOG_DIR, exist_ok=True)


def _with_format(handler: logging.Handler) -> logging.Handler:
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.setLevel(logging.INFO)
    return handler


def get_logger(name: str):
    """
    Logger for a uxray module, echoing to the terminal and to the rotating
    scan log. Handlers are attached once per name.
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)

    # Keeps at most LOG_BACKUPS old files of MAX_LOG_BYTES each
    logger.addHandler(_with_format(RotatingFileHandler(LOG_FILE, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS)))
    logger.addHandler(_with_format(logging.StreamHandler()))

    return logger
