import logging
import sys

APP_LOGGER = "owl"

# Library modules log through logging.getLogger(__name__).
LIBRARY_LOGGERS = ("engines", "models", "utils")


def setup_logging(level=logging.INFO):
    """
    Sets up console logging for the application and the library packages.
    Logs to stdout with a single handler, no matter how often it is called.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        '[%(asctime)s] %(levelname)-8s %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))

    for name in (APP_LOGGER,) + LIBRARY_LOGGERS:
        logger = logging.getLogger(name)
        logger.setLevel(level)

        # Prevent duplicate handlers if called multiple times
        if logger.handlers:
            for existing in logger.handlers:
                existing.setLevel(level)
            continue
        logger.addHandler(handler)

    return logging.getLogger(APP_LOGGER)


def get_logger(name=None):
    """
    Helper to get a sub-logger of the application logger.
    """
    if name:
        return logging.getLogger(f"{APP_LOGGER}.{name}")
    return logging.getLogger(APP_LOGGER)
