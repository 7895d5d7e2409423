import logging
import os


def setup_logging(level: str | None = None) -> logging.Logger:
    """Attach a stream handler to the "studio" logger and return it."""
    logger = logging.getLogger("studio")
    logger.setLevel((level or os.environ.get("LOG_LEVEL", "INFO")).upper())

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt="%(asctime)s - %(levelname)s - %(module)s - %(message)s"))
        logger.addHandler(handler)

    return logger
