import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level="INFO"):
    """Configure the rates_oracle logger with a single stream handler"""
    logger = logging.getLogger("rates_oracle")
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger
