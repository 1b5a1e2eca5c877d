"""
Logging setup for the calpal command line.
"""

import logging


def setup_logging(level_name: str = "INFO") -> int:
    """
    Apply the configured level (settings.log_level or CALPAL_LOG_LEVEL).

    When the host already owns the root logger (a test runner, an embedding
    scheduler) only the calpal loggers get the level; otherwise the root
    logger is configured once. Returns the numeric level applied.
    """
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    logging.getLogger("calpal").setLevel(level)

    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(level=level, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    return level
