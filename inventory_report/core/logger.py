# inventory_report/core/logger.py

import logging
import sys


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger instance"""
    # Imported here so config.py can log through this helper while it loads
    from inventory_report.config import LOG_LEVEL

    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    return logger
