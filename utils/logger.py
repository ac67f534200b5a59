# utils/logger.py
from __future__ import annotations

import logging
import sys

from utils.settings import LOG_FILE, LOG_LEVEL

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(name: str) -> logging.Logger:
    """
    Returns a logger with a console handler and, when LOG_FILE is set,
    a file handler that records everything down to DEBUG.
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    # handlers are attached once per logger name
    if logger.handlers:
        return logger

    formatter = logging.Formatter(_FORMAT)

    if LOG_FILE:
        try:
            file_handler = logging.FileHandler(LOG_FILE, mode="a", encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            sys.stderr.write(f"Failed to setup file handler for {LOG_FILE}: {e}\n")

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    return logger
