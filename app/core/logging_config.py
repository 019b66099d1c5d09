# app/core/logging_config.py

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging once; uvicorn keeps its own handlers."""
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
