# -*- coding: utf-8 -*-
from __future__ import annotations
import logging, logging.handlers
from pathlib import Path
from typing import Optional

LOG_FILE_NAME = "lab_inventory.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"

# uvicorn configures these itself, so they get the file handler directly
WIRED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi")


def _our_handler(logger: logging.Logger) -> Optional[logging.Handler]:
    for h in logger.handlers:
        if isinstance(h, logging.handlers.RotatingFileHandler) and h.baseFilename.endswith(LOG_FILE_NAME):
            return h
    return None


def setup_logging(settings) -> Optional[Path]:
    """
    INFO level on the root logger; with LOG_TO_FILE also a rotating file at
    LAB_DATA_ROOT/logs/lab_inventory.log (5 MB x 3). Safe to call twice.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)

    if not settings.LOG_TO_FILE:
        return None

    log_dir = Path(settings.LAB_DATA_ROOT).expanduser() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / LOG_FILE_NAME

    handler = _our_handler(root_logger)
    if handler is None:
        handler = logging.handlers.RotatingFileHandler(
            log_path, maxBytes=5_000_000, backupCount=3, encoding="utf-8", delay=True
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.setLevel(logging.INFO)
        root_logger.addHandler(handler)

    for name in WIRED_LOGGERS:
        lg = logging.getLogger(name)
        lg.setLevel(logging.INFO)
        if _our_handler(lg) is None:
            lg.addHandler(handler)

    return log_path
