"""EVENT-level receipt log for ledger replays.

Receipts go to a size-rotated ``events.log`` as one sorted-key JSON object
per line, separate from the ``bt.logging`` debug stream.
"""

from __future__ import annotations

import json
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Any

EVENTS_LEVEL_NUM = 38
EVENTS_LOGGER_NAME = "gridstake.event"
EVENTS_FILE_NAME = "events.log"
DEFAULT_LOG_BACKUP_COUNT = 10
DEFAULT_EVENTS_RETENTION_SIZE = 2 * 1024 * 1024


def setup_events_logger(
    events_dir: str | os.PathLike,
    events_retention_size: int = DEFAULT_EVENTS_RETENTION_SIZE,
) -> logging.Logger:
    """Return the receipt logger writing to ``<events_dir>/events.log``.

    Calling it again for the same directory reuses the existing handler.
    """
    logging.addLevelName(EVENTS_LEVEL_NUM, "EVENT")
    logger = logging.getLogger(EVENTS_LOGGER_NAME)
    logger.setLevel(EVENTS_LEVEL_NUM)

    os.makedirs(events_dir, exist_ok=True)
    log_path = os.path.abspath(os.path.join(events_dir, EVENTS_FILE_NAME))
    if any(getattr(h, "baseFilename", None) == log_path for h in logger.handlers):
        return logger

    handler = RotatingFileHandler(
        log_path,
        maxBytes=events_retention_size,
        backupCount=DEFAULT_LOG_BACKUP_COUNT,
    )
    handler.setLevel(EVENTS_LEVEL_NUM)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logger.addHandler(handler)
    return logger


def log_event(logger: logging.Logger, receipt: dict[str, Any]) -> None:
    logger.log(EVENTS_LEVEL_NUM, json.dumps(receipt, sort_keys=True, default=str))


__all__ = ["EVENTS_LEVEL_NUM", "log_event", "setup_events_logger"]
