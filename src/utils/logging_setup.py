"""
Logging for the teams file organizer.

Everything goes to ``teams_organizer`` (console, a daily master log and a
daily error log). Keyword learning writes to its own daily file under
``teams_organizer.learning`` and does not reach the console.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict

BASE_LOGGER = "teams_organizer"
LEARNING_LOGGER = f"{BASE_LOGGER}.learning"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# (file prefix, minimum level) for the base logger's file handlers
_BASE_FILES = (("master_log", logging.NOTSET), ("error_log", logging.ERROR))


def _file_handler(path: Path, formatter: logging.Formatter, level: int = logging.NOTSET) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(log_dir: Path, level: int = logging.INFO) -> Dict[str, logging.Logger]:
    """Attach handlers once per process and return the ``main`` and ``learning`` loggers."""
    log_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d")
    formatter = logging.Formatter(LOG_FORMAT)

    main_logger = logging.getLogger(BASE_LOGGER)
    main_logger.setLevel(level)
    if not main_logger.handlers:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        main_logger.addHandler(console)
        for prefix, handler_level in _BASE_FILES:
            main_logger.addHandler(_file_handler(log_dir / f"{prefix}_{stamp}.log", formatter, handler_level))

    learning_logger = logging.getLogger(LEARNING_LOGGER)
    learning_logger.setLevel(logging.INFO)
    learning_logger.propagate = False
    if not learning_logger.handlers:
        learning_logger.addHandler(_file_handler(log_dir / f"learning_log_{stamp}.log", formatter))

    return {"main": main_logger, "learning": learning_logger}
