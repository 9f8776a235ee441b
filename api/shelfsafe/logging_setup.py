# shelfsafe/logging_setup.py
"""
Logging for the API process.

One rotating file, DATA_ROOT/logs/shelfsafe.log, shared by the root logger
and the uvicorn/fastapi loggers. Safe to call more than once.
"""
from __future__ import annotations
import logging, logging.handlers
from pathlib import Path

LOG_FILE_NAME = "shelfsafe.log"

def _is_ours(h: logging.Handler) -> bool:
    return isinstance(h, logging.handlers.RotatingFileHandler) and getattr(h, "baseFilename", "").endswith(LOG_FILE_NAME)

def setup_logging(settings) -> Path:
    """Configure rotating file logging under DATA_ROOT/logs/shelfsafe.log"""
    root = Path(settings.DATA_ROOT).expanduser()
    log_dir = root / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / LOG_FILE_NAME

    level = logging.getLevelName(str(settings.LOG_LEVEL).upper())
    if not isinstance(level, int):
        level = logging.INFO

    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s")
    handler = logging.handlers.RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=3, encoding="utf-8")
    handler.setFormatter(fmt)
    handler.setLevel(level)

    logger = logging.getLogger()  # root
    logger.setLevel(level)
    # avoid duplicate handlers
    if not any(_is_ours(h) for h in logger.handlers):
        logger.addHandler(handler)

    # also wire uvicorn loggers (if present)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi"):
        lg = logging.getLogger(name)
        lg.setLevel(level)
        if not any(_is_ours(h) for h in lg.handlers):
            lg.addHandler(handler)

    return log_path
