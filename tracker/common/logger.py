import logging
import os
from pathlib import Path
from logging.handlers import RotatingFileHandler
from tracker.common.setup import PATHS
from datetime import datetime

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s:%(filename)s:%(lineno)d] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Attaches the handler to the logger under the given name, unless a handler with that name is already there (so
# re-importing or calling get_logger twice never doubles up output). Returns True if it was attached.
def _attach(logger: logging.Logger, handler_name: str, make_handler, level, fmt) -> bool:
    if any(h.get_name() == handler_name for h in logger.handlers):
        return False
    handler = make_handler()
    handler.setLevel(level)
    handler.setFormatter(fmt)
    handler.set_name(handler_name)
    logger.addHandler(handler)
    return True

# Reads the wanted level from TIMER_TRACKER_LOG_LEVEL ("DEBUG", "INFO", ...), falling back to the given default.
def level_from_env(default=logging.INFO):
    raw = os.getenv("TIMER_TRACKER_LOG_LEVEL", "").strip().upper()
    if not raw:
        return default
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else default

def get_logger(
        name = "timertracker",
        level = logging.INFO,
        log_dir: Path | None = None,
        max_bytes = 2 * 1024 * 1024,
        backup_count = 3,
        persistent = True,
        console = False,
        historical_debugs: int = 5
) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.propagate = False
    logger.setLevel(min(level, logging.DEBUG) if historical_debugs > 0 else level)

    log_dir = log_dir or PATHS.logs
    log_dir.mkdir(parents=True,exist_ok=True)
    fmt = logging.Formatter(LOG_FORMAT,LOG_DATE_FORMAT)

    # Persistent, size-rotated log shared by all runs
    if persistent:
        _attach(logger, f"{name}:persistent", lambda: RotatingFileHandler(
            filename=log_dir / f"{name}.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        ), level, fmt)

    # Latest-only log, overwritten each run
    _attach(logger, f"{name}:latest", lambda: logging.FileHandler(
        filename=log_dir / "latest.log", mode="w", encoding="utf-8"
    ), level, fmt)

    # One full debug log per run, only the newest `historical_debugs` are kept
    if historical_debugs > 0:
        debug_dir = log_dir / "debug"
        debug_dir.mkdir(parents=True,exist_ok=True)
        run_path = debug_dir / f"{name}_{datetime.now():%Y-%m-%d_%H-%M-%S}.log"
        attached = _attach(logger, f"{name}:historical_debug", lambda: logging.FileHandler(
            filename=run_path, encoding="utf-8"
        ), logging.DEBUG, fmt)
        if attached:
            runs = sorted(debug_dir.glob(f"{name}_*.log"),key=lambda p: p.stat().st_mtime,reverse=True)
            for run in runs[historical_debugs:]:
                try: run.unlink()
                except OSError: pass

    if console:
        _attach(logger, f"{name}:console", logging.StreamHandler, level, fmt)

    return logger

log = get_logger(level=level_from_env(), console=bool(os.getenv("TIMER_TRACKER_CONSOLE")))
