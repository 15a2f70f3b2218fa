"""
Logging setup for applications embedding LatArchiver.

The library itself only installs a NullHandler on the ``latarchiver`` logger;
configure_logging() attaches real handlers to that logger without touching
the host application's root logger.
"""
import logging
import os
import platform
from pathlib import Path
from typing import Optional


PACKAGE_LOGGER = "latarchiver"
LOG_FILE_NAME = "latarchiver.log"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# GPU and 7z libraries log adapter and per-member detail below WARNING.
BACKEND_LOGGERS = ("wgpu", "py7zr")

_DEFERRED_FILE_LOGGING: dict[str, object] = {
    "logger": None,
    "log_file": None,
}


def default_log_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA") or os.getenv("APPDATA") or str(Path.home())
        return Path(base) / "LatArchiver" / "logs"
    if platform.system() == "Darwin":
        return Path.home() / "Library" / "Logs" / "LatArchiver"
    state_home = os.getenv("XDG_STATE_HOME")
    base = Path(state_home) if state_home else Path.home() / ".local" / "state"
    return base / "latarchiver" / "logs"


def _reset_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()


def _file_handler(log_file: Path, level: int) -> logging.FileHandler:
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def _quiet_backend_loggers(debug: bool) -> None:
    for name in BACKEND_LOGGERS:
        logging.getLogger(name).setLevel(logging.INFO if debug else logging.WARNING)


def configure_logging(
    debug: bool,
    log_dir: Optional[Path] = None,
    defer_file_logging: bool = False,
) -> logging.Logger:
    """
    Configure the package logger and return it.

    Non-debug runs only persist warnings (or discard everything when the log
    directory cannot be created). Debug runs log INFO to the console and
    DEBUG to the file; the file handler can be deferred until
    enable_deferred_file_logging() is called, e.g. until the user has chosen
    where archives and logs may be written.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    _reset_handlers(logger)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    _quiet_backend_loggers(debug)
    _DEFERRED_FILE_LOGGING.update(logger=None, log_file=None)

    target_dir = log_dir or default_log_dir()
    log_file = target_dir / LOG_FILE_NAME
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        log_file = None

    if not debug:
        if log_file is None:
            logger.addHandler(logging.NullHandler())
        else:
            logger.addHandler(_file_handler(log_file, logging.WARNING))
        return logger

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)

    if defer_file_logging:
        _DEFERRED_FILE_LOGGING.update(logger=logger, log_file=log_file)
    elif log_file is not None:
        logger.addHandler(_file_handler(log_file, logging.DEBUG))
    return logger


def enable_deferred_file_logging() -> None:
    logger = _DEFERRED_FILE_LOGGING.get("logger")
    log_file = _DEFERRED_FILE_LOGGING.get("log_file")
    if not isinstance(logger, logging.Logger) or not isinstance(log_file, Path):
        return

    if any(isinstance(handler, logging.FileHandler) for handler in logger.handlers):
        return

    logger.addHandler(_file_handler(log_file, logging.DEBUG))
