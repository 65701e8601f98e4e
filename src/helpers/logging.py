"""Logger module."""

import logging
import os
import sys

import colorlog

loggers: dict[str, logging.Logger] = {}

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

LOG_STREAMS = {
    "stdout": sys.stdout,
    "stderr": sys.stderr,
}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


def _env_flag(key: str) -> bool:
    return os.getenv(key, "").strip().lower() in {"1", "true", "yes", "on"}


def get_logger(
    name: str,
    log_handler: str | None = None,
    log_level: str | None = None,
    log_color: bool | None = None,
) -> logging.Logger:
    """Get a module logger, configured once per name.

    Each argument left as None is read from the environment: LOG_HANDLER
    ('stdout' or 'stderr', default 'stdout'), LOG_LEVEL (default 'INFO')
    and LOG_COLOR (off unless set to a truthy value). Sending logs to
    stderr keeps the report table on stdout clean.

    Args:
        name: The name of the logger.
        log_handler: The stream to log to ('stdout' or 'stderr').
        log_level: The logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL').
        log_color: Whether to use colored output.

    Returns:
        logging.Logger: Configured logger instance.

    Raises:
        ValueError: If invalid handler or log level is provided.
    """
    if name in loggers:
        return loggers[name]

    if log_handler is None:
        log_handler = os.getenv("LOG_HANDLER", "stdout").lower()
    if log_level is None:
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    if log_color is None:
        log_color = _env_flag("LOG_COLOR")

    if log_handler not in LOG_STREAMS:
        err_msg = f"Invalid handler: {log_handler}"
        raise ValueError(err_msg)
    if log_level not in LOG_LEVELS:
        err_msg = f"Invalid log level: {log_level}"
        raise ValueError(err_msg)

    stream = LOG_STREAMS[log_handler]
    level = LOG_LEVELS[log_level]

    if log_color:
        logger = colorlog.getLogger(name)
        handler: logging.Handler = colorlog.StreamHandler(stream)
        formatter: logging.Formatter = colorlog.ColoredFormatter(
            "%(log_color)s " + LOG_FORMAT, log_colors=LOG_COLORS
        )
    else:
        logger = logging.getLogger(name)
        handler = logging.StreamHandler(stream)
        formatter = logging.Formatter(LOG_FORMAT)

    logger.setLevel(level)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    loggers[name] = logger
    return logger
