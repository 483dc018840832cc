"""
Logging setup and small helpers shared by the round-trip arbitrage bot.

Every module logs through ``logging.getLogger(__name__)``; the CLI host calls
``configure_logging`` once so all of those records end up on the package
logger's console and file handlers.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

PACKAGE_LOGGER = "roundtrip_arbitrage"
DEFAULT_LOG_FILE = "logs/arbitrage.log"

STRUCTURED_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
MINIMAL_FORMAT = "%(asctime)s | %(message)s"

QUIET_LOGGERS = ("web3", "urllib3", "aiohttp.access", "ccxt")


def format_duration(seconds: float) -> str:
    """Render a session runtime as whole minutes and seconds, e.g. ``2m 5s``."""
    minutes, secs = divmod(max(int(seconds), 0), 60)
    return f"{minutes}m {secs}s"


def ensure_path_exists(path: Union[str, Path], is_file: bool = False) -> Path:
    """
    Create a directory, or the parent directory of a file path.

    Args:
        path: Directory or file location
        is_file: Treat ``path`` as a file and only create its parent

    Returns:
        The path as a ``Path``
    """
    target = Path(path)
    directory = target.parent if is_file else target
    directory.mkdir(parents=True, exist_ok=True)
    return target


def deep_merge(base: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge config layers section by section.

    Nested mappings are merged recursively; any other value in ``update``
    replaces the one in ``base``. Neither input is modified.
    """
    merged = dict(base)

    for key, value in update.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value

    return merged


def get_logger(
    name: str,
    level: Union[str, int] = logging.INFO,
    minimal: bool = False,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Return a logger with the bot's pipe-separated format.

    Handlers are attached only the first time a name is seen, so repeated
    calls never duplicate output.

    Args:
        name: Logger name (typically __name__)
        level: Level applied when the logger has none yet
        minimal: Use ``time | message`` instead of the full structured format
        log_file: Optional file that receives a copy of every record
    """
    logger = logging.getLogger(name)

    if logger.level == logging.NOTSET:
        logger.setLevel(level)

    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        MINIMAL_FORMAT if minimal else STRUCTURED_FORMAT, datefmt="%H:%M:%S"
    )

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file:
        ensure_path_exists(log_file, is_file=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def configure_logging(
    level: Union[str, int] = logging.INFO,
    log_file: Optional[Union[str, Path]] = DEFAULT_LOG_FILE,
) -> logging.Logger:
    """
    Configure the package logger for the CLI host.

    Replaces any existing handlers so repeated calls do not duplicate output.
    Noisy third-party loggers are held at WARNING.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(level)

    for noisy in QUIET_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return get_logger(PACKAGE_LOGGER, level, minimal=True, log_file=log_file)
