"""
Shared logging setup for the analytics server and report CLI.
"""
import logging
from pathlib import Path
from typing import Optional

from feedback_analytics.settings import LoggingSettings, load_settings

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def configure_logging(options: Optional[LoggingSettings] = None) -> logging.Logger:
    """
    Install root handlers for the given logging options.

    Parameters
    ----------
    options : LoggingSettings, optional
        ``level`` applies to the root logger and the optional ``log_file``
        handler. The stderr handler only shows warnings and above.
    """
    options = options or LoggingSettings()
    level = logging.getLevelName(options.level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT)

    if options.log_file:
        log_path = Path(options.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        root_logger.addHandler(file_handler)

    stderr_handler = logging.StreamHandler()
    stderr_handler.setFormatter(formatter)
    stderr_handler.setLevel(logging.WARNING)
    root_logger.addHandler(stderr_handler)
    return root_logger


def setup_logging_from_config(config_path: Path) -> logging.Logger:
    """Configure logging from the ``logging`` block of an analytics config file."""
    settings = load_settings(Path(config_path))
    return configure_logging(settings.logging)
