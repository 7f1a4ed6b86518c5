"""
Logging setup for the dfaudit command line.
"""

import logging
from logging.handlers import RotatingFileHandler

from rich.console import Console
from rich.logging import RichHandler

from .config import LoggingConfig


def setup_logging(config: LoggingConfig, debug: bool = False) -> None:
    """Route dfaudit logs to stderr through rich, plus an optional rotating file."""
    level = logging.DEBUG if debug else getattr(logging, config.level)

    handlers: list[logging.Handler] = [
        RichHandler(console=Console(stderr=True), show_path=debug, markup=False)
    ]
    if config.file:
        file_handler = RotatingFileHandler(
            config.file,
            maxBytes=config.max_size,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(config.format))
        handlers.append(file_handler)

    root = logging.getLogger("dfaudit")
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
