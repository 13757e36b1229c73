"""Logging setup that stays off the terminal the TUI draws on.

Console output would corrupt the Textual screen, so records go to the Textual
devtools console (``textual console``) and, optionally, to a log file.
"""
from __future__ import annotations

import logging
from pathlib import Path

from textual.logging import TextualHandler

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"
_NOISY_LOGGERS = ("httpx", "httpcore", "asyncio")


def configure_logging(level: str = "INFO", log_file: str | Path | None = None) -> logging.Logger:
    """Configure the ``cryptoboard`` logger tree and return its root.

    Calling it again replaces the handlers installed by the previous call.
    """
    numeric = logging.getLevelName(str(level).upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level!r}")

    logger = logging.getLogger("cryptoboard")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(numeric)
    logger.propagate = False

    formatter = logging.Formatter(_FORMAT, datefmt=_DATEFMT)
    textual_handler = TextualHandler()
    textual_handler.setFormatter(formatter)
    logger.addHandler(textual_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return logger
