"""Logging setup shared by the loader, the writer and the CLI."""
from __future__ import annotations

import logging
from typing import Optional

_DEFAULT_LEVEL = logging.INFO
_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_ROOT_LOGGER_NAME = "docx_replacer"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-level logger, installing a default handler on first use."""
    if not logging.getLogger().handlers:
        logging.basicConfig(level=_DEFAULT_LEVEL, format=_LOG_FORMAT)
    return logging.getLogger(name)


def set_verbosity(verbose: bool) -> None:
    """Switch the package loggers between INFO and DEBUG output.

    Only the ``docx_replacer`` logger is touched; handlers installed by a
    host application keep their own levels.
    """
    level = logging.DEBUG if verbose else _DEFAULT_LEVEL
    logging.getLogger(_ROOT_LOGGER_NAME).setLevel(level)
