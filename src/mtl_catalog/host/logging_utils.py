"""Logging helpers for the local importer host."""

from __future__ import annotations

import logging
import sys


DEFAULT_BASE_LOGGER_NAME = "mtl_catalog"
BASE_LOGGER_NAME = DEFAULT_BASE_LOGGER_NAME
LOG_FORMAT = "[MtlCatalog] %(levelname)s: %(message)s"
_HANDLER_NAME = "mtl_catalog_stdout"


def derive_base_logger_name(module_name: str) -> str:
    if not module_name:
        return DEFAULT_BASE_LOGGER_NAME
    base = module_name.split(".", 1)[0]
    return base or DEFAULT_BASE_LOGGER_NAME


def _ensure_stdout_handler(base_logger: logging.Logger) -> None:
    for handler in base_logger.handlers:
        if handler.name == _HANDLER_NAME:
            return

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setLevel(logging.DEBUG)
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    stream_handler.name = _HANDLER_NAME
    base_logger.addHandler(stream_handler)


def configure_logging(module_name: str, debug: bool = False) -> logging.Logger:
    """Install the stdout handler on the package base logger.

    Args:
        module_name: Any module inside the package; its top-level name
            becomes the base logger.
        debug: Log at DEBUG instead of INFO.

    Returns:
        logging.Logger: The configured base logger.
    """
    global BASE_LOGGER_NAME
    if BASE_LOGGER_NAME == DEFAULT_BASE_LOGGER_NAME:
        BASE_LOGGER_NAME = derive_base_logger_name(module_name)

    base_logger = logging.getLogger(BASE_LOGGER_NAME)
    _ensure_stdout_handler(base_logger)
    base_logger.setLevel(logging.DEBUG if debug else logging.INFO)
    base_logger.propagate = False
    return base_logger


def set_debug(debug: bool) -> None:
    logging.getLogger(BASE_LOGGER_NAME).setLevel(
        logging.DEBUG if debug else logging.INFO
    )


def get_base_logger_name() -> str:
    return BASE_LOGGER_NAME
