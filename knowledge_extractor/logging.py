"""Logging utilities for knowledge extraction runs."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "knowledge_extractor"
_PREFIX = "knowledge-extractor"


class ComponentFormatter(logging.Formatter):
    """Prefixes console lines with the stage that emitted them, e.g. ``[knowledge-extractor:discovery]``."""

    def __init__(self) -> None:
        super().__init__("%(levelname)s %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        component = record.name.removeprefix(f"{_LOGGER_NAME}.")
        tag = _PREFIX if component == _LOGGER_NAME else f"{_PREFIX}:{component}"
        return f"[{tag}] {super().format(record)}"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the knowledge_extractor hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the package logger with console output and optional file sink."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Repeated CLI runs in one process must not stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(ComponentFormatter())
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["ComponentFormatter", "configure_logging", "get_logger"]
