from __future__ import annotations

import logging

_ROOT = "lazygraph"
_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger namespaced under ``lazygraph``."""
    if not name:
        return logging.getLogger(_ROOT)
    if name == _ROOT or name.startswith(_ROOT + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT}.{name}")


def configure_logging(level: str | int = "WARNING") -> logging.Logger:
    """
    Attach a stream handler to the package logger (once) and set its level.
    Library code never calls this; entry points such as the CLI do.
    """
    logger = logging.getLogger(_ROOT)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logger.setLevel(level)
    if not any(getattr(h, "_lazygraph", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._lazygraph = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
