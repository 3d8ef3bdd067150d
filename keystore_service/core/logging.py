from __future__ import annotations

import logging
import sys

from keystore_service.core.config import settings

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_handler: logging.Handler | None = None


def setup_logging(level: str | None = None) -> None:
    """Configura il logger root una sola volta all'avvio del servizio."""
    global _handler
    root = logging.getLogger()
    root.setLevel((level or settings.LOG_LEVEL).upper())
    if _handler is None:
        _handler = logging.StreamHandler(sys.stdout)
        _handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(_handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
