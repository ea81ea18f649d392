"""Process-wide logging configuration.

Logging is configured once, on application start-up, through
``logging.config.dictConfig``. Modules obtain their loggers with
``logging.getLogger(__name__)`` and never configure handlers themselves.
"""

from __future__ import annotations

import logging
import logging.config
from typing import Any


def build_logging_config(level: str = "INFO") -> dict[str, Any]:
    """Return the ``dictConfig`` mapping for the given root level."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "[%(asctime)s] %(levelname)s - %(name)s - %(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            }
        },
        "root": {
            "handlers": ["console"],
            "level": level.upper(),
        },
    }


_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger. Later calls only adjust the level."""
    global _configured
    if not _configured:
        logging.config.dictConfig(build_logging_config(level))
        _configured = True
    else:
        logging.getLogger().setLevel(level.upper())
