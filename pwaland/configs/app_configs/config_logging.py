"""Logging configuration"""

import logging
import sys
from logging.config import dictConfig

from dockerflow import logging as dockerflow_logging

from pwaland.configs import settings


def configure_logging() -> None:
    """Configure logging with MozLog."""
    match settings.logging.format:
        case "mozlog":
            handler = ["console-mozlog"]
        case "pretty":
            handler = ["console-pretty"]
        case _:
            raise ValueError(
                f"Invalid log format: {settings.logging.format}."
                f" Should either be 'mozlog' or 'pretty'."
            )

    if settings.current_env.lower() == "production" and handler != ["console-mozlog"]:
        raise ValueError("Log format must be 'mozlog' in production")

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "text": {
                    "format": "%(message)s",
                },
                "json": {
                    "()": JobJSONFormatter,
                    "logger_name": "pwaland",
                },
            },
            "handlers": {
                "console-mozlog": {
                    "level": settings.logging.level,
                    "class": "logging.StreamHandler",
                    "formatter": "json",
                    "stream": sys.stdout,
                },
                "console-pretty": {
                    "level": settings.logging.level,
                    "class": "rich.logging.RichHandler",
                    "formatter": "text",
                },
            },
            "loggers": {
                "pwaland": {
                    "handlers": handler,
                    "level": settings.logging.level,
                    "propagate": settings.logging.can_propagate,
                },
                "httpx": {
                    "handlers": handler,
                    "level": "WARNING",
                    "propagate": False,
                },
            },
        }
    )


class JobJSONFormatter(dockerflow_logging.JsonLogFormatter):
    """Dockerflow log formatter that also emits a GCP compatible `severity` field."""

    STACKDRIVER_LEVEL_MAP = {
        logging.CRITICAL: 600,
        logging.ERROR: 500,
        logging.WARNING: 400,
        logging.INFO: 200,
        logging.DEBUG: 100,
        logging.NOTSET: 0,
    }

    def convert_record(self, record):
        """Add `severity` next to the MozLog `Severity` field."""
        out = super().convert_record(record)
        out["severity"] = self.STACKDRIVER_LEVEL_MAP.get(record.levelno, 0)
        return out
