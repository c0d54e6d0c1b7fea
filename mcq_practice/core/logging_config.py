# mcq_practice/core/logging_config.py
import logging.config

from mcq_practice.core.config import settings


def setup_logging(level: str | None = None) -> None:
    """Configure root logging for the API process and the backup worker."""
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "root": {
                "handlers": ["console"],
                "level": (level or settings.LOG_LEVEL).upper(),
            },
            "loggers": {
                # rq is chatty at INFO
                "rq.worker": {"level": "WARNING"},
            },
        }
    )
