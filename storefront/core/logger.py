import logging
import logging.config

from storefront.core.config import settings


def _logging_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "storefront": {
                "format": "%(asctime)s %(levelname)-7s [%(name)s] %(message)s",
            },
        },
        "handlers": {
            "console": {
                "formatter": "storefront",
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            # Client libraries log every request at INFO.
            "httpx": {"level": "WARNING"},
            "chromadb": {"level": "WARNING"},
        },
        "root": {
            "level": level.upper(),
            "handlers": ["console"],
        },
    }


_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a named logger, installing the storefront logging setup once.

    Args:
        name (str): Usually the caller's ``__name__``.

    Returns:
        logging.Logger: Logger writing to stdout at ``settings.LOG_LEVEL``.
    """
    global _configured
    if not _configured:
        logging.config.dictConfig(_logging_config(settings.LOG_LEVEL))
        _configured = True
    return logging.getLogger(name)
