import logging
import logging.config

from yoga_builder.core.config import settings


FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# third-party noise
QUIET_LOGGERS = {
    "sqlalchemy": "WARNING",
    "sqlalchemy.engine": "WARNING",
    "httpx": "WARNING",
    "httpcore": "WARNING",
}


def setup_logging(level: str | None = None) -> None:
    level = (level or settings.LOG_LEVEL).upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": {"format": FORMAT}},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "level": level,
                },
            },
            "root": {"handlers": ["console"], "level": level},
            "loggers": {name: {"level": lvl} for name, lvl in QUIET_LOGGERS.items()},
        }
    )
    logging.getLogger(__name__).debug("Logging configured at %s", level)
