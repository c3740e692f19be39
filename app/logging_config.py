import logging.config
import os

from app.config import settings

LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str | None = None, log_dir: str | None = None) -> None:
    level = (level or settings.LOG_LEVEL or "INFO").upper()
    log_dir = log_dir or settings.LOG_DIR or "logs"
    os.makedirs(log_dir, exist_ok=True)
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": LOG_FORMAT, "datefmt": DATE_FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            },
            "error_file": {
                "class": "logging.FileHandler",
                "formatter": "default",
                "filename": os.path.join(log_dir, "error.log"),
                "level": "ERROR",
                "encoding": "utf-8",
            },
            "combined_file": {
                "class": "logging.FileHandler",
                "formatter": "default",
                "filename": os.path.join(log_dir, "combined.log"),
                "encoding": "utf-8",
            },
        },
        "loggers": {
            "devconnect": {
                "handlers": ["console", "error_file", "combined_file"],
                "level": level,
                "propagate": False,
            },
        },
    })
