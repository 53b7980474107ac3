import logging.config
from pathlib import Path
from typing import Optional

from examcore.core.config import settings

# Also written to sessions.log
SESSION_LOGGERS = (
    "examcore.services.test_session",
    "examcore.services.certificate",
    "examcore.core.scheduler",
)


def _rotating(filename: Path, level: str, formatter: str) -> dict:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": formatter,
        "filename": str(filename),
        "maxBytes": 10485760,
        "backupCount": 5,
    }


def build_logging_config(log_dir: Path, level: str = "INFO") -> dict:
    handlers = ["console", "file", "error_file"]
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
            "session": {
                "format": "%(asctime)s - %(levelname)s - [%(threadName)s] %(name)s: %(message)s"
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
            "file": _rotating(log_dir / "examcore.log", level, "default"),
            "error_file": _rotating(log_dir / "error.log", "ERROR", "session"),
            "session_file": _rotating(log_dir / "sessions.log", "INFO", "session"),
        },
        "root": {"level": "WARNING", "handlers": ["console"]},
        "loggers": {
            "examcore": {"level": level, "handlers": handlers, "propagate": False},
            "sqlalchemy.engine": {"level": "WARNING", "handlers": ["console"], "propagate": False},
            "apscheduler": {"level": "WARNING", "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": "WARNING", "handlers": ["console"], "propagate": False},
        },
    }
    for name in SESSION_LOGGERS:
        config["loggers"][name] = {"level": level, "handlers": handlers + ["session_file"], "propagate": False}
    return config


def configure_logging(log_dir: Optional[Path] = None) -> dict:
    log_dir = Path(log_dir or settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    config = build_logging_config(log_dir, settings.LOG_LEVEL)
    logging.config.dictConfig(config)
    return config
