import logging
import logging.config
import os
import sys

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE", "/tmp/relaycheck.log")
LOG_FORMAT = "%(asctime)s %(levelname)-6s %(name)8s:%(lineno)d %(message)s"

# Transport and RPC client chatter only matters when it goes wrong.
QUIET_LIBRARIES = ("httpx", "httpcore", "solana")


def logging_config(level: str = LOG_LEVEL, log_file: str | None = LOG_FILE) -> dict:
    handlers = {
        "console": {"class": "logging.StreamHandler", "formatter": "default", "stream": sys.stdout},
    }
    if log_file:
        handlers["file"] = {"class": "logging.FileHandler", "formatter": "default", "filename": log_file, "mode": "a"}
    names = list(handlers)

    loggers = {"relaycheck": {"level": level, "handlers": names, "propagate": False}}
    loggers.update({lib: {"level": "WARNING", "handlers": names, "propagate": False} for lib in QUIET_LIBRARIES})

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": LOG_FORMAT, "datefmt": "%Y-%m-%d %H:%M:%S"}},
        "handlers": handlers,
        "loggers": loggers,
        "root": {"level": "WARNING", "handlers": names},
    }


def setup_logging(level: str | None = None, log_file: str | None = LOG_FILE):
    """Install the harness logging config; `level` overrides LOG_LEVEL."""
    logging.config.dictConfig(logging_config((level or LOG_LEVEL).upper(), log_file))
    os.environ.setdefault("PYTHONUNBUFFERED", "1")
