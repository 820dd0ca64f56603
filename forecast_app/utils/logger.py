# forecast_app/utils/logger.py

"""
Logging setup shared by the UI, the controller and the API client.
- root logger configured once, lazily, on the first get_logger()
- console handler always; rotating file handler when LOG_TO_FILE is on
"""
from __future__ import annotations
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Dict

from forecast_app.config import settings

NOISY_LOGGERS = ("urllib3", "werkzeug")


class LoggerFactory:
    _loggers: Dict[str, logging.Logger] = {}
    _initialized = False

    @classmethod
    def _initialize(cls) -> None:
        if cls._initialized:
            return

        level = (settings.LOG_LEVEL or "INFO").upper()
        root = logging.getLogger()
        root.setLevel(getattr(logging, level, logging.INFO))

        detailed = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        simple = logging.Formatter("%(levelname)s - %(name)s - %(message)s")

        if settings.LOG_TO_FILE:
            log_file = os.path.join(settings.LOG_DIR, "forecast_app.log")
            try:
                os.makedirs(settings.LOG_DIR, exist_ok=True)
                fh = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8")
                fh.setLevel(logging.DEBUG)
                fh.setFormatter(detailed)
                root.addHandler(fh)
            except OSError as e:
                print(f"cannot open log file {log_file}: {e}", file=sys.stderr)

        ch = logging.StreamHandler(sys.stdout)
        ch.setLevel(logging.INFO)
        ch.setFormatter(simple)
        root.addHandler(ch)

        cls._initialized = True
        suppress_noisy_loggers()
        logging.getLogger("LoggerFactory").debug("logging initialized - level=%s", level)

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        if not cls._initialized:
            cls._initialize()
        if name not in cls._loggers:
            cls._loggers[name] = logging.getLogger(name)
        return cls._loggers[name]

    @classmethod
    def set_level(cls, level: str) -> None:
        """Change the root level at runtime. Raises ValueError for unknown names."""
        lv = (level or "").upper()
        if not isinstance(getattr(logging, lv, None), int):
            raise ValueError(f"invalid log level: {level}")
        logging.getLogger().setLevel(getattr(logging, lv))
        cls.get_logger("LoggerFactory").info("log level set to %s", lv)


def get_logger(name: str) -> logging.Logger:
    return LoggerFactory.get_logger(name)


def suppress_noisy_loggers() -> None:
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
