"""structlog on top of stdlib logging, configured through `dictConfig`.

Everything is driven by environment variables named after the logger:

- `DCMSORT_LOG_LEVEL`: DEBUG, INFO, WARNING (default), ERROR or CRITICAL.
- `DCMSORT_ENABLE_JSON_LOGGING`: set to ``1`` to also write JSON logs to
  a rotating file under ``.dcmsort/logs``.
- `DCMSORT_LOG_TIMEZONE`: pytz zone for timestamps (default UTC).
"""

import json
import logging
import logging.config
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

import pytz
import structlog
from structlog.processors import CallsiteParameter, CallsiteParameterAdder
from structlog.typing import Processor

from dcmsort.loggers.processors import (
    CallPrettifier,
    PathPrettifier,
    ZoneTimeStamper,
)

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_LOG_TIMEZONE = "UTC"

LOG_DIR_NAME = Path(".dcmsort/logs")
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


class LoggingManager:
    """
    Configure the stdlib logger `name` and structlog to render through it.

    Examples
    --------
        >>> manager = LoggingManager(name="dcmsort")
        >>> logger = manager.get_logger()
        >>> logger.info("Sorting", files=12)
    """

    def __init__(
        self,
        name: str,
        base_dir: Path | None = None,
    ) -> None:
        self.name = name
        self.base_dir = base_dir or Path.cwd()
        self.level = self.env_level
        self.enable_json_logging = self._env("ENABLE_JSON_LOGGING", "0") == "1"
        self.timezone = self._env("LOG_TIMEZONE", DEFAULT_LOG_TIMEZONE)
        if self.timezone not in pytz.all_timezones_set:
            self.timezone = DEFAULT_LOG_TIMEZONE
        self._initialize_logger()

    def _env(self, suffix: str, default: str) -> str:
        return os.environ.get(f"{self.name}_{suffix}".upper(), default)

    @property
    def env_level(self) -> str:
        return self._env("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()

    @property
    def pre_chain(self) -> List[Processor]:
        """Processors shared by structlog and foreign (stdlib) records."""
        return [
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            CallsiteParameterAdder(
                [
                    CallsiteParameter.MODULE,
                    CallsiteParameter.FUNC_NAME,
                    CallsiteParameter.LINENO,
                ]
            ),
            PathPrettifier(base_dir=self.base_dir),
            structlog.stdlib.ExtraAdder(),
            structlog.processors.StackInfoRenderer(),
        ]

    def _formatter(self, *processors: Processor) -> Dict[str, Any]:
        return {
            "()": structlog.stdlib.ProcessorFormatter,
            "processors": [
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *processors,
            ],
            "foreign_pre_chain": self.pre_chain,
        }

    def _json_handler(self) -> Dict[str, Any]:
        LOG_DIR_NAME.mkdir(parents=True, exist_ok=True)
        logfile = LOG_DIR_NAME / f"{self.name}_{datetime.now():%Y-%m-%d_%H-%M-%S}.log"
        return {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "json",
            "filename": logfile,
            "maxBytes": LOG_FILE_MAX_BYTES,
            "backupCount": LOG_FILE_BACKUPS,
        }

    @property
    def base_logging_config(self) -> Dict[str, Any]:
        """The `dictConfig` mapping for the current settings."""
        console = self._formatter(
            ZoneTimeStamper(fmt="%H:%M:%S", tz_name=self.timezone),
            CallPrettifier(concise=True),
            structlog.dev.ConsoleRenderer(
                colors=True,
                sort_keys=False,
                exception_formatter=structlog.dev.RichTracebackFormatter(
                    width=-1, show_locals=False
                ),
            ),
        )
        handlers: Dict[str, Dict[str, Any]] = {
            "console": {"class": "logging.StreamHandler", "formatter": "console"},
        }
        formatters = {"console": console}

        if self.enable_json_logging:
            formatters["json"] = self._formatter(
                ZoneTimeStamper(tz_name=self.timezone),
                CallPrettifier(concise=False),
                structlog.processors.dict_tracebacks,
                structlog.processors.JSONRenderer(serializer=json.dumps, default=str),
            )
            handlers["json"] = self._json_handler()

        return {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": formatters,
            "handlers": handlers,
            "loggers": {
                self.name: {
                    "handlers": list(handlers),
                    "level": self.level,
                    "propagate": False,
                },
            },
        }

    def _initialize_logger(self) -> None:
        logging.config.dictConfig(self.base_logging_config)
        structlog.configure(
            processors=[
                *self.pre_chain,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

    def get_logger(self) -> structlog.stdlib.BoundLogger:
        return structlog.get_logger(self.name)

    def configure_logging(
        self, level: str = DEFAULT_LOG_LEVEL
    ) -> structlog.stdlib.BoundLogger:
        """Re-apply the configuration at `level` and return the logger.

        Raises
        ------
        ValueError
            If `level` is not a standard level name.
        """
        level_upper = level.upper()
        if level_upper not in VALID_LOG_LEVELS:
            msg = f"Invalid logging level: {level}"
            raise ValueError(msg)

        self.level = level_upper
        self._initialize_logger()
        return self.get_logger()
