import logging
from contextlib import AbstractContextManager

import structlog
from tqdm.contrib.logging import logging_redirect_tqdm as _redirect_tqdm

from dcmsort.loggers.logging_config import LoggingManager

LOGGER_NAME = "dcmsort"


def get_logger(
    name: str, level: str | None = None
) -> structlog.stdlib.BoundLogger:
    """
    Configure logging for `name` and return its structlog logger.

    Parameters
    ----------
    name : str
        Logger name, also the prefix of its environment variables.
    level : str, optional
        Log level. Defaults to `<NAME>_LOG_LEVEL`, or WARNING.
    """
    logging_manager = LoggingManager(name)
    return logging_manager.configure_logging(
        level=level or logging_manager.env_level
    )


def tqdm_logging_redirect(
    logger_name: str = LOGGER_NAME,
) -> AbstractContextManager[None]:
    """Route log records through `tqdm.write` so progress bars stay intact.

    Examples
    --------
    >>> with tqdm_logging_redirect():
    ...     for path in tqdm(paths):
    ...         logger.info("Reading", path=path)
    """
    return _redirect_tqdm([logging.getLogger(logger_name)])


logger = get_logger(LOGGER_NAME)

__all__ = ["LOGGER_NAME", "get_logger", "logger", "tqdm_logging_redirect"]
