from __future__ import annotations

import time
from functools import wraps
from typing import Any, Callable

from dcmsort.loggers import logger

__all__ = ["timer", "TimerContext"]


def timer(name: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Log how long each call of the decorated function takes.

    Parameters
    ----------
    name : str
        Label used in the log message.

    Example
    -------
        @timer("Parsing DICOM headers")
        def scan(paths):
            ...

        # INFO: Parsing DICOM headers took 3.1244 seconds
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:  # noqa
            with TimerContext(name):
                return func(*args, **kwargs)

        return wrapper

    return decorator


class TimerContext:
    """Measure a block; `elapsed` is set on exit, even if the block raised."""

    start_time: float
    elapsed: float | None = None

    def __init__(self, name: str) -> None:
        self.name = name

    def __enter__(self) -> TimerContext:
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        self.elapsed = time.perf_counter() - self.start_time
        logger.info(
            f"{self.name} took {self.elapsed:.4f} seconds",
            failed=exc_type is not None,
        )
