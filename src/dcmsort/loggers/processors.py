"""structlog processors used by both the console and the JSON formatter."""

import contextlib
import datetime
from pathlib import Path
from typing import Optional

import pytz
from structlog.types import EventDict, WrappedLogger


class _EventProcessor:
    def __call__(
        self, logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        if not isinstance(event_dict, dict):
            msg = f"{type(self).__name__} expects a dict, got {type(event_dict)}"
            raise TypeError(msg)
        return self.process(event_dict)

    def process(self, event_dict: EventDict) -> EventDict:
        raise NotImplementedError


class PathPrettifier(_EventProcessor):
    """Show `Path` values relative to `base_dir` (cwd by default).

    Sources and destinations are logged as `Path` objects, which would
    otherwise print as long absolute paths. Paths outside `base_dir` are
    left untouched.
    """

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self.base_dir = base_dir or Path.cwd()

    def process(self, event_dict: EventDict) -> EventDict:
        for key, value in event_dict.items():
            if not isinstance(value, Path):
                continue
            with contextlib.suppress(ValueError):
                event_dict[key] = str(value.relative_to(self.base_dir))
        return event_dict


class CallPrettifier(_EventProcessor):
    """Fold the call-site fields into a single `call` entry.

    Concise mode renders ``module.func:line``; otherwise the three fields
    are kept as a mapping (for JSON logs).
    """

    def __init__(self, concise: bool = True) -> None:
        self.concise = concise

    def process(self, event_dict: EventDict) -> EventDict:
        module = event_dict.pop("module", "")
        func_name = event_dict.pop("func_name", "")
        lineno = event_dict.pop("lineno", "")

        if self.concise:
            event_dict["call"] = f"{module}.{func_name}:{lineno}"
        else:
            event_dict["call"] = {
                "module": module,
                "func_name": func_name,
                "lineno": lineno,
            }
        return event_dict


class ZoneTimeStamper(_EventProcessor):
    """Add a `timestamp` in the zone named by `tz_name` (any pytz name)."""

    def __init__(
        self, fmt: str = "%Y-%m-%dT%H:%M:%S%z", tz_name: str = "UTC"
    ) -> None:
        self.fmt = fmt
        self.tz = pytz.timezone(tz_name)

    def process(self, event_dict: EventDict) -> EventDict:
        event_dict["timestamp"] = datetime.datetime.now(self.tz).strftime(
            self.fmt
        )
        return event_dict
