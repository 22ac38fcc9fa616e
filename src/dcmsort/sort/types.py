"""Closed sets of choices shared by the planner, executor and CLI.

Every enum value doubles as its command-line spelling.
"""

from enum import Enum
from typing import List, Type, TypeVar

E = TypeVar("E", bound="ChoiceEnum")


class ChoiceEnum(Enum):
    @classmethod
    def validate(cls: Type[E], value: "str | E") -> E:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError as e:
            valid = ", ".join([f"`{member.value}`" for member in cls])
            msg = f"Invalid {cls.__name__}: {value}. Must be one of: {valid}"
            raise ValueError(msg) from e

    @classmethod
    def choices(cls) -> List[str]:
        return [member.value for member in cls]


class Layout(ChoiceEnum):
    """Which directory levels appear between the output root and the file."""

    PATIENT_STUDY_SERIES = "patient-study-series"
    STUDY_SERIES = "study-series"
    SERIES_ONLY = "series-only"
    FLAT = "flat"


class SortBy(ChoiceEnum):
    """Which signal orders the files of one series."""

    AUTO = "auto"
    INSTANCE = "instance"
    GEOMETRY = "geometry"
