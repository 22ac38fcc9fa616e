from .sanitize_file_name import (
    MAX_COMPONENT_LENGTH,
    UNKNOWN_COMPONENT,
    sanitize_component,
)
from .timer_utils import timer

__all__ = [
    # sanitize_file_name
    "MAX_COMPONENT_LENGTH",
    "UNKNOWN_COMPONENT",
    "sanitize_component",
    # timer_utils
    "timer",
]
