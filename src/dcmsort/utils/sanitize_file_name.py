"""
Functions
---------
sanitize_component(raw: str) -> str
    Turn an arbitrary string into a single filesystem-safe path component.

Examples
--------
Sanitize a component:
    >>> sanitize_component("file<>name")
    'file__name'
    >>> sanitize_component("CON")
    '_CON'
"""

import re

UNKNOWN_COMPONENT = "UNKNOWN"
MAX_COMPONENT_LENGTH = 80

# Anything outside ASCII letters, digits, `.`, `_` and `-`
DISALLOWED_CHARS_PATTERN = re.compile(r"[^A-Za-z0-9._-]")

RESERVED_NAMES = frozenset(
    {
        "CON",
        "PRN",
        "AUX",
        "NUL",
        "COM1",
        "COM2",
        "COM3",
        "COM4",
        "LPT1",
        "LPT2",
        "LPT3",
    }
)


def sanitize_component(raw: str) -> str:
    """
    Sanitize a single path component.

    Unlike a full path, a component never keeps a separator, so `/` and
    `\\` are replaced like any other disallowed character.

    Parameters
    ----------
    raw : str
        The input string, usually a DICOM tag value.

    Returns
    -------
    str
        A non-empty component of at most 80 characters made only of
        `[A-Za-z0-9._-]`, never starting or ending with `.`.
    """
    trimmed = raw.strip()
    if not trimmed:
        return UNKNOWN_COMPONENT

    component = DISALLOWED_CHARS_PATTERN.sub("_", trimmed).strip(".")

    if not component or set(component) == {"_"}:
        return UNKNOWN_COMPONENT

    if component.upper() in RESERVED_NAMES:
        component = f"_{component}"

    component = component[:MAX_COMPONENT_LENGTH]
    # truncation can expose a trailing dot
    return component.rstrip(".")
