"""Filesystem-safe names for exported notes.

Export archives are unpacked on arbitrary platforms, so entry names are
restricted to ASCII letters, digits, ``_``, ``-`` and ``.``.
"""

from __future__ import annotations

import re

_UNSAFE_RE = re.compile(r"[^A-Za-z0-9_.\-]")
_UNDERSCORE_RUN_RE = re.compile(r"_{2,}")


def sanitize_filename(name: str, max_length: int = 200) -> str:
    """Return *name* reduced to a filesystem-safe form.

    Every character outside ``[A-Za-z0-9_.-]`` becomes ``_``, runs of
    underscores collapse to one, and the result is truncated to
    *max_length* characters.  No extension is added.

    Parameters
    ----------
    name:
        Arbitrary display name, typically a note title.
    max_length:
        Maximum length of the result.  Must be at least 1.

    Returns
    -------
    str
        The sanitized name.  May be empty when *name* is empty.

    Examples
    --------
    >>> sanitize_filename("My: Notes / 2024")
    'My_Notes_2024'
    """
    if max_length < 1:
        raise ValueError(f"max_length must be >= 1, got {max_length}")
    cleaned = _UNSAFE_RE.sub("_", name)
    cleaned = _UNDERSCORE_RUN_RE.sub("_", cleaned)
    return cleaned[:max_length]


def unique_name(name: str, taken: set[str]) -> str:
    """Return *name*, or ``stem_2.ext``, ``stem_3.ext``... if already taken.

    The chosen name is added to *taken*.
    """
    candidate = name
    if candidate in taken:
        stem, dot, ext = name.rpartition(".")
        if not dot:
            stem, ext = name, ""
        counter = 2
        while True:
            candidate = f"{stem}_{counter}{dot}{ext}"
            if candidate not in taken:
                break
            counter += 1
    taken.add(candidate)
    return candidate
