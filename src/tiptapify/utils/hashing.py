"""MD5 helpers for attachment verification.

NoteStation archives store every attachment as ``file_<md5>`` and repeat
the digest in the note metadata.  These hashes are **not** used for
security purposes.
"""

from __future__ import annotations

import hashlib


def md5_hash(data: bytes | str) -> str:
    """Return the hex-encoded MD5 digest of *data*.

    Strings are encoded as UTF-8 before hashing.

    Examples
    --------
    >>> md5_hash(b"hello")
    '5d41402abc4b2a76b9719d911017c592'
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.md5(data).hexdigest()
