from .filename import sanitize_filename, unique_name
from .hashing import md5_hash
from .timestamps import format_timestamp, from_epoch_seconds

__all__ = [
    "sanitize_filename",
    "unique_name",
    "md5_hash",
    "format_timestamp",
    "from_epoch_seconds",
]
