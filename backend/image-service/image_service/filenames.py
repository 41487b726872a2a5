import re
import time
import uuid
from typing import Optional

_WHITESPACE = re.compile(r"\s+")
_UNSAFE = re.compile(r"[^\w.-]", re.ASCII)


def normalize_filename(filename: str) -> str:
    """Turn a user supplied filename into a storage-safe key fragment.

    Lowercases the name, trims surrounding whitespace, collapses each inner
    run of whitespace into a single underscore and drops everything except
    word characters, dots and hyphens. The result may be empty.
    """
    name = _WHITESPACE.sub("_", filename.strip().lower())
    return _UNSAFE.sub("", name)


def build_storage_key(normalized_filename: str, now_ms: Optional[int] = None) -> str:
    """Storage key as ``{epoch-ms}-{token}-{normalized filename}``"""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    token = uuid.uuid4().hex[:8]
    return f"{now_ms}-{token}-{normalized_filename}"
