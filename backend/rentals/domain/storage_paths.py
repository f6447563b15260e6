# backend/rentals/domain/storage_paths.py
from __future__ import annotations

import re
import time
from typing import Any, Iterator, Optional
from urllib.parse import unquote, urlparse

_OBJECT_RE = re.compile(r"/(?:public|sign)/([^/]+)/(.+)$")
_RAW_RE = re.compile(r"/storage/v1/object/(?:public|sign)/[^/]+/([^?#]+)")
_UNSAFE_RE = re.compile(r"[^a-zA-Z0-9_]")


def extract_storage_path(url: Optional[str]) -> Optional[str]:
    """
    Object path inside its bucket, from a public or signed Storage URL.

      https://x.supabase.co/storage/v1/object/sign/bucket/P1/a/b.pdf?token=..  ->  P1/a/b.pdf

    Returns None for anything that is not a Storage object URL.
    """
    if not url:
        return None

    parsed = urlparse(str(url))
    if parsed.scheme and parsed.netloc:
        m = _OBJECT_RE.search(parsed.path)
        return unquote(m.group(2)) if m else None

    m = _RAW_RE.search(str(url))
    return unquote(m.group(1)) if m else None


def sanitize_name(name: str) -> str:
    return _UNSAFE_RE.sub("_", name or "")


def file_extension(filename: Optional[str]) -> str:
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1]


def build_object_path(owner_id: str, folder: str, stem: str, filename: Optional[str], *, now_ms: Optional[int] = None) -> str:
    """{owner_id}/{folder}/{sanitized stem}_{epoch ms}.{ext}"""
    ts = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{owner_id}/{folder}/{sanitize_name(stem)}_{ts}.{file_extension(filename)}"


def _strings(value: Any) -> Iterator[str]:
    if isinstance(value, str):
        yield value
    elif isinstance(value, dict):
        for v in value.values():
            yield from _strings(v)
    elif isinstance(value, (list, tuple)):
        for v in value:
            yield from _strings(v)


def references_object(value: Any, url: Optional[str]) -> bool:
    """
    True when ``url`` points at an object that ``value`` (a column value:
    string, room lists, custom-document dicts, lead doc maps) already holds.

    Signed URLs of one object differ only in their token, so the match is on
    the object path.
    """
    path = extract_storage_path(url)
    if not path:
        return False
    return any(extract_storage_path(s) == path for s in _strings(value))
