from __future__ import annotations
import difflib, re

import chardet

_WS_RE = re.compile(r"\s+")


def decode_sql_bytes(data: bytes) -> str:
    """Decode an uploaded/read SQL file, guessing the encoding."""
    if not data:
        return ""
    if data.startswith(b"\xef\xbb\xbf"):
        return data[3:].decode("utf-8")
    enc = chardet.detect(data).get('encoding') or 'utf-8'
    try:
        return data.decode(enc)
    except (LookupError, UnicodeDecodeError):
        return data.decode('utf-8', errors='replace')


def preview_sql(sql: str, max_length: int = 100) -> str:
    """One-line preview for history lists, cut at max_length with a trailing '...'."""
    flat = _WS_RE.sub(" ", sql).strip()
    if len(flat) <= max_length:
        return flat
    return flat[:max_length] + "..."


def compute_diff(a: str, b: str) -> str:
    """Unified diff between two SQL strings."""
    diff_lines = list(difflib.unified_diff(a.splitlines(), b.splitlines(),
                                           fromfile="original", tofile="formatted", lineterm=""))
    return "\n".join(diff_lines) or "No differences."
