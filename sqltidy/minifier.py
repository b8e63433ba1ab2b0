from __future__ import annotations
import re
from typing import List, Tuple

_WS_RE = re.compile(r"\s+")
_TIGHTEN_RE = re.compile(r"\s*([(),;])\s*")


def _split_segments(sql: str) -> List[Tuple[bool, str]]:
    """
    Split into (quoted, text) runs. Quoted runs are single-quoted literals and
    double-quoted/backtick identifiers, copied verbatim. Comments are dropped
    from the code runs and leave a single space behind.
    """
    segments: List[Tuple[bool, str]] = []
    code: List[str] = []
    quoted: List[str] = []
    quote = ""
    i, n = 0, len(sql)
    while i < n:
        ch = sql[i]
        if quote:
            quoted.append(ch)
            i += 1
            if ch == quote:
                # a doubled quote closes and reopens, so keep going
                if i < n and sql[i] == quote:
                    quoted.append(ch)
                    i += 1
                    continue
                segments.append((True, "".join(quoted)))
                quoted, quote = [], ""
            continue
        if ch in "'\"`":
            if code:
                segments.append((False, "".join(code)))
                code = []
            quote = ch
            quoted.append(ch)
            i += 1
        elif sql.startswith("--", i):
            j = sql.find("\n", i)
            i = n if j < 0 else j
            code.append(" ")
        elif sql.startswith("/*", i):
            j = sql.find("*/", i + 2)
            i = n if j < 0 else j + 2
            code.append(" ")
        else:
            code.append(ch)
            i += 1
    if quoted:
        # unterminated literal runs to the end
        segments.append((True, "".join(quoted)))
    if code:
        segments.append((False, "".join(code)))
    return segments


def strip_comments(sql: str) -> str:
    """Drop '--' and '/* */' comments, leaving literals and quoted identifiers alone."""
    return "".join(text for _, text in _split_segments(sql))


def minify_sql(sql: str) -> str:
    segments = []
    for quoted, text in _split_segments(sql):
        if not quoted:
            text = _WS_RE.sub(" ", text)
            text = _TIGHTEN_RE.sub(r"\1", text)
            text = text.replace(";", ";\n")
        segments.append((quoted, text))
    if segments and not segments[0][0]:
        segments[0] = (False, segments[0][1].lstrip())
    if segments and not segments[-1][0]:
        segments[-1] = (False, segments[-1][1].rstrip())
    return "".join(text for _, text in segments)


def split_statements(sql: str) -> List[str]:
    """Minified statements, one per ';' outside literals; the ';' itself is dropped."""
    statements: List[str] = []
    buf: List[str] = []
    for quoted, text in _split_segments(minify_sql(sql)):
        if quoted:
            buf.append(text)
            continue
        parts = text.split(";")
        for part in parts[:-1]:
            buf.append(part)
            statements.append("".join(buf).strip())
            buf = []
        buf.append(parts[-1])
    statements.append("".join(buf).strip())
    return [s for s in statements if s]
