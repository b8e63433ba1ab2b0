from __future__ import annotations
import re
from typing import List, Tuple

from pydantic import BaseModel

MARKER_BASE = "__LITERAL_"


class LiteralGuardError(RuntimeError):
    """A placeholder went missing, was duplicated, or points past the table."""


class LiteralTable(BaseModel):
    marker: str = MARKER_BASE
    literals: List[str] = []

    def placeholder(self, index: int) -> str:
        return f"{self.marker}{index}__"

    def __len__(self) -> int:
        return len(self.literals)


def _choose_marker(text: str) -> str:
    marker = MARKER_BASE
    while marker in text:
        marker += "X"
    return marker


def _quoted_end(text: str, start: int, quote: str) -> int:
    """Index just past the quoted run opening at start; a doubled quote continues the run."""
    i = start + 1
    while True:
        j = text.find(quote, i)
        if j < 0:
            return len(text)
        if text.startswith(quote * 2, j):
            i = j + 2
            continue
        return j + 1


def extract_literals(text: str) -> Tuple[str, LiteralTable]:
    """
    Replace every single-quoted literal with a placeholder.
    Comments and quoted identifiers are copied through untouched so an
    apostrophe inside them never opens a literal.
    """
    table = LiteralTable(marker=_choose_marker(text))
    out: List[str] = []
    i, n = 0, len(text)
    while i < n:
        ch = text[i]
        if ch == "'":
            j = _quoted_end(text, i, "'")
            out.append(table.placeholder(len(table.literals)))
            table.literals.append(text[i:j])
        elif ch in '"`':
            j = _quoted_end(text, i, ch)
            out.append(text[i:j])
        elif text.startswith("--", i):
            j = text.find("\n", i)
            j = n if j < 0 else j
            out.append(text[i:j])
        elif text.startswith("/*", i):
            j = text.find("*/", i + 2)
            j = n if j < 0 else j + 2
            out.append(text[i:j])
        else:
            j = i + 1
            out.append(ch)
        i = j
    return "".join(out), table


def restore_literals(text: str, table: LiteralTable) -> str:
    if not table.literals:
        return text
    seen = set()

    def _put_back(m: re.Match) -> str:
        idx = int(m.group(1))
        if idx in seen:
            raise LiteralGuardError(f"placeholder {idx} appears more than once")
        if idx >= len(table.literals):
            raise LiteralGuardError(f"placeholder {idx} has no extracted literal")
        seen.add(idx)
        return table.literals[idx]

    restored = re.sub(re.escape(table.marker) + r"(\d+)__", _put_back, text)
    if len(seen) != len(table.literals):
        missing = sorted(set(range(len(table.literals))) - seen)
        raise LiteralGuardError(f"placeholders never restored: {missing}")
    return restored
