"""
Single-pass SQL tokenizer.

Produces a flat token stream the formatting stages consume, so no stage
re-scans raw text. String literals are expected to be guarded already (see
literals.py); their placeholders come back as LITERAL tokens.
"""
from __future__ import annotations
import re
from typing import List, NamedTuple, Optional

from .keywords import is_keyword

KEYWORD = "keyword"
IDENTIFIER = "identifier"
NUMBER = "number"
LITERAL = "literal"
OPERATOR = "operator"
PUNCTUATION = "punctuation"
COMMENT = "comment"
WHITESPACE = "whitespace"
OTHER = "other"

# Longest operators first so '<=' never splits into '<' and '='.
OPERATORS = ("<>", "<=", ">=", "!=", "||", "=", "<", ">", "+", "-", "*", "/", "%", "^")

_TOKEN_RE = re.compile(r"""
    (?P<whitespace>\s+)
  | (?P<line_comment>--[^\r\n]*)
  | (?P<block_comment>/\*.*?(?:\*/|\Z))
  | (?P<quoted>"(?:[^"]|"")*(?:"|\Z)|`[^`]*(?:`|\Z))
  | (?P<number>(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\w*)
  | (?P<word>[^\W\d]\w*)
  | (?P<operator>""" + "|".join(re.escape(op) for op in OPERATORS) + r""")
  | (?P<punctuation>[(),;.])
  | (?P<other>.)
""", re.VERBOSE | re.DOTALL)


class Token(NamedTuple):
    kind: str
    text: str
    # Whitespace preceded the token in the input, and how many line breaks it held.
    space_before: bool = False
    newlines: int = 0

    @property
    def upper(self) -> str:
        return self.text.upper()

    def is_punct(self, char: str) -> bool:
        return self.kind == PUNCTUATION and self.text == char

    @property
    def is_line_comment(self) -> bool:
        return self.kind == COMMENT and self.text.startswith("--")


def tokenize(text: str, literal_marker: Optional[str] = None) -> List[Token]:
    """Split guarded SQL text into tokens, whitespace included."""
    placeholder = re.compile(re.escape(literal_marker) + r"\d+__\Z") if literal_marker else None
    tokens: List[Token] = []
    for m in _TOKEN_RE.finditer(text):
        group, value = m.lastgroup, m.group()
        if group in ("line_comment", "block_comment"):
            kind = COMMENT
        elif group == "quoted":
            kind = IDENTIFIER
        elif group == "word":
            if placeholder is not None and placeholder.match(value):
                kind = LITERAL
            elif is_keyword(value):
                kind = KEYWORD
            else:
                kind = IDENTIFIER
        else:
            kind = group
        tokens.append(Token(kind, value))
    return tokens


def significant(tokens: List[Token]) -> List[Token]:
    """Fold whitespace tokens into the space_before/newlines flags of the token that follows."""
    out: List[Token] = []
    gap = ""
    for tok in tokens:
        if tok.kind == WHITESPACE:
            gap += tok.text
            continue
        out.append(tok._replace(space_before=bool(gap), newlines=gap.count("\n")))
        gap = ""
    return out
