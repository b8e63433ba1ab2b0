"""
SQL formatter.

Works on a token stream (tokens.py) with string literals guarded as
placeholders (literals.py). Stage order matters: operator spacing, clause
lines and indent, comma splitting, parenthesis reflow, keyword casing, then
rendering. Layout depends only on the token sequence and on input blank
lines, which keeps format_sql idempotent.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Union

from .keywords import (
    CLAUSE_KEYWORDS, CLAUSE_MODIFIER_PREFIXES, CONDITION_CLAUSES, JOIN_KEYWORDS,
    SET_OPERATORS, STATEMENT_KEYWORDS, STATEMENT_MODIFIER_PREFIXES, SUBQUERY_KEYWORDS,
)
from .literals import extract_literals, restore_literals
from .models import FormatOptions, coerce_options
from .tokens import (
    COMMENT, KEYWORD, OPERATOR, OTHER, PUNCTUATION, Token, significant, tokenize,
)

LIST_CONTINUATION = "  "


@dataclass
class IndentState:
    """Current indent in units; never negative."""
    level: int = 0

    def grow(self) -> "IndentState":
        self.level += 1
        return self

    def shrink(self) -> "IndentState":
        self.level = max(0, self.level - 1)
        return self

    def render(self, unit: str) -> str:
        return unit * self.level


@dataclass
class Line:
    tokens: List[Token] = field(default_factory=list)
    level: int = 0
    # fixed two-space list continuation on top of the level
    hang: bool = False
    # line is headed by a statement/clause keyword; its list items hang
    clause: bool = False


# -------- Operator Spacer --------

def space_operators(tokens: List[Token]) -> List[Token]:
    """Exactly one space on each side of every operator, line breaks around it dropped."""
    out: List[Token] = []
    after_op = False
    for tok in tokens:
        if tok.kind == OPERATOR or after_op:
            tok = tok._replace(space_before=True, newlines=0)
        out.append(tok)
        after_op = tok.kind == OPERATOR
    return out


# -------- Clause Indenter --------

@dataclass
class _Scope:
    kind: str                  # "query" or "group"
    base: int = 0              # indent of the statement owning this scope
    clause: Optional[str] = None
    between: bool = False


def _next_code(tokens: List[Token], i: int) -> Optional[Token]:
    for tok in tokens[i + 1:]:
        if tok.kind != COMMENT:
            return tok
    return None


def _is_join_head(word: str, prev_word: str, nxt: Optional[Token]) -> bool:
    if word not in JOIN_KEYWORDS or prev_word in JOIN_KEYWORDS or prev_word == "OUTER":
        return False
    if word == "JOIN":
        return True
    return nxt is not None and nxt.upper in JOIN_KEYWORDS | {"OUTER"}


def indent_clauses(tokens: List[Token]) -> List[Line]:
    """
    Split the stream into lines at statement and clause keywords and give each
    line an indent level:
      - statement keyword: the enclosing statement's indent
      - clause keyword / join head: one unit deeper
      - AND/OR inside WHERE or HAVING: one unit deeper than the clause
      - anything else stays on the current line
    Breaks happen at top level and inside subquery parentheses only.
    """
    lines: List[Line] = []
    cur = Line(clause=True)
    top = _Scope("query")
    stack: List[_Scope] = []
    prev: Optional[Token] = None
    break_pending = False

    def flush() -> None:
        if cur.tokens:
            lines.append(cur)

    def start(level: int, hang: bool = False, clause: bool = False) -> None:
        nonlocal cur
        flush()
        cur = Line(level=level, hang=hang, clause=clause)

    def carry_on() -> None:
        if cur.tokens:
            start(cur.level, hang=cur.hang or cur.clause)

    for i, tok in enumerate(tokens):
        if tok.newlines >= 2:
            carry_on()
            lines.extend(Line() for _ in range(tok.newlines - 1))
        elif break_pending:
            carry_on()
        elif tok.is_line_comment and tok.newlines:
            # a comment that began its own line keeps it
            carry_on()
        break_pending = False

        scope = stack[-1] if stack else top
        prev_word = prev.upper if prev is not None else ""
        if tok.kind == KEYWORD and scope.kind == "query":
            word = tok.upper
            glued = prev is not None and prev.is_punct("(")
            if word in STATEMENT_KEYWORDS and not glued and prev_word not in STATEMENT_MODIFIER_PREFIXES:
                scope.clause, scope.between = None, False
                start(scope.base, clause=True)
            elif word in SET_OPERATORS:
                scope.clause, scope.between = None, False
                start(scope.base, clause=True)
            elif word in CLAUSE_KEYWORDS and prev_word not in CLAUSE_MODIFIER_PREFIXES.get(word, ()):
                scope.clause, scope.between = word, False
                start(scope.base + 1, clause=True)
            elif _is_join_head(word, prev_word, _next_code(tokens, i)):
                scope.clause, scope.between = "JOIN", False
                start(scope.base + 1, clause=True)
            elif word == "BETWEEN":
                scope.between = True
            elif word in ("AND", "OR") and scope.clause in CONDITION_CLAUSES:
                if word == "AND" and scope.between:
                    scope.between = False
                else:
                    start(scope.base + 2, clause=True)

        cur.tokens.append(tok)

        if tok.is_punct("("):
            nxt = _next_code(tokens, i)
            if nxt is not None and nxt.upper in SUBQUERY_KEYWORDS:
                stack.append(_Scope("query", base=cur.level))
            else:
                stack.append(_Scope("group"))
        elif tok.is_punct(")"):
            if stack:
                stack.pop()
        elif tok.is_punct(";"):
            stack.clear()
            top = _Scope("query")
            start(0, clause=True)
        elif tok.is_line_comment:
            break_pending = True
        if tok.kind != COMMENT:
            prev = tok

    flush()
    return lines


# -------- Parenthesis Reflower --------

@dataclass
class _Paren:
    kind: str                  # "inline", "query" or "group"
    line: Line


def _paren_kind(tokens: List[Token], i: int) -> str:
    rest = tokens[i + 1:i + 3]
    if rest and rest[0].is_punct(")"):
        return "inline"
    if rest and rest[0].kind == KEYWORD and rest[0].upper in SUBQUERY_KEYWORDS:
        return "query"
    if len(rest) == 2 and rest[1].is_punct(")") and rest[0].kind not in (PUNCTUATION, COMMENT):
        return "inline"
    return "group"


def reflow_parentheses(lines: List[Line]) -> List[Line]:
    """
    Break after '(' and before its ')'. The interior sits one unit deeper than
    the opening line and the closing line returns to it. Subquery openers stay
    glued to SELECT; empty and single-token parentheses stay inline.
    """
    out: List[Line] = []
    stack: List[_Paren] = []
    for line in lines:
        if not line.tokens:
            out.append(line)
            continue
        cur = Line(level=line.level, hang=line.hang, clause=line.clause)
        if stack and stack[-1].kind == "group":
            cur = Line(level=stack[-1].line.level + 1, hang=stack[-1].line.hang)
        for i, tok in enumerate(line.tokens):
            if tok.is_punct("("):
                kind = _paren_kind(line.tokens, i)
                cur.tokens.append(tok)
                stack.append(_Paren(kind, cur))
                if kind == "group":
                    out.append(cur)
                    cur = Line(level=cur.level + 1, hang=cur.hang)
            elif tok.is_punct(")"):
                opener = stack.pop() if stack else None
                if opener is not None and opener.kind == "inline":
                    cur.tokens.append(tok)
                    continue
                if cur.tokens:
                    out.append(cur)
                if opener is not None:
                    cur = Line(level=opener.line.level, hang=opener.line.hang, clause=opener.line.clause)
                else:
                    # unmatched: one unit shallower, clamped
                    cur = Line(level=IndentState(cur.level).shrink().level, hang=cur.hang, clause=cur.clause)
                cur.tokens.append(tok)
            else:
                cur.tokens.append(tok)
        if cur.tokens:
            out.append(cur)
    return out


# -------- Comma Splitter --------

def split_commas(lines: List[Line]) -> List[Line]:
    """Break after each comma; a leading comma stays with the item it introduces."""
    out: List[Line] = []
    for line in lines:
        if not line.tokens:
            out.append(line)
            continue
        cur = Line(level=line.level, hang=line.hang, clause=line.clause)
        last = len(line.tokens) - 1
        for i, tok in enumerate(line.tokens):
            cur.tokens.append(tok)
            if tok.is_punct(",") and 0 < i < last and not line.tokens[i + 1].is_line_comment:
                out.append(cur)
                cur = Line(level=line.level, hang=line.hang or line.clause)
        out.append(cur)
    return out


# -------- Keyword Normalizer --------

def normalize_keywords(tokens: List[Token], keyword_case: str) -> List[Token]:
    if keyword_case == "preserve":
        return list(tokens)
    recase = str.upper if keyword_case == "upper" else str.lower
    return [tok._replace(text=recase(tok.text)) if tok.kind == KEYWORD else tok for tok in tokens]


# -------- Spacing Finalizer --------

def _needs_space(prev: Token, tok: Token) -> bool:
    if tok.kind == PUNCTUATION and tok.text in ",;)":
        return False
    if tok.is_punct(".") or prev.is_punct(".") or prev.is_punct("("):
        return False
    if tok.is_punct("("):
        if prev.kind == OPERATOR or prev.is_punct(","):
            return True
        return tok.space_before
    if tok.kind == OPERATOR or prev.kind == OPERATOR:
        return True
    if tok.kind == OTHER or prev.kind == OTHER:
        return tok.space_before
    return True


def render_line(line: Line, unit: str) -> str:
    if not line.tokens:
        return ""
    parts = [IndentState(line.level).render(unit), LIST_CONTINUATION if line.hang else "", line.tokens[0].text]
    for prev, tok in zip(line.tokens, line.tokens[1:]):
        if _needs_space(prev, tok):
            parts.append(" ")
        parts.append(tok.text)
    return "".join(parts)


def finalize_spacing(lines: List[Line], unit: str) -> str:
    return "\n".join(render_line(line, unit) for line in lines)


# -------- Output clean-up --------

def align_first_line(text: str) -> str:
    """First line starts at column 0; no line keeps trailing whitespace."""
    lines = [line.rstrip() for line in text.split("\n")]
    while lines and not lines[0]:
        lines.pop(0)
    if lines:
        lines[0] = lines[0].lstrip()
    return "\n".join(lines)


def collapse_blank_lines(text: str, max_lines: int) -> str:
    """Keep at most max_lines + 1 consecutive blank lines; trim blank lines at both ends."""
    result: List[str] = []
    blank = 0
    for line in text.split("\n"):
        if line.strip():
            blank = 0
            result.append(line)
        else:
            blank += 1
            if blank <= max_lines + 1:
                result.append("")
    while result and not result[0]:
        result.pop(0)
    while result and not result[-1]:
        result.pop()
    return "\n".join(result)


def format_sql(sql: str, options: Union[FormatOptions, Mapping[str, Any], None] = None) -> str:
    opts = coerce_options(options)
    guarded, table = extract_literals(sql.strip())
    tokens = space_operators(significant(tokenize(guarded, table.marker)))
    lines = indent_clauses(tokens)
    lines = split_commas(lines)
    lines = reflow_parentheses(lines)
    for line in lines:
        line.tokens = normalize_keywords(line.tokens, opts.keyword_case)
    text = finalize_spacing(lines, opts.indent_unit)
    text = align_first_line(text)
    text = collapse_blank_lines(text, opts.lines_between_queries)
    return restore_literals(text, table)
