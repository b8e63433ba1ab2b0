from __future__ import annotations
from typing import FrozenSet

# Canonical spellings recognized by the keyword normalizer. Built once at import, never mutated.
KEYWORDS: FrozenSet[str] = frozenset({
    "SELECT", "FROM", "WHERE", "AND", "OR", "NOT", "IN", "LIKE", "BETWEEN",
    "IS", "NULL", "AS", "DISTINCT", "ALL", "ANY", "SOME", "EXISTS", "JOIN",
    "INNER", "LEFT", "RIGHT", "FULL", "OUTER", "ON", "CROSS", "NATURAL",
    "ORDER", "BY", "ASC", "DESC", "GROUP", "HAVING", "LIMIT", "OFFSET",
    "UNION", "INTERSECT", "EXCEPT", "MINUS", "INSERT", "INTO", "VALUES",
    "UPDATE", "SET", "DELETE", "CREATE", "TABLE", "ALTER", "DROP", "TRUNCATE",
    "INDEX", "VIEW", "SCHEMA", "DATABASE", "CONSTRAINT", "PRIMARY", "FOREIGN",
    "KEY", "REFERENCES", "UNIQUE", "CHECK", "DEFAULT", "CASCADE", "RESTRICT",
    "NO", "ACTION", "BEGIN", "COMMIT", "ROLLBACK", "SAVEPOINT", "TRANSACTION",
    "WITH", "RECURSIVE", "WINDOW", "OVER", "PARTITION", "RANGE", "ROWS",
    "FETCH", "FIRST", "NEXT", "ONLY", "CASE", "WHEN", "THEN", "ELSE", "END",
    "CAST", "COALESCE", "NULLIF", "TRUE", "FALSE",
})

# Lines starting with these reset to the enclosing statement's indent.
STATEMENT_KEYWORDS: FrozenSet[str] = frozenset({
    "SELECT", "INSERT", "UPDATE", "DELETE", "CREATE", "ALTER", "DROP", "TRUNCATE",
})
SET_OPERATORS: FrozenSet[str] = frozenset({"UNION", "INTERSECT", "EXCEPT", "MINUS"})

# Lines starting with these sit one unit below the statement keyword.
CLAUSE_KEYWORDS: FrozenSet[str] = frozenset({
    "FROM", "WHERE", "GROUP", "HAVING", "ORDER", "LIMIT", "OFFSET", "SET", "VALUES",
})
JOIN_KEYWORDS: FrozenSet[str] = frozenset({"JOIN", "INNER", "LEFT", "RIGHT", "FULL", "CROSS", "NATURAL"})

# AND/OR only break lines inside these clauses.
CONDITION_CLAUSES: FrozenSet[str] = frozenset({"WHERE", "HAVING"})

SUBQUERY_KEYWORDS: FrozenSet[str] = frozenset({"SELECT", "WITH"})

# Preceding words that turn a statement keyword into a modifier (ON DELETE CASCADE, DO UPDATE SET ...).
STATEMENT_MODIFIER_PREFIXES: FrozenSet[str] = frozenset({
    "ON", "FOR", "DO", "OF", "BEFORE", "AFTER", "INSTEAD", "GRANT", "REVOKE", ",",
})
CLAUSE_MODIFIER_PREFIXES = {
    "FROM": frozenset({"DELETE", "DISTINCT"}),
    "SET": frozenset({"CHARACTER", "CHARSET"}),
    "GROUP": frozenset({"WITHIN"}),
    "VALUES": frozenset({"DEFAULT"}),
}


def is_keyword(word: str) -> bool:
    return word.upper() in KEYWORDS
