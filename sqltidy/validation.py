from __future__ import annotations
from typing import Dict, Iterable, List, Union

import sqlglot
from sqlglot.errors import SqlglotError

from .generator import GeneratedStatement

StatementLike = Union[str, GeneratedStatement]


def validate_sql_with_sqlglot(items: Iterable[StatementLike], read_dialect: str = "postgres") -> List[Dict[str, str]]:
    """
    Advisory parse report, one row per statement: Result is OK or ERROR,
    SQL is the statement and Error the parser message. Never raises for bad SQL.
    """
    report: List[Dict[str, str]] = []
    for it in items:
        sqltxt = (it.sql if isinstance(it, GeneratedStatement) else str(it)).strip()
        if not sqltxt:
            continue
        result, error = "OK", ""
        try:
            parsed = sqlglot.parse(sqltxt, read=read_dialect)
            if not any(node is not None for node in parsed):
                result, error = "ERROR", "no statement found"
        except SqlglotError as e:
            result, error = "ERROR", str(e).splitlines()[0] if str(e) else type(e).__name__
        report.append({"Result": result, "SQL": sqltxt, "Error": error})
    return report

