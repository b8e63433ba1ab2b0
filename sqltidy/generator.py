from __future__ import annotations
import io, re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import chardet
import pandas as pd
from pydantic import BaseModel

from .models import ColumnDefinition

ColumnLike = Union[ColumnDefinition, Mapping[str, Any]]

ALL_OPS = ("SELECT", "INSERT", "UPDATE", "DELETE", "CREATE")


class GeneratedStatement(BaseModel):
    schema_name: Optional[str] = None
    table: str
    op: str
    sql: str


def quote_identifier(name: str) -> str:
    return '"' + str(name).replace('"', '""') + '"'


def qualified_name(table: str, schema: Optional[str] = None) -> str:
    if schema:
        return f"{quote_identifier(schema)}.{quote_identifier(table)}"
    return quote_identifier(table)


def _as_column(col: ColumnLike) -> ColumnDefinition:
    return col if isinstance(col, ColumnDefinition) else ColumnDefinition.model_validate(dict(col))


# -------- Statement builders --------

def generate_select_all(table: str, schema: Optional[str] = None, limit: Optional[int] = None) -> str:
    sql = f"SELECT *\nFROM {qualified_name(table, schema)}"
    if limit is not None:
        sql += f"\nLIMIT {int(limit)}"
    return sql + ";"


def generate_insert(table: str, columns: Sequence[str], schema: Optional[str] = None) -> str:
    head = f"INSERT INTO {qualified_name(table, schema)}"
    if not columns:
        return f"{head}\nVALUES\n  ();"
    col_list = ",\n  ".join(quote_identifier(c) for c in columns)
    placeholders = ",\n  ".join("?" for _ in columns)
    return f"{head}\n  ({col_list})\nVALUES\n  ({placeholders});"


def generate_update(table: str, columns: Sequence[str], where_column: str, schema: Optional[str] = None) -> str:
    assignments = ",\n".join(f"  {quote_identifier(c)} = ?" for c in columns if c != where_column)
    body = f"\n{assignments}" if assignments else ""
    return (f"UPDATE {qualified_name(table, schema)}\nSET{body}\n"
            f"WHERE {quote_identifier(where_column)} = ?;")


def generate_delete(table: str, where_column: str, schema: Optional[str] = None) -> str:
    return f"DELETE FROM {qualified_name(table, schema)}\nWHERE {quote_identifier(where_column)} = ?;"


def _column_type(col: ColumnDefinition) -> str:
    if col.length is None:
        return col.type
    if col.scale is not None:
        return f"{col.type}({col.length}, {col.scale})"
    return f"{col.type}({col.length})"


def generate_create_table(table: str, columns: Iterable[ColumnLike], schema: Optional[str] = None) -> str:
    """
    One column definition per line, then a composite PRIMARY KEY clause when
    any column is flagged, then one FOREIGN KEY clause per referencing column.
    """
    cols = [_as_column(c) for c in columns]
    lines: List[str] = []
    for col in cols:
        line = f"  {quote_identifier(col.name)} {_column_type(col)}"
        if not col.nullable:
            line += " NOT NULL"
        if col.default is not None:
            line += f" DEFAULT {col.default}"
        lines.append(line)
    pk_cols = [quote_identifier(c.name) for c in cols if c.pk]
    if pk_cols:
        lines.append(f"  PRIMARY KEY ({', '.join(pk_cols)})")
    for col in cols:
        if col.references_table:
            target = quote_identifier(col.references_column or col.name)
            lines.append(f"  FOREIGN KEY ({quote_identifier(col.name)}) "
                         f"REFERENCES {quote_identifier(col.references_table)} ({target})")
    body = ",\n".join(lines)
    return f"CREATE TABLE {qualified_name(table, schema)} (\n{body}\n);"


def generate_truncate(table: str, schema: Optional[str] = None) -> str:
    return f"TRUNCATE TABLE {qualified_name(table, schema)};"


def generate_drop(table: str, schema: Optional[str] = None, if_exists: bool = False) -> str:
    guard = "IF EXISTS " if if_exists else ""
    return f"DROP TABLE {guard}{qualified_name(table, schema)};"


def default_where_column(columns: Sequence[ColumnDefinition]) -> Optional[str]:
    for col in columns:
        if col.pk:
            return col.name
    return columns[0].name if columns else None


def generate_statements(table: str, columns: Iterable[ColumnLike], schema: Optional[str] = None,
                        ops: Sequence[str] = ALL_OPS, where_column: Optional[str] = None,
                        limit: Optional[int] = None) -> List[GeneratedStatement]:
    """Run the requested builders for one table, in the order given by ops."""
    cols = [_as_column(c) for c in columns]
    names = [c.name for c in cols]
    key = where_column or default_where_column(cols) or "id"
    builders = {
        "SELECT": lambda: generate_select_all(table, schema, limit=limit),
        "INSERT": lambda: generate_insert(table, names, schema),
        "UPDATE": lambda: generate_update(table, names, key, schema),
        "DELETE": lambda: generate_delete(table, key, schema),
        "CREATE": lambda: generate_create_table(table, cols, schema),
        "TRUNCATE": lambda: generate_truncate(table, schema),
        "DROP": lambda: generate_drop(table, schema, if_exists=True),
    }
    items: List[GeneratedStatement] = []
    for op in ops:
        op = op.strip().upper()
        if op not in builders:
            raise ValueError(f"Unknown statement type: {op}")
        items.append(GeneratedStatement(schema_name=schema, table=table, op=op, sql=builders[op]()))
    return items


# -------- Column sheets --------

_HEADER_ALIASES = {
    "name": "name", "column": "name", "column_name": "name",
    "type": "type", "data_type": "type", "datatype": "type",
    "nullable": "nullable", "null": "nullable",
    "default": "default", "default_value": "default",
    "pk": "pk", "primary_key": "pk", "is_primary_key": "pk",
    "length": "length", "size": "length", "precision": "length",
    "scale": "scale",
    "references": "references",
}


def _norm(s: str) -> str:
    return re.sub(r'[^a-z0-9]+', '_', str(s).strip().lower()).strip('_')


def _coerce_boolish(val: Any, fallback: bool) -> bool:
    if val is None or (not isinstance(val, str) and pd.isna(val)):
        return fallback
    if isinstance(val, float) and val.is_integer():
        val = int(val)
    s = str(val).strip().lower()
    if s in {"true", "t", "yes", "y", "1"}:
        return True
    if s in {"false", "f", "no", "n", "0"}:
        return False
    return fallback


def _cell(row: Mapping[str, Any], key: str) -> Optional[str]:
    val = row.get(key)
    if val is None or (not isinstance(val, str) and pd.isna(val)):
        return None
    if isinstance(val, float) and val.is_integer():
        val = int(val)
    s = str(val).strip()
    return s or None


def load_columns_dataframe(data: bytes, filename: str, sheet: Optional[str] = None) -> pd.DataFrame:
    if filename.lower().endswith('.xlsx'):
        xls = pd.ExcelFile(io.BytesIO(data))
        use = sheet if sheet and sheet in xls.sheet_names else xls.sheet_names[0]
        return xls.parse(use)
    enc = chardet.detect(data).get('encoding') or 'utf-8'
    return pd.read_csv(io.StringIO(data.decode(enc)))


def columns_from_dataframe(df: pd.DataFrame) -> List[ColumnDefinition]:
    """Map a column sheet onto ColumnDefinitions; rows without a name are skipped."""
    renamed = {c: _HEADER_ALIASES.get(_norm(c), _norm(c)) for c in df.columns}
    frame = df.rename(columns=renamed)
    if "name" not in frame.columns:
        raise ValueError("Column sheet needs a 'name' (or 'column') header")
    cols: List[ColumnDefinition] = []
    for _, raw in frame.iterrows():
        row: Dict[str, Any] = raw.to_dict()
        name = _cell(row, "name")
        if not name:
            continue
        ref_table, ref_col = None, None
        ref = _cell(row, "references")
        if ref:
            # "table" or "table.column" / "table(column)"
            m = re.match(r'^\s*([^.(]+?)\s*(?:[.(]\s*([^)]+?)\s*\)?)?\s*$', ref)
            if m:
                ref_table, ref_col = m.group(1), m.group(2)
        length, scale = _cell(row, "length"), _cell(row, "scale")
        cols.append(ColumnDefinition(
            name=name,
            type=(_cell(row, "type") or "TEXT").upper(),
            nullable=_coerce_boolish(row.get("nullable"), True),
            default=_cell(row, "default"),
            pk=_coerce_boolish(row.get("pk"), False),
            length=int(float(length)) if length else None,
            scale=int(float(scale)) if scale else None,
            references_table=ref_table,
            references_column=ref_col,
        ))
    return cols
