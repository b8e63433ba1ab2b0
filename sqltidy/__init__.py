from .models import ColumnDefinition, FormatOptions
from .formatter import format_sql
from .minifier import minify_sql, split_statements, strip_comments
from .literals import LiteralGuardError, extract_literals, restore_literals
from .generator import (GeneratedStatement, columns_from_dataframe, generate_create_table, generate_delete,
                        generate_drop, generate_insert, generate_select_all, generate_statements,
                        generate_truncate, generate_update, load_columns_dataframe)
from .utils import compute_diff, decode_sql_bytes, preview_sql
from .validation import validate_sql_with_sqlglot
__all__ = ["FormatOptions","ColumnDefinition","GeneratedStatement","LiteralGuardError","format_sql","minify_sql","strip_comments","split_statements","extract_literals","restore_literals","generate_select_all","generate_insert","generate_update","generate_delete","generate_create_table","generate_truncate","generate_drop","generate_statements","load_columns_dataframe","columns_from_dataframe","compute_diff","decode_sql_bytes","preview_sql","validate_sql_with_sqlglot"]
