from __future__ import annotations
import argparse, sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from .formatter import format_sql
from .generator import ALL_OPS, columns_from_dataframe, generate_statements, load_columns_dataframe
from .minifier import minify_sql, split_statements
from .models import FormatOptions
from .utils import decode_sql_bytes
from .validation import validate_sql_with_sqlglot


def eprint(*a, **k):
    print(*a, file=sys.stderr, **k)


def read_sql(infile: Optional[str]) -> str:
    try:
        if infile and infile != "-":
            return decode_sql_bytes(Path(infile).read_bytes())
        return decode_sql_bytes(sys.stdin.buffer.read())
    except FileNotFoundError:
        eprint(f"[ERROR] Input file not found: {infile}")
        sys.exit(2)
    except PermissionError:
        eprint(f"[ERROR] Permission denied reading: {infile or 'stdin'}")
        sys.exit(2)
    except OSError as e:
        eprint(f"[ERROR] OS error reading {infile or 'stdin'}: {e}")
        sys.exit(2)


def write_sql(text: str, outfile: Optional[str]) -> None:
    if not outfile:
        print(text)
        return
    try:
        path = Path(outfile)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text + "\n", encoding="utf-8")
    except OSError as e:
        eprint(f"[ERROR] OS error writing {outfile}: {e}")
        sys.exit(2)
    eprint(f"[done] wrote {outfile}")


def build_options(args: argparse.Namespace) -> FormatOptions:
    """Options from --config (JSON), then the flags given on the command line on top."""
    base = {}
    if args.config:
        try:
            base = FormatOptions.model_validate_json(Path(args.config).read_text(encoding="utf-8")).model_dump()
        except OSError as e:
            eprint(f"[ERROR] Cannot read config {args.config}: {e}")
            sys.exit(2)
    overrides = {
        "keyword_case": args.keyword_case,
        "tab_size": args.tab_size,
        "use_tabs": args.use_tabs,
        "lines_between_queries": args.lines_between_queries,
    }
    base.update({k: v for k, v in overrides.items() if v is not None})
    return FormatOptions.model_validate(base)


def cmd_format(args: argparse.Namespace) -> int:
    opts = build_options(args)
    write_sql(format_sql(read_sql(args.file), opts), args.out)
    return 0


def cmd_minify(args: argparse.Namespace) -> int:
    write_sql(minify_sql(read_sql(args.file)), args.out)
    return 0


def cmd_generate(args: argparse.Namespace) -> int:
    path = Path(args.columns)
    try:
        df = load_columns_dataframe(path.read_bytes(), path.name, args.sheet)
    except OSError as e:
        eprint(f"[ERROR] Cannot read column sheet {args.columns}: {e}")
        return 2
    columns = columns_from_dataframe(df)
    if not columns:
        eprint(f"[WARN] No column rows found in {args.columns}")
    items = generate_statements(args.table, columns, schema=args.schema, ops=args.ops,
                                where_column=args.where_column, limit=args.limit)
    write_sql("\n\n".join(i.sql for i in items), args.out)
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    report = validate_sql_with_sqlglot(split_statements(read_sql(args.file)), read_dialect=args.dialect)
    failed = 0
    for row in report:
        if row["Result"] == "OK":
            print(f"[OK] {row['SQL']}")
        else:
            failed += 1
            print(f"[ERROR] {row['SQL']}\n        {row['Error']}")
    print(f"[done] {len(report)} statement(s), {failed} failed")
    return 1 if failed else 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="sqltidy", description="Format, minify, generate and check SQL text")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_f = sub.add_parser("format", help="Pretty-print SQL")
    ap_f.add_argument("file", nargs="?", help="SQL file (default: stdin)")
    ap_f.add_argument("--config", help="JSON file with formatting options")
    ap_f.add_argument("--keyword-case", choices=["upper", "lower", "preserve"])
    ap_f.add_argument("--tab-size", type=int)
    ap_f.add_argument("--use-tabs", action="store_true", default=None)
    ap_f.add_argument("--lines-between-queries", type=int)
    ap_f.add_argument("--out", help="Write to this file instead of stdout")
    ap_f.set_defaults(func=cmd_format)

    ap_m = sub.add_parser("minify", help="Strip comments and collapse whitespace")
    ap_m.add_argument("file", nargs="?", help="SQL file (default: stdin)")
    ap_m.add_argument("--out", help="Write to this file instead of stdout")
    ap_m.set_defaults(func=cmd_minify)

    ap_g = sub.add_parser("generate", help="Generate statements from a column sheet (CSV/XLSX)")
    ap_g.add_argument("--columns", required=True, help="CSV or XLSX column sheet")
    ap_g.add_argument("--table", required=True)
    ap_g.add_argument("--schema")
    ap_g.add_argument("--sheet", help="XLSX sheet name (default: first sheet)")
    ap_g.add_argument("--ops", nargs="+", default=list(ALL_OPS), type=str.upper,
                      help="Statement types: SELECT INSERT UPDATE DELETE CREATE TRUNCATE DROP")
    ap_g.add_argument("--where-column", help="Key column for UPDATE/DELETE")
    ap_g.add_argument("--limit", type=int, help="LIMIT for the SELECT statement")
    ap_g.add_argument("--out", help="Write to this file instead of stdout")
    ap_g.set_defaults(func=cmd_generate)

    ap_c = sub.add_parser("check", help="Parse statements with sqlglot and report failures")
    ap_c.add_argument("file", nargs="?", help="SQL file (default: stdin)")
    ap_c.add_argument("--dialect", default="postgres")
    ap_c.set_defaults(func=cmd_check)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except ValidationError as ve:
        for e in ve.errors():
            eprint(f"[ERROR] {e['msg']} (at {'.'.join(str(loc) for loc in e['loc'])})")
        return 2
    except ValueError as e:
        eprint(f"[ERROR] {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
