from __future__ import annotations
import streamlit as st, pandas as pd
from pydantic import ValidationError
from sqltidy import (FormatOptions, compute_diff, decode_sql_bytes, format_sql, minify_sql, preview_sql,
                     split_statements, validate_sql_with_sqlglot)

st.set_page_config(page_title="SQL Tidy", page_icon="🧹", layout="wide")
st.title("SQL Tidy")

# --- Sidebar ---
with st.sidebar:
    st.header("Formatting")
    keyword_case = st.selectbox("Keyword case", ["upper", "lower", "preserve"], index=0)
    use_tabs = st.toggle("Indent with tabs", value=False)
    tab_size = st.number_input("Tab size", min_value=1, max_value=8, value=2, step=1, disabled=use_tabs)
    lines_between = st.number_input("Max blank lines between queries", min_value=0, max_value=10, value=1, step=1)
    max_len = st.number_input("Max line length (advisory)", min_value=20, max_value=400, value=80, step=10)

    st.header("Syntax report")
    dialect = st.selectbox("SQL dialect", ["postgres", "mysql", "sqlite", "tsql", "bigquery", "snowflake"], index=0)

tabs = st.tabs(["Editor", "Syntax report", "History"])

# --- Session ---
if "sql_text" not in st.session_state:
    st.session_state.sql_text = ""
    st.session_state.result = None
    st.session_state.action = None
if "history" not in st.session_state:
    st.session_state.history = []
if "uploader_key" not in st.session_state:
    st.session_state.uploader_key = 0


def _clear_editor():
    st.session_state.sql_text = ""
    st.session_state.result = None
    st.session_state.action = None


def _load_history(past: str):
    st.session_state.sql_text = past
    st.session_state.result = None


def _remember(sql: str) -> None:
    hist = st.session_state.history
    if sql.strip() and (not hist or hist[-1] != sql):
        hist.append(sql)
        del hist[:-50]


with tabs[0]:
    c1, c2 = st.columns([3, 1])
    with c2:
        st.subheader("Actions")
        up = st.file_uploader("Open .sql file", type=["sql", "txt"], key=f"sqlfile_{st.session_state.uploader_key}")
        if up is not None:
            st.session_state.sql_text = decode_sql_bytes(up.read())
            st.session_state.uploader_key += 1
            st.rerun()
        run_fmt = st.button("Format", type="primary")
        run_min = st.button("Minify")
        st.button("Clear", type="secondary", help="Empty the editor and clear results", on_click=_clear_editor)
    with c1:
        st.subheader("SQL")
        sql = st.text_area("Query", key="sql_text", height=300, label_visibility="collapsed")

    if run_fmt or run_min:
        try:
            opts = FormatOptions(keyword_case=keyword_case, use_tabs=use_tabs, tab_size=int(tab_size),
                                 lines_between_queries=int(lines_between), max_line_length=int(max_len))
        except ValidationError as ve:
            st.error(f"Invalid options: {ve.errors()[0]['msg']}")
        else:
            st.session_state.result = format_sql(sql, opts) if run_fmt else minify_sql(sql)
            st.session_state.action = "Formatted" if run_fmt else "Minified"
            _remember(sql)

    result = st.session_state.result
    if result is None:
        st.info("Paste or open SQL and click **Format** or **Minify**.")
    else:
        st.subheader(st.session_state.action)
        st.code(result, language="sql")
        long_lines = [i + 1 for i, line in enumerate(result.splitlines()) if len(line) > max_len]
        if long_lines:
            st.caption(f"Lines over {max_len} characters: {', '.join(map(str, long_lines[:20]))}")
        st.download_button("Download .sql", data=result + "\n", file_name="query.sql", mime="text/x-sql")
        with st.expander("Diff against the editor"):
            st.code(compute_diff(sql, result), language="diff")


with tabs[1]:
    st.subheader("Syntax report (sqlglot: Result, SQL, Error)")
    source = st.session_state.result or st.session_state.sql_text
    if source.strip():
        statements = split_statements(source)
        report = validate_sql_with_sqlglot(statements, read_dialect=dialect)
        df = pd.DataFrame(report, columns=["Result", "SQL", "Error"])
        st.dataframe(df, use_container_width=True, hide_index=True)
        st.caption("Advisory only: formatting never depends on this report.")
    else:
        st.info("Nothing to check yet.")


with tabs[2]:
    st.subheader("History")
    hist = st.session_state.history
    if not hist:
        st.info("Formatted or minified queries show up here.")
    for idx, past in enumerate(reversed(hist)):
        h1, h2 = st.columns([5, 1])
        h1.text(preview_sql(past))
        h2.button("Load", key=f"hist_{idx}", on_click=_load_history, args=(past,))
