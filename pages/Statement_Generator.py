import streamlit as st, pandas as pd
from pydantic import ValidationError
from sqltidy import columns_from_dataframe, generate_statements, load_columns_dataframe, validate_sql_with_sqlglot
from sqltidy.generator import ALL_OPS

st.set_page_config(page_title="Statement Generator", layout="wide")
st.title("Statement Generator")

GRID_COLUMNS = ["name", "type", "length", "scale", "nullable", "default", "pk", "references"]
EMPTY_GRID = pd.DataFrame([
    {"name": "id", "type": "INTEGER", "length": None, "scale": None, "nullable": False, "default": "", "pk": True, "references": ""},
    {"name": "email", "type": "VARCHAR", "length": 255, "scale": None, "nullable": False, "default": "", "pk": False, "references": ""},
], columns=GRID_COLUMNS)

st.markdown("### Table")
c1, c2 = st.columns(2)
with c1:
    table = st.text_input("Table name", value="users")
    schema = st.text_input("Schema (optional)", value="")
with c2:
    ops = st.multiselect("Statements", list(ALL_OPS) + ["TRUNCATE", "DROP"], default=list(ALL_OPS))
    limit = st.number_input("SELECT limit (0 = none)", min_value=0, value=100, step=10)

st.markdown("### Columns")
sheet = st.file_uploader("Load a column sheet (CSV or XLSX)", type=["csv", "xlsx"])
if sheet is not None:
    try:
        grid = columns_from_dataframe(load_columns_dataframe(sheet.read(), sheet.name))
        base = pd.DataFrame([{
            "name": c.name, "type": c.type, "length": c.length, "scale": c.scale, "nullable": c.nullable,
            "default": c.default or "", "pk": c.pk,
            "references": f"{c.references_table}.{c.references_column}" if c.references_column else (c.references_table or ""),
        } for c in grid], columns=GRID_COLUMNS)
    except (ValueError, ValidationError) as e:
        st.error(f"Could not read {sheet.name}: {e}")
        base = EMPTY_GRID
else:
    base = EMPTY_GRID

edited = st.data_editor(
    base, num_rows="dynamic", use_container_width=True, hide_index=True,
    column_config={
        "nullable": st.column_config.CheckboxColumn("nullable", default=True),
        "pk": st.column_config.CheckboxColumn("pk", default=False),
        "length": st.column_config.NumberColumn("length", min_value=1, step=1),
        "scale": st.column_config.NumberColumn("scale", min_value=0, step=1),
        "references": st.column_config.TextColumn("references", help="table or table.column"),
    },
)

key_choices = ["(primary key)"] + [str(n) for n in edited["name"].dropna() if str(n).strip()]
where_choice = st.selectbox("Key column for UPDATE / DELETE", key_choices, index=0)

if not table.strip():
    st.info("Enter a table name to generate statements.")
else:
    try:
        columns = columns_from_dataframe(edited)
        items = generate_statements(
            table.strip(), columns, schema=schema.strip() or None, ops=ops,
            where_column=None if where_choice == "(primary key)" else where_choice,
            limit=int(limit) or None,
        )
    except (ValueError, ValidationError) as e:
        st.error(str(e))
        items = []

    for item in items:
        st.markdown(f"#### {item.op}")
        st.code(item.sql, language="sql")

    if items:
        bad = [r for r in validate_sql_with_sqlglot(items, read_dialect="sqlite") if r["Result"] != "OK"]
        if bad:
            st.warning(f"sqlglot could not parse {len(bad)} statement(s); see the Syntax report on the editor page.")
        script = "\n\n".join(i.sql for i in items) + "\n"
        st.download_button("Download .sql", data=script, file_name=f"{table.strip()}.sql", mime="text/x-sql")
