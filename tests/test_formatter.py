import unittest

from pydantic import ValidationError

from sqltidy import FormatOptions, format_sql
from sqltidy.formatter import IndentState, collapse_blank_lines
from sqltidy.tokens import KEYWORD, LITERAL, OPERATOR, significant, tokenize

LITERAL_TEXT = "'it''s a comma, and a SELECT inside'"

SAMPLES = [
    "select * from users where id=1",
    "select u.id, count(*) from users u left join orders o on o.user_id = u.id "
    "where u.active = true and o.total > 10 group by u.id order by 2 desc limit 5",
    "select a from (select b from t) x where a in (1, 2)",
    "insert into t (a, b) values (1, 'x')",
    "update t set a = 1, b = 'two, three' where id = 3",
    "create table t (id int primary key, name varchar(20) not null)",
    "delete from t where x between 1 and 5 or y is null",
    "select 1;\n\n\n\nselect 2; -- trailing\nselect case when a=1 then 'x' else 'y' end as c from t",
    "SELECT a,\n-- note\nb /* block\ncomment */ FROM t",
    "SELECT a\n  -- c\n  , b FROM t",
    "select (a from t",
    "select a) from t",
    f"select {LITERAL_TEXT} as s, f(x, y) from t",
]


class TokenizerTests(unittest.TestCase):
    def test_classifies_keywords_operators_and_placeholders(self):
        toks = significant(tokenize("select a<=__LITERAL_0__", "__LITERAL_"))
        self.assertEqual([t.kind for t in toks], [KEYWORD, "identifier", OPERATOR, LITERAL])
        self.assertEqual(toks[2].text, "<=")
        self.assertTrue(toks[1].space_before)
        self.assertFalse(toks[2].space_before)

    def test_whitespace_folds_into_newline_count(self):
        toks = significant(tokenize("a\n\n\nb"))
        self.assertEqual(toks[1].newlines, 3)


class IndentStateTests(unittest.TestCase):
    def test_shrink_clamps_at_zero(self):
        state = IndentState()
        state.shrink().shrink()
        self.assertEqual(state.level, 0)
        self.assertEqual(state.grow().grow().render("  "), "    ")


class FormatSqlTests(unittest.TestCase):
    def test_simple_query_breaks_before_clauses(self):
        self.assertEqual(format_sql("select * from users where id=1"),
                         "SELECT *\n  FROM users\n  WHERE id = 1")

    def test_conditions_break_inside_where_only(self):
        out = format_sql("delete from t where x between 1 and 5 or y is null")
        self.assertEqual(out, "DELETE FROM t\n  WHERE x BETWEEN 1 AND 5\n    OR y IS NULL")

    def test_join_and_select_list(self):
        out = format_sql(SAMPLES[1])
        self.assertEqual(out.splitlines(), [
            "SELECT u.id,",
            "  count(*)",
            "  FROM users u",
            "  LEFT JOIN orders o ON o.user_id = u.id",
            "  WHERE u.active = TRUE",
            "    AND o.total > 10",
            "  GROUP BY u.id",
            "  ORDER BY 2 DESC",
            "  LIMIT 5",
        ])

    def test_update_assignments_hang_under_set(self):
        self.assertEqual(format_sql("update t set a = 1, b = 2 where id = 3"),
                         "UPDATE t\n  SET a = 1,\n    b = 2\n  WHERE id = 3")

    def test_parentheses_reflow_with_single_token_groups_inline(self):
        out = format_sql("create table t (id int primary key, name varchar(20) not null)")
        self.assertEqual(out, "CREATE TABLE t (\n  id int PRIMARY KEY,\n  name varchar(20) NOT NULL\n)")

    def test_subquery_stays_glued_to_its_parenthesis(self):
        out = format_sql("select a from (select b from t) x")
        self.assertEqual(out, "SELECT a\n  FROM (SELECT b\n    FROM t\n  ) x")

    def test_empty_parentheses_stay_inline(self):
        self.assertEqual(format_sql("select now()"), "SELECT now()")

    def test_keyword_case_options(self):
        self.assertEqual(format_sql("Select a From t", {"keywordCase": "preserve"}), "Select a\n  From t")
        self.assertEqual(format_sql("SELECT a FROM t", {"keyword_case": "lower"}), "select a\n  from t")

    def test_tabs_as_indent_unit(self):
        self.assertEqual(format_sql("select a from t", FormatOptions(use_tabs=True)), "SELECT a\n\tFROM t")
        self.assertEqual(format_sql("select a from t", FormatOptions(tab_size=4)), "SELECT a\n    FROM t")

    def test_literal_survives_every_keyword_case(self):
        sql = f"select {LITERAL_TEXT}, b from t where c = {LITERAL_TEXT}"
        for case in ("upper", "lower", "preserve"):
            with self.subTest(case=case):
                out = format_sql(sql, {"keyword_case": case})
                self.assertEqual(out.count(LITERAL_TEXT), 2)

    def test_marker_collision_keeps_identifier(self):
        out = format_sql("select __LITERAL_0__, 'x' from t")
        self.assertEqual(out, "SELECT __LITERAL_0__,\n  'x'\n  FROM t")

    def test_own_line_comment_stays_on_its_line(self):
        sql = "SELECT a\n  -- c\n  , b FROM t"
        out = format_sql(sql)
        self.assertEqual(out, "SELECT a\n  -- c\n  , b\n  FROM t")
        self.assertEqual(format_sql(out), out)

    def test_trailing_comment_stays_after_code(self):
        self.assertEqual(format_sql("select a -- c\nfrom t"), "SELECT a -- c\n  FROM t")

    def test_unterminated_literal(self):
        self.assertEqual(format_sql("select 'abc"), "SELECT 'abc")

    def test_unbalanced_parentheses_do_not_raise(self):
        self.assertEqual(format_sql("select a) from t"), "SELECT a\n)\n  FROM t")
        self.assertEqual(format_sql("select (a from t"), "SELECT (\n  a FROM t")

    def test_empty_input(self):
        self.assertEqual(format_sql(""), "")
        self.assertEqual(format_sql("   \n  "), "")

    def test_idempotent(self):
        for sql in SAMPLES:
            for opts in ({}, {"keyword_case": "lower", "use_tabs": True}, {"lines_between_queries": 0}):
                with self.subTest(sql=sql, opts=opts):
                    once = format_sql(sql, opts)
                    self.assertEqual(format_sql(once, opts), once)

    def test_invalid_options_raise(self):
        with self.assertRaises(ValidationError):
            format_sql("select 1", {"tabSize": 0})
        with self.assertRaises(ValidationError):
            FormatOptions(keyword_case="title")


class BlankLineTests(unittest.TestCase):
    SQL = "SELECT 1;\n\n\n\n\n\nSELECT 2;"

    def _max_blank_run(self, text):
        run = best = 0
        for line in text.split("\n"):
            run = run + 1 if not line.strip() else 0
            best = max(best, run)
        return best

    def test_cap_one_keeps_two(self):
        self.assertEqual(format_sql(self.SQL, {"linesBetweenQueries": 1}), "SELECT 1;\n\n\nSELECT 2;")

    def test_cap_zero_keeps_one(self):
        self.assertEqual(format_sql(self.SQL, {"linesBetweenQueries": 0}), "SELECT 1;\n\nSELECT 2;")

    def test_large_cap_keeps_all_five(self):
        out = format_sql(self.SQL, {"linesBetweenQueries": 10})
        self.assertEqual(self._max_blank_run(out), 5)

    def test_collapse_trims_edges(self):
        self.assertEqual(collapse_blank_lines("\n\na\n\n\n\nb\n\n", 0), "a\n\nb")


if __name__ == "__main__":
    unittest.main()
