import unittest

from sqltidy import compute_diff, decode_sql_bytes, generate_statements, preview_sql, validate_sql_with_sqlglot


class UtilsTests(unittest.TestCase):
    def test_decode_strips_bom_and_handles_empty(self):
        self.assertEqual(decode_sql_bytes(b"\xef\xbb\xbfSELECT 1"), "SELECT 1")
        self.assertEqual(decode_sql_bytes(b""), "")
        self.assertEqual(decode_sql_bytes(b"select a from t;\n"), "select a from t;\n")

    def test_preview_flattens_and_truncates(self):
        self.assertEqual(preview_sql("select  *\n  from t"), "select * from t")
        long_sql = "select " + ", ".join(f"col_{i}" for i in range(40)) + " from t"
        preview = preview_sql(long_sql)
        self.assertEqual(len(preview), 103)
        self.assertTrue(preview.endswith("..."))

    def test_compute_diff(self):
        self.assertEqual(compute_diff("a", "a"), "No differences.")
        diff = compute_diff("select 1", "SELECT 1")
        self.assertIn("--- original", diff)
        self.assertIn("+++ formatted", diff)
        self.assertIn("+SELECT 1", diff)


class ValidationTests(unittest.TestCase):
    def test_report_marks_parse_failures(self):
        report = validate_sql_with_sqlglot(["SELECT 1", "  ", "SELECT (1"])
        self.assertEqual([r["Result"] for r in report], ["OK", "ERROR"])
        self.assertEqual(report[0]["Error"], "")
        self.assertTrue(report[1]["Error"])

    def test_generated_statements_parse(self):
        items = generate_statements("users", [{"name": "id", "pk": True}, {"name": "email"}],
                                    ops=["SELECT", "INSERT", "DELETE"])
        report = validate_sql_with_sqlglot(items, read_dialect="sqlite")
        self.assertEqual([r["Result"] for r in report], ["OK", "OK", "OK"])


if __name__ == "__main__":
    unittest.main()
