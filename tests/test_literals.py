import unittest

from sqltidy.literals import LiteralGuardError, LiteralTable, extract_literals, restore_literals


class ExtractLiteralsTests(unittest.TestCase):
    def test_literals_become_ordered_placeholders(self):
        guarded, table = extract_literals("SELECT 'a', 'it''s' FROM t")
        self.assertEqual(guarded, "SELECT __LITERAL_0__, __LITERAL_1__ FROM t")
        self.assertEqual(table.literals, ["'a'", "'it''s'"])
        self.assertEqual(len(table), 2)

    def test_unterminated_literal_runs_to_end(self):
        guarded, table = extract_literals("SELECT 'abc, def")
        self.assertEqual(guarded, "SELECT __LITERAL_0__")
        self.assertEqual(table.literals, ["'abc, def"])

    def test_marker_avoids_text_already_in_input(self):
        guarded, table = extract_literals("SELECT __LITERAL_0__, 'x'")
        self.assertEqual(table.marker, "__LITERAL_X")
        self.assertEqual(guarded, "SELECT __LITERAL_0__, __LITERAL_X0__")

    def test_comments_and_quoted_identifiers_are_not_scanned(self):
        sql = "SELECT \"it's\" -- don't\nFROM t /* won't */ WHERE a = 'b'"
        guarded, table = extract_literals(sql)
        self.assertEqual(table.literals, ["'b'"])
        self.assertIn("\"it's\"", guarded)
        self.assertIn("-- don't", guarded)
        self.assertIn("/* won't */", guarded)


class RestoreLiteralsTests(unittest.TestCase):
    def test_round_trip_is_exact(self):
        sql = "SELECT 'a,b', 'SELECT ''x''' FROM t WHERE c = ''"
        guarded, table = extract_literals(sql)
        self.assertEqual(restore_literals(guarded, table), sql)

    def test_text_without_literals_passes_through(self):
        self.assertEqual(restore_literals("SELECT 1", LiteralTable()), "SELECT 1")

    def test_duplicate_placeholder_raises(self):
        table = LiteralTable(literals=["'a'"])
        with self.assertRaises(LiteralGuardError):
            restore_literals("__LITERAL_0__ __LITERAL_0__", table)

    def test_unknown_placeholder_raises(self):
        table = LiteralTable(literals=["'a'"])
        with self.assertRaises(LiteralGuardError):
            restore_literals("__LITERAL_0__ __LITERAL_1__", table)

    def test_missing_placeholder_raises(self):
        table = LiteralTable(literals=["'a'", "'b'"])
        with self.assertRaises(LiteralGuardError):
            restore_literals("__LITERAL_1__", table)


if __name__ == "__main__":
    unittest.main()
