from pathlib import Path
import tempfile
import unittest

from bodymetrics.exceptions import MalformedStateError
from bodymetrics.services.identity_store import IdentityRecord, IdentityStore


class IdentityStoreTests(unittest.TestCase):
    def test_missing_file_is_empty(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = IdentityStore(Path(tmpdir) / "knownPeople.csv")
            self.assertEqual(store.load(), [])
            self.assertIsNone(store.get("1"))
            self.assertEqual(len(store), 0)

    def test_upsert_replaces_row_in_place(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "unknownPeople.csv"
            store = IdentityStore(path)
            store.upsert(IdentityRecord("a", (1800.0, 900.0, 700.0, 400.0, 600.0), 0))
            store.upsert(IdentityRecord("b", (1700.0, 850.0, 650.0, 380.0, 560.0), 0))
            store.upsert(IdentityRecord("a", (1810.0, 905.0, 705.0, 405.0, 605.0), 1))

            records = store.load()
            self.assertEqual([r.subject_id for r in records], ["a", "b"])
            self.assertEqual(records[0].count, 1)
            self.assertEqual(records[0].values, (1810.0, 905.0, 705.0, 405.0, 605.0))
            self.assertFalse(path.with_suffix(".csv.tmp").exists())

    def test_row_format_is_semicolon_delimited(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "knownPeople.csv"
            store = IdentityStore(path)
            store.append(IdentityRecord("42", (1900.0, 900.0, 650.0, 400.0, 600.0), 101))
            store.append(IdentityRecord("43", (1600.5, 800.0, 600.0, 350.0, 520.0), 101))
            lines = path.read_text(encoding="utf-8").splitlines()
            self.assertEqual(lines[0], "42;1900.0;900.0;650.0;400.0;600.0;101")
            self.assertEqual(len(lines), 2)
            self.assertEqual(store.get("43").values[0], 1600.5)

    def test_custom_delimiter(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "people.csv"
            store = IdentityStore(path, delimiter=",")
            store.append(IdentityRecord("x", (1.0, 2.0, 3.0, 4.0, 5.0), 3))
            self.assertIn("x,1.0,2.0", path.read_text(encoding="utf-8"))
            self.assertEqual(store.load()[0].count, 3)

    def test_malformed_rows_raise(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "knownPeople.csv"
            path.write_text("1;2;3\n", encoding="utf-8")
            with self.assertRaises(MalformedStateError):
                IdentityStore(path).load()

            path.write_text("1;abc;2;3;4;5;6\n", encoding="utf-8")
            with self.assertRaises(MalformedStateError):
                IdentityStore(path).load()

    def test_blank_lines_are_ignored(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "knownPeople.csv"
            path.write_text("7;1;2;3;4;5;0\n\n", encoding="utf-8")
            self.assertEqual(len(IdentityStore(path)), 1)

    def test_subject_id_whitespace_is_preserved(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "unknownPeople.csv"
            store = IdentityStore(path)
            store.upsert(IdentityRecord(" 7", (1800.0, 900.0, 700.0, 400.0, 600.0), 0))
            store.upsert(IdentityRecord(" 7", (1800.0, 900.0, 700.0, 400.0, 600.0), 1))

            records = store.load()
            self.assertEqual([r.subject_id for r in records], [" 7"])
            self.assertEqual(store.get(" 7").count, 1)
            self.assertIsNone(store.get("7"))


if __name__ == "__main__":
    unittest.main()
