"""Local file storage and Range header parsing."""

import io
import tempfile
import unittest
from pathlib import Path

from app.services.errors import BadRequest, RangeNotSatisfiable
from app.services.file_storage import FileStorage, iter_file, parse_byte_range


class TestParseByteRange(unittest.TestCase):
    def test_no_header(self) -> None:
        self.assertIsNone(parse_byte_range(None, 100))
        self.assertIsNone(parse_byte_range("", 100))

    def test_closed_range(self) -> None:
        self.assertEqual(parse_byte_range("bytes=0-9", 100), (0, 9))

    def test_open_ended_range(self) -> None:
        self.assertEqual(parse_byte_range("bytes=90-", 100), (90, 99))

    def test_suffix_range(self) -> None:
        self.assertEqual(parse_byte_range("bytes=-10", 100), (90, 99))
        self.assertEqual(parse_byte_range("bytes=-500", 100), (0, 99))

    def test_end_is_clamped_to_size(self) -> None:
        self.assertEqual(parse_byte_range("bytes=50-1000", 100), (50, 99))

    def test_unsatisfiable(self) -> None:
        for header in ("bytes=100-", "bytes=10-5", "bytes=-0", "bytes=-", "items=0-1", "bytes=0-1,5-6"):
            with self.subTest(header=header):
                with self.assertRaises(RangeNotSatisfiable):
                    parse_byte_range(header, 100)

    def test_empty_file(self) -> None:
        with self.assertRaises(RangeNotSatisfiable):
            parse_byte_range("bytes=0-0", 0)


class TestFileStorage(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.storage = FileStorage(self.root, max_bytes=1024)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_save_uses_dated_directory_and_keeps_extension(self) -> None:
        stored = self.storage.save(io.BytesIO(b"hello"), "Report.PDF")
        path = Path(stored.real_path)
        self.assertTrue(path.is_file())
        self.assertTrue(stored.saved_name.endswith(".pdf"))
        self.assertEqual(len(path.relative_to(self.root).parts), 4)
        self.assertEqual(stored.size, 5)

    def test_names_are_unique(self) -> None:
        a = self.storage.save(io.BytesIO(b"a"), "same.txt")
        b = self.storage.save(io.BytesIO(b"b"), "same.txt")
        self.assertNotEqual(a.saved_name, b.saved_name)

    def test_too_large_leaves_no_file(self) -> None:
        with self.assertRaises(BadRequest):
            self.storage.save(io.BytesIO(b"x" * 2048), "big.bin")
        self.assertEqual([p for p in self.root.rglob("*") if p.is_file()], [])

    def test_replace_removes_old_file(self) -> None:
        old = self.storage.save(io.BytesIO(b"old"), "a.txt")
        new = self.storage.replace(old.real_path, io.BytesIO(b"newer"), "a.txt")
        self.assertFalse(Path(old.real_path).exists())
        self.assertEqual(Path(new.real_path).read_bytes(), b"newer")

    def test_delete_missing_file_is_quiet(self) -> None:
        self.storage.delete(str(self.root / "nope"))

    def test_iter_file_range(self) -> None:
        stored = self.storage.save(io.BytesIO(b"0123456789"), "digits.txt")
        self.assertEqual(b"".join(iter_file(stored.real_path, 2, 5)), b"2345")
        self.assertEqual(b"".join(iter_file(stored.real_path)), b"0123456789")
