"""Log file listing and line parsing."""

import os
import tempfile
import time
import unittest
from pathlib import Path

from app.services.errors import BadRequest, NotFound
from app.services.system_log import list_log_files, parse_line, read_log_file

SAMPLE = "\n".join(
    [
        "2026-01-29T12:00:00Z [INFO] [app.main] Started",
        '2026-01-29T12:00:01Z [WARNING] [app.services.sessions] Login rejected {"user_id": 3}',
        "2026-01-29T12:00:02Z [ERROR] [app.api.errors] Boom",
        "free-form line",
        "",
    ]
)


class TestParseLine(unittest.TestCase):
    def test_full_line(self) -> None:
        entry = parse_line("2026-01-29T12:00:00Z [INFO] [app.main] Started")
        self.assertEqual(
            (entry.timestamp, entry.level, entry.context, entry.message),
            ("2026-01-29T12:00:00Z", "INFO", "app.main", "Started"),
        )
        self.assertIsNone(entry.metadata)

    def test_trailing_json_becomes_metadata(self) -> None:
        entry = parse_line('2026-01-29T12:00:01Z [WARNING] [ctx] Login rejected {"user_id": 3}')
        self.assertEqual(entry.message, "Login rejected")
        self.assertEqual(entry.metadata, {"user_id": 3})

    def test_invalid_trailing_json_stays_in_message(self) -> None:
        entry = parse_line("2026-01-29T12:00:01Z [INFO] [ctx] value {not json}")
        self.assertEqual(entry.message, "value {not json}")
        self.assertIsNone(entry.metadata)

    def test_context_is_optional(self) -> None:
        entry = parse_line("2026-01-29T12:00:00Z [DEBUG] no context here")
        self.assertEqual(entry.context, "")
        self.assertEqual(entry.message, "no context here")

    def test_unparseable_line(self) -> None:
        entry = parse_line("free-form line")
        self.assertEqual((entry.level, entry.message), ("UNKNOWN", "free-form line"))


class TestLogFiles(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        (self.dir / "app.log").write_text(SAMPLE, encoding="utf-8")
        older = self.dir / "old.log"
        older.write_text("2026-01-01T00:00:00Z [INFO] [x] old\n", encoding="utf-8")
        past = time.time() - 3600
        os.utime(older, (past, past))
        (self.dir / "notes.txt").write_text("ignored", encoding="utf-8")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_lists_log_files_newest_first(self) -> None:
        self.assertEqual([f.filename for f in list_log_files(self.dir)], ["app.log", "old.log"])

    def test_missing_directory(self) -> None:
        self.assertEqual(list_log_files(self.dir / "absent"), [])

    def test_read_newest_first(self) -> None:
        content = read_log_file(self.dir, "app.log")
        self.assertEqual(content.lines, 4)
        self.assertEqual(content.entries[0].message, "free-form line")
        self.assertEqual(content.entries[-1].message, "Started")

    def test_filters_and_limit(self) -> None:
        self.assertEqual(
            [e.message for e in read_log_file(self.dir, "app.log", level="ERROR").entries], ["Boom"]
        )
        self.assertEqual(
            [e.message for e in read_log_file(self.dir, "app.log", search="SESSIONS").entries],
            ["Login rejected"],
        )
        self.assertEqual(len(read_log_file(self.dir, "app.log", limit=2).entries), 2)

    def test_rejects_path_traversal(self) -> None:
        for name in ("../secret.log", "sub/app.log", "sub\\app.log"):
            with self.subTest(name=name):
                with self.assertRaises(BadRequest):
                    read_log_file(self.dir, name)

    def test_missing_file(self) -> None:
        with self.assertRaises(NotFound):
            read_log_file(self.dir, "nope.log")
