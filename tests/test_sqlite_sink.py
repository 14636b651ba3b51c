# -*- coding: utf-8 -*-

from __future__ import annotations

import shutil
import sqlite3
import tempfile
import unittest
from pathlib import Path

from connectkit.errors import SinkError
from connectkit.records.data_record import DataRecordDecoder
from connectkit.sinks.sqlite import SqliteRecordSink

T0 = "2024-05-01T07:00:00Z"


def weight(value, client_id=None, version=None):
    record = {
        "recordKind": "data",
        "type": "weight",
        "time": T0,
        "data": {"valuePattern": "quantity", "value": value, "unit": "kg"},
    }
    if client_id is not None:
        record["source"] = {"clientRecordId": client_id, "clientRecordVersion": version}
    return DataRecordDecoder(platform="android").decode(record)


class TestSqliteRecordSink(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="connectkit-test-"))
        self.db_path = self._tmp / "records.db"
        self.sink = SqliteRecordSink(self.db_path, origin="app.one", platform="android", timeout=5)

    def tearDown(self) -> None:
        shutil.rmtree(self._tmp, ignore_errors=True)

    def test_insert_returns_one_id_per_record(self) -> None:
        ids = self.sink.insert_batch([weight(70), weight(71)])
        self.assertEqual(len(ids), 2)
        self.assertNotEqual(ids[0], ids[1])
        self.assertEqual(self.sink.count(), 2)

        row = self.sink.get(ids[1])
        self.assertEqual(row["record_kind"], "data")
        self.assertEqual(row["record_type"], "weight")
        self.assertEqual(row["origin"], "app.one")
        self.assertEqual(row["payload"]["value"], {"value": 71.0, "unit": "kg", "dimension": "mass"})
        self.assertIsNone(row["source"])

    def test_get_unknown_id(self) -> None:
        self.assertIsNone(self.sink.get("missing"))

    def test_higher_version_updates(self) -> None:
        [first] = self.sink.insert_batch([weight(70, "w-1", 1)])
        [second] = self.sink.insert_batch([weight(72, "w-1", 2)])
        self.assertEqual(first, second)
        self.assertEqual(self.sink.count(), 1)
        row = self.sink.get(first)
        self.assertEqual(row["client_record_version"], 2)
        self.assertEqual(row["payload"]["value"]["value"], 72.0)
        self.assertEqual(row["source"]["clientRecordId"], "w-1")

    def test_lower_or_equal_version_is_ignored(self) -> None:
        [first] = self.sink.insert_batch([weight(72, "w-1", 2)])
        ids = self.sink.insert_batch([weight(70, "w-1", 1), weight(71, "w-1", 2)])
        self.assertEqual(ids, [first, first])
        self.assertEqual(self.sink.count(), 1)
        self.assertEqual(self.sink.get(first)["payload"]["value"]["value"], 72.0)

    def test_other_origin_inserts(self) -> None:
        [first] = self.sink.insert_batch([weight(70, "w-1", 1)])
        other = SqliteRecordSink(self.db_path, origin="app.two", platform="android", timeout=5)
        [second] = other.insert_batch([weight(72, "w-1", 5)])
        self.assertNotEqual(first, second)
        self.assertEqual(self.sink.count(), 2)
        self.assertEqual(self.sink.get(first)["payload"]["value"]["value"], 70.0)

    def test_batch_is_all_or_nothing(self) -> None:
        sink = self.sink
        original = sink._upsert
        calls = []

        def failing_upsert(conn, record):
            calls.append(record)
            if len(calls) == 2:
                raise sqlite3.IntegrityError("constraint failed")
            return original(conn, record)

        sink._upsert = failing_upsert
        with self.assertRaises(SinkError):
            sink.insert_batch([weight(70), weight(71)])
        self.assertEqual(sink.count(), 0)

    def test_sqlite_errors_become_sink_errors(self) -> None:
        conn = sqlite3.connect(str(self.db_path))
        try:
            conn.execute("DROP TABLE records")
            conn.commit()
        finally:
            conn.close()
        with self.assertLogs("connectkit.sinks.sqlite", level="ERROR") as logs:
            with self.assertRaises(SinkError) as ctx:
                self.sink.insert_batch([weight(70)])
        self.assertEqual(str(ctx.exception), "SQLite write failed")
        self.assertTrue(any("no such table" in line for line in logs.output))


if __name__ == "__main__":
    unittest.main()
