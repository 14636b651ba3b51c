# -*- coding: utf-8 -*-

from __future__ import annotations

import logging
import unittest
from typing import List, Sequence

from connectkit.errors import SinkError
from connectkit.records.mapper import RecordMapper
from connectkit.records.models import Record
from connectkit.sinks.base import RecordSink
from connectkit.write.models import FailureType, IndexPath, WriteOutcome
from connectkit.write.service import WriteService

T0 = "2024-05-01T07:00:00Z"
T1 = "2024-05-01T08:00:00Z"


def weight(value=70, unit="kg") -> dict:
    return {
        "recordKind": "data",
        "type": "weight",
        "time": T0,
        "data": {"valuePattern": "quantity", "value": value, "unit": unit},
    }


class MemorySink(RecordSink):
    def __init__(self) -> None:
        self.calls: List[List[Record]] = []

    def insert_batch(self, records: Sequence[Record]) -> List[str]:
        self.calls.append(list(records))
        return [f"id-{len(self.calls)}-{i}" for i in range(len(records))]


class BrokenSink(RecordSink):
    def insert_batch(self, records: Sequence[Record]) -> List[str]:
        raise SinkError("database is locked")


class ExplodingMapper:
    def decode(self, data):
        raise RuntimeError("boom")


class TestWriteService(unittest.TestCase):
    def setUp(self) -> None:
        self.logger = logging.getLogger("tests.write_service")
        self.mapper = RecordMapper(platform="android", validate_sleep_stages=False, logger=self.logger)
        self.sink = MemorySink()
        self.service = WriteService(self.mapper, self.sink, logger=self.logger)

    def test_empty_batch(self) -> None:
        result = self.service.write_records([])
        self.assertEqual(result.outcome, WriteOutcome.FAILURE)
        self.assertEqual(result.persisted_record_ids, [])
        self.assertEqual(len(result.validation_failures), 1)
        failure = result.validation_failures[0]
        self.assertIsNone(failure.index_path)
        self.assertEqual(failure.type, FailureType.NO_RECORDS)
        self.assertEqual(failure.message, "No records to write - empty input")
        self.assertEqual(self.sink.calls, [])

    def test_complete_success(self) -> None:
        result = self.service.write_records([weight(70), weight(71)])
        self.assertEqual(result.outcome, WriteOutcome.COMPLETE_SUCCESS)
        self.assertEqual(len(result.persisted_record_ids), 2)
        self.assertEqual(result.validation_failures, [])
        self.assertEqual(len(self.sink.calls), 1)

    def test_partial_success(self) -> None:
        with self.assertLogs(self.logger, level="ERROR"):
            result = self.service.write_records([weight(70), weight(70, "stone"), weight(72)])
        self.assertEqual(result.outcome, WriteOutcome.PARTIAL_SUCCESS)
        self.assertEqual(len(result.persisted_record_ids), 2)
        self.assertEqual(len(result.validation_failures), 1)
        failure = result.validation_failures[0]
        self.assertEqual(failure.index_path, IndexPath(1))
        self.assertEqual(failure.type, FailureType.DECODE_ERROR)
        self.assertTrue(failure.message.startswith("data | value | "))

    def test_every_record_fails(self) -> None:
        result = self.service.write_records([weight(-1), "garbage", {"recordKind": "teleport"}])
        self.assertEqual(result.outcome, WriteOutcome.FAILURE)
        self.assertEqual(result.persisted_record_ids, [])
        self.assertEqual(
            [f.index_path.to_list() for f in result.validation_failures],
            [[0], [1], [2]],
        )
        self.assertTrue(all(f.type is FailureType.DECODE_ERROR for f in result.validation_failures))
        self.assertEqual(self.sink.calls, [])

    def test_missing_record_kind_message(self) -> None:
        result = self.service.write_records([{"type": "weight"}])
        self.assertEqual(
            result.validation_failures[0].message,
            "Unknown record kind | recordKind | Missing required field 'recordKind'",
        )

    def test_nested_failures_are_rooted_at_the_parent(self) -> None:
        workout = {
            "recordKind": "workout",
            "activityType": "running",
            "startTime": T0,
            "endTime": T1,
            "duringSession": [
                {
                    "recordKind": "data",
                    "type": "distance",
                    "startTime": T0,
                    "endTime": T1,
                    "data": {"valuePattern": "quantity", "value": 5, "unit": "km"},
                },
                "not a map",
            ],
        }
        result = self.service.write_records([weight(), workout])
        self.assertEqual(result.outcome, WriteOutcome.PARTIAL_SUCCESS)
        # weight, workout and its distance sample
        self.assertEqual(len(result.persisted_record_ids), 3)
        self.assertEqual(len(result.validation_failures), 1)
        failure = result.validation_failures[0]
        self.assertEqual(failure.index_path.to_list(), [1, 1])
        self.assertEqual(failure.type, FailureType.DURING_SESSION_INVALID_TYPE)

    def test_unsupported_kind(self) -> None:
        audiogram = {
            "recordKind": "audiogram",
            "time": T0,
            "sensitivityPoints": [{"frequency": 1000, "leftEarSensitivity": 20}],
        }
        result = self.service.write_records([weight(), audiogram])
        self.assertEqual(result.outcome, WriteOutcome.PARTIAL_SUCCESS)
        failure = result.validation_failures[0]
        self.assertEqual(failure.index_path, IndexPath(1))
        self.assertEqual(failure.type, FailureType.UNSUPPORTED_KIND)
        self.assertIn("Unsupported record kind 'audiogram'", failure.message)

    def test_unexpected_error(self) -> None:
        service = WriteService(ExplodingMapper(), self.sink, logger=self.logger)
        with self.assertLogs(self.logger, level="ERROR"):
            result = service.write_records([weight()])
        self.assertEqual(result.outcome, WriteOutcome.FAILURE)
        failure = result.validation_failures[0]
        self.assertEqual(failure.type, FailureType.UNEXPECTED_ERROR)
        self.assertEqual(failure.message, "Unexpected error: boom")

    def test_sink_failure_fails_the_batch(self) -> None:
        service = WriteService(self.mapper, BrokenSink(), logger=self.logger)
        with self.assertLogs(self.logger, level="ERROR") as logs:
            result = service.write_records([weight(), weight(70, "stone")])
        self.assertEqual(result.outcome, WriteOutcome.FAILURE)
        self.assertEqual(result.persisted_record_ids, [])
        types = [f.type for f in result.validation_failures]
        self.assertEqual(types, [FailureType.DECODE_ERROR, FailureType.SINK_ERROR])
        sink_failure = result.validation_failures[1]
        self.assertIsNone(sink_failure.index_path)
        self.assertEqual(sink_failure.message, "Failed to write records to the sink")
        self.assertNotIn("database is locked", sink_failure.message)
        self.assertTrue(any("database is locked" in line for line in logs.output))

    def test_source_metadata_reaches_the_sink(self) -> None:
        record = weight()
        record["source"] = {"clientRecordId": "scale-1", "clientRecordVersion": 4}
        self.service.write_records([record])
        persisted = self.sink.calls[0][0]
        self.assertEqual(persisted.source.client_record_id, "scale-1")
        self.assertEqual(persisted.source.client_record_version, 4)


if __name__ == "__main__":
    unittest.main()
