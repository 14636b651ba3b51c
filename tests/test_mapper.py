# -*- coding: utf-8 -*-

from __future__ import annotations

import logging
import unittest

from connectkit.errors import DecodeError, UnsupportedKindError
from connectkit.records.mapper import RecordMapper
from connectkit.records.models import BloodPressureRecord, DataRecord, RecordKind, WorkoutRecord
from connectkit.write.models import FailureType, IndexPath

T0 = "2024-05-01T07:00:00Z"
T1 = "2024-05-01T08:00:00Z"


class TestRecordMapper(unittest.TestCase):
    def setUp(self) -> None:
        self.logger = logging.getLogger("tests.mapper")
        self.mapper = RecordMapper(platform="android", validate_sleep_stages=False, logger=self.logger)

    def test_every_kind_has_a_handler(self) -> None:
        self.assertEqual(set(self.mapper._handlers), set(RecordKind))

    def test_missing_record_kind(self) -> None:
        with self.assertRaises(DecodeError) as ctx:
            self.mapper.decode({"type": "weight"})
        self.assertEqual(ctx.exception.field_name, "recordKind")

    def test_record_kind_must_be_a_string(self) -> None:
        with self.assertRaises(DecodeError):
            self.mapper.decode({"recordKind": 3})

    def test_unknown_record_kind(self) -> None:
        with self.assertRaises(DecodeError) as ctx:
            self.mapper.decode({"recordKind": "bloodSugar"})
        self.assertIn("Unknown record kind: 'bloodSugar'", str(ctx.exception))

    def test_data_record(self) -> None:
        with self.assertLogs(self.logger, level="DEBUG") as logs:
            records, failures = self.mapper.decode(
                {
                    "recordKind": "data",
                    "type": "weight",
                    "time": T0,
                    "data": {"valuePattern": "quantity", "value": 70, "unit": "kg"},
                }
            )
        self.assertEqual(len(records), 1)
        self.assertIsInstance(records[0], DataRecord)
        self.assertEqual(failures, [])
        self.assertTrue(any("Mapping record kind" in line for line in logs.output))

    def test_blood_pressure_record(self) -> None:
        records, _ = self.mapper.decode(
            {
                "recordKind": "bloodPressure",
                "time": T0,
                "systolic": {"value": 118, "unit": "mmHg"},
                "diastolic": {"value": 76, "unit": "mmHg"},
            }
        )
        self.assertIsInstance(records[0], BloodPressureRecord)

    def test_workout_returns_parent_then_nested(self) -> None:
        records, failures = self.mapper.decode(
            {
                "recordKind": "workout",
                "activityType": "biking",
                "startTime": T0,
                "endTime": T1,
                "duringSession": [
                    {
                        "recordKind": "data",
                        "type": "distance",
                        "startTime": T0,
                        "endTime": T1,
                        "data": {"valuePattern": "quantity", "value": 20, "unit": "km"},
                    },
                    42,
                ],
            }
        )
        self.assertEqual(len(records), 2)
        self.assertIsInstance(records[0], WorkoutRecord)
        self.assertEqual(records[1].type_name, "distance")
        self.assertEqual(len(failures), 1)
        self.assertEqual(failures[0].index_path, IndexPath(1))
        self.assertEqual(failures[0].type, FailureType.DURING_SESSION_INVALID_TYPE)

    def test_platform_limited_kinds(self) -> None:
        with self.assertRaises(UnsupportedKindError):
            self.mapper.decode({"recordKind": "audiogram", "time": T0})
        with self.assertRaises(UnsupportedKindError):
            self.mapper.decode({"recordKind": "ecg", "time": T0})


if __name__ == "__main__":
    unittest.main()
