# -*- coding: utf-8 -*-

from __future__ import annotations

import unittest

from connectkit.write.aggregator import aggregate
from connectkit.write.models import FailureType, IndexPath, RecordFailure, WriteOutcome

FAILURE = RecordFailure("data | value | bad", FailureType.DECODE_ERROR, IndexPath(1))


class TestAggregate(unittest.TestCase):
    def test_complete_success(self) -> None:
        result = aggregate(["a", "b"], [])
        self.assertEqual(result.outcome, WriteOutcome.COMPLETE_SUCCESS)
        self.assertEqual(result.persisted_record_ids, ["a", "b"])
        self.assertEqual(result.validation_failures, [])

    def test_partial_success(self) -> None:
        result = aggregate(["a"], [FAILURE])
        self.assertEqual(result.outcome, WriteOutcome.PARTIAL_SUCCESS)
        self.assertEqual(result.validation_failures, [FAILURE])

    def test_failure(self) -> None:
        self.assertEqual(aggregate([], [FAILURE]).outcome, WriteOutcome.FAILURE)
        self.assertEqual(aggregate([], []).outcome, WriteOutcome.FAILURE)

    def test_inputs_are_copied(self) -> None:
        ids = ["a"]
        result = aggregate(ids, [])
        ids.append("b")
        self.assertEqual(result.persisted_record_ids, ["a"])

    def test_wire_shape(self) -> None:
        self.assertEqual(
            aggregate(["a"], []).to_dict(),
            {"outcome": "completeSuccess", "persistedRecordIds": ["a"], "validationFailures": None},
        )
        self.assertEqual(
            aggregate([], [FAILURE]).to_dict(),
            {
                "outcome": "failure",
                "persistedRecordIds": None,
                "validationFailures": [
                    {"indexPath": [1], "message": "data | value | bad", "type": "DecodeError"}
                ],
            },
        )


class TestIndexPath(unittest.TestCase):
    def test_prefixed(self) -> None:
        self.assertEqual(IndexPath(2).prefixed(5), IndexPath(5, 2))
        self.assertEqual(IndexPath(5, 2).to_list(), [5, 2])
        with self.assertRaises(ValueError):
            IndexPath(5, 2).prefixed(1)

    def test_failure_without_path_is_not_prefixed(self) -> None:
        failure = RecordFailure("boom", FailureType.SINK_ERROR)
        self.assertIs(failure.prefixed(3), failure)


if __name__ == "__main__":
    unittest.main()
