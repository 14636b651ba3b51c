# -*- coding: utf-8 -*-

from __future__ import annotations

import os
import shutil
import sys
import tempfile
import unittest
from pathlib import Path

from fastapi.testclient import TestClient

T0 = "2024-05-01T07:00:00Z"


def weight(value=70, unit="kg") -> dict:
    return {
        "recordKind": "data",
        "type": "weight",
        "time": T0,
        "data": {"valuePattern": "quantity", "value": value, "unit": unit},
    }


class TestRecordsApi(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls._tmp = Path(tempfile.mkdtemp(prefix="connectkit-test-"))
        data_root = cls._tmp / "data"
        os.environ["CONNECTKIT_DATA_ROOT"] = str(data_root)
        os.environ["CONNECTKIT_DB_PATH"] = str(data_root / "connectkit.db")
        os.environ["CONNECTKIT_PLATFORM"] = "android"
        os.environ["CONNECTKIT_ORIGIN"] = "test.origin"

        # Ensure settings/app reflect the env vars above.
        for name in list(sys.modules.keys()):
            if name == "connectkit" or name.startswith("connectkit."):
                sys.modules.pop(name, None)

        from connectkit.api import app  # noqa: WPS433 (import inside test for env control)

        cls.client = TestClient(app)

    @classmethod
    def tearDownClass(cls) -> None:
        cls.client.close()
        shutil.rmtree(cls._tmp, ignore_errors=True)

    def test_health(self) -> None:
        resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"status": "ok", "platform": "android"})

    def test_write_complete_success(self) -> None:
        resp = self.client.post("/api/records/write", json={"records": [weight(70), weight(71)]})
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["outcome"], "completeSuccess")
        self.assertEqual(len(body["persistedRecordIds"]), 2)
        self.assertIsNone(body["validationFailures"])

    def test_write_partial_success(self) -> None:
        resp = self.client.post(
            "/api/records/write",
            json={"records": [weight(70), weight(70, "stone"), "garbage"]},
        )
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["outcome"], "partialSuccess")
        self.assertEqual(len(body["persistedRecordIds"]), 1)
        self.assertEqual([f["indexPath"] for f in body["validationFailures"]], [[1], [2]])
        self.assertEqual({f["type"] for f in body["validationFailures"]}, {"DecodeError"})

    def test_write_rejects_nan_pressure(self) -> None:
        body = (
            '{"records": [{"recordKind": "bloodPressure", "time": "%s",'
            ' "systolic": {"value": NaN, "unit": "mmHg"},'
            ' "diastolic": {"value": 80, "unit": "mmHg"}}]}' % T0
        )
        resp = self.client.post(
            "/api/records/write", content=body, headers={"Content-Type": "application/json"}
        )
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["outcome"], "failure")
        self.assertIsNone(body["persistedRecordIds"])
        self.assertEqual([f["indexPath"] for f in body["validationFailures"]], [[0]])
        self.assertEqual(body["validationFailures"][0]["type"], "DecodeError")

    def test_write_empty(self) -> None:
        resp = self.client.post("/api/records/write", json={"records": []})
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["outcome"], "failure")
        self.assertIsNone(body["persistedRecordIds"])
        self.assertEqual(
            body["validationFailures"],
            [{"indexPath": None, "message": "No records to write - empty input", "type": "NoRecords"}],
        )

    def test_write_rejects_malformed_body(self) -> None:
        resp = self.client.post("/api/records/write", json={"records": "weight"})
        self.assertEqual(resp.status_code, 422)

    def test_list_types(self) -> None:
        resp = self.client.get("/api/records/types")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertIn("weight", body["types"])
        self.assertNotIn("distanceCycling", body["types"])
        self.assertEqual(body["count"], len(body["types"]))

        resp = self.client.get("/api/records/types", params={"include_unsupported": "true"})
        self.assertIn("distanceCycling", resp.json()["types"])

    def test_expand_types(self) -> None:
        resp = self.client.post("/api/records/types/expand", json={"types": ["bloodPressure", "weight"]})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            resp.json()["types"],
            ["bloodPressure.diastolic", "bloodPressure.systolic", "weight"],
        )

        resp = self.client.post("/api/records/types/expand", json={"types": ["bloodSugar"]})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("bloodSugar", resp.json()["detail"])


if __name__ == "__main__":
    unittest.main()
