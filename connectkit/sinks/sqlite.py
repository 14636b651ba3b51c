# -*- coding: utf-8 -*-
"""SQLite record sink.

Stands in for the platform health stores. A batch is written in one
transaction, so either every record lands or none does. Records carrying a
``clientRecordId`` are upserted per origin: a strictly higher
``clientRecordVersion`` replaces the stored row, anything else is ignored and
the existing id is returned.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4

from ..app_db import db_conn, init_app_db
from ..config import settings
from ..errors import SinkError
from ..records.models import Record
from .base import RecordSink

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SqliteRecordSink(RecordSink):
    def __init__(
        self,
        db_path: Optional[Path] = None,
        origin: Optional[str] = None,
        platform: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.db_path = Path(db_path or settings.db_path)
        self.origin = origin or settings.origin
        self.platform = platform or settings.platform
        self.timeout = settings.sink_timeout if timeout is None else timeout
        init_app_db(self.db_path)

    def insert_batch(self, records: Sequence[Record]) -> List[str]:
        ids: List[str] = []
        try:
            with db_conn(self.db_path, timeout=self.timeout) as conn:
                for record in records:
                    ids.append(self._upsert(conn, record))
        except sqlite3.Error as exc:
            logger.error("SQLite write to %s failed: %s", self.db_path, exc)
            raise SinkError("SQLite write failed") from exc
        logger.debug("Persisted %d record(s) to %s", len(ids), self.db_path)
        return ids

    def _upsert(self, conn: sqlite3.Connection, record: Record) -> str:
        source = record.source
        client_id = source.client_record_id if source else None
        version = (source.client_record_version if source else None) or 0
        now = _now_iso()

        if client_id is not None:
            row = conn.execute(
                "SELECT id, client_record_version FROM records WHERE origin = ? AND client_record_id = ?",
                (self.origin, client_id),
            ).fetchone()
            if row is not None:
                if version > row["client_record_version"]:
                    conn.execute(
                        """
                        UPDATE records
                        SET record_kind = ?, record_type = ?, start_time = ?, end_time = ?,
                            start_zone_offset = ?, end_zone_offset = ?, client_record_version = ?,
                            source_json = ?, payload_json = ?, updated_at = ?
                        WHERE id = ?
                        """,
                        (
                            record.kind.value,
                            record.type_name,
                            record.start_time.isoformat(),
                            record.end_time.isoformat(),
                            record.start_zone_offset,
                            record.end_zone_offset,
                            version,
                            json.dumps(source.to_dict(), ensure_ascii=False),
                            json.dumps(record.payload(), ensure_ascii=False),
                            now,
                            row["id"],
                        ),
                    )
                else:
                    logger.debug(
                        "Ignoring '%s' version %d, stored version is %d",
                        client_id,
                        version,
                        row["client_record_version"],
                    )
                return row["id"]

        record_id = str(uuid4())
        conn.execute(
            """
            INSERT INTO records (
                id, origin, platform, record_kind, record_type, start_time, end_time,
                start_zone_offset, end_zone_offset, client_record_id, client_record_version,
                source_json, payload_json, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record_id,
                self.origin,
                self.platform,
                record.kind.value,
                record.type_name,
                record.start_time.isoformat(),
                record.end_time.isoformat(),
                record.start_zone_offset,
                record.end_zone_offset,
                client_id,
                version,
                json.dumps(source.to_dict(), ensure_ascii=False) if source else None,
                json.dumps(record.payload(), ensure_ascii=False),
                now,
                now,
            ),
        )
        return record_id

    def get(self, record_id: str) -> Optional[Dict[str, Any]]:
        with db_conn(self.db_path, timeout=self.timeout) as conn:
            row = conn.execute("SELECT * FROM records WHERE id = ?", (record_id,)).fetchone()
        if row is None:
            return None
        item = dict(row)
        source_json = item.pop("source_json")
        item["source"] = json.loads(source_json) if source_json else None
        item["payload"] = json.loads(item.pop("payload_json"))
        return item

    def count(self) -> int:
        with db_conn(self.db_path, timeout=self.timeout) as conn:
            return int(conn.execute("SELECT COUNT(*) FROM records").fetchone()[0])
