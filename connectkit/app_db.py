# -*- coding: utf-8 -*-
"""Record store — SQLite helpers."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator


def connect(db_path: Path, timeout: float = 30.0) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path), timeout=timeout, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


def init_app_db(db_path: Path) -> None:
    conn = connect(db_path)
    try:
        cur = conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS records (
                id TEXT PRIMARY KEY,
                origin TEXT NOT NULL,
                platform TEXT NOT NULL,
                record_kind TEXT NOT NULL,
                record_type TEXT NOT NULL,
                start_time TEXT NOT NULL,
                end_time TEXT NOT NULL,
                start_zone_offset INTEGER NOT NULL DEFAULT 0,
                end_zone_offset INTEGER NOT NULL DEFAULT 0,
                client_record_id TEXT,
                client_record_version INTEGER NOT NULL DEFAULT 0,
                source_json TEXT,
                payload_json TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
            """
        )
        cur.execute(
            "CREATE UNIQUE INDEX IF NOT EXISTS idx_records_origin_client_id ON records(origin, client_record_id) WHERE client_record_id IS NOT NULL;"
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_records_type_start ON records(record_type, start_time DESC);"
        )
        conn.commit()
    finally:
        conn.close()


@contextmanager
def db_conn(db_path: Path, timeout: float = 30.0) -> Iterator[sqlite3.Connection]:
    conn = connect(db_path, timeout=timeout)
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()
