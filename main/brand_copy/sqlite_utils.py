from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path


@contextmanager
def sqlite_conn(db_path: str):
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        conn.row_factory = sqlite3.Row
        # Avoid filesystem temp writes in constrained environments.
        conn.execute("PRAGMA temp_store = MEMORY;")
        yield conn
    finally:
        conn.close()


def ensure_system_tables(db_path: str) -> None:
    with sqlite_conn(db_path) as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS record_collections (
                collection_key TEXT PRIMARY KEY,
                payload_json TEXT NOT NULL,
                revision INTEGER NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.commit()
