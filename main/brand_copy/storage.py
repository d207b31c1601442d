from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from .errors import StaleRevisionError
from .sqlite_utils import ensure_system_tables, sqlite_conn


logger = logging.getLogger(__name__)


class SqliteRecordStore:
    """JSON arrays of saved records keyed by collection name.

    Every write bumps the collection's revision. Passing the revision read
    at load time to :meth:`save` turns a lost update into a
    :class:`StaleRevisionError` instead of a silent overwrite.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        ensure_system_tables(db_path)

    def load(self, key: str) -> tuple[list[dict[str, Any]], int]:
        with sqlite_conn(self.db_path) as conn:
            row = conn.execute(
                "SELECT payload_json, revision FROM record_collections WHERE collection_key = ?",
                (key,),
            ).fetchone()
        if row is None:
            return [], 0
        records = json.loads(row["payload_json"])
        if not isinstance(records, list):
            raise ValueError(f"Collection {key!r} does not hold a JSON array.")
        return records, int(row["revision"])

    def records(self, key: str) -> list[dict[str, Any]]:
        return self.load(key)[0]

    def save(self, key: str, records: list[dict[str, Any]], expected_revision: Optional[int] = None) -> int:
        now = datetime.now(timezone.utc).isoformat()
        payload = json.dumps(records, ensure_ascii=False)
        with sqlite_conn(self.db_path) as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                row = conn.execute(
                    "SELECT revision FROM record_collections WHERE collection_key = ?",
                    (key,),
                ).fetchone()
                current = int(row["revision"]) if row else 0
                if expected_revision is not None and expected_revision != current:
                    raise StaleRevisionError(key, expected_revision, current)
                conn.execute(
                    """
                    INSERT OR REPLACE INTO record_collections (collection_key, payload_json, revision, updated_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (key, payload, current + 1, now),
                )
                conn.commit()
            except Exception:
                conn.rollback()
                raise
        logger.debug("Saved %d records to %s at revision %d.", len(records), key, current + 1)
        return current + 1

    def append(self, key: str, new_records: list[dict[str, Any]], cap: Optional[int] = None) -> list[dict[str, Any]]:
        """Prepend ``new_records`` (newest first) and evict the oldest past ``cap``."""
        existing, revision = self.load(key)
        merged = cap_records(list(new_records) + existing, cap)
        self.save(key, merged, expected_revision=revision)
        return merged

    def delete(self, key: str, record_id: str) -> bool:
        existing, revision = self.load(key)
        remaining = [record for record in existing if record.get("id") != record_id]
        if len(remaining) == len(existing):
            return False
        self.save(key, remaining, expected_revision=revision)
        return True

    def soft_delete(self, key: str, record_id: str) -> bool:
        return self._set_deleted_at(key, record_id, datetime.now(timezone.utc).isoformat())

    def restore(self, key: str, record_id: str) -> bool:
        return self._set_deleted_at(key, record_id, None)

    def purge_trash(self, key: str) -> int:
        existing, revision = self.load(key)
        remaining = [record for record in existing if not record.get("deletedAt")]
        purged = len(existing) - len(remaining)
        if purged:
            self.save(key, remaining, expected_revision=revision)
        return purged

    def _set_deleted_at(self, key: str, record_id: str, deleted_at: Optional[str]) -> bool:
        existing, revision = self.load(key)
        found = False
        for record in existing:
            if record.get("id") != record_id:
                continue
            found = True
            if deleted_at is None:
                record.pop("deletedAt", None)
            else:
                record["deletedAt"] = deleted_at
        if found:
            self.save(key, existing, expected_revision=revision)
        return found


def cap_records(records: list[dict[str, Any]], cap: Optional[int]) -> list[dict[str, Any]]:
    if cap is None or cap <= 0 or len(records) <= cap:
        return records
    return records[:cap]
