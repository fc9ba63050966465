"""SQLite-backed local ledger of anchored payloads."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List

from mintdata.anchor.backend import payload_checksum
from mintdata.models import AnchoredRecord, Receipt

LOGGER = logging.getLogger(__name__)


class SQLiteLedger:
    """Append-only record store implementing the anchoring backend interface."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self._conn = sqlite3.connect(self.db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL;")
        self._conn.execute("PRAGMA synchronous=NORMAL;")
        self._ensure_schema()

    def __enter__(self) -> "SQLiteLedger":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def close(self) -> None:
        self._conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        try:
            yield self._conn
            self._conn.commit()
        except Exception:
            self._conn.rollback()
            raise

    def _ensure_schema(self) -> None:
        with self.transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS records (
                    id INTEGER PRIMARY KEY,
                    identity TEXT NOT NULL,
                    payload TEXT NOT NULL,
                    payload_sha256 TEXT NOT NULL,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            conn.execute(
                """CREATE INDEX IF NOT EXISTS idx_records_identity
                    ON records(identity)
                """
            )

    def submit(self, identity: str, payload: str) -> Receipt:
        """Append ``payload`` under ``identity`` and return its receipt."""
        if not identity:
            raise ValueError("identity must not be empty")

        digest = payload_checksum(payload)
        with self.transaction() as conn:
            record_id = conn.execute(
                "INSERT INTO records(identity, payload, payload_sha256) VALUES (?, ?, ?)",
                (identity, payload, digest),
            ).lastrowid
            row = conn.execute(
                "SELECT created_at FROM records WHERE id = ?", (record_id,)
            ).fetchone()

        LOGGER.info("Anchored record %s for %s", record_id, identity)
        return Receipt(
            record_id=record_id,
            identity=identity,
            checksum=digest,
            created_at=row["created_at"],
        )

    def list_records(self) -> List[AnchoredRecord]:
        rows = self._conn.execute(
            "SELECT id, identity, payload, created_at FROM records ORDER BY id"
        ).fetchall()
        return [self._to_record(row) for row in rows]

    def find_by_checksum(self, checksum: str) -> List[AnchoredRecord]:
        """Return records whose metadata payload carries the given file checksum."""
        rows = self._conn.execute(
            """
            SELECT id, identity, payload, created_at FROM records
            WHERE CASE WHEN json_valid(payload) THEN json_extract(payload, '$.checksum') END = ?
            ORDER BY id
            """,
            (checksum,),
        ).fetchall()
        return [self._to_record(row) for row in rows]

    def get_stats(self) -> dict:
        row = self._conn.execute(
            "SELECT COUNT(*) AS record_count, COUNT(DISTINCT identity) AS identity_count FROM records"
        ).fetchone()
        return {"record_count": row["record_count"], "identity_count": row["identity_count"]}

    @staticmethod
    def _to_record(row: sqlite3.Row) -> AnchoredRecord:
        return AnchoredRecord(
            record_id=row["id"],
            identity=row["identity"],
            payload=row["payload"],
            created_at=row["created_at"],
        )
