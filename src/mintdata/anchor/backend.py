"""Interface to record-anchoring backends."""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from typing import List, Protocol

from mintdata.models import AnchoredRecord, Receipt


class AnchorBackend(Protocol):
    """Anything that durably records a payload under a submitter identity."""

    def submit(self, identity: str, payload: str) -> Receipt:
        ...

    def list_records(self) -> List[AnchoredRecord]:
        ...


def payload_checksum(payload: str) -> str:
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


class InMemoryBackend:
    """List-backed backend for tests and dry runs."""

    def __init__(self) -> None:
        self._records: List[AnchoredRecord] = []

    def submit(self, identity: str, payload: str) -> Receipt:
        if not identity:
            raise ValueError("identity must not be empty")
        record = AnchoredRecord(
            record_id=len(self._records) + 1,
            identity=identity,
            payload=payload,
            created_at=_utc_timestamp(),
        )
        self._records.append(record)
        return Receipt(
            record_id=record.record_id,
            identity=identity,
            checksum=payload_checksum(payload),
            created_at=record.created_at,
        )

    def list_records(self) -> List[AnchoredRecord]:
        return list(self._records)
