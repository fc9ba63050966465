"""FastAPI application exposing extraction and anchoring over HTTP."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from mintdata.anchor.pipeline import Anchorer, AnchorResult
from mintdata.anchor.storage import SQLiteLedger
from mintdata.config import AppConfig
from mintdata.errors import MintdataError, NotFoundError, UnsupportedFormatError
from mintdata.ingestion.extractor import MetadataExtractor
from mintdata.models import Metadata

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="mintdata", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class ExtractPayload(BaseModel):
    path: Path


class AnchorPayload(BaseModel):
    path: Path
    identity: str | None = None
    db: Path | None = None


def _resolve_db_path(db: Path | None) -> Path:
    default = getattr(app.state, "db_path", None)
    config = AppConfig(db_path=db if db is not None else default)
    return config.resolve_db_path(Path.cwd())


def _ensure_db_parent(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _error_status(exc: MintdataError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, UnsupportedFormatError):
        return 415
    return 400


def _extract(path: Path) -> Metadata:
    try:
        return MetadataExtractor().extract(path.expanduser())
    except MintdataError as exc:
        LOGGER.warning("Extraction failed for %s: %s", path, exc)
        raise HTTPException(status_code=_error_status(exc), detail=str(exc)) from exc


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.post("/extract")
async def extract_metadata(payload: ExtractPayload) -> dict[str, Any]:
    metadata = await asyncio.to_thread(_extract, payload.path)
    return metadata.to_dict()


def _run_anchor_job(path: Path, identity: str, db_path: Path) -> AnchorResult:
    ledger = SQLiteLedger(db_path)
    try:
        return Anchorer(MetadataExtractor(), ledger, identity=identity).anchor(path)
    finally:
        ledger.close()


@app.post("/anchor")
async def anchor_image(payload: AnchorPayload) -> dict[str, Any]:
    identity = (payload.identity or AppConfig().identity).strip()
    if not identity:
        raise HTTPException(status_code=400, detail="Empty identity")

    resolved_db = _resolve_db_path(payload.db)
    _ensure_db_parent(resolved_db)

    try:
        result = await asyncio.to_thread(
            _run_anchor_job, payload.path.expanduser(), identity, resolved_db
        )
    except MintdataError as exc:
        LOGGER.warning("Anchoring failed for %s: %s", payload.path, exc)
        raise HTTPException(status_code=_error_status(exc), detail=str(exc)) from exc

    receipt = result.receipt
    return {
        "metadata": result.metadata.to_dict(),
        "receipt": {
            "record_id": receipt.record_id,
            "identity": receipt.identity,
            "checksum": receipt.checksum,
            "created_at": receipt.created_at,
        },
    }


@app.get("/records")
async def list_records(db: Path | None = None, checksum: str | None = None) -> dict[str, Any]:
    """List records stored in the ledger, optionally only those for one file checksum."""
    resolved_db = _resolve_db_path(db)
    if not resolved_db.exists():
        return {"records": [], "stats": {"record_count": 0, "identity_count": 0}}

    ledger = SQLiteLedger(resolved_db)
    try:
        records = ledger.find_by_checksum(checksum) if checksum else ledger.list_records()
        stats = ledger.get_stats()
    finally:
        ledger.close()

    return {
        "records": [
            {
                "record_id": record.record_id,
                "identity": record.identity,
                "payload": record.payload,
                "created_at": record.created_at,
            }
            for record in records
        ],
        "stats": stats,
    }
