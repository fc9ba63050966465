"""Extract-and-anchor pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from mintdata.anchor.backend import AnchorBackend
from mintdata.errors import MintdataError
from mintdata.ingestion.extractor import MetadataExtractor
from mintdata.models import Metadata, Receipt

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class AnchorResult:
    metadata: Metadata
    payload: str
    receipt: Receipt


@dataclass(slots=True)
class AnchorStats:
    anchored: int = 0
    failed: int = 0
    processed_files: list[Path] = field(default_factory=list)
    results: list[AnchorResult] = field(default_factory=list)

    def record(self, path: Path, result: AnchorResult | None) -> None:
        if result is None:
            self.failed += 1
        else:
            self.anchored += 1
            self.results.append(result)
        self.processed_files.append(path)


def write_artifact(payload: str, output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(payload, encoding="utf-8")


class Anchorer:
    """Coordinates metadata extraction, the JSON artifact and submission."""

    def __init__(
        self,
        extractor: MetadataExtractor,
        backend: AnchorBackend,
        *,
        identity: str,
        output_path: Path | None = None,
    ) -> None:
        if not identity:
            raise ValueError("identity must not be empty")
        self.extractor = extractor
        self.backend = backend
        self.identity = identity
        self.output_path = output_path

    def anchor(self, path: Path) -> AnchorResult:
        """Extract metadata for ``path``, persist it and submit it to the backend."""
        metadata = self.extractor.extract(path)
        payload = metadata.to_json()
        if self.output_path is not None:
            write_artifact(payload, self.output_path)
            LOGGER.debug("Wrote %s", self.output_path)
        receipt = self.backend.submit(self.identity, payload)
        LOGGER.info("Anchored %s as record %s", path, receipt.record_id)
        return AnchorResult(metadata=metadata, payload=payload, receipt=receipt)

    def anchor_many(self, paths: Sequence[Path]) -> AnchorStats:
        stats = AnchorStats()
        for path in paths:
            try:
                result = self.anchor(path)
            except (MintdataError, OSError) as exc:
                LOGGER.error("Failed to anchor %s: %s", path, exc)
                result = None
            stats.record(path, result)
        return stats
