"""Metadata extraction for image files."""

from __future__ import annotations

import logging
import os
import stat as stat_module
from pathlib import Path
from typing import Iterable, Iterator, Tuple

from mintdata.errors import (
    ChecksumError,
    FileAccessError,
    MintdataError,
    NotFoundError,
    UnsupportedFormatError,
)
from mintdata.ingestion.decoders import DecoderRegistry, default_registry
from mintdata.models import Metadata
from mintdata.utils.files import DEFAULT_CHUNK_SIZE, compute_sha256

LOGGER = logging.getLogger(__name__)

ExtractionOutcome = Tuple[Path, "Metadata | None", "MintdataError | None"]


class MetadataExtractor:
    """Builds a :class:`Metadata` record from a file on disk.

    The extractor holds no per-call state, so one instance can serve several
    threads as long as each works on its own file.
    """

    def __init__(
        self,
        registry: DecoderRegistry | None = None,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.registry = registry if registry is not None else default_registry()
        self.chunk_size = chunk_size

    def extract(self, path: Path | str) -> Metadata:
        """Extract name, dimensions, format, size and checksum for ``path``.

        Raises:
            NotFoundError: the path does not exist.
            FileAccessError: the file cannot be opened or stat'ed.
            UnsupportedFormatError: no registered decoder accepts the header.
            ChecksumError: reading the content for the checksum failed.
        """
        path = Path(path)
        file_stat = self._stat(path)
        format_name, width, height = self._decode_header(path)

        try:
            checksum = compute_sha256(path, chunk_size=self.chunk_size)
        except ChecksumError:
            raise
        except MintdataError as exc:
            raise ChecksumError("Failed computing checksum", path, exc) from exc

        metadata = Metadata(
            file_name=path.name,
            width=width,
            height=height,
            format=format_name,
            checksum=checksum,
            file_size=file_stat.st_size,
        )
        LOGGER.debug("Extracted metadata for %s: %s", path, metadata)
        return metadata

    def extract_many(self, paths: Iterable[Path]) -> Iterator[ExtractionOutcome]:
        """Extract each path in turn, reporting failures instead of raising."""
        for path in paths:
            try:
                yield path, self.extract(path), None
            except MintdataError as exc:
                LOGGER.warning("Skipping %s: %s", path, exc)
                yield path, None, exc

    def _stat(self, path: Path) -> os.stat_result:
        try:
            file_stat = path.stat()
        except FileNotFoundError as exc:
            raise NotFoundError("File not found", path, exc) from exc
        except OSError as exc:
            raise FileAccessError("Cannot read file attributes", path, exc) from exc
        if not stat_module.S_ISREG(file_stat.st_mode):
            raise FileAccessError("Not a regular file", path)
        return file_stat

    def _decode_header(self, path: Path) -> Tuple[str, int, int]:
        try:
            handle = path.open("rb")
        except FileNotFoundError as exc:
            raise NotFoundError("File not found", path, exc) from exc
        except OSError as exc:
            raise FileAccessError("Cannot open file", path, exc) from exc

        with handle:
            try:
                prefix = handle.read(self.registry.sniff_length)
                decoder = self.registry.detect(prefix)
                if decoder is None:
                    raise UnsupportedFormatError("Unrecognized image header", path)
                handle.seek(0)
                width, height = decoder.decode(handle)
            except MintdataError:
                raise
            except OSError as exc:
                raise FileAccessError("Failed reading image header", path, exc) from exc

        return decoder.format, width, height
