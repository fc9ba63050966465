"""Error types raised while fingerprinting image files."""

from __future__ import annotations

from pathlib import Path


class MintdataError(Exception):
    """Base error carrying the offending path and the underlying cause."""

    def __init__(self, message: str, path: Path | str, cause: BaseException | None = None) -> None:
        self.path = Path(path)
        self.cause = cause
        detail = f"{message}: {self.path}"
        if cause is not None:
            detail = f"{detail} ({cause})"
        super().__init__(detail)


class FileAccessError(MintdataError):
    """The file cannot be opened or its attributes cannot be read."""


class NotFoundError(FileAccessError):
    """The path does not exist."""


class UnsupportedFormatError(MintdataError):
    """No registered decoder recognizes the file header."""


class ChecksumError(MintdataError):
    """Reading the file content for the checksum failed."""
