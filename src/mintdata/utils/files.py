"""Utility helpers for working with files."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Iterable, Iterator

from mintdata.errors import ChecksumError, FileAccessError, NotFoundError

DEFAULT_CHUNK_SIZE = 1 << 20

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp"}


def is_image_file(path: Path) -> bool:
    return path.suffix.lower() in IMAGE_EXTENSIONS


def iter_image_paths(inputs: Iterable[Path]) -> Iterator[Path]:
    """Yield image paths from input paths, descending into directories.

    Anything that is not a directory is yielded as given, whatever its
    extension and even if it does not exist, so the caller reports it.
    Directory contents are filtered by extension.
    """
    for item in inputs:
        if item.is_dir():
            yield from sorted(child for child in item.rglob("*") if child.is_file() and is_image_file(child))
        else:
            yield item


def compute_sha256(path: Path, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
    """Compute SHA256 hash for a file, reading it in chunks."""
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    path = Path(path)
    sha = hashlib.sha256()
    try:
        handle = path.open("rb")
    except FileNotFoundError as exc:
        raise NotFoundError("File not found", path, exc) from exc
    except OSError as exc:
        raise FileAccessError("Cannot open file", path, exc) from exc

    with handle:
        try:
            for chunk in iter(lambda: handle.read(chunk_size), b""):
                sha.update(chunk)
        except OSError as exc:
            raise ChecksumError("Failed reading file content", path, exc) from exc
    return sha.hexdigest()
