"""Shared fixtures for building image files."""

from __future__ import annotations

import struct
import zlib
from pathlib import Path
from typing import Callable

import pytest
from PIL import Image

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

PIL_FORMATS = {
    "png": "PNG",
    "jpeg": "JPEG",
    "gif": "GIF",
    "bmp": "BMP",
    "webp": "WEBP",
}


def png_chunk(tag: bytes, data: bytes) -> bytes:
    crc = zlib.crc32(tag + data) & 0xFFFFFFFF
    return struct.pack(">I", len(data)) + tag + data + struct.pack(">I", crc)


def build_grayscale_png(width: int, height: int, *, total_size: int | None = None) -> bytes:
    """Hand-build an 8-bit grayscale PNG, padded with a tEXt chunk to ``total_size``."""
    ihdr = png_chunk(b"IHDR", struct.pack(">IIBBBBB", width, height, 8, 0, 0, 0, 0))
    rows = b"".join(b"\x00" + bytes((x + y) % 256 for x in range(width)) for y in range(height))
    idat = png_chunk(b"IDAT", zlib.compress(rows, 0))
    iend = png_chunk(b"IEND", b"")

    text = b""
    if total_size is not None:
        used = len(PNG_SIGNATURE) + len(ihdr) + len(idat) + len(iend)
        keyword = b"Comment\x00"
        filler = total_size - used - 12 - len(keyword)
        if filler < 0:
            raise ValueError("total_size too small for image")
        text = png_chunk(b"tEXt", keyword + b"x" * filler)

    return PNG_SIGNATURE + ihdr + text + idat + iend


@pytest.fixture
def dataset_example(tmp_path: Path) -> Path:
    """A 10x10, 238-byte PNG named like the sample dataset file."""
    path = tmp_path / "dataset_example.png"
    path.write_bytes(build_grayscale_png(10, 10, total_size=238))
    return path


@pytest.fixture
def make_image(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a Pillow-encoded image and returning its path."""

    def _make(
        fmt: str = "png",
        size: tuple[int, int] = (16, 8),
        name: str | None = None,
        color: tuple[int, int, int] = (200, 30, 60),
    ) -> Path:
        path = tmp_path / (name or f"image.{fmt}")
        image = Image.new("RGB", size, color)
        if fmt == "gif":
            image = image.convert("P")
        image.save(path, format=PIL_FORMATS[fmt])
        return path

    return _make


def build_header(fmt: str, width: int, height: int) -> bytes:
    """Build the smallest valid header of ``fmt`` with no pixel data after it.

    WebP accepts ``webp`` (extended VP8X), ``webp-vp8`` (lossy) and
    ``webp-vp8l`` (lossless).
    """
    if fmt == "png":
        ihdr = png_chunk(b"IHDR", struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0))
        return PNG_SIGNATURE + ihdr
    if fmt == "jpeg":
        app0 = b"\xff\xe0" + struct.pack(">H5sBBBHHBB", 16, b"JFIF\x00", 1, 1, 0, 1, 1, 0, 0)
        sof0 = b"\xff\xc0" + struct.pack(">HBHHBBBB", 11, 8, height, width, 1, 1, 0x11, 0)
        return b"\xff\xd8" + app0 + sof0
    if fmt == "gif":
        return b"GIF89a" + struct.pack("<HHBBB", width, height, 0, 0, 0)
    if fmt == "bmp":
        file_header = b"BM" + struct.pack("<IHHI", 54, 0, 0, 54)
        info = struct.pack("<IiiHHIIiiII", 40, width, height, 1, 24, 0, 0, 2835, 2835, 0, 0)
        return file_header + info
    if fmt == "webp":
        chunk = b"VP8X" + struct.pack("<I", 10) + b"\x00" * 4
        chunk += (width - 1).to_bytes(3, "little") + (height - 1).to_bytes(3, "little")
    elif fmt == "webp-vp8":
        frame = b"\x00\x00\x00\x9d\x01\x2a" + struct.pack("<HH", width, height)
        chunk = b"VP8 " + struct.pack("<I", len(frame)) + frame
    elif fmt == "webp-vp8l":
        bits = (width - 1) | ((height - 1) << 14)
        frame = b"\x2f" + bits.to_bytes(4, "little")
        chunk = b"VP8L" + struct.pack("<I", len(frame)) + frame
    else:
        raise ValueError(f"Unknown header format {fmt!r}")
    return b"RIFF" + struct.pack("<I", 4 + len(chunk)) + b"WEBP" + chunk


@pytest.fixture
def make_header(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a header-only image file and returning its path."""

    def _make(fmt: str = "png", size: tuple[int, int] = (10, 7), name: str | None = None) -> Path:
        path = tmp_path / (name or f"header.{fmt}")
        path.write_bytes(build_header(fmt, *size))
        return path

    return _make


@pytest.fixture
def header_bytes() -> Callable[[str, int, int], bytes]:
    """The header-only image builder."""
    return build_header
