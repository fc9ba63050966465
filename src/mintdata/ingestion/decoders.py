"""Image header decoders and the registry that selects between them.

Each decoder pairs a signature sniffer, which looks at the first bytes of a
file, with a header parser that returns the pixel dimensions. The built-in
parsers read only the fixed header fields of each format, so pixel data may
be truncated or corrupt and image size never matters.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import BinaryIO, Callable, Dict, Iterator, Tuple

from mintdata.errors import UnsupportedFormatError

LOGGER = logging.getLogger(__name__)

DEFAULT_SNIFF_LENGTH = 32

Sniffer = Callable[[bytes], bool]
HeaderParser = Callable[[BinaryIO], Tuple[int, int]]


@dataclass(frozen=True, slots=True)
class HeaderDecoder:
    """A named format with its signature check and header parser."""

    format: str
    sniff: Sniffer
    decode: HeaderParser


class DecoderRegistry:
    """Ordered mapping of format names to header decoders."""

    def __init__(self, *, sniff_length: int = DEFAULT_SNIFF_LENGTH) -> None:
        if sniff_length <= 0:
            raise ValueError("sniff_length must be positive")
        self.sniff_length = sniff_length
        self._decoders: Dict[str, HeaderDecoder] = {}

    def register(self, decoder: HeaderDecoder) -> None:
        if decoder.format in self._decoders:
            raise ValueError(f"Decoder already registered for format {decoder.format!r}")
        self._decoders[decoder.format] = decoder

    def unregister(self, format: str) -> None:
        try:
            del self._decoders[format]
        except KeyError:
            raise KeyError(f"No decoder registered for format {format!r}") from None

    @property
    def formats(self) -> tuple[str, ...]:
        return tuple(self._decoders)

    def __contains__(self, format: object) -> bool:
        return format in self._decoders

    def __len__(self) -> int:
        return len(self._decoders)

    def __iter__(self) -> Iterator[HeaderDecoder]:
        return iter(self._decoders.values())

    def detect(self, prefix: bytes) -> HeaderDecoder | None:
        """Return the first decoder whose sniffer accepts ``prefix``."""
        for decoder in self._decoders.values():
            if decoder.sniff(prefix):
                return decoder
        return None


def sniff_png(prefix: bytes) -> bool:
    return prefix.startswith(b"\x89PNG\r\n\x1a\n")


def sniff_jpeg(prefix: bytes) -> bool:
    return prefix.startswith(b"\xff\xd8\xff")


def sniff_gif(prefix: bytes) -> bool:
    return prefix[:6] in (b"GIF87a", b"GIF89a")


def sniff_bmp(prefix: bytes) -> bool:
    return prefix.startswith(b"BM")


def sniff_webp(prefix: bytes) -> bool:
    return prefix[:4] == b"RIFF" and prefix[8:12] == b"WEBP"


def _read_exact(handle: BinaryIO, size: int, format: str) -> bytes:
    data = handle.read(size)
    if len(data) != size:
        raise _header_error(handle, format, "header is truncated")
    return data


def _header_error(handle: BinaryIO, format: str, reason: str) -> UnsupportedFormatError:
    LOGGER.debug("Rejected %s header: %s", format, reason)
    return UnsupportedFormatError(f"Invalid {format} header ({reason})", getattr(handle, "name", "<stream>"))


def parse_png(handle: BinaryIO) -> Tuple[int, int]:
    """Read width and height from the IHDR chunk that must follow the signature."""
    data = _read_exact(handle, 24, "PNG")
    if data[12:16] != b"IHDR":
        raise _header_error(handle, "PNG", "first chunk is not IHDR")
    return struct.unpack(">II", data[16:24])


def parse_gif(handle: BinaryIO) -> Tuple[int, int]:
    """Read the logical screen size."""
    data = _read_exact(handle, 10, "GIF")
    return struct.unpack("<HH", data[6:10])


def parse_bmp(handle: BinaryIO) -> Tuple[int, int]:
    """Read the size from the DIB header following the 14-byte file header."""
    data = _read_exact(handle, 18, "BMP")
    (dib_size,) = struct.unpack("<I", data[14:18])
    if dib_size == 12:
        # OS/2 BITMAPCOREHEADER stores unsigned 16-bit dimensions.
        return struct.unpack("<HH", _read_exact(handle, 4, "BMP"))
    if dib_size < 16:
        raise _header_error(handle, "BMP", f"unknown DIB header size {dib_size}")
    width, height = struct.unpack("<ii", _read_exact(handle, 8, "BMP"))
    if width < 0:
        raise _header_error(handle, "BMP", "negative width")
    # Negative height marks a top-down bitmap.
    return width, abs(height)


# Start-of-frame markers; DHT (C4), JPG (C8) and DAC (CC) share the range.
_JPEG_SOF = {0xC0, 0xC1, 0xC2, 0xC3, 0xC5, 0xC6, 0xC7, 0xC9, 0xCA, 0xCB, 0xCD, 0xCE, 0xCF}
_JPEG_STANDALONE = {0x01, 0xD8} | set(range(0xD0, 0xD8))


def parse_jpeg(handle: BinaryIO) -> Tuple[int, int]:
    """Walk marker segments until the first start-of-frame."""
    _read_exact(handle, 2, "JPEG")
    while True:
        if _read_exact(handle, 1, "JPEG") != b"\xff":
            raise _header_error(handle, "JPEG", "expected marker")
        marker = 0xFF
        while marker == 0xFF:
            marker = _read_exact(handle, 1, "JPEG")[0]
        if marker in _JPEG_STANDALONE:
            continue
        if marker in (0xD9, 0xDA):
            raise _header_error(handle, "JPEG", "no frame header before scan data")
        (length,) = struct.unpack(">H", _read_exact(handle, 2, "JPEG"))
        if length < 2:
            raise _header_error(handle, "JPEG", "invalid segment length")
        if marker in _JPEG_SOF:
            frame = _read_exact(handle, 5, "JPEG")
            height, width = struct.unpack(">HH", frame[1:5])
            return width, height
        _read_exact(handle, length - 2, "JPEG")


def parse_webp(handle: BinaryIO) -> Tuple[int, int]:
    """Read the canvas size from the first VP8, VP8L or VP8X chunk."""
    data = _read_exact(handle, 20, "WebP")
    chunk = data[12:16]
    if chunk == b"VP8 ":
        frame = _read_exact(handle, 10, "WebP")
        if frame[3:6] != b"\x9d\x01\x2a":
            raise _header_error(handle, "WebP", "missing VP8 start code")
        width, height = struct.unpack("<HH", frame[6:10])
        return width & 0x3FFF, height & 0x3FFF
    if chunk == b"VP8L":
        frame = _read_exact(handle, 5, "WebP")
        if frame[0] != 0x2F:
            raise _header_error(handle, "WebP", "missing VP8L signature")
        bits = int.from_bytes(frame[1:5], "little")
        return (bits & 0x3FFF) + 1, ((bits >> 14) & 0x3FFF) + 1
    if chunk == b"VP8X":
        frame = _read_exact(handle, 10, "WebP")
        width = int.from_bytes(frame[4:7], "little") + 1
        height = int.from_bytes(frame[7:10], "little") + 1
        return width, height
    raise _header_error(handle, "WebP", f"unknown chunk {chunk!r}")


def default_registry() -> DecoderRegistry:
    """Return a new registry with the built-in raster formats."""
    registry = DecoderRegistry()
    registry.register(HeaderDecoder("png", sniff_png, parse_png))
    registry.register(HeaderDecoder("jpeg", sniff_jpeg, parse_jpeg))
    registry.register(HeaderDecoder("gif", sniff_gif, parse_gif))
    registry.register(HeaderDecoder("bmp", sniff_bmp, parse_bmp))
    registry.register(HeaderDecoder("webp", sniff_webp, parse_webp))
    return registry
