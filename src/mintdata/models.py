"""Core mintdata data models."""

from __future__ import annotations

import json
import re
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict

_HEX_DIGEST = re.compile(r"^[0-9a-f]{64}$")


def _check_count(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {value!r}")


@dataclass(frozen=True, slots=True)
class Metadata:
    """Reproducible fingerprint of an image file.

    Field order is the serialization order, so two records extracted from the
    same bytes under the same name always serialize identically.
    """

    file_name: str
    width: int
    height: int
    format: str
    checksum: str
    file_size: int

    def __post_init__(self) -> None:
        if not isinstance(self.file_name, str) or not self.file_name:
            raise ValueError("file_name must be a non-empty string")
        if not isinstance(self.format, str) or not self.format:
            raise ValueError("format must be a non-empty string")
        _check_count("width", self.width)
        _check_count("height", self.height)
        _check_count("file_size", self.file_size)
        if not isinstance(self.checksum, str) or not _HEX_DIGEST.match(self.checksum):
            raise ValueError(f"checksum must be 64 lowercase hex characters, got {self.checksum!r}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        """Compact JSON with keys in field order."""
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Metadata":
        expected = {f.name for f in fields(cls)}
        keys = set(data)
        if keys != expected:
            missing = sorted(expected - keys)
            unknown = sorted(keys - expected)
            raise ValueError(f"Invalid metadata keys (missing={missing}, unknown={unknown})")
        return cls(**data)

    @classmethod
    def from_json(cls, text: str) -> "Metadata":
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("Metadata JSON must be an object")
        return cls.from_dict(data)


@dataclass(frozen=True, slots=True)
class Receipt:
    """Acknowledgement returned by an anchoring backend."""

    record_id: int
    identity: str
    checksum: str
    created_at: str


@dataclass(frozen=True, slots=True)
class AnchoredRecord:
    """A payload as listed back from an anchoring backend."""

    record_id: int
    identity: str
    payload: str
    created_at: str

    def metadata(self) -> Metadata:
        return Metadata.from_json(self.payload)
