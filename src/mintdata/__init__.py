"""Deterministic image fingerprinting and metadata anchoring."""

from mintdata.errors import (
    ChecksumError,
    FileAccessError,
    MintdataError,
    NotFoundError,
    UnsupportedFormatError,
)
from mintdata.ingestion.decoders import DecoderRegistry, HeaderDecoder, default_registry
from mintdata.ingestion.extractor import MetadataExtractor
from mintdata.models import AnchoredRecord, Metadata, Receipt
from mintdata.utils.files import compute_sha256

__all__ = [
    "AnchoredRecord",
    "ChecksumError",
    "DecoderRegistry",
    "FileAccessError",
    "HeaderDecoder",
    "Metadata",
    "MetadataExtractor",
    "MintdataError",
    "NotFoundError",
    "Receipt",
    "UnsupportedFormatError",
    "compute_sha256",
    "default_registry",
]
