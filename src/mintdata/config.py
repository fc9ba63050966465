"""Application configuration defaults."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

from mintdata.utils.files import DEFAULT_CHUNK_SIZE

DEFAULT_IDENTITY = "alice"
DEFAULT_OUTPUT = Path("metadata.json")


def _get_default_db_path() -> Path:
    """Get the default ledger path based on execution context."""
    user_db = Path.home() / "Documents" / "mintdata" / "mintdata.db"

    if getattr(sys, "frozen", False):
        return user_db

    # Running from source: prefer a local data/ ledger if one exists
    local_db = Path("data/mintdata.db")
    if local_db.exists():
        return local_db

    return user_db


@dataclass(slots=True)
class AppConfig:
    db_path: Path | None = None
    output_path: Path = DEFAULT_OUTPUT
    identity: str = DEFAULT_IDENTITY
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self) -> None:
        if self.db_path is None:
            self.db_path = _get_default_db_path()

    def resolve_db_path(self, base_dir: Path | None = None) -> Path:
        if self.db_path is None:
            self.db_path = _get_default_db_path()
        return _resolve(Path(self.db_path), base_dir)

    def resolve_output_path(self, base_dir: Path | None = None) -> Path:
        return _resolve(Path(self.output_path), base_dir)


def _resolve(path: Path, base_dir: Path | None) -> Path:
    if path.is_absolute() or base_dir is None:
        return path
    return base_dir / path
