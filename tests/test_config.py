"""Tests for application configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from mintdata.config import AppConfig


class TestAppConfig:
    """Test AppConfig dataclass."""

    def test_default_config(self) -> None:
        config = AppConfig()

        assert config.db_path is not None
        assert config.db_path.name == "mintdata.db"
        assert config.output_path == Path("metadata.json")
        assert config.identity == "alice"
        assert config.chunk_size == 1 << 20

    def test_local_data_dir_preferred(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """A data/ ledger next to the working directory wins when present."""
        (tmp_path / "data").mkdir()
        (tmp_path / "data" / "mintdata.db").touch()
        monkeypatch.chdir(tmp_path)

        assert AppConfig().db_path == Path("data/mintdata.db")

    def test_custom_config(self) -> None:
        config = AppConfig(
            db_path=Path("/custom/ledger.db"),
            output_path=Path("out.json"),
            identity="bob",
            chunk_size=4096,
        )

        assert config.db_path == Path("/custom/ledger.db")
        assert config.output_path == Path("out.json")
        assert config.identity == "bob"
        assert config.chunk_size == 4096

    def test_resolve_db_path_absolute(self) -> None:
        config = AppConfig(db_path=Path("/absolute/path/db.db"))

        assert config.resolve_db_path(Path("/base")) == Path("/absolute/path/db.db")

    def test_resolve_db_path_relative_no_base(self) -> None:
        config = AppConfig(db_path=Path("relative/db.db"))

        assert config.resolve_db_path(base_dir=None) == Path("relative/db.db")

    def test_resolve_db_path_relative_with_base(self) -> None:
        config = AppConfig(db_path=Path("relative/db.db"))

        assert config.resolve_db_path(Path("/base/directory")) == Path("/base/directory/relative/db.db")

    def test_resolve_output_path(self) -> None:
        config = AppConfig()

        assert config.resolve_output_path(Path("/project")) == Path("/project/metadata.json")
        assert AppConfig(output_path=Path("/tmp/m.json")).resolve_output_path(Path("/x")) == Path(
            "/tmp/m.json"
        )
