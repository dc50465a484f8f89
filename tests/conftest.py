"""Common test fixtures."""

import tarfile
from pathlib import Path
from typing import Callable, Dict

import pytest

from archive_utils import Entries, write_archive
from tardelta.config import DeltaConfig
from tardelta.services import DeltaService


@pytest.fixture
def make_archive(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing archives under tmp_path."""

    def _make(name: str, entries: Entries, format: int = tarfile.PAX_FORMAT) -> Path:
        return write_archive(tmp_path / name, entries, format=format)

    return _make


@pytest.fixture
def delta_config(tmp_path: Path, monkeypatch) -> DeltaConfig:
    """Config isolated from the developer's environment."""
    monkeypatch.chdir(tmp_path)
    for var in ("COMPRESSION", "CHUNK_SIZE", "LOG_LEVEL", "LOG_FILE", "DIAGNOSTICS"):
        monkeypatch.delenv(f"TARDELTA_{var}", raising=False)
    # A tiny buffer makes the tests exercise multi-chunk reads
    return DeltaConfig(chunk_size=7, diagnostics=True)


@pytest.fixture
def delta_service(delta_config: DeltaConfig) -> DeltaService:
    return DeltaService(delta_config)


@pytest.fixture
def scenario(make_archive) -> Dict[str, Path]:
    """old = {a: hello, b: world}; new = {a: hello, b: WORLD, c: new}."""
    old = make_archive("old.tar", {"a.txt": "hello", "b.txt": "world"})
    new = make_archive("new.tar", {"a.txt": "hello", "b.txt": "WORLD", "c.txt": "new"})
    return {"old": old, "new": new}
