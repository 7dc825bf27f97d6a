"""Shared test fixtures for the Vitalis test suite."""

import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from vitalis.config import get_settings


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Drop VITALIS_* variables from the caller's shell and the cached settings."""
    for key in list(os.environ):
        if key.upper().startswith("VITALIS_"):
            monkeypatch.delenv(key)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """An empty config directory selected through VITALIS_CONFIG_DIR.

    The environment is set to "test", so only default.toml and test.toml
    written into it are read.
    """
    directory = tmp_path / "config"
    directory.mkdir()
    monkeypatch.setenv("VITALIS_CONFIG_DIR", str(directory))
    monkeypatch.setenv("VITALIS_ENV", "test")
    return directory


@pytest.fixture
def write_config(config_dir: Path) -> Callable[..., None]:
    """Write TOML files into config_dir.

    Usage:
        write_config(default="[observations]\\nmax_last_n = 10", test="...")
    """

    def _write(**files: str) -> None:
        for name, content in files.items():
            (config_dir / f"{name}.toml").write_text(content)

    return _write
