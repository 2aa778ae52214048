"""Pytest configuration and fixtures for scssgraph tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from scssgraph_cli.analyzer import VariableAnalyzer
from scssgraph_cli.models import PropertyContext


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture(autouse=True)
def isolated_config(temp_dir: Path, monkeypatch) -> Path:
    """Point the config file at a temporary directory.

    config_manager imports the paths at module load, so both modules are
    patched.
    """
    base_dir = temp_dir / "home"
    config_file = base_dir / "config.toml"
    monkeypatch.setattr("scssgraph_cli.config.BASE_DIR", base_dir)
    monkeypatch.setattr("scssgraph_cli.config.CONFIG_FILE", config_file)
    monkeypatch.setattr("scssgraph_cli.config_manager.BASE_DIR", base_dir)
    monkeypatch.setattr("scssgraph_cli.config_manager.CONFIG_FILE", config_file)
    monkeypatch.setattr("scssgraph_cli.cli.CONFIG_FILE", config_file)
    return config_file


@pytest.fixture
def styles_path() -> Path:
    """Get path to the sample stylesheets."""
    return Path(__file__).parent / "fixtures" / "styles"


@pytest.fixture
def analyzer() -> VariableAnalyzer:
    return VariableAnalyzer()


@pytest.fixture
def property_context() -> PropertyContext:
    """A neutral usage site for resolution calls."""
    return PropertyContext(
        selector=".button",
        property="font-size",
        value="",
        line_number=1,
        file_path="test.scss",
    )


@pytest.fixture
def sample_scss() -> str:
    """Stylesheet with flags, scopes and a mixin for extractor tests."""
    return """// Settings
$base: 16px;
$large: $base * 1.5;
$theme: dark !default;
$url: "data:image/png;base64,AAAA";

@mixin spaced($size: 4px) {
  $inner: $size * 2;
  padding: $inner;
}

.card {
  $local-gap: $base / 2 !global;
  margin: $local-gap;
}
"""
