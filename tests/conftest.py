"""Pytest configuration for the JScriptor test suite."""

import sys
from pathlib import Path

import pytest

# Add src directory to path so tests run without an install
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture
def write_file(tmp_path):
    """Write a file under tmp_path, creating parent directories. Returns its path."""

    def _write(rel: str, text: str) -> Path:
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
