"""Shared test helpers."""

from pathlib import Path

import pytest


@pytest.fixture
def write_files(tmp_path):
    """Write {relative_path: content} under tmp_path and return the root."""

    def _write(files: dict) -> Path:
        for rel, content in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content, encoding="utf-8")
        return tmp_path

    return _write
