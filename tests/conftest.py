# File: tests/conftest.py
import sys
import tempfile
from pathlib import Path
from typing import Callable, Optional

import pytest

from essence.config import ViewerConfig, ViewerSpec
from essence.models import FetchedResource


@pytest.fixture()
def make_resource() -> Callable[..., FetchedResource]:
    """
    Build a FetchedResource; *body* may be str (encoded UTF-8) or bytes.
    """

    def _make(url: str, content_type: Optional[str], body) -> FetchedResource:
        if isinstance(body, str):
            body = body.encode("utf-8")
        return FetchedResource(final_url=url, content_type=content_type, body=body)

    return _make


@pytest.fixture()
def isolated_tmpdir(tmp_path, monkeypatch) -> Path:
    """
    Point the tempfile module at an empty directory so tests can check leaks.
    """
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))
    return scratch


@pytest.fixture()
def python_viewer(tmp_path) -> Callable[..., ViewerSpec]:
    """
    ViewerSpec running the current interpreter on a small script.

    The script receives the expanded arguments in sys.argv[1:].
    """

    def _make(script: str, args: list[str], input_mode: Optional[str] = None) -> ViewerSpec:
        script_path = tmp_path / f"viewer_{abs(hash(script))}.py"
        script_path.write_text(script, encoding="utf-8")
        data = {"command": sys.executable, "args": [str(script_path), *args]}
        if input_mode is not None:
            data["input_mode"] = input_mode
        return ViewerSpec(**data)

    return _make


@pytest.fixture()
def default_config() -> ViewerConfig:
    return ViewerConfig()
